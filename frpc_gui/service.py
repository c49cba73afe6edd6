"""
The frpc service controller: owns the status, the log buffer and the busy
flag, and turns user intents and frpc log lines into status changes.
"""

import logging
import threading
from collections import deque
from typing import Callable, List, Optional

from .classifier import LogClassifier, StatusHint, default_classifier
from .exceptions import ProcessLaunchError
from .frpc_config import ConfigManager
from .models import AppStatus, LogEntry, ProxyItem
from .process import LogEvent
from .settings import LOG_CAPACITY
from .validation import ValidationError, validate_start_input

logger = logging.getLogger(__name__)

MISSING_BINARY_MARKERS = ("cannot find the file", "not found", "no such file")


def normalize_start_error(message: str) -> str:
    lower = message.lower()
    if any(marker in lower for marker in MISSING_BINARY_MARKERS):
        return ("Start failed: frpc executable not found. "
                "Place frpc in the bin directory or choose it via File > Select frpc Binary.")
    return f"Start Failed: {message}"


class LogBuffer:
    """Fixed-size FIFO of log entries; the oldest entry goes first."""

    def __init__(self, capacity: int = LOG_CAPACITY):
        self._entries = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    def append(self, msg: str, level: str = "info") -> LogEntry:
        entry = LogEntry(msg, level)
        with self._lock:
            self._entries.append(entry)
        return entry

    def entries(self) -> List[LogEntry]:
        with self._lock:
            return list(self._entries)

    def clear(self):
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class FrpcService:
    def __init__(self, process, classifier: LogClassifier = default_classifier,
                 on_change: Optional[Callable[[], None]] = None,
                 capacity: int = LOG_CAPACITY):
        self.process = process
        self.classifier = classifier
        self.on_change = on_change
        self.logs = LogBuffer(capacity)
        self.status = AppStatus.STOPPED
        self.is_busy = False
        self._busy_lock = threading.Lock()
        self._state_lock = threading.RLock()
        # lines from runs up to this id no longer move the status
        self._retired_run = 0
        self._subscription = process.subscribe(self._on_event)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _notify(self):
        if self.on_change:
            self.on_change()

    def _set_status(self, status: AppStatus):
        with self._state_lock:
            if self.status == status:
                return
            logger.info("Status %s -> %s", self.status.value, status.value)
            self.status = status

    def append_log(self, msg: str, level: str = "info"):
        self.logs.append(msg, level)
        self._notify()

    def clear_logs(self):
        self.logs.clear()
        self._notify()

    def _retire(self, run_id: Optional[int] = None):
        if run_id is None:
            run_id = self.process.run_id
        with self._state_lock:
            self._retired_run = max(self._retired_run, run_id)

    def _acquire(self) -> bool:
        with self._busy_lock:
            if self.is_busy:
                return False
            self.is_busy = True
        self._notify()
        return True

    def _release(self):
        with self._busy_lock:
            self.is_busy = False
        self._notify()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, server_addr: str, server_port: str, token: str,
              proxies: List[ProxyItem]) -> List[ValidationError]:
        if not self._acquire():
            return []

        try:
            try:
                self.process.stop()
            except Exception as e:
                logger.debug("Pre-start stop ignored: %s", e)
            self._retire()

            errors = validate_start_input(server_addr, server_port, proxies)
            if errors:
                for err in errors:
                    self.logs.append(err.message, "error")
                self._set_status(AppStatus.STOPPED)
                logger.info("Start rejected: %d validation error(s)", len(errors))
                return errors

            ini_text = ConfigManager.build_ini(server_addr, server_port, token, proxies)
            # frpc may report progress before start() returns
            self._set_status(AppStatus.CONNECTING)
            try:
                self.process.start(ini_text)
            except (ProcessLaunchError, OSError) as e:
                logger.error("Launch failed: %s", e)
                self.logs.append(normalize_start_error(str(e)), "error")
                self._set_status(AppStatus.STOPPED)
                return []

            self.logs.append("--- Service Starting ---", "info")
            return []
        finally:
            self._release()

    def stop(self):
        if not self._acquire():
            return

        try:
            self._retire()
            try:
                self.process.stop()
                self.logs.append("--- Service Stopped ---", "info")
            except Exception as e:
                logger.error("Stop failed: %s", e)
                self.logs.append(f"Stop Failed: {e}", "error")
            self._set_status(AppStatus.STOPPED)
        finally:
            self._release()

    def toggle(self, server_addr: str, server_port: str, token: str,
               proxies: List[ProxyItem]) -> List[ValidationError]:
        if self.status == AppStatus.STOPPED:
            return self.start(server_addr, server_port, token, proxies)
        self.stop()
        return []

    def close(self):
        """Release the log subscription and stop frpc."""
        self._subscription.close()
        self._retire()
        try:
            self.process.stop()
        except Exception as e:
            logger.warning("Stop on close failed: %s", e)

    # ------------------------------------------------------------------
    # Log-driven status
    # ------------------------------------------------------------------

    def _on_event(self, event: LogEvent):
        self.handle_log(event.msg, event.level, event.run_id)

    def handle_log(self, msg: str, level: str = "info", run_id: Optional[int] = None):
        if not msg:
            return

        self.logs.append(msg, level)
        hint = self.classifier.classify(msg)
        request_stop = False

        with self._state_lock:
            stale = run_id is not None and run_id <= self._retired_run
            if hint is not None and not stale:
                if hint == StatusHint.RUNNING:
                    self._set_status(AppStatus.RUNNING)
                elif hint == StatusHint.CONNECTING:
                    self._set_status(AppStatus.CONNECTING)
                elif hint == StatusHint.FATAL:
                    # later lines of this run no longer count
                    self._retire(run_id)
                    self._set_status(AppStatus.STOPPED)
                    request_stop = True

        if request_stop:
            logger.warning("Fatal frpc output, stopping: %s", msg)
            try:
                self.process.stop()
            except Exception as e:
                logger.error("Stop after fatal output failed: %s", e)

        self._notify()
