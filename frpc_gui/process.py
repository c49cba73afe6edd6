"""
Lifecycle of the frpc subprocess and the stream of log events it produces.
"""

import os
import sys
import shutil
import logging
import platform
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Callable, List, Optional

from .classifier import detect_level, strip_ansi
from .exceptions import ProcessLaunchError
from .frpc_config import ConfigManager
from .settings import BINARY_NAME, GENERATED_INI, STOP_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


@dataclass
class LogEvent:
    msg: str
    level: str = "info"
    run_id: Optional[int] = None


def find_binary_path() -> Path:
    """Find the frpc binary in the environment, bundle, app dir or PATH."""
    if os.environ.get("FRPC_BIN"):
        return Path(os.environ["FRPC_BIN"])

    search_paths = []

    # 1. Running as bundle (PyInstaller temp dir and the exe's own dir)
    if getattr(sys, 'frozen', False):
        app_dir = Path(getattr(sys, '_MEIPASS', ''))
        if app_dir.exists():
            search_paths.append(app_dir / BINARY_NAME)
            search_paths.append(app_dir / "bin" / BINARY_NAME)
        exe_dir = Path(sys.executable).parent
        search_paths.append(exe_dir / BINARY_NAME)
        search_paths.append(exe_dir / "bin" / BINARY_NAME)

    # 2. Source checkout
    src_dir = Path(__file__).parent
    search_paths.append(src_dir / "bin" / BINARY_NAME)
    search_paths.append(src_dir.parent / "bin" / BINARY_NAME)

    # 3. Current working directory
    search_paths.append(Path.cwd() / "bin" / BINARY_NAME)
    search_paths.append(Path.cwd() / BINARY_NAME)

    for path in search_paths:
        if path.is_file():
            return path

    on_path = shutil.which("frpc")
    if on_path:
        return Path(on_path)

    # Not found; the start attempt will report it
    return Path("bin") / BINARY_NAME


class Subscription:
    """Handle for a log callback; close() detaches it."""

    def __init__(self, owner: "ProcessManager", callback: Callable[[LogEvent], None]):
        self._owner = owner
        self.callback = callback
        self.active = True

    def close(self):
        if self.active:
            self.active = False
            self._owner._unsubscribe(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class ProcessManager:
    """Manages the lifecycle of the frpc subprocess."""

    def __init__(self, binary: Path, config_path: Path = GENERATED_INI):
        self.binary = binary
        self.config_path = config_path
        self.process: Optional[subprocess.Popen] = None
        self.run_id = 0
        self._lock = threading.Lock()
        self._subscribers: List[Subscription] = []

    @property
    def running(self) -> bool:
        proc = self.process
        return proc is not None and proc.poll() is None

    def subscribe(self, callback: Callable[[LogEvent], None]) -> Subscription:
        sub = Subscription(self, callback)
        with self._lock:
            self._subscribers.append(sub)
        return sub

    def _unsubscribe(self, sub: Subscription):
        with self._lock:
            if sub in self._subscribers:
                self._subscribers.remove(sub)

    def _publish(self, event: LogEvent):
        with self._lock:
            subscribers = list(self._subscribers)
        for sub in subscribers:
            try:
                sub.callback(event)
            except Exception:
                logger.exception("Log subscriber failed on %r", event.msg)

    def start(self, config_text: str) -> int:
        if self.running:
            raise ProcessLaunchError("frpc is already running")

        try:
            ConfigManager.save_text(config_text, self.config_path)
        except OSError as e:
            raise ProcessLaunchError(f"Cannot write config file {self.config_path}: {e}") from e

        cmd = [str(self.binary), "-c", str(self.config_path)]
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                creationflags=subprocess.CREATE_NO_WINDOW if platform.system() == "Windows" else 0
            )
        except OSError as e:
            raise ProcessLaunchError(f"{e} ({self.binary})") from e

        with self._lock:
            self.run_id += 1
            run_id = self.run_id
            self.process = proc

        logger.info("frpc started (pid %s, run %d): %s", proc.pid, run_id, " ".join(cmd))
        threading.Thread(target=self._read_loop, args=(proc, proc.stdout, "info", run_id, True),
                         daemon=True).start()
        threading.Thread(target=self._read_loop, args=(proc, proc.stderr, "error", run_id, False),
                         daemon=True).start()
        return run_id

    def stop(self):
        with self._lock:
            proc, self.process = self.process, None
        if not proc:
            return

        try:
            proc.terminate()
            proc.wait(timeout=STOP_TIMEOUT_SECONDS)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
        except OSError as e:
            # already gone
            logger.debug("terminate failed: %s", e)
        logger.info("frpc stopped (pid %s)", proc.pid)

    def _read_loop(self, proc: subprocess.Popen, stream: Optional[IO[str]], level: str,
                   run_id: int, watch_exit: bool):
        if stream is None:
            return
        with stream:
            for raw in iter(stream.readline, ''):
                line = strip_ansi(raw).strip()
                if not line:
                    continue
                # stderr is always an error; stdout follows frpc's own level tag
                self._publish(LogEvent(line, detect_level(line, level) if watch_exit else level, run_id))

        if not watch_exit:
            return
        code = proc.wait()
        with self._lock:
            exited_by_itself = self.process is proc
            if exited_by_itself:
                self.process = None
        if exited_by_itself:
            logger.warning("frpc exited with code %s", code)
            self._publish(LogEvent(f"frpc exited with code {code}", "error" if code else "info", run_id))
