"""
Persistent state: a small SQLite key/value store holding the app config as a
single JSON document, plus the recent-profiles list.
"""

import json
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .models import AppConfig
from .settings import SAVE_DEBOUNCE_SECONDS

logger = logging.getLogger(__name__)

APP_CONFIG_KEY = "app_config"
RECENT_LIMIT = 10


class DatabaseManager:
    """SQLite storage for persistent app state and recent profiles."""

    def __init__(self, path: Path):
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.path)

    def _init_db(self):
        with self._connect() as conn:
            conn.execute("""CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )""")
            conn.execute("""CREATE TABLE IF NOT EXISTS recent_profiles (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT,
                filepath TEXT,
                last_used TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )""")

    def set(self, key: str, val: Any):
        with self._connect() as conn:
            conn.execute("INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP)",
                         (key, json.dumps(val)))

    def get(self, key: str, default: Any = None) -> Any:
        try:
            with self._connect() as conn:
                res = conn.execute("SELECT value FROM settings WHERE key=?", (key,)).fetchone()
                return json.loads(res[0]) if res else default
        except (sqlite3.Error, ValueError) as e:
            logger.warning("Cannot read setting %r: %s", key, e)
            return default

    def add_recent(self, name: str, filepath: str):
        with self._connect() as conn:
            conn.execute("DELETE FROM recent_profiles WHERE filepath = ?", (filepath,))
            conn.execute("INSERT INTO recent_profiles (name, filepath) VALUES (?, ?)", (name, filepath))
            conn.execute("""DELETE FROM recent_profiles WHERE id NOT IN
                         (SELECT id FROM recent_profiles ORDER BY id DESC LIMIT ?)""", (RECENT_LIMIT,))

    def get_recent(self) -> List[Dict[str, Any]]:
        try:
            with self._connect() as conn:
                conn.row_factory = sqlite3.Row
                res = conn.execute("SELECT * FROM recent_profiles ORDER BY id DESC").fetchall()
                return [dict(r) for r in res]
        except sqlite3.Error as e:
            logger.warning("Cannot read recent profiles: %s", e)
            return []


class ConfigStore:
    """Loads and saves the AppConfig document."""

    def __init__(self, db: DatabaseManager):
        self.db = db

    def load(self) -> AppConfig:
        data = self.db.get(APP_CONFIG_KEY)
        if not isinstance(data, dict):
            return AppConfig()
        try:
            return AppConfig.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning("Stored config is unreadable, using defaults: %s", e)
            return AppConfig()

    def save(self, config: AppConfig):
        self.db.set(APP_CONFIG_KEY, config.to_dict())
        logger.debug("Config saved (%d tunnels)", len(config.proxies))


class DebouncedSaver:
    """Coalesces bursts of edits into one write after a quiet period."""

    def __init__(self, save: Callable[[AppConfig], None], delay: float = SAVE_DEBOUNCE_SECONDS):
        self._save = save
        self.delay = delay
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._pending: Optional[AppConfig] = None
        self._generation = 0

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def schedule(self, config: AppConfig):
        with self._lock:
            self._pending = config.copy()
            self._generation += 1
            if self._timer:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._fire, args=(self._generation,))
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, generation: int):
        with self._lock:
            # a newer edit restarted the quiet period
            if generation != self._generation:
                return
        self.flush()

    def flush(self):
        with self._lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None
            snapshot, self._pending = self._pending, None
        if snapshot is None:
            return
        try:
            self._save(snapshot)
        except Exception as e:
            logger.error("Saving config failed: %s", e)

    def cancel(self):
        with self._lock:
            if self._timer:
                self._timer.cancel()
                self._timer = None
            self._pending = None
