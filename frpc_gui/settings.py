"""
Global configuration, paths and the design system shared by every window.
"""

import os
import sys
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

# ============================================================================
# Global Configuration
# ============================================================================

APP_NAME = "frpc GUI"
APP_VERSION = "1.2.0"

if getattr(sys, 'frozen', False):
    APP_DIR = Path(getattr(sys, '_MEIPASS', os.getcwd()))
    USER_DIR = Path(os.environ.get('LOCALAPPDATA', Path.home())) / "frpc_gui"
else:
    APP_DIR = Path(__file__).parent
    USER_DIR = Path.home() / ".frpc_gui"

if os.environ.get("FRPC_GUI_HOME"):
    USER_DIR = Path(os.environ["FRPC_GUI_HOME"])

CONFIG_DIR = USER_DIR
DATABASE_FILE = CONFIG_DIR / "frpc_gui.db"
GENERATED_INI = CONFIG_DIR / "frpc.ini"
LOG_FILE = CONFIG_DIR / "frpc_gui.log"

BINARY_NAME = "frpc.exe" if sys.platform == "win32" else "frpc"

LOG_CAPACITY = 200
SAVE_DEBOUNCE_SECONDS = 0.8
STOP_TIMEOUT_SECONDS = 2

# Color Palette: dark theme, same family as the other tunnel panels
COLORS = {
    "bg_root": "#0a0a0f",
    "bg_sidebar": "#12121a",
    "bg_card": "#151520",
    "bg_input": "#0f0f15",
    "bg_hover": "#252535",

    "accent": "#3b82f6",
    "accent_hover": "#60a5fa",
    "accent_dim": "#1e3a8a",

    "text_main": "#ffffff",
    "text_dim": "#a0a0b0",
    "text_muted": "#505060",

    "success": "#22c55e",
    "warning": "#eab308",
    "error": "#ef4444",
    "info": "#4488ff",

    "border": "#1f2937",
    "border_error": "#7f1d1d",
}

# ============================================================================
# Logging
# ============================================================================

def setup_logging(level: str = "INFO", log_file: Path = LOG_FILE) -> None:
    """Route the package loggers to a rotating file in the user directory."""
    logger = logging.getLogger("frpc_gui")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(log_file, maxBytes=2 * 1024 * 1024,
                                       backupCount=3, encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-8s [%(name)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(file_handler)

    logger.info("Logging initialised: level=%s, file=%s", level, log_file)
