#!/usr/bin/env python3
"""
frpc GUI - main application window.

Owns the application state (config, store, frpc process and service) and
hands it to the status and config views.
"""

import logging
import threading
from pathlib import Path
from queue import Queue, Empty
from typing import List
import tkinter as tk
from tkinter import ttk, messagebox, filedialog

from .exceptions import ProfileError
from .frpc_config import ConfigManager
from .i18n import other_language, translate
from .models import AppConfig, AppStatus, ProxyItem, new_proxy
from .process import ProcessManager, find_binary_path
from .service import FrpcService
from .settings import APP_NAME, APP_VERSION, COLORS, DATABASE_FILE, setup_logging
from .store import ConfigStore, DatabaseManager, DebouncedSaver
from .validation import (FieldErrors, ValidationError, hints_from_errors,
                         merge_hints, validate_config_fields)
from .views import ConfigView, StatusView

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 100


class FrpcApp:
    def __init__(self):
        self.root = tk.Tk()
        self.root.title(f"{APP_NAME} v{APP_VERSION}")
        self.root.geometry("980x760")
        self.root.minsize(860, 640)
        self.root.configure(bg=COLORS["bg_root"])

        self.db = DatabaseManager(DATABASE_FILE)
        self.store = ConfigStore(self.db)
        self.config: AppConfig = self.store.load()
        self.saver = DebouncedSaver(self.store.save)

        saved_bin = self.db.get("binary_path")
        if saved_bin and Path(saved_bin).is_file():
            self.binary_path = Path(saved_bin)
        else:
            self.binary_path = find_binary_path()

        # Reader threads only enqueue; the Tk thread drains in _poll_events
        self._events: Queue = Queue()
        self.pm = ProcessManager(self.binary_path)
        self.service = FrpcService(self.pm, on_change=lambda: self._events.put(("refresh", None)))
        self._submit_hints = FieldErrors()

        self._setup_styles()
        self._create_menu()
        self._build_ui()
        self.service.append_log(f"frpc binary: {self.binary_path}", "info")
        logger.info("Started with %d tunnels, binary %s", len(self.config.proxies), self.binary_path)

    def t(self, key: str, **kwargs) -> str:
        return translate(key, self.config.language, **kwargs)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _setup_styles(self):
        style = ttk.Style()
        style.theme_use("clam")

        style.configure("TNotebook", background=COLORS["bg_root"], borderwidth=0)
        style.configure("TNotebook.Tab", background=COLORS["bg_sidebar"], foreground=COLORS["text_dim"],
                        padding=[20, 10], font=("Inter", 10, "bold"), borderwidth=0)
        style.map("TNotebook.Tab", background=[("selected", COLORS["bg_card"])],
                  foreground=[("selected", COLORS["accent"])])

        style.configure("TCombobox", fieldbackground=COLORS["bg_input"], background=COLORS["bg_input"],
                        foreground=COLORS["text_main"], arrowcolor=COLORS["accent"], borderwidth=0)

    def _build_ui(self):
        self.body = tk.Frame(self.root, bg=COLORS["bg_root"])
        self.body.pack(fill=tk.BOTH, expand=True)

        header = tk.Frame(self.body, bg=COLORS["bg_root"], padx=30, pady=15)
        header.pack(fill=tk.X)
        tk.Label(header, text="frpc", fg=COLORS["accent"], bg=COLORS["bg_root"],
                 font=("Inter", 22, "bold")).pack(side=tk.LEFT)
        tk.Label(header, text=f"GUI v{APP_VERSION}", fg=COLORS["text_muted"],
                 bg=COLORS["bg_root"], font=("Inter", 10, "bold")).pack(side=tk.LEFT, padx=10, pady=(8, 0))
        lang_label = "EN" if self.config.language == "en" else "中"
        tk.Button(header, text=lang_label, command=self.toggle_language, bg=COLORS["bg_sidebar"],
                  fg=COLORS["text_main"], relief="flat", font=("Inter", 10, "bold"),
                  padx=10, cursor="hand2").pack(side=tk.RIGHT)

        self.notebook = ttk.Notebook(self.body)
        self.notebook.pack(fill=tk.BOTH, expand=True, padx=30, pady=(0, 20))

        self.status_view = StatusView(self.notebook, self)
        self.config_view = ConfigView(self.notebook, self)
        self.notebook.add(self.status_view, text=self.t("status").upper())
        self.notebook.add(self.config_view, text=self.t("config").upper())

        self.config_view.load()
        self._refresh_hints()
        self.status_view.refresh()

    def _rebuild_ui(self):
        selected = self.notebook.index(self.notebook.select())
        self.body.destroy()
        self.menubar.destroy()
        self._create_menu()
        self._build_ui()
        self.notebook.select(selected)

    def _create_menu(self):
        t = self.t
        menubar = tk.Menu(self.root, bg=COLORS["bg_sidebar"], fg=COLORS["text_main"])
        self.menubar = menubar
        self.root.config(menu=menubar)

        file_menu = tk.Menu(menubar, tearoff=0, bg=COLORS["bg_sidebar"], fg=COLORS["text_main"])
        menubar.add_cascade(label=t("menu_file"), menu=file_menu)
        file_menu.add_command(label=t("import_profile"), command=self.import_action, accelerator="Ctrl+O")
        file_menu.add_command(label=t("export_profile"), command=self.export_action, accelerator="Ctrl+S")
        file_menu.add_separator()

        self.recent_menu = tk.Menu(file_menu, tearoff=0, bg=COLORS["bg_sidebar"], fg=COLORS["text_main"])
        file_menu.add_cascade(label=t("recent_profiles"), menu=self.recent_menu)
        self._update_recent_menu()

        file_menu.add_separator()
        file_menu.add_command(label=t("export_ini"), command=self.export_ini_action)
        file_menu.add_command(label=t("select_binary"), command=self._browse_bin)
        file_menu.add_separator()
        file_menu.add_command(label=t("exit"), command=self._on_close, accelerator="Alt+F4")

        service_menu = tk.Menu(menubar, tearoff=0, bg=COLORS["bg_sidebar"], fg=COLORS["text_main"])
        menubar.add_cascade(label=t("menu_service"), menu=service_menu)
        service_menu.add_command(label=t("menu_start"), command=self.start_action)
        service_menu.add_command(label=t("menu_stop"), command=self.stop_action)
        service_menu.add_separator()
        service_menu.add_command(label=t("menu_clear_logs"), command=self.service.clear_logs)

        view_menu = tk.Menu(menubar, tearoff=0, bg=COLORS["bg_sidebar"], fg=COLORS["text_main"])
        menubar.add_cascade(label=t("menu_view"), menu=view_menu)
        view_menu.add_command(label="English / 中文", command=self.toggle_language)

        self.root.bind("<Control-o>", lambda e: self.import_action())
        self.root.bind("<Control-s>", lambda e: self.export_action())

    def _update_recent_menu(self):
        self.recent_menu.delete(0, tk.END)
        recent = self.db.get_recent()
        if not recent:
            self.recent_menu.add_command(label=self.t("no_recent"), state="disabled")
            return

        for item in recent:
            self.recent_menu.add_command(label=item["name"],
                                         command=lambda p=item["filepath"]: self._load_profile(Path(p)))

    # ------------------------------------------------------------------
    # State changes
    # ------------------------------------------------------------------

    def _poll_events(self):
        dirty = False
        try:
            while True:
                kind, payload = self._events.get_nowait()
                if kind == "errors":
                    self._submit_hints = hints_from_errors(payload)
                    self._refresh_hints()
                dirty = True
        except Empty:
            pass
        if dirty:
            self.status_view.refresh()
        self.root.after(POLL_INTERVAL_MS, self._poll_events)

    def _refresh_hints(self):
        live = validate_config_fields(self.config.server_addr, self.config.server_port,
                                      self.config.proxies)
        self.config_view.apply_errors(merge_hints(live, self._submit_hints))

    def on_config_edited(self):
        self._submit_hints = FieldErrors()
        self._refresh_hints()
        self.saver.schedule(self.config)
        self.status_view.refresh()

    def add_tunnel_action(self):
        self.config.proxies.append(new_proxy(self.config.proxies))
        self.config_view.rebuild_rows()
        self.on_config_edited()

    def remove_tunnel_action(self, proxy: ProxyItem):
        if proxy in self.config.proxies:
            self.config.proxies.remove(proxy)
        self.config_view.rebuild_rows()
        self.on_config_edited()

    def toggle_language(self):
        self.config.language = other_language(self.config.language)
        self.saver.schedule(self.config)
        self._rebuild_ui()

    def copy_to_clipboard(self, text: str):
        self.root.clipboard_clear()
        self.root.clipboard_append(text)
        self.service.append_log(f"Copied {text} to clipboard.", "success")

    # ------------------------------------------------------------------
    # Service control
    # ------------------------------------------------------------------

    def _run_in_background(self, target, *args):
        threading.Thread(target=target, args=args, daemon=True).start()

    def _start_worker(self, snapshot: AppConfig):
        errors: List[ValidationError] = self.service.start(
            snapshot.server_addr, snapshot.server_port, snapshot.token, snapshot.proxies)
        if errors:
            self._events.put(("errors", errors))

    def toggle_action(self):
        if self.service.is_busy:
            return
        if self.service.status == AppStatus.STOPPED:
            self.start_action()
        else:
            self.stop_action()

    def start_action(self):
        if self.service.is_busy:
            return
        self._run_in_background(self._start_worker, self.config.copy())

    def stop_action(self):
        if self.service.is_busy:
            return
        self._run_in_background(self.service.stop)

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def _load_profile(self, path: Path):
        cfg = ConfigManager.import_profile(path)
        if not cfg:
            self.service.append_log(f"Could not import profile from {path}", "error")
            return
        cfg.language = self.config.language
        self.config = cfg
        self.db.add_recent(path.name, str(path))
        self._update_recent_menu()
        self.config_view.load()
        self.on_config_edited()
        self.service.append_log(f"Imported profile from {path}", "success")

    def import_action(self):
        path = filedialog.askopenfilename(filetypes=[("YAML files", "*.yaml *.yml"), ("All files", "*")])
        if path:
            self._load_profile(Path(path))

    def export_action(self):
        path = filedialog.asksaveasfilename(defaultextension=".yaml", filetypes=[("YAML files", "*.yaml")])
        if not path:
            return
        try:
            ConfigManager.export_profile(self.config, Path(path))
        except ProfileError as e:
            self.service.append_log(str(e), "error")
            return
        self.db.add_recent(Path(path).name, path)
        self._update_recent_menu()
        self.service.append_log(f"Exported profile to {path}", "success")

    def export_ini_action(self):
        path = filedialog.asksaveasfilename(defaultextension=".ini", initialfile="frpc.ini",
                                            filetypes=[("INI files", "*.ini")])
        if not path:
            return
        text = ConfigManager.build_ini(self.config.server_addr, self.config.server_port,
                                       self.config.token, self.config.proxies)
        try:
            ConfigManager.save_text(text, Path(path))
        except OSError as e:
            self.service.append_log(f"Export failed: {e}", "error")
            return
        self.service.append_log(f"Exported frpc config to {path}", "success")

    def _browse_bin(self):
        path = filedialog.askopenfilename()
        if path:
            self.binary_path = Path(path)
            self.pm.binary = self.binary_path
            self.db.set("binary_path", str(path))
            self.service.append_log(f"frpc binary: {path}", "info")

    # ------------------------------------------------------------------
    # Lifetime
    # ------------------------------------------------------------------

    def _on_close(self):
        if self.pm.running and not messagebox.askokcancel(APP_NAME, self.t("confirm_quit")):
            return
        self.service.close()
        self.saver.flush()
        logger.info("Shutting down")
        self.root.destroy()

    def run(self):
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)
        self.root.after(POLL_INTERVAL_MS, self._poll_events)
        self.root.mainloop()


def main():
    setup_logging()
    app = FrpcApp()
    app.run()


if __name__ == "__main__":
    main()
