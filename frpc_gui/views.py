"""
Status and config views. Both read the application state owned by FrpcApp
and send user intents back to it.
"""

import tkinter as tk
from tkinter import ttk, messagebox
from typing import TYPE_CHECKING, Callable, Dict, List

from .models import PROXY_TYPES, AppStatus, ProxyItem, remote_address
from .settings import COLORS
from .validation import FieldErrors
from .widgets import Card, HintLabel, LogViewer, ModernButton, ModernEntry, StatusIndicator

if TYPE_CHECKING:
    from .app import FrpcApp


class ScrollFrame(tk.Frame):
    """Vertically scrollable container; children go into .body."""
    def __init__(self, parent, bg=COLORS["bg_root"], **kwargs):
        super().__init__(parent, bg=bg, **kwargs)
        self.canvas = tk.Canvas(self, bg=bg, highlightthickness=0)
        scrollbar = ttk.Scrollbar(self, orient=tk.VERTICAL, command=self.canvas.yview)
        self.body = tk.Frame(self.canvas, bg=bg)
        self.body.bind("<Configure>", lambda e: self.canvas.configure(scrollregion=self.canvas.bbox("all")))
        self._window = self.canvas.create_window((0, 0), window=self.body, anchor=tk.NW)
        self.canvas.bind("<Configure>", lambda e: self.canvas.itemconfig(self._window, width=e.width))
        self.canvas.configure(yscrollcommand=scrollbar.set)
        self.canvas.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)


# ============================================================================
# Status View
# ============================================================================

class StatusView(tk.Frame):
    STATUS_TEXT = {
        AppStatus.STOPPED: ("stopped", "ready"),
        AppStatus.CONNECTING: ("connecting", "waiting"),
        AppStatus.RUNNING: ("running", "connected"),
    }

    def __init__(self, parent, app: "FrpcApp"):
        super().__init__(parent, bg=COLORS["bg_root"], padx=20, pady=20)
        self.app = app
        t = app.t

        header = tk.Frame(self, bg=COLORS["bg_card"], highlightthickness=1,
                          highlightbackground=COLORS["border"], padx=20, pady=15)
        header.pack(fill=tk.X)

        text_box = tk.Frame(header, bg=COLORS["bg_card"])
        text_box.pack(side=tk.LEFT)
        self.title_label = tk.Label(text_box, text=t("stopped"), bg=COLORS["bg_card"],
                                    fg=COLORS["text_main"], font=("Inter", 18, "bold"))
        self.title_label.pack(anchor=tk.W)
        sub_row = tk.Frame(text_box, bg=COLORS["bg_card"])
        sub_row.pack(anchor=tk.W, pady=(4, 0))
        self.indicator = StatusIndicator(sub_row, size=10)
        self.indicator.pack(side=tk.LEFT, padx=(0, 8))
        self.sub_label = tk.Label(sub_row, text=t("ready"), bg=COLORS["bg_card"],
                                  fg=COLORS["text_dim"], font=("Inter", 9))
        self.sub_label.pack(side=tk.LEFT)

        self.toggle_btn = ModernButton(header, t("start"), app.toggle_action, width=16)
        self.toggle_btn.pack(side=tk.RIGHT)

        self.tunnel_box = tk.Frame(self, bg=COLORS["bg_root"])

        log_card = Card(self, t("logs"))
        log_card.pack(fill=tk.BOTH, expand=True, pady=(20, 0))
        self.log_card = log_card
        bar = tk.Frame(log_card.content, bg=COLORS["bg_card"])
        bar.pack(fill=tk.X, pady=(0, 8))
        ModernButton(bar, t("clear_logs"), app.service.clear_logs, variant="secondary").pack(side=tk.RIGHT)
        self.log_viewer = LogViewer(log_card.content, height=14)
        self.log_viewer.pack(fill=tk.BOTH, expand=True)

        self._tunnel_key = None

    def refresh(self):
        app = self.app
        status = app.service.status
        busy = app.service.is_busy
        title, sub = self.STATUS_TEXT[status]

        self.title_label.config(text=app.t(title))
        self.sub_label.config(text=app.t(sub))
        self.indicator.set(status)

        if status == AppStatus.STOPPED:
            self.toggle_btn.config(text=app.t("start"))
            self.toggle_btn.set_variant("primary")
        elif status == AppStatus.CONNECTING:
            self.toggle_btn.config(text=app.t("connecting"))
            self.toggle_btn.set_variant("warning")
        else:
            self.toggle_btn.config(text=app.t("stop"))
            self.toggle_btn.set_variant("danger")
        # stopping a connecting service stays possible from the menu
        self.toggle_btn.config(state="disabled" if busy or status == AppStatus.CONNECTING else "normal")

        self._refresh_tunnels(status)
        placeholder = app.t("waiting") if status == AppStatus.CONNECTING else app.t("no_logs")
        self.log_viewer.render(app.service.logs.entries(), placeholder)

    def _refresh_tunnels(self, status: AppStatus):
        proxies = self.app.config.proxies
        visible = status == AppStatus.RUNNING and bool(proxies)
        key = (visible, self.app.config.server_addr,
               tuple((p.id, p.name, p.type, p.remote_port, p.custom_domains) for p in proxies))
        if key == self._tunnel_key:
            return
        self._tunnel_key = key

        for child in self.tunnel_box.winfo_children():
            child.destroy()
        if not visible:
            self.tunnel_box.pack_forget()
            return

        self.tunnel_box.pack(fill=tk.X, pady=(15, 0), before=self.log_card)
        for proxy in proxies:
            self._tunnel_row(proxy)

    def _tunnel_row(self, proxy: ProxyItem):
        app = self.app
        row = tk.Frame(self.tunnel_box, bg=COLORS["bg_card"], padx=12, pady=8,
                       highlightthickness=1, highlightbackground=COLORS["border"])
        row.pack(fill=tk.X, pady=3)

        tk.Label(row, text=proxy.name, bg=COLORS["bg_card"], fg=COLORS["text_main"],
                 font=("Inter", 10, "bold")).pack(side=tk.LEFT)
        tk.Label(row, text=proxy.type.upper(), bg=COLORS["bg_card"], fg=COLORS["text_muted"],
                 font=("JetBrains Mono", 8)).pack(side=tk.LEFT, padx=10)

        address = remote_address(proxy, app.config.server_addr)
        ModernButton(row, app.t("copy"), lambda a=address: app.copy_to_clipboard(a),
                     variant="secondary").pack(side=tk.RIGHT)
        tk.Label(row, text=address, bg=COLORS["bg_card"], fg=COLORS["success"],
                 font=("JetBrains Mono", 10, "bold")).pack(side=tk.RIGHT, padx=10)
        tk.Label(row, text=app.t("remote_addr"), bg=COLORS["bg_card"], fg=COLORS["text_muted"],
                 font=("Inter", 8)).pack(side=tk.RIGHT)


# ============================================================================
# Config View
# ============================================================================

class TunnelRow(tk.Frame):
    """Editor for one ProxyItem; edits write straight into the item."""

    def __init__(self, parent, app: "FrpcApp", proxy: ProxyItem,
                 on_delete: Callable[[ProxyItem], None]):
        super().__init__(parent, bg=COLORS["bg_card"], highlightthickness=1,
                         highlightbackground=COLORS["border"], padx=12, pady=10)
        self.app = app
        self.proxy = proxy
        self._syncing = True
        t = app.t

        self.vars: Dict[str, tk.StringVar] = {
            "name": tk.StringVar(value=proxy.name),
            "type": tk.StringVar(value=proxy.type),
            "local_ip": tk.StringVar(value=proxy.local_ip),
            "local_port": tk.StringVar(value=proxy.local_port),
            "target": tk.StringVar(value=self._target_value()),
        }

        grid = tk.Frame(self, bg=COLORS["bg_card"])
        grid.pack(fill=tk.X)
        for col, weight in enumerate((3, 2, 3, 2, 4, 0)):
            grid.columnconfigure(col, weight=weight)

        def label(col, key):
            lbl = tk.Label(grid, text=t(key).upper(), bg=COLORS["bg_card"], fg=COLORS["text_muted"],
                           font=("Inter", 8, "bold"))
            lbl.grid(row=0, column=col, sticky=tk.W, padx=4)
            return lbl

        label(0, "name")
        label(1, "type")
        label(2, "local_ip")
        label(3, "local_port")
        self.target_label = label(4, self._target_key())

        ModernEntry(grid, self.vars["name"], width=14).grid(row=1, column=0, sticky=tk.EW, padx=4)
        type_box = ttk.Combobox(grid, textvariable=self.vars["type"], values=PROXY_TYPES,
                                state="readonly", width=7)
        type_box.grid(row=1, column=1, sticky=tk.EW, padx=4)
        ModernEntry(grid, self.vars["local_ip"], width=14).grid(row=1, column=2, sticky=tk.EW, padx=4)
        self.local_port_entry = ModernEntry(grid, self.vars["local_port"], width=7)
        self.local_port_entry.grid(row=1, column=3, sticky=tk.EW, padx=4)
        self.target_entry = ModernEntry(grid, self.vars["target"], width=18)
        self.target_entry.grid(row=1, column=4, sticky=tk.EW, padx=4)
        ModernButton(grid, t("delete"), lambda: on_delete(self.proxy),
                     variant="secondary").grid(row=1, column=5, padx=(8, 0))

        self.local_port_hint = HintLabel(grid)
        self.local_port_hint.grid(row=2, column=3, sticky=tk.W, padx=4)
        self.target_hint = HintLabel(grid)
        self.target_hint.grid(row=2, column=4, sticky=tk.W, padx=4)

        for name, var in self.vars.items():
            var.trace_add("write", lambda *_, n=name: self._on_edit(n))
        self._syncing = False

    def _target_key(self) -> str:
        return "custom_domain" if self.proxy.uses_domain else "remote_port"

    def _target_value(self) -> str:
        if self.proxy.uses_domain:
            return self.proxy.custom_domains or ""
        return self.proxy.remote_port or ""

    def _on_edit(self, name: str):
        if self._syncing:
            return
        value = self.vars[name].get()
        if name == "target":
            if self.proxy.uses_domain:
                self.proxy.custom_domains = value
            else:
                self.proxy.remote_port = value
        elif name == "type":
            self.proxy.type = value
            # show the other field without marking it as edited
            self._syncing = True
            self.vars["target"].set(self._target_value())
            self._syncing = False
            self.target_label.config(text=self.app.t(self._target_key()).upper())
        else:
            setattr(self.proxy, name, value)
        self.app.on_config_edited()

    def apply_errors(self, errors: Dict[str, str]):
        t = self.app.t
        port_err = errors.get("local_port", "")
        self.local_port_hint.show(t(port_err) if port_err else "")
        self.local_port_entry.set_invalid(bool(port_err))

        target_err = errors.get("custom_domains" if self.proxy.uses_domain else "remote_port", "")
        self.target_hint.show(t(target_err) if target_err else "")
        self.target_entry.set_invalid(bool(target_err))


class ConfigView(tk.Frame):
    def __init__(self, parent, app: "FrpcApp"):
        super().__init__(parent, bg=COLORS["bg_root"], padx=20, pady=20)
        self.app = app
        self._syncing = False
        t = app.t

        settings_card = Card(self, t("settings"))
        settings_card.pack(fill=tk.X)
        grid = settings_card.content
        grid.columnconfigure(0, weight=3)
        grid.columnconfigure(1, weight=1)

        self.vars = {
            "server_addr": tk.StringVar(),
            "server_port": tk.StringVar(),
            "token": tk.StringVar(),
        }

        for col, key in enumerate(("server_addr", "server_port")):
            tk.Label(grid, text=t(key), bg=COLORS["bg_card"], fg=COLORS["text_dim"]).grid(
                row=0, column=col, sticky=tk.W, padx=4)
        self.addr_entry = ModernEntry(grid, self.vars["server_addr"], width=30)
        self.addr_entry.grid(row=1, column=0, sticky=tk.EW, padx=4)
        self.port_entry = ModernEntry(grid, self.vars["server_port"], width=8)
        self.port_entry.grid(row=1, column=1, sticky=tk.EW, padx=4)
        self.addr_hint = HintLabel(grid)
        self.addr_hint.grid(row=2, column=0, sticky=tk.W, padx=4)
        self.port_hint = HintLabel(grid)
        self.port_hint.grid(row=2, column=1, sticky=tk.W, padx=4)

        tk.Label(grid, text=t("token"), bg=COLORS["bg_card"], fg=COLORS["text_dim"]).grid(
            row=3, column=0, sticky=tk.W, padx=4, pady=(8, 0))
        ModernEntry(grid, self.vars["token"], width=40, show="*").grid(
            row=4, column=0, columnspan=2, sticky=tk.EW, padx=4)

        for name, var in self.vars.items():
            var.trace_add("write", lambda *_, n=name: self._on_server_edit(n))

        header = tk.Frame(self, bg=COLORS["bg_root"])
        header.pack(fill=tk.X, pady=(20, 10))
        tk.Label(header, text=t("tunnels").upper(), bg=COLORS["bg_root"], fg=COLORS["accent"],
                 font=("Inter", 9, "bold")).pack(side=tk.LEFT)
        self.count_label = tk.Label(header, text="0", bg=COLORS["accent_dim"], fg=COLORS["text_main"],
                                    font=("JetBrains Mono", 8), padx=6)
        self.count_label.pack(side=tk.LEFT, padx=8)
        ModernButton(header, f"+ {t('add_tunnel')}", app.add_tunnel_action,
                     variant="secondary").pack(side=tk.RIGHT)

        self.scroll = ScrollFrame(self)
        self.scroll.pack(fill=tk.BOTH, expand=True)
        self.rows: List[TunnelRow] = []

    def load(self):
        """Populate every field from the current config."""
        cfg = self.app.config
        self._syncing = True
        self.vars["server_addr"].set(cfg.server_addr)
        self.vars["server_port"].set(cfg.server_port)
        self.vars["token"].set(cfg.token)
        self._syncing = False
        self.rebuild_rows()

    def _on_server_edit(self, name: str):
        if self._syncing:
            return
        setattr(self.app.config, name, self.vars[name].get())
        self.app.on_config_edited()

    def rebuild_rows(self):
        self.rows = []
        for child in self.scroll.body.winfo_children():
            child.destroy()

        proxies = self.app.config.proxies
        self.count_label.config(text=str(len(proxies)))
        if not proxies:
            tk.Label(self.scroll.body, text=self.app.t("no_tunnels"), bg=COLORS["bg_root"],
                     fg=COLORS["text_muted"], pady=30).pack(fill=tk.X)
            return

        for proxy in proxies:
            row = TunnelRow(self.scroll.body, self.app, proxy, self._confirm_delete)
            row.pack(fill=tk.X, pady=4)
            self.rows.append(row)

    def _confirm_delete(self, proxy: ProxyItem):
        name = proxy.name or str(self.app.config.proxies.index(proxy) + 1)
        if messagebox.askyesno(self.app.t("delete"), self.app.t("confirm_delete", name=name)):
            self.app.remove_tunnel_action(proxy)

    def apply_errors(self, errors: FieldErrors):
        t = self.app.t
        addr_err = errors.server.get("serverAddr", "")
        port_err = errors.server.get("serverPort", "")
        self.addr_hint.show(t(addr_err) if addr_err else "")
        self.addr_entry.set_invalid(bool(addr_err))
        self.port_hint.show(t(port_err) if port_err else "")
        self.port_entry.set_invalid(bool(port_err))

        for index, row in enumerate(self.rows):
            row.apply_errors(errors.proxies.get(index, {}))
