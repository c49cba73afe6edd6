"""
Modern UI component library shared by the status and config views.
"""

import tkinter as tk
from tkinter import scrolledtext
from typing import Iterable

from .models import AppStatus, LogEntry
from .settings import COLORS


class Card(tk.Frame):
    """A visually distinct section with a title and border."""
    def __init__(self, parent, title: str, **kwargs):
        super().__init__(parent, bg=COLORS["bg_card"], highlightthickness=1,
                         highlightbackground=COLORS["border"], padx=15, pady=10, **kwargs)

        self.title_label = tk.Label(self, text=title.upper(), bg=COLORS["bg_card"],
                                    fg=COLORS["accent"], font=("Inter", 9, "bold"))
        self.title_label.pack(anchor=tk.W, pady=(0, 10))

        self.content = tk.Frame(self, bg=COLORS["bg_card"])
        self.content.pack(fill=tk.BOTH, expand=True)


class ModernEntry(tk.Frame):
    def __init__(self, parent, textvariable=None, width=20, show="", **kwargs):
        super().__init__(parent, bg=COLORS["border"], padx=1, pady=1)
        self._invalid = False
        entry_kwargs = {"width": width, "show": show, "bg": COLORS["bg_input"],
                        "fg": COLORS["text_main"], "insertbackground": COLORS["accent"],
                        "relief": "flat", "highlightthickness": 0, "font": ("JetBrains Mono", 10)}
        if textvariable:
            entry_kwargs["textvariable"] = textvariable

        self.entry = tk.Entry(self, **entry_kwargs)
        self.entry.pack(padx=8, pady=6, fill=tk.X)

        self.entry.bind("<FocusIn>", lambda e: self.config(bg=COLORS["accent"]))
        self.entry.bind("<FocusOut>", lambda e: self._paint_border())

    def _paint_border(self):
        self.config(bg=COLORS["error"] if self._invalid else COLORS["border"])

    def set_invalid(self, invalid: bool):
        self._invalid = invalid
        self._paint_border()


class HintLabel(tk.Label):
    """Inline validation hint shown under a field; empty when valid."""
    def __init__(self, parent, bg=COLORS["bg_card"], **kwargs):
        super().__init__(parent, text="", bg=bg, fg=COLORS["error"],
                         font=("Inter", 8), anchor=tk.W, **kwargs)

    def show(self, text: str):
        self.config(text=text or "")


class ModernButton(tk.Button):
    def __init__(self, parent, text, command=None, variant="primary", **kwargs):
        self.variant = variant
        btn_kwargs = {"text": text, "font": ("Inter", 10, "bold"), "relief": "flat",
                      "padx": 15, "pady": 6, "borderwidth": 0, "cursor": "hand2"}
        if command:
            btn_kwargs["command"] = command

        super().__init__(parent, **btn_kwargs, **kwargs)
        self.set_variant(variant)

        self.bind("<Enter>", lambda e: self.config(bg=self._active_bg) if self["state"] != "disabled" else None)
        self.bind("<Leave>", lambda e: self.config(bg=self._bg) if self["state"] != "disabled" else None)

    def set_variant(self, variant: str):
        palette = {
            "primary": (COLORS["accent"], COLORS["accent_hover"], COLORS["bg_root"]),
            "secondary": (COLORS["bg_hover"], COLORS["bg_card"], COLORS["text_main"]),
            "danger": (COLORS["error"], COLORS["border_error"], COLORS["text_main"]),
            "warning": (COLORS["warning"], COLORS["bg_hover"], COLORS["bg_root"]),
        }
        self._bg, self._active_bg, fg = palette.get(variant, palette["secondary"])
        self.variant = variant
        self.config(bg=self._bg, fg=fg, activebackground=self._active_bg, activeforeground=fg)


class StatusIndicator(tk.Canvas):
    STATUS_COLORS = {
        AppStatus.STOPPED: COLORS["error"],
        AppStatus.CONNECTING: COLORS["warning"],
        AppStatus.RUNNING: COLORS["success"],
    }

    def __init__(self, parent, size=14, bg=COLORS["bg_card"], **kwargs):
        super().__init__(parent, width=size, height=size, bg=bg,
                         highlightthickness=0, **kwargs)
        self.dot = self.create_oval(2, 2, size-2, size-2, fill=COLORS["error"], outline="")

    def set(self, status: AppStatus):
        self.itemconfig(self.dot, fill=self.STATUS_COLORS.get(status, COLORS["error"]))


class LogViewer(scrolledtext.ScrolledText):
    def __init__(self, parent, **kwargs):
        super().__init__(parent, bg=COLORS["bg_input"], fg=COLORS["text_dim"],
                         font=("JetBrains Mono", 9), relief="flat", padx=10, pady=10,
                         highlightthickness=1, highlightbackground=COLORS["border"], **kwargs)
        self.tag_config("info", foreground=COLORS["text_dim"])
        self.tag_config("debug", foreground=COLORS["text_muted"])
        self.tag_config("success", foreground=COLORS["success"])
        self.tag_config("error", foreground=COLORS["error"])
        self.tag_config("warning", foreground=COLORS["warning"])
        self.tag_config("ts", foreground=COLORS["text_muted"])
        self.config(state="disabled")

    def render(self, entries: Iterable[LogEntry], placeholder: str = ""):
        """Redraw from the log buffer; the buffer is small enough to repaint."""
        entries = list(entries)
        self.config(state="normal")
        self.delete(1.0, tk.END)
        if not entries and placeholder:
            self.insert(tk.END, placeholder, "ts")
        for entry in entries:
            self.insert(tk.END, f"[{entry.timestamp}] ", "ts")
            self.insert(tk.END, f"{entry.msg}\n", entry.level if entry.level in self.tag_names() else "info")
        self.see(tk.END)
        self.config(state="disabled")
