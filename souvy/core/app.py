# App (Tk), ttk styles, base Screen
import logging

import tkinter as tk
from tkinter import ttk, messagebox

from .state import APP_TITLE

logger = logging.getLogger(__name__)

# Shared UI colors
COLOR_BG_SCREEN = "#F1F3F5"
COLOR_BG_PANEL = "#ffffff"
COLOR_BG_DARK = "#0f172a"
COLOR_ACCENT = "#004D4D"
COLOR_WARNING = "#ef4444"
COLOR_TEXT = "#0f172a"
COLOR_MUTED = "#94a3b8"

UI_SCALE = 1.0


# Helpers: dialogs
def warn(message: str, title: str = "Warning"):
    messagebox.showwarning(title, message)


def scale_px(value: float) -> int:
    """Scale pixel values by UI_SCALE with rounding."""
    return int(round(value * UI_SCALE))


def apply_styles(root):
    style = ttk.Style(root)
    style.theme_use("clam")
    style.configure("Screen.TFrame", background=COLOR_BG_SCREEN)
    style.configure("Panel.TFrame",  background=COLOR_BG_PANEL)
    style.configure("Title.TFrame",  background=COLOR_BG_PANEL)
    style.configure("Brand.TLabel",  background=COLOR_BG_PANEL, foreground=COLOR_TEXT, font=("Helvetica", 14, "bold"))
    style.configure("Sub.TLabel",    background=COLOR_BG_PANEL, foreground=COLOR_MUTED, font=("Helvetica", 9))
    style.configure("H3.TLabel",     background=COLOR_BG_PANEL, foreground=COLOR_MUTED, font=("Helvetica", 9, "bold"))
    style.configure("Label.TLabel",  background=COLOR_BG_PANEL, foreground=COLOR_TEXT, font=("Helvetica", 11))
    style.configure("Advice.TLabel", background=COLOR_BG_PANEL, foreground=COLOR_TEXT, font=("Helvetica", 11, "italic"))
    style.configure("Accent.TButton", background=COLOR_ACCENT, foreground="#ffffff")
    style.map("Accent.TButton", background=[("disabled", COLOR_MUTED), ("active", "#006666")])


class App(tk.Tk):
    def __init__(self, title: str = APP_TITLE, size: str = "1280x800"):
        super().__init__()
        self.title(title)
        self.size = (int(size.split("x")[0]), int(size.split("x")[1]))

        self.resizable(True, True)
        self.minsize(960, 640)
        self.geometry(f"{self.size[0]}x{self.size[1]}")
        self.is_fullscreen = False

        self.configure(bg=COLOR_BG_SCREEN)
        apply_styles(self)
        self.current = None
        self._history: list[tuple[type, dict]] = []

    def show_screen(self, screen_cls, push_history: bool = True, **kwargs):
        if self.current is not None:
            if push_history:
                self._history.append((self.current.__class__, getattr(self.current, "screen_kwargs", {})))
            self.current.destroy()
        # clear global hotkeys between screens
        try:
            self.unbind("<Return>")
            self.unbind("<Escape>")
        except Exception:
            logger.exception("Failed to clear global hotkeys")
        self.current = screen_cls(self, self, **kwargs)
        self.current.screen_kwargs = kwargs
        self.current.pack(expand=True, fill="both")

    def quit_app(self):
        self.destroy()

    def go_back(self):
        if self._history:
            prev, kwargs = self._history.pop()
            self.show_screen(prev, push_history=False, **kwargs)
        else:
            self.quit_app()

    def toggle_fullscreen(self):
        if self.is_fullscreen:
            self.geometry(f"{self.size[0]}x{self.size[1]}")
        else:
            self.geometry(f"{self.winfo_screenwidth()}x{self.winfo_screenheight()}")
        self.attributes("-fullscreen", not self.is_fullscreen)
        self.is_fullscreen = not self.is_fullscreen


class Screen(ttk.Frame):
    def __init__(self, master: tk.Tk, app: App):
        super().__init__(master)
        self.app = app
        self.configure(style="Screen.TFrame")
        self.app.bind("<F11>", lambda _e: self.app.toggle_fullscreen())

    def scale_px(self, value: float) -> int:
        return scale_px(value)

    def brand_bar(self, parent, subtitle: str = ""):
        bar = ttk.Frame(parent, style="Title.TFrame", height=scale_px(56))
        bar.pack(fill="x")
        bar.pack_propagate(False)
        titles = ttk.Frame(bar, style="Title.TFrame")
        titles.pack(side="left", padx=scale_px(16))
        ttk.Label(titles, text=APP_TITLE, style="Brand.TLabel").pack(anchor="w", pady=(scale_px(8), 0))
        if subtitle:
            ttk.Label(titles, text=subtitle, style="Sub.TLabel").pack(anchor="w")
        return bar
