from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Callable, Dict, Optional

import tkinter as tk
from tkinter import ttk, filedialog

from PIL import Image

from souvy.canvas.export import RasterExporter
from souvy.canvas.images import open_image, render_photo
from souvy.canvas.layering import LayerDirection
from souvy.canvas.object import Customization, ElementType, Product, ToneTier
from souvy.canvas.selection import CanvasGeometry
from souvy.canvas.session import EditorSession
from souvy.core.app import Screen, warn, COLOR_ACCENT, COLOR_BG_PANEL, COLOR_WARNING
from souvy.core.state import CUSTOMIZATIONS_PATH, OUTPUT_PATH, load_settings
from souvy.core.storage import save_customization
from souvy.core.worker import AsyncRunner
from souvy.services.assets import HttpAssetFetcher, encode_data_url
from souvy.services.gateway import AIGateway

logger = logging.getLogger(__name__)

CANVAS_SIZE = 600
FONT_FAMILIES = ("Playfair Display", "Inter", "Outfit")
HANDLE_PX = 6


def default_save(customization: Customization, product: Product) -> None:
    """Store the design next to the app: JSON under _internal, preview PNG under outputs."""
    save_customization(CUSTOMIZATIONS_PATH / f"{product.id}.json", customization)
    if customization.preview_image:
        OUTPUT_PATH.mkdir(exist_ok=True)
        (OUTPUT_PATH / f"{product.id}.png").write_bytes(customization.preview_image)
    logger.info("Saved customization for %s", product.id)


class EditorScreen(Screen):
    """Design editor: product photo, draggable elements, layers and AI copy."""

    def __init__(
        self,
        master,
        app,
        product: Product,
        initial: Optional[Customization] = None,
        on_save: Optional[Callable[[Customization], None]] = None,
        runner: Optional[AsyncRunner] = None,
    ):
        super().__init__(master, app)
        self.product = product
        self.runner = runner or AsyncRunner()
        settings = load_settings()
        fetcher = HttpAssetFetcher(proxy=settings.asset_proxy, timeout=settings.request_timeout)
        self.fetcher = fetcher
        self.session = EditorSession(
            product,
            exporter=RasterExporter(fetcher),
            gateway=AIGateway(settings, fetcher),
            on_save=on_save or (lambda c: default_save(c, product)),
            initial=initial,
            geometry=CanvasGeometry(CANVAS_SIZE, CANVAS_SIZE),
        )

        self._base_pil: Optional[Image.Image] = None
        self._assets: Dict[str, Image.Image] = {}
        self._pending_assets: set[str] = set()
        # Keep PhotoImage references alive while shown
        self._photos: list = []
        self._layer_ids: list[str] = []
        self._suppress_traces = False
        self._busy = False

        self.header_bar = self.brand_bar(self, subtitle=f"Editing: {product.name}")
        self._build_header_actions()
        body = ttk.Frame(self, style="Screen.TFrame")
        body.pack(fill="both", expand=True)
        self._build_left_panel(body)
        self._build_right_panel(body)
        self._build_canvas(body)

        self.app.bind("<Escape>", lambda _e: self.on_close())
        self.app.bind("<Delete>", lambda _e: self.on_delete())

        self._load_base_image()
        self._analyze_surface()
        self.redraw()

    # --- Layout ---
    def _build_header_actions(self):
        bar = self.header_bar
        self.finalize_btn = ttk.Button(bar, text="Finalize Design", style="Accent.TButton", command=self.on_finalize)
        self.finalize_btn.pack(side="right", padx=16)
        ttk.Button(bar, text="Close", command=self.on_close).pack(side="right")

    def _build_left_panel(self, parent):
        left = ttk.Frame(parent, style="Panel.TFrame", width=self.scale_px(280))
        left.pack(side="left", fill="y")
        left.pack_propagate(False)

        ttk.Label(left, text="CANVAS ELEMENTS", style="H3.TLabel").pack(anchor="w", padx=16, pady=(16, 6))
        ttk.Button(left, text="T+  Add New Text Box", command=self.on_add_text).pack(fill="x", padx=16)
        ttk.Button(left, text="Upload Asset", command=self.on_upload).pack(fill="x", padx=16, pady=(6, 0))

        # Text editor (shown for selected text elements)
        self.text_box = ttk.Frame(left, style="Panel.TFrame")
        self.text_content = tk.StringVar()
        self.text_family = tk.StringVar()
        self.text_size = tk.StringVar()
        ttk.Label(self.text_box, text="TEXT EDITOR", style="H3.TLabel").pack(anchor="w", pady=(12, 4))
        ttk.Entry(self.text_box, textvariable=self.text_content).pack(fill="x")
        row = ttk.Frame(self.text_box, style="Panel.TFrame")
        row.pack(fill="x", pady=(6, 0))
        ttk.Combobox(row, textvariable=self.text_family, values=FONT_FAMILIES, width=16, state="readonly").pack(side="left")
        ttk.Spinbox(row, textvariable=self.text_size, from_=6, to=200, width=5).pack(side="left", padx=(6, 0))
        for var in (self.text_content, self.text_family, self.text_size):
            var.trace_add("write", self.on_text_change)

        self.element_actions = ttk.Frame(left, style="Panel.TFrame")
        for label, direction in (("Top", "top"), ("Up", "up"), ("Down", "down"), ("Bottom", "bottom")):
            ttk.Button(self.element_actions, text=label, width=6,
                       command=lambda d=direction: self.on_reorder(d)).pack(side="left", padx=1)
        ttk.Button(self.element_actions, text="Delete", width=6, command=self.on_delete).pack(side="left", padx=1)

        self.layers_list = tk.Listbox(left, height=10, activestyle="none", exportselection=False)
        self.layers_list.pack(fill="both", expand=True, padx=16, pady=(0, 16), side="bottom")
        ttk.Label(left, text="LAYERS", style="H3.TLabel").pack(anchor="w", padx=16, pady=(16, 6), side="bottom")
        self.layers_list.bind("<<ListboxSelect>>", self.on_layer_pick)

    def _build_right_panel(self, parent):
        right = ttk.Frame(parent, style="Panel.TFrame", width=self.scale_px(340))
        right.pack(side="right", fill="y")
        right.pack_propagate(False)

        ttk.Label(right, text="AI Director", style="Brand.TLabel").pack(anchor="w", padx=16, pady=(16, 8))
        self.advice_var = tk.StringVar(value=self.session.design_advice or "Design advice will appear here after sync.")
        ttk.Label(right, textvariable=self.advice_var, style="Advice.TLabel", wraplength=300).pack(anchor="w", padx=16)

        self.recipient_var = tk.StringVar(value=self.session.recipient_name)
        self.occasion_var = tk.StringVar(value=self.session.occasion)
        self.tone_var = tk.StringVar(value=self.session.tone.value)
        ttk.Label(right, text="RECIPIENT", style="H3.TLabel").pack(anchor="w", padx=16, pady=(16, 2))
        ttk.Entry(right, textvariable=self.recipient_var).pack(fill="x", padx=16)
        ttk.Label(right, text="OCCASION", style="H3.TLabel").pack(anchor="w", padx=16, pady=(8, 2))
        ttk.Entry(right, textvariable=self.occasion_var).pack(fill="x", padx=16)
        ttk.Label(right, text="TONE", style="H3.TLabel").pack(anchor="w", padx=16, pady=(8, 2))
        ttk.Combobox(right, textvariable=self.tone_var, values=[t.value for t in ToneTier], state="readonly").pack(fill="x", padx=16)
        self.sync_btn = ttk.Button(right, text="Sync AI Engine", command=self.on_sync_ai)
        self.sync_btn.pack(fill="x", padx=16, pady=(12, 0))

        self.note_var = tk.StringVar(value=self._quoted(self.session.generated_note))
        ttk.Label(right, textvariable=self.note_var, style="Advice.TLabel", wraplength=300).pack(anchor="w", padx=16, pady=(16, 0))

    def _build_canvas(self, parent):
        holder = ttk.Frame(parent, style="Screen.TFrame")
        holder.pack(side="left", fill="both", expand=True)
        self.canvas = tk.Canvas(holder, width=CANVAS_SIZE, height=CANVAS_SIZE, bg=COLOR_BG_PANEL, highlightthickness=0)
        self.canvas.place(relx=0.5, rely=0.5, anchor="center")
        self.canvas.bind("<ButtonPress-1>", self.on_press)
        self.canvas.bind("<B1-Motion>", self.on_drag)
        self.canvas.bind("<ButtonRelease-1>", self.on_release)
        self.canvas.bind("<Leave>", self.on_leave)
        self.canvas.bind("<Configure>", self.on_canvas_resize)

    @staticmethod
    def _quoted(note: str) -> str:
        return f"“{note}”" if note else ""

    # --- Background work ---
    def _load_base_image(self):
        async def _fetch():
            return open_image(await self.fetcher.fetch(self.product.image))

        def _done(pil):
            self._base_pil = pil
            self.redraw()

        def _report(fut):
            if fut.exception() is not None:
                logger.warning("Product image unavailable: %s", fut.exception())

        self.runner.submit(_fetch(), widget=self, on_done=_done).add_done_callback(_report)

    def _analyze_surface(self):
        self.session.analyzing = True
        self.runner.submit(self.session.analyze_surface(), widget=self, on_done=lambda _zone: self.redraw())

    def _ensure_asset(self, ref: str) -> Optional[Image.Image]:
        if ref in self._assets:
            return self._assets[ref]
        if ref and ref not in self._pending_assets:
            self._pending_assets.add(ref)

            async def _fetch():
                return open_image(await self.fetcher.fetch(ref))

            def _done(pil):
                self._assets[ref] = pil
                self._pending_assets.discard(ref)
                self.redraw()

            def _failed(_e):
                # allow a later redraw to retry the download
                self._pending_assets.discard(ref)

            self.runner.submit(_fetch(), widget=self, on_done=_done, on_error=_failed)
        return None

    # --- Rendering ---
    def _px(self, pct: float, axis: int) -> float:
        size = self.session.controller.geometry.width if axis == 0 else self.session.controller.geometry.height
        return pct / 100.0 * size

    def redraw(self):
        c = self.canvas
        c.delete("all")
        self._photos = []
        geo = self.session.controller.geometry
        if self._base_pil is not None:
            photo = render_photo(self._base_pil, int(geo.width), int(geo.height))
            if photo is not None:
                self._photos.append(photo)
                c.create_image(0, 0, image=photo, anchor="nw")

        zone = self.session.safe_zone
        selected_id = self.session.store.selected_id
        if zone is not None and (self.session.analyzing or selected_id):
            z = zone.to_percent()
            c.create_rectangle(self._px(z.xmin, 0), self._px(z.ymin, 1), self._px(z.xmax, 0), self._px(z.ymax, 1),
                               outline="#14b8a6", dash=(4, 4))

        for el in self.session.store.ordered():
            left, top, right, bottom = el.bbox()
            x0, y0, x1, y1 = self._px(left, 0), self._px(top, 1), self._px(right, 0), self._px(bottom, 1)
            if el.type == ElementType.TEXT:
                c.create_text((x0 + x1) / 2, (y0 + y1) / 2, text=el.content, fill=el.color or "#000000",
                              font=(el.font_family or "Helvetica", -int(el.font_size or 20), "bold italic"),
                              width=max(1, x1 - x0), justify="center")
            else:
                pil = self._ensure_asset(el.content)
                if pil is not None:
                    photo = render_photo(pil, int(x1 - x0), int(y1 - y0))
                    if photo is not None:
                        self._photos.append(photo)
                        c.create_image(x0, y0, image=photo, anchor="nw")
            if el.id == selected_id:
                ring = COLOR_WARNING if self.session.is_out_of_bound(el.id) else COLOR_ACCENT
                c.create_rectangle(x0, y0, x1, y1, outline=ring, width=2)
                c.create_oval(x1 - HANDLE_PX, y1 - HANDLE_PX, x1 + HANDLE_PX, y1 + HANDLE_PX, fill="white", outline=ring, width=2)

        self._refresh_controls()
        self._refresh_layers()

    def _refresh_controls(self):
        el = self.session.store.selected
        if el is not None:
            self.element_actions.pack(fill="x", padx=16, pady=(12, 0))
        else:
            self.element_actions.pack_forget()
        if el is not None and el.type == ElementType.TEXT:
            self._suppress_traces = True
            try:
                if self.text_content.get() != el.content:
                    self.text_content.set(el.content)
                self.text_family.set(el.font_family or "")
                self.text_size.set(str(int(el.font_size or 0)))
            finally:
                self._suppress_traces = False
            self.text_box.pack(fill="x", padx=16, before=self.element_actions)
        else:
            self.text_box.pack_forget()
        state = ["disabled"] if self._busy else ["!disabled"]
        self.finalize_btn.state(state)
        self.sync_btn.state(state)

    def _set_busy(self, busy: bool):
        self._busy = busy
        self._refresh_controls()

    def _refresh_layers(self):
        self.layers_list.delete(0, "end")
        self._layer_ids = []
        for el in self.session.layers.layers():
            tag = "T" if el.type == ElementType.TEXT else "IMG"
            label = el.content[:15] if el.type == ElementType.TEXT else "image"
            self.layers_list.insert("end", f"{tag}  {label}")
            self._layer_ids.append(el.id)
            if el.id == self.session.store.selected_id:
                self.layers_list.selection_set("end")

    # --- Pointer events ---
    def on_press(self, e):
        self.session.controller.pointer_down_at(e.x, e.y)
        self.redraw()

    def on_drag(self, e):
        if self.session.controller.pointer_move(e.x, e.y):
            self.redraw()

    def on_release(self, _e):
        self.session.controller.pointer_up()

    def on_leave(self, _e):
        self.session.controller.pointer_leave()

    def on_canvas_resize(self, e):
        if (e.width, e.height) != (self.session.controller.geometry.width, self.session.controller.geometry.height):
            self.session.controller.resize_canvas(e.width, e.height)
            self.redraw()

    # --- Commands ---
    def on_add_text(self):
        self.session.add_text()
        self.redraw()

    def on_upload(self):
        path = filedialog.askopenfilename(filetypes=[("Images", "*.png *.jpg *.jpeg *.gif *.webp"), ("All files", "*.*")])
        if not path:
            return
        try:
            data = Path(path).read_bytes()
            open_image(data)
        except Exception as e:
            logger.exception("Failed to read uploaded asset %s", path)
            warn(f"Could not open image:\n{e}")
            return
        mime = mimetypes.guess_type(path)[0] or "image/png"
        self.session.add_image(encode_data_url(data, mime))
        self.redraw()

    def on_text_change(self, *_):
        if self._suppress_traces:
            return
        el = self.session.store.selected
        if el is None or el.type != ElementType.TEXT:
            return
        changes = {"content": self.text_content.get(), "font_family": self.text_family.get() or el.font_family}
        try:
            changes["font_size"] = int(self.text_size.get())
        except ValueError:
            pass
        self.session.update(el.id, **changes)
        self.redraw()

    def on_reorder(self, direction: str):
        selected = self.session.store.selected_id
        if selected:
            self.session.reorder(selected, LayerDirection(direction))
            self.redraw()

    def on_delete(self):
        selected = self.session.store.selected_id
        if selected:
            self.session.remove(selected)
            self.redraw()

    def on_layer_pick(self, _e=None):
        sel = self.layers_list.curselection()
        if not sel:
            return
        self.session.store.select(self._layer_ids[sel[0]])
        self.redraw()

    def _pull_inputs(self):
        self.session.recipient_name = self.recipient_var.get()
        self.session.occasion = self.occasion_var.get()
        self.session.tone = ToneTier(self.tone_var.get())

    def on_sync_ai(self):
        self._pull_inputs()
        self._set_busy(True)

        def _done(ok: bool):
            if ok:
                self.advice_var.set(self.session.design_advice)
                self.note_var.set(self._quoted(self.session.generated_note))
            self._set_busy(False)

        self.runner.submit(self.session.sync_creative(self.session.creative_brief()), widget=self, on_done=_done,
                           on_error=lambda _e: self._set_busy(False))

    def on_finalize(self):
        self._pull_inputs()
        self._set_busy(True)

        def _failed(e: BaseException):
            self._set_busy(False)
            warn(f"Could not finalize the design:\n{e}")

        self.runner.submit(self.session.finalize(self.session.store.snapshot()), widget=self, on_done=lambda _c: self.app.go_back(), on_error=_failed)

    def on_close(self):
        self.session.cancel()
        self.app.go_back()
