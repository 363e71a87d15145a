from __future__ import annotations

import logging
from typing import Callable, List, Optional, Set

from souvy.canvas.bounds import is_out_of_bound, out_of_bound_ids
from souvy.canvas.export import RasterExporter, RasterResult
from souvy.canvas.layering import LayerDirection, LayerManager
from souvy.canvas.object import CanvasElement, Customization, ElementType, Product, SafeZone, ToneTier
from souvy.canvas.selection import CanvasGeometry, InteractionController
from souvy.canvas.store import ElementStore
from souvy.services.gateway import AIGateway, CreativeBrief

logger = logging.getLogger(__name__)

DEFAULT_RECIPIENT = "Alexandra"
DEFAULT_OCCASION = "Special Day"
LOGO_BRANDING = "Includes custom logo branding"
TEXT_ONLY = "Text only engraving"


class EditorSession:
    """Everything one open editor owns for a single product.

    Holds the element store and the controllers that mutate it, the detected
    safe zone, the creative copy, and the recipient/occasion/tone inputs.
    ``finalize`` rasterizes the design and hands a :class:`Customization` to
    the save callback; ``cancel`` drops the session without saving.
    """

    def __init__(
        self,
        product: Product,
        exporter: RasterExporter,
        gateway: AIGateway,
        on_save: Callable[[Customization], None],
        initial: Optional[Customization] = None,
        geometry: Optional[CanvasGeometry] = None,
    ) -> None:
        self.product = product
        self.exporter = exporter
        self.gateway = gateway
        self.on_save = on_save

        self.store = ElementStore(initial.elements if initial else None)
        self.layers = LayerManager(self.store)
        self.controller = InteractionController(self.store, geometry or CanvasGeometry(600, 600))

        self.safe_zone: Optional[SafeZone] = None
        self.analyzing = False
        self.loading_ai = False
        self.closed = False

        self.recipient_name = (initial.recipient_name if initial else "") or DEFAULT_RECIPIENT
        self.occasion = (initial.occasion if initial else "") or DEFAULT_OCCASION
        self.tone = ToneTier(initial.tone) if initial else ToneTier.MINIMALIST
        self.generated_note = initial.generated_note if initial else ""
        self.design_advice = initial.design_advice if initial else ""

    # --- Element editing ---
    def add_text(self, content: Optional[str] = None) -> str:
        return self.store.add(ElementType.TEXT, content)

    def add_image(self, content: str) -> str:
        return self.store.add(ElementType.IMAGE, content)

    def update(self, element_id: str, **changes) -> None:
        self.store.update(element_id, **changes)

    def remove(self, element_id: str) -> None:
        self.store.remove(element_id)

    def reorder(self, element_id: str, direction: LayerDirection | str) -> None:
        self.layers.reorder(element_id, direction)

    # --- Validation ---
    def is_out_of_bound(self, element_id: str) -> bool:
        el = self.store.get(element_id)
        return el is not None and is_out_of_bound(el, self.safe_zone)

    def out_of_bound_ids(self) -> Set[str]:
        return out_of_bound_ids(self.store, self.safe_zone)

    # --- Gateway ---
    async def analyze_surface(self) -> SafeZone:
        self.analyzing = True
        try:
            self.safe_zone = await self.gateway.detect_safe_zone(self.product.image)
        finally:
            self.analyzing = False
        logger.info("Safe zone for %s: %s", self.product.id, self.safe_zone)
        return self.safe_zone

    def creative_brief(self) -> CreativeBrief:
        has_logo = any(el.type == ElementType.IMAGE for el in self.store)
        return CreativeBrief(
            product_name=self.product.name,
            recipient_name=self.recipient_name,
            occasion=self.occasion,
            tone=self.tone,
            logo_description=LOGO_BRANDING if has_logo else TEXT_ONLY,
        )

    async def sync_creative(self, brief: Optional[CreativeBrief] = None) -> bool:
        """Refresh the note and advice; previous values stay on failure.

        Hosts that mutate the store on another thread pass a ``brief`` built
        on that thread.
        """
        if brief is None:
            brief = self.creative_brief()
        self.loading_ai = True
        try:
            content = await self.gateway.generate_creative_content(brief)
        finally:
            self.loading_ai = False
        if content is None:
            return False
        self.generated_note = content.note
        self.design_advice = content.design_advice
        return True

    # --- Save / cancel ---
    def customization(
        self,
        preview: Optional[RasterResult] = None,
        elements: Optional[List[CanvasElement]] = None,
    ) -> Customization:
        return Customization(
            elements=elements if elements is not None else self.store.snapshot(),
            generated_note=self.generated_note,
            design_advice=self.design_advice,
            recipient_name=self.recipient_name,
            occasion=self.occasion,
            tone=self.tone,
            preview_image=preview.png if preview else None,
        )

    async def render_preview(self, elements: Optional[List[CanvasElement]] = None) -> RasterResult:
        if elements is None:
            elements = self.store.snapshot()
        return await self.exporter.export(self.product.image, elements)

    async def finalize(self, elements: Optional[List[CanvasElement]] = None) -> Customization:
        """Export the design and pass the result to the save callback.

        The preview and the saved elements come from one snapshot, taken
        before the first await (or passed in by the host), so edits made
        while the export runs are not saved. An empty export leaves
        ``preview_image`` unset; whether that blocks saving is up to the host.
        """
        if elements is None:
            elements = self.store.snapshot()
        self.loading_ai = True
        try:
            preview = await self.render_preview(elements)
        finally:
            self.loading_ai = False
        if not preview:
            logger.warning("Preview export failed for %s", self.product.id)
        result = self.customization(preview, elements)
        self.closed = True
        self.on_save(result)
        return result

    def cancel(self) -> None:
        self.closed = True
        logger.debug("Editor session for %s cancelled", self.product.id)
