from .object import CanvasElement, ElementType, SafeZone, Customization, ToneTier, Product, FALLBACK_SAFE_ZONE
from .store import ElementStore
from .layering import LayerManager, LayerDirection
from .bounds import is_out_of_bound, out_of_bound_ids
from .selection import InteractionController, CanvasGeometry, DragMode, Idle, Selected, Dragging
from .export import RasterExporter, RasterResult
