from __future__ import annotations

import base64
import random
import string
from enum import Enum
from typing import Optional, Any, List
from dataclasses import dataclass, field, fields

_ID_ALPHABET = string.digits + string.ascii_lowercase

# Python attribute name -> key used in saved customizations
_ELEMENT_KEYS = {
    "font_size": "fontSize",
    "font_family": "fontFamily",
    "z_index": "zIndex",
    "is_locked": "isLocked",
}


class ElementType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class ToneTier(str, Enum):
    ROMANTIC = "Romantic"
    PROFESSIONAL = "Professional"
    HUMOROUS = "Humorous"
    MINIMALIST = "Minimalist"


def new_element_id() -> str:
    """Return a short random base-36 identifier (9 chars)."""
    return "".join(random.choice(_ID_ALPHABET) for _ in range(9))


@dataclass
class CanvasElement:
    """One text or image object placed on the design surface.

    Geometry is resolution independent: ``x``/``y`` are the center and
    ``width``/``height`` the size, all as percentages of the canvas width and
    height. Pixel conversion happens in the screen and in the exporter.
    """

    id: str
    type: ElementType
    content: str = ""  # literal text, or image reference (data URL, http(s) URL, path)

    x: float = 50.0
    y: float = 50.0
    width: float = 20.0
    height: float = 20.0

    # Text only; None for images
    font_size: Optional[float] = None
    font_family: Optional[str] = None
    color: Optional[str] = None

    # Ordering key, only the relative order matters
    z_index: int = 0
    # Reserved for UI gating, not enforced by the store
    is_locked: bool = False

    def __post_init__(self) -> None:
        self.type = ElementType(self.type)

    @property
    def is_text(self) -> bool:
        return self.type == ElementType.TEXT

    def bbox(self) -> tuple[float, float, float, float]:
        """Return ``(left, top, right, bottom)`` in percent."""
        hw = self.width / 2.0
        hh = self.height / 2.0
        return self.x - hw, self.y - hh, self.x + hw, self.y + hh

    def contains(self, px: float, py: float) -> bool:
        left, top, right, bottom = self.bbox()
        return left <= px <= right and top <= py <= bottom

    def to_dict(self) -> dict:
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            if value is None:
                continue
            data[_ELEMENT_KEYS.get(f.name, f.name)] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CanvasElement":
        reverse = {v: k for k, v in _ELEMENT_KEYS.items()}
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = reverse.get(key, key)
            if name in known:
                kwargs[name] = value
        return cls(**kwargs)


@dataclass(frozen=True)
class SafeZone:
    """Printable area of a product photo in a normalized 0-1000 space."""

    ymin: float
    xmin: float
    ymax: float
    xmax: float

    def to_percent(self) -> "SafeZone":
        """Same rectangle expressed in element percentage space (0-100)."""
        return SafeZone(self.ymin / 10.0, self.xmin / 10.0, self.ymax / 10.0, self.xmax / 10.0)

    def to_dict(self) -> dict:
        return {"ymin": self.ymin, "xmin": self.xmin, "ymax": self.ymax, "xmax": self.xmax}


FALLBACK_SAFE_ZONE = SafeZone(ymin=300, xmin=300, ymax=700, xmax=700)


@dataclass
class Product:
    id: str
    name: str
    category: str
    price: float
    image: str
    description: str = ""


@dataclass
class Customization:
    """Finalized design handed to the host when the editor saves.

    Attributes:
        elements: Placed elements, in insertion order.
        generated_note: Gift note produced by the creative engine.
        design_advice: Branding advice produced by the creative engine.
        recipient_name: Who the gift is for.
        occasion: Free-form occasion label.
        tone: Tone used when generating the note.
        preview_image: PNG bytes of the composited design, if export succeeded.
    """
    elements: List[CanvasElement] = field(default_factory=list)
    generated_note: str = ""
    design_advice: str = ""
    recipient_name: str = ""
    occasion: str = ""
    tone: ToneTier = ToneTier.MINIMALIST
    preview_image: Optional[bytes] = None

    def to_dict(self) -> dict:
        data = {
            "elements": [el.to_dict() for el in self.elements],
            "generatedNote": self.generated_note,
            "designAdvice": self.design_advice,
            "recipientName": self.recipient_name,
            "occasion": self.occasion,
            "tone": ToneTier(self.tone).value,
        }
        if self.preview_image:
            encoded = base64.b64encode(self.preview_image).decode("ascii")
            data["previewImage"] = f"data:image/png;base64,{encoded}"
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Customization":
        preview = None
        raw_preview = data.get("previewImage") or ""
        if raw_preview.startswith("data:") and "," in raw_preview:
            preview = base64.b64decode(raw_preview.split(",", 1)[1])
        return cls(
            elements=[CanvasElement.from_dict(el) for el in data.get("elements", [])],
            generated_note=str(data.get("generatedNote", "")),
            design_advice=str(data.get("designAdvice", "")),
            recipient_name=str(data.get("recipientName", "")),
            occasion=str(data.get("occasion", "")),
            tone=ToneTier(data.get("tone", ToneTier.MINIMALIST.value)),
            preview_image=preview,
        )
