import json
import logging
from pathlib import Path
from typing import Optional

from souvy.canvas.object import Customization

logger = logging.getLogger(__name__)


def save_customization(path: str | Path, customization: Customization) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(customization.to_dict(), f, ensure_ascii=False, indent=2)


def load_customization(path: str | Path) -> Optional[Customization]:
    p = Path(path)
    if not p.exists():
        return None
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
        return Customization.from_dict(data)
    except (ValueError, KeyError, TypeError):
        logger.exception("Failed to load customization from %s", p)
        return None
