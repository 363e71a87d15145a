import os
import logging
from pathlib import Path
from dataclasses import dataclass

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


APP_TITLE = "Souvy Creative Studio"
# Text sizes are authored against a 600px wide design and scaled on export
REFERENCE_DESIGN_WIDTH = 600

INTERNAL_PATH = Path.cwd() / "_internal"
INTERNAL_PATH.mkdir(exist_ok=True)

FONTS_PATH          = INTERNAL_PATH / "fonts"
LOGS_PATH           = INTERNAL_PATH / "logs"
LOGS_PATH.mkdir(exist_ok=True)
CUSTOMIZATIONS_PATH = INTERNAL_PATH / "customizations"
OUTPUT_PATH         = Path.cwd() / "outputs"

ENV_PATH = INTERNAL_PATH / "env"


@dataclass
class Settings:
    """Runtime configuration read from ``_internal/env`` and the environment.

    Attributes:
        anthropic_api_key: Key for the AI gateway. Empty disables AI calls.
        model_vision: Model used for image understanding (safe zone, receipts).
        model_text: Model used for creative copy.
        asset_proxy: Optional URL template with a ``{url}`` placeholder used
            to route remote image downloads through a proxy. Empty = direct.
        request_timeout: Seconds before an HTTP asset download gives up.
    """
    anthropic_api_key: str = ""
    model_vision: str = "claude-sonnet-4-5-20250929"
    model_text: str = "claude-haiku-4-5-20251001"
    asset_proxy: str = ""
    request_timeout: float = 30.0


def load_settings(env_path: str | Path = ENV_PATH) -> Settings:
    p = Path(env_path)
    if p.exists():
        load_dotenv(p)
    settings = Settings(
        anthropic_api_key=os.environ.get("ANTHROPIC_API_KEY", ""),
        model_vision=os.environ.get("SOUVY_MODEL_VISION", Settings.model_vision),
        model_text=os.environ.get("SOUVY_MODEL_TEXT", Settings.model_text),
        asset_proxy=os.environ.get("SOUVY_ASSET_PROXY", ""),
    )
    raw_timeout = os.environ.get("SOUVY_REQUEST_TIMEOUT", "")
    if raw_timeout:
        try:
            settings.request_timeout = float(raw_timeout)
        except ValueError:
            logger.warning("Ignoring invalid SOUVY_REQUEST_TIMEOUT=%r", raw_timeout)
    return settings
