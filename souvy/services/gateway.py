"""AI gateway: safe-zone detection, creative copy and receipt checks.

Every call degrades instead of raising: safe-zone detection falls back to a
centered zone, creative content returns None and receipt verification
returns an unverified verdict carrying the error text.
"""

from __future__ import annotations

import io
import re
import json
import base64
import logging
from typing import Any, Callable, Optional

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from souvy.canvas.object import FALLBACK_SAFE_ZONE, SafeZone, ToneTier
from souvy.core.errors import AssetFetchError
from souvy.core.state import Settings
from souvy.services.assets import AssetFetcher
from souvy.services.prompts import CREATIVE_PROMPT, RECEIPT_PROMPT, SAFE_ZONE_PROMPT

logger = logging.getLogger(__name__)


class SafeZoneModel(BaseModel):
    ymin: float = Field(ge=0, le=1000)
    xmin: float = Field(ge=0, le=1000)
    ymax: float = Field(ge=0, le=1000)
    xmax: float = Field(ge=0, le=1000)


class CreativeBrief(BaseModel):
    product_name: str
    recipient_name: str
    occasion: str
    tone: ToneTier
    logo_description: str


class CreativeContent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    note: str
    design_advice: str = Field(alias="designAdvice")
    final_specs: str = Field(default="", alias="finalSpecs")


class ReceiptExpectation(BaseModel):
    amount: float
    reference: str
    account_name: str


class ReceiptVerdict(BaseModel):
    verified: bool
    reason: str


def parse_json_block(text: str) -> Optional[dict]:
    """Extract the first JSON object from a model reply (fenced or raw)."""
    match = re.search(r"```(?:json)?\s*\n?({[\s\S]*?})\s*\n?```", text)
    candidates = [match.group(1)] if match else []
    raw = re.search(r"({[\s\S]*})", text)
    if raw:
        candidates.append(raw.group(1))
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(data, dict):
            return data
    return None


def _media_type(data: bytes) -> str:
    try:
        fmt = Image.open(io.BytesIO(data)).format or "JPEG"
    except Exception:
        return "image/jpeg"
    return Image.MIME.get(fmt.upper(), "image/jpeg")


def _image_message(data: bytes, prompt: str):
    from langchain_core.messages import HumanMessage

    return HumanMessage(
        content=[
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": _media_type(data),
                    "data": base64.b64encode(data).decode("ascii"),
                },
            },
            {"type": "text", "text": prompt},
        ]
    )


class AIGateway:
    """Client for the creative engine backed by Anthropic models via LangChain.

    ``llm_factory`` builds a chat model for a model id; it defaults to
    ``ChatAnthropic`` and is mainly swapped out in tests.
    """

    def __init__(
        self,
        settings: Settings,
        fetcher: AssetFetcher,
        llm_factory: Optional[Callable[[str], Any]] = None,
    ) -> None:
        self.settings = settings
        self.fetcher = fetcher
        self._llm_factory = llm_factory or self._default_llm

    @property
    def enabled(self) -> bool:
        return bool(self.settings.anthropic_api_key)

    def _default_llm(self, model: str):
        from langchain_anthropic import ChatAnthropic

        return ChatAnthropic(
            model=model,
            api_key=self.settings.anthropic_api_key,
            max_tokens=1024,
        )

    async def _ask(self, model: str, message) -> Optional[dict]:
        llm = self._llm_factory(model)
        response = await llm.ainvoke([message])
        return parse_json_block(str(response.content))

    async def detect_safe_zone(self, image_ref: str) -> SafeZone:
        if not self.enabled:
            logger.debug("No API key, using fallback safe zone")
            return FALLBACK_SAFE_ZONE
        try:
            data = await self.fetcher.fetch(image_ref)
            parsed = await self._ask(self.settings.model_vision, _image_message(data, SAFE_ZONE_PROMPT))
            if parsed is None:
                logger.warning("Safe zone reply had no JSON, using fallback")
                return FALLBACK_SAFE_ZONE
            zone = SafeZoneModel.model_validate(parsed)
        except (AssetFetchError, ValidationError) as e:
            logger.warning("Spatial analysis failed: %s", e)
            return FALLBACK_SAFE_ZONE
        except Exception as e:
            logger.warning("Spatial analysis request failed: %s", e)
            return FALLBACK_SAFE_ZONE
        if zone.ymin >= zone.ymax or zone.xmin >= zone.xmax:
            logger.warning("Degenerate safe zone %s, using fallback", zone)
            return FALLBACK_SAFE_ZONE
        return SafeZone(ymin=zone.ymin, xmin=zone.xmin, ymax=zone.ymax, xmax=zone.xmax)

    async def generate_creative_content(self, brief: CreativeBrief) -> Optional[CreativeContent]:
        if not self.enabled:
            logger.debug("No API key, skipping creative content")
            return None
        from langchain_core.messages import HumanMessage

        prompt = CREATIVE_PROMPT.format(
            product_name=brief.product_name,
            recipient_name=brief.recipient_name,
            occasion=brief.occasion,
            tone=brief.tone.value,
            logo_description=brief.logo_description,
        )
        try:
            parsed = await self._ask(self.settings.model_text, HumanMessage(content=prompt))
            if parsed is None:
                logger.warning("Creative reply had no JSON")
                return None
            return CreativeContent.model_validate(parsed)
        except ValidationError as e:
            logger.warning("Creative reply did not match schema: %s", e)
            return None
        except Exception as e:
            logger.warning("Failed to generate creative content: %s", e)
            return None

    async def verify_receipt(self, receipt: bytes, expected: ReceiptExpectation) -> ReceiptVerdict:
        if not self.enabled:
            return ReceiptVerdict(verified=False, reason="Receipt verification is not configured.")
        prompt = RECEIPT_PROMPT.format(
            amount=expected.amount,
            reference=expected.reference,
            account_name=expected.account_name,
        )
        try:
            parsed = await self._ask(self.settings.model_vision, _image_message(receipt, prompt))
            if parsed is None:
                return ReceiptVerdict(verified=False, reason="No response")
            return ReceiptVerdict.model_validate(parsed)
        except Exception as e:
            logger.warning("Receipt verification failed: %s", e)
            return ReceiptVerdict(verified=False, reason=f"Error processing the receipt analysis: {e}")
