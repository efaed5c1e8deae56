"""
Speech-to-bill extraction through the Gemini generateContent API
"""
from __future__ import annotations
import base64
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

import requests
from pydantic import BaseModel, Field, ValidationError

from errors import ExtractionError, MissingApiKeyError
from models import BillDraft, ItemizedCost

logger = logging.getLogger(__name__)

GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

EQUAL = "equal"
ITEMIZED = "itemized"

FALLBACK_ITEM = "Unknown Item"
FALLBACK_PAYER = "Unknown"

Transport = Callable[[str, dict], Tuple[int, str]]

PROMPT = """
Analyze this audio recording and determine if it describes an equal split or unequal split bill, then extract the appropriate information:

FOR EQUAL SPLIT (when people share items equally):
- Example: "John paid 250 rupees for pizza and it was shared between Alice, Bob, Charlie"
- Response format:
{
  "item": "name of the item",
  "amount": numeric_amount,
  "paidBy": "name of person who paid",
  "sharedWith": ["name1", "name2", "name3"],
  "isEqualSplit": true
}

FOR UNEQUAL SPLIT (when specific items/costs are mentioned for individuals):
- Example: "Aryan paid 60rs for drinks which had lemon drink for arun which costed 10rs and a soda for mohit which costed 20rs and a mojito for gurjot which costed 30rs"
- Response format:
{
  "item": "main category name",
  "amount": total_numeric_amount,
  "paidBy": "name of person who paid",
  "sharedWith": [],
  "isEqualSplit": false,
  "itemizedCosts": [
    {"person": "name1", "item": "item1", "cost": cost1},
    {"person": "name2", "item": "item2", "cost": cost2}
  ]
}

INSTRUCTIONS:
1. First determine if this is an equal split (people sharing equally) or unequal split (specific items/costs mentioned)
2. Extract the information according to the appropriate format above
3. For equal splits, list all people who will share the cost in "sharedWith"
4. For unequal splits, list individual items and costs in "itemizedCosts"
5. Return ONLY valid JSON, no additional text

Analyze the audio and respond with the appropriate JSON format.
"""

_JSON_BLOCK = re.compile(r"\{.*\}", re.DOTALL)


class RawItemizedCost(BaseModel):
    person: str = ""
    item: str = ""
    cost: float = 0.0


class RawBillResponse(BaseModel):
    """JSON object the model is asked to return"""
    item: str
    amount: float
    paid_by: str = Field(alias="paidBy")
    shared_with: Optional[List[str]] = Field(default=None, alias="sharedWith")
    is_equal_split: Optional[bool] = Field(default=None, alias="isEqualSplit")
    itemized_costs: Optional[List[RawItemizedCost]] = Field(default=None, alias="itemizedCosts")


def build_prompt() -> str:
    return PROMPT


def build_request_body(audio: bytes, mime_type: str = "audio/wav") -> dict:
    """Gemini request body: prompt text plus the recording as inline base64 data"""
    return {
        "contents": [{
            "parts": [
                {"text": build_prompt()},
                {"inline_data": {
                    "mime_type": mime_type or "audio/wav",
                    "data": base64.b64encode(audio).decode("ascii"),
                }},
            ]
        }]
    }


def fallback_draft() -> BillDraft:
    """Placeholder returned when the model's answer cannot be parsed"""
    return BillDraft(
        item=FALLBACK_ITEM,
        amount=0.0,
        paid_by=FALLBACK_PAYER,
        shared_with=[],
        is_equal_split=True,
        itemized_costs=[],
        is_fallback=True,
    )


def parse_response_text(text: str) -> BillDraft:
    """
    Turn the model's text into a BillDraft.
    Never raises: anything unparseable becomes fallback_draft().
    """
    match = _JSON_BLOCK.search(text or "")
    if not match:
        logger.warning("no JSON found in model response")
        return fallback_draft()
    try:
        raw = RawBillResponse.model_validate(json.loads(match.group(0)))
    except (ValueError, ValidationError) as ex:
        logger.warning("could not parse model response: %s", ex)
        return fallback_draft()
    if not raw.item or not raw.amount or not raw.paid_by:
        logger.warning("model response missing item, amount or payer")
        return fallback_draft()

    return BillDraft(
        item=raw.item,
        amount=float(raw.amount),
        paid_by=raw.paid_by,
        shared_with=list(raw.shared_with or []),
        is_equal_split=raw.is_equal_split is not False,
        itemized_costs=[ItemizedCost(c.person, c.item, c.cost) for c in raw.itemized_costs or []],
    )


def requests_transport(url: str, body: dict, timeout: float = 60.0) -> Tuple[int, str]:
    """POST JSON and return (status, response text)"""
    try:
        response = requests.post(url, json=body, timeout=timeout)
    except requests.RequestException as ex:
        raise ExtractionError(f"Gemini API unreachable: {ex}") from ex
    return response.status_code, response.text


class ExtractionProvider(ABC):
    """Turns a recording into a bill draft"""

    @abstractmethod
    def extract(self, audio: bytes, mime_type: str = "audio/wav", mode: str = EQUAL) -> BillDraft:
        pass


class GeminiExtractor(ExtractionProvider):
    def __init__(self, api_key: str, model: str = "gemini-1.5-flash", transport: Optional[Transport] = None):
        self.api_key = api_key
        self.model = model
        self.transport = transport or requests_transport

    def extract(self, audio: bytes, mime_type: str = "audio/wav", mode: str = EQUAL) -> BillDraft:
        # mode only decides which list the caller files the draft under
        if not self.api_key or not self.api_key.strip():
            raise MissingApiKeyError("Gemini API key is required")

        url = GEMINI_API_URL.format(model=self.model) + "?key=" + self.api_key.strip()
        logger.info("sending %d bytes of %s audio to Gemini (%s split)", len(audio), mime_type, mode)
        status, text = self.transport(url, build_request_body(audio, mime_type))
        if status < 200 or status >= 300:
            logger.error("Gemini API error %s: %s", status, text)
            raise ExtractionError(f"Gemini API error: {status} - {text}")

        try:
            data = json.loads(text)
            generated = data["candidates"][0]["content"]["parts"][0]["text"]
        except (ValueError, KeyError, IndexError, TypeError) as ex:
            raise ExtractionError("Invalid response from Gemini API") from ex

        logger.debug("generated text: %s", generated)
        return parse_response_text(generated)
