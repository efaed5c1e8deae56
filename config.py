"""
Configuration and data loading/saving for VoiceSplit
"""
from __future__ import annotations
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

from models import BillBook, EqualSplitEntry, ItemizedCost, ItemizedSplitEntry
from utils import app_dir, safe_float

logger = logging.getLogger(__name__)

# storage keys
BILL_ITEMS_KEY = "billItems"
ITEMIZED_BILL_ITEMS_KEY = "itemizedBillItems"
ALL_PEOPLE_KEY = "allPeople"
API_KEY_KEY = "geminiApiKey"

DEFAULT_MODEL = "gemini-1.5-flash"
STORE_FILENAME = "store.json"
SETTINGS_FILENAME = "settings.json"


@dataclass
class Settings:
    """Runtime settings; environment variables win over settings.json"""
    api_key: str = ""
    model: str = DEFAULT_MODEL
    store_path: str = ""
    log_level: str = "WARNING"


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from JSON file, then apply environment overrides"""
    base = app_dir()
    path = path or os.path.join(base, SETTINGS_FILENAME)
    data = {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("no settings file at %s", path)

    s = Settings(
        api_key=data.get("api_key", ""),
        model=data.get("model", DEFAULT_MODEL),
        store_path=data.get("store_path") or os.path.join(base, STORE_FILENAME),
        log_level=data.get("log_level", "WARNING"),
    )
    s.api_key = os.environ.get("GEMINI_API_KEY", s.api_key)
    s.model = os.environ.get("VOICESPLIT_MODEL", s.model)
    s.store_path = os.environ.get("VOICESPLIT_STORE", s.store_path)
    s.log_level = os.environ.get("VOICESPLIT_LOG_LEVEL", s.log_level)
    return s


class JsonStore:
    """Key/value store persisted as one JSON file"""

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return {}

    def get(self, key: str) -> Any:
        return self._read().get(key)

    def _write(self, data: dict) -> None:
        d = os.path.dirname(self.path)
        if d:
            os.makedirs(d, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def set(self, key: str, value: Any) -> None:
        self.update({key: value})

    def update(self, values: dict) -> None:
        data = self._read()
        data.update(values)
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


def equal_entry_to_dict(e: EqualSplitEntry) -> dict:
    return {
        "id": e.id,
        "item": e.item,
        "amount": e.amount,
        "paidBy": e.paid_by,
        "sharedWith": list(e.shared_with),
    }


def itemized_entry_to_dict(e: ItemizedSplitEntry) -> dict:
    return {
        "id": e.id,
        "item": e.item,
        "amount": e.amount,
        "paidBy": e.paid_by,
        "itemizedCosts": [{"person": c.person, "item": c.item, "cost": c.cost} for c in e.itemized_costs],
    }


def dict_to_equal_entry(d: dict) -> EqualSplitEntry:
    return EqualSplitEntry(
        id=str(d.get("id", "")),
        item=d.get("item", ""),
        amount=safe_float(d.get("amount")),
        paid_by=d.get("paidBy", ""),
        shared_with=list(d.get("sharedWith", [])),
    )


def dict_to_itemized_entry(d: dict) -> ItemizedSplitEntry:
    costs = [
        ItemizedCost(person=c.get("person", ""), item=c.get("item", ""), cost=safe_float(c.get("cost")))
        for c in d.get("itemizedCosts", [])
    ]
    return ItemizedSplitEntry(
        id=str(d.get("id", "")),
        item=d.get("item", ""),
        amount=safe_float(d.get("amount")),
        paid_by=d.get("paidBy", ""),
        itemized_costs=costs,
    )


def book_to_dict(book: BillBook) -> dict:
    """Convert BillBook to the keyed dictionary written to the store"""
    return {
        BILL_ITEMS_KEY: [equal_entry_to_dict(e) for e in book.equal_entries],
        ITEMIZED_BILL_ITEMS_KEY: [itemized_entry_to_dict(e) for e in book.itemized_entries],
        ALL_PEOPLE_KEY: list(book.people),
    }


def dict_to_book(d: dict) -> BillBook:
    """Convert keyed dictionary back to BillBook; missing keys read as empty"""
    return BillBook(
        equal_entries=[dict_to_equal_entry(e) for e in d.get(BILL_ITEMS_KEY) or []],
        itemized_entries=[dict_to_itemized_entry(e) for e in d.get(ITEMIZED_BILL_ITEMS_KEY) or []],
        people=list(d.get(ALL_PEOPLE_KEY) or []),
    )


def load_book(store: JsonStore) -> BillBook:
    """Load the three persisted keys from the store"""
    book = dict_to_book({
        BILL_ITEMS_KEY: store.get(BILL_ITEMS_KEY),
        ITEMIZED_BILL_ITEMS_KEY: store.get(ITEMIZED_BILL_ITEMS_KEY),
        ALL_PEOPLE_KEY: store.get(ALL_PEOPLE_KEY),
    })
    logger.debug(
        "loaded %d equal, %d itemized entries from %s",
        len(book.equal_entries), len(book.itemized_entries), store.path,
    )
    return book


def save_book(store: JsonStore, book: BillBook) -> None:
    """Write every persisted key back to the store"""
    store.update(book_to_dict(book))


def load_api_key(store: JsonStore) -> str:
    return store.get(API_KEY_KEY) or ""


def save_api_key(store: JsonStore, key: str) -> bool:
    """Remember the Gemini key; blank keys are ignored. Returns whether it was stored"""
    key = (key or "").strip()
    if not key:
        return False
    store.set(API_KEY_KEY, key)
    logger.info("Gemini API key stored in %s", store.path)
    return True
