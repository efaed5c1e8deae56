"""
Bill book workflow: recordings become pending drafts, confirmed drafts become entries.
Every change is written back to the store.
"""
from __future__ import annotations
import logging
from typing import Dict, List, Optional, Union

from computations import aggregate, compute_summary, settle
from config import JsonStore, load_book, save_book
from errors import EntryNotFoundError, ExtractionError, InvalidEntryError
from extraction import EQUAL, ITEMIZED, ExtractionProvider
from models import (
    BillBook,
    BillDraft,
    EqualSplitEntry,
    ItemizedCost,
    ItemizedSplitEntry,
    PersonLedger,
    Settlement,
)
from utils import new_entry_id

logger = logging.getLogger(__name__)

Entry = Union[EqualSplitEntry, ItemizedSplitEntry]


def entry_people(entry: Entry) -> List[str]:
    """Payer first, then everyone the entry charges"""
    if isinstance(entry, EqualSplitEntry):
        return [entry.paid_by, *entry.shared_with]
    return [entry.paid_by, *(c.person for c in entry.itemized_costs)]


def validate_entry(entry: Entry) -> None:
    """Reject entries the book should not accept; the computations themselves never check"""
    if not entry.paid_by or not entry.paid_by.strip():
        raise InvalidEntryError("Payer name is required")
    if entry.amount <= 0:
        raise InvalidEntryError(f"Amount must be positive, got {entry.amount}")
    if isinstance(entry, ItemizedSplitEntry):
        for c in entry.itemized_costs:
            if not c.person or not c.person.strip():
                raise InvalidEntryError(f"Itemized cost '{c.item}' has no person")


def merge_people(people: List[str], new: List[str]) -> List[str]:
    """Append unseen names, keeping first-seen order"""
    out = list(people)
    for p in new:
        if p not in out:
            out.append(p)
    return out


class BillSession:
    """Holds the bill book plus at most one pending draft of each kind"""

    def __init__(self, store: JsonStore, extractor: Optional[ExtractionProvider] = None):
        self.store = store
        self.extractor = extractor
        self.book: BillBook = load_book(store)
        self.pending_equal: Optional[EqualSplitEntry] = None
        self.pending_itemized: Optional[ItemizedSplitEntry] = None

    # ---------- Persistence ----------
    def save(self) -> None:
        save_book(self.store, self.book)

    def reset(self) -> None:
        """Drop every entry and person"""
        self.book = BillBook()
        self.pending_equal = None
        self.pending_itemized = None
        self.save()

    def _next_id(self) -> str:
        used = {e.id for e in self.book.equal_entries} | {e.id for e in self.book.itemized_entries}
        used |= {e.id for e in (self.pending_equal, self.pending_itemized) if e is not None}
        eid = new_entry_id()
        while eid in used:
            eid = str(int(eid) + 1)
        return eid

    # ---------- Recording ----------
    def process_audio(self, audio: bytes, mime_type: str = "audio/wav", equal_split: bool = True) -> Entry:
        """Run the recording through the provider and hold the result for confirmation"""
        if self.extractor is None:
            raise ExtractionError("No extraction provider configured")
        draft = self.extractor.extract(audio, mime_type, EQUAL if equal_split else ITEMIZED)
        if draft.is_fallback:
            logger.warning("recording could not be understood; pending entry is a placeholder")
        return self.set_pending(draft, equal_split)

    def set_pending(self, draft: BillDraft, equal_split: bool) -> Entry:
        if equal_split:
            self.pending_equal = EqualSplitEntry(
                id=self._next_id(),
                item=draft.item,
                amount=draft.amount,
                paid_by=draft.paid_by,
                shared_with=list(draft.shared_with),
            )
            return self.pending_equal
        self.pending_itemized = ItemizedSplitEntry(
            id=self._next_id(),
            item=draft.item,
            amount=draft.amount,
            paid_by=draft.paid_by,
            itemized_costs=list(draft.itemized_costs),
        )
        return self.pending_itemized

    def confirm_pending(self, equal_split: bool = True) -> Entry:
        pending = self.pending_equal if equal_split else self.pending_itemized
        if pending is None:
            raise EntryNotFoundError("Nothing pending to confirm")
        entry = self._add(pending)
        if equal_split:
            self.pending_equal = None
        else:
            self.pending_itemized = None
        return entry

    def reject_pending(self, equal_split: bool = True) -> None:
        if equal_split:
            self.pending_equal = None
        else:
            self.pending_itemized = None
        logger.info("pending %s entry discarded", EQUAL if equal_split else ITEMIZED)

    # ---------- CRUD: Entries ----------
    def _add(self, entry: Entry) -> Entry:
        validate_entry(entry)
        if isinstance(entry, EqualSplitEntry):
            self.book.equal_entries.append(entry)
        else:
            self.book.itemized_entries.append(entry)
        self.book.people = merge_people(self.book.people, entry_people(entry))
        self.save()
        logger.info("added %s for %.2f paid by %s", entry.item, entry.amount, entry.paid_by)
        return entry

    def add_equal_entry(self, item: str, amount: float, paid_by: str, shared_with: List[str]) -> EqualSplitEntry:
        return self._add(EqualSplitEntry(self._next_id(), item, float(amount), paid_by, list(shared_with)))

    def add_itemized_entry(self, item: str, amount: float, paid_by: str,
                           itemized_costs: List[ItemizedCost]) -> ItemizedSplitEntry:
        return self._add(ItemizedSplitEntry(self._next_id(), item, float(amount), paid_by, list(itemized_costs)))

    def _find_equal(self, entry_id: str) -> EqualSplitEntry:
        e = next((x for x in self.book.equal_entries if x.id == entry_id), None)
        if e is None:
            raise EntryNotFoundError(f"No equal-split entry with id {entry_id}")
        return e

    def delete_equal_entry(self, entry_id: str) -> None:
        self._find_equal(entry_id)
        self.book.equal_entries = [e for e in self.book.equal_entries if e.id != entry_id]
        self.save()

    def delete_itemized_entry(self, entry_id: str) -> None:
        if not any(e.id == entry_id for e in self.book.itemized_entries):
            raise EntryNotFoundError(f"No itemized entry with id {entry_id}")
        self.book.itemized_entries = [e for e in self.book.itemized_entries if e.id != entry_id]
        self.save()

    def delete_entry(self, entry_id: str) -> None:
        """Delete from whichever list holds the id"""
        if any(e.id == entry_id for e in self.book.equal_entries):
            self.delete_equal_entry(entry_id)
        else:
            self.delete_itemized_entry(entry_id)

    def import_entries(self, equal: List[EqualSplitEntry], itemized: List[ItemizedSplitEntry],
                       replace: bool = False) -> None:
        """Append (or replace with) entries read from a file; imported rows are not validated"""
        if replace:
            self.book.equal_entries = list(equal)
            self.book.itemized_entries = list(itemized)
            self.book.people = []
        else:
            self.book.equal_entries.extend(equal)
            self.book.itemized_entries.extend(itemized)
        for e in [*equal, *itemized]:
            self.book.people = merge_people(self.book.people, entry_people(e))
        self.save()

    # ---------- People on a bill ----------
    def add_person_to_bill(self, entry_id: str, name: str) -> None:
        e = self._find_equal(entry_id)
        e.shared_with.append(name)
        self.book.people = merge_people(self.book.people, [name])
        self.save()

    def remove_person_from_bill(self, entry_id: str, name: str) -> None:
        e = self._find_equal(entry_id)
        e.shared_with = [p for p in e.shared_with if p != name]
        self.save()

    # ---------- Reports ----------
    def ledger(self) -> Dict[str, PersonLedger]:
        return aggregate(self.book.equal_entries, self.book.itemized_entries)

    def settlements(self) -> List[Settlement]:
        return settle(self.ledger())

    def summary(self) -> dict:
        return compute_summary(self.book)
