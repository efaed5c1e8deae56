import pytest

from config import JsonStore
from errors import EntryNotFoundError, ExtractionError, InvalidEntryError
from extraction import ExtractionProvider, fallback_draft
from models import BillDraft, EqualSplitEntry, ItemizedCost, Settlement
from session import BillSession


class StubExtractor(ExtractionProvider):
    def __init__(self, draft):
        self.draft = draft
        self.modes = []

    def extract(self, audio, mime_type="audio/wav", mode="equal"):
        self.modes.append(mode)
        return self.draft


PIZZA_DRAFT = BillDraft("Pizza", 250.0, "John", ["Alice", "Bob", "Charlie"])


def test_recording_waits_for_confirmation(store):
    session = BillSession(store, StubExtractor(PIZZA_DRAFT))

    pending = session.process_audio(b"audio")
    assert session.book.equal_entries == []
    assert pending.item == "Pizza"

    session.confirm_pending()

    assert session.pending_equal is None
    assert [e.item for e in session.book.equal_entries] == ["Pizza"]
    assert session.book.people == ["John", "Alice", "Bob", "Charlie"]
    assert session.settlements() == [
        Settlement("Alice", "John", 62.5),
        Settlement("Bob", "John", 62.5),
        Settlement("Charlie", "John", 62.5),
    ]


def test_itemized_recording(store):
    draft = BillDraft("Drinks", 60.0, "Aryan", is_equal_split=False,
                      itemized_costs=[ItemizedCost("arun", "lemon", 10.0)])
    extractor = StubExtractor(draft)
    session = BillSession(store, extractor)

    session.process_audio(b"audio", equal_split=False)
    session.confirm_pending(equal_split=False)

    assert extractor.modes == ["itemized"]
    assert session.book.itemized_entries[0].itemized_costs == [ItemizedCost("arun", "lemon", 10.0)]
    assert session.book.people == ["Aryan", "arun"]


def test_reject_pending(store):
    session = BillSession(store, StubExtractor(PIZZA_DRAFT))
    session.process_audio(b"audio")

    session.reject_pending()

    assert session.pending_equal is None
    with pytest.raises(EntryNotFoundError):
        session.confirm_pending()


def test_fallback_draft_cannot_be_confirmed(store):
    session = BillSession(store, StubExtractor(fallback_draft()))
    session.process_audio(b"audio")

    with pytest.raises(InvalidEntryError):
        session.confirm_pending()
    assert session.book.equal_entries == []


def test_no_extractor(store):
    with pytest.raises(ExtractionError):
        BillSession(store).process_audio(b"audio")


@pytest.mark.parametrize("amount,payer", [(0, "John"), (-5, "John"), (10, ""), (10, "   ")])
def test_invalid_manual_entries(store, amount, payer):
    session = BillSession(store)

    with pytest.raises(InvalidEntryError):
        session.add_equal_entry("Tea", amount, payer, ["Ann"])


def test_itemized_cost_needs_person(store):
    with pytest.raises(InvalidEntryError):
        BillSession(store).add_itemized_entry("Bar", 10, "Ann", [ItemizedCost("", "beer", 10)])


def test_changes_survive_restart(store):
    session = BillSession(store)
    pizza = session.add_equal_entry("Pizza", 250, "John", ["Alice"])
    session.add_itemized_entry("Drinks", 60, "Aryan", [ItemizedCost("Alice", "soda", 20)])

    reloaded = BillSession(JsonStore(store.path))

    assert reloaded.book == session.book
    assert reloaded.ledger()["Alice"].total_owed == pytest.approx(145)
    assert reloaded.book.equal_entries[0].id == pizza.id


def test_ids_are_unique(store):
    session = BillSession(store)
    a = session.add_equal_entry("A", 1, "X", [])
    b = session.add_equal_entry("B", 1, "X", [])
    c = session.add_itemized_entry("C", 1, "X", [])

    assert len({a.id, b.id, c.id}) == 3


def test_delete_entries(store):
    session = BillSession(store)
    a = session.add_equal_entry("A", 10, "X", ["Y"])
    b = session.add_itemized_entry("B", 10, "X", [ItemizedCost("Y", "b", 10)])

    session.delete_entry(a.id)
    session.delete_entry(b.id)

    assert session.book.equal_entries == []
    assert session.book.itemized_entries == []
    assert session.book.people == ["X", "Y"]
    with pytest.raises(EntryNotFoundError):
        session.delete_entry("nope")


def test_add_and_remove_person(store):
    session = BillSession(store)
    e = session.add_equal_entry("Cab", 30, "X", ["Y"])

    session.add_person_to_bill(e.id, "Z")
    assert session.ledger()["Z"].total_owed == pytest.approx(10)
    assert session.book.people == ["X", "Y", "Z"]

    session.remove_person_from_bill(e.id, "Y")
    assert BillSession(JsonStore(store.path)).book.equal_entries[0].shared_with == ["Z"]
    assert session.ledger()["X"].total_owed == pytest.approx(15)


def test_summary_and_reset(store):
    session = BillSession(store)
    session.add_equal_entry("Pizza", 250, "John", ["Alice", "Bob", "Charlie"])

    assert session.summary()["participant_count"] == 4

    session.reset()
    assert BillSession(JsonStore(store.path)).summary()["total_amount"] == 0


def test_replacing_import_rebuilds_people(store):
    session = BillSession(store)
    session.add_equal_entry("Old", 10, "Gone", ["Also Gone"])
    imported = EqualSplitEntry("9", "New", 20.0, "Ann", ["Bob"])

    session.import_entries([imported], [], replace=True)

    assert session.book.people == ["Ann", "Bob"]
    assert BillSession(JsonStore(store.path)).book.people == ["Ann", "Bob"]


def test_appending_import_keeps_people(store):
    session = BillSession(store)
    session.add_equal_entry("Old", 10, "Ann", ["Cy"])

    session.import_entries([EqualSplitEntry("9", "New", 20.0, "Ann", ["Bob"])], [])

    assert session.book.people == ["Ann", "Cy", "Bob"]
