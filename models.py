"""
Data models for VoiceSplit
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

PAID = "paid"
OWED = "owed"


@dataclass
class EqualSplitEntry:
    """Bill shared evenly by the payer and everyone in shared_with"""
    id: str
    item: str
    amount: float
    paid_by: str
    shared_with: List[str] = field(default_factory=list)  # payer not included


@dataclass
class ItemizedCost:
    """Sub-item attributed to one person"""
    person: str
    item: str
    cost: float


@dataclass
class ItemizedSplitEntry:
    """Bill where each person owes for their own sub-items"""
    id: str
    item: str
    amount: float  # total paid; not forced to match the sum of costs
    paid_by: str
    itemized_costs: List[ItemizedCost] = field(default_factory=list)


@dataclass
class LedgerTransaction:
    """One line of a person's history"""
    item: str
    amount: float
    kind: str  # PAID or OWED


@dataclass
class PersonLedger:
    """Accumulated totals for a single person"""
    total_paid: float = 0.0
    total_owed: float = 0.0
    transactions: List[LedgerTransaction] = field(default_factory=list)

    @property
    def net_balance(self) -> float:
        # positive -> should receive; negative -> should pay
        return self.total_paid - self.total_owed


@dataclass
class Settlement:
    """Transfer from a debtor to a creditor"""
    from_person: str
    to_person: str
    amount: float


@dataclass
class BillDraft:
    """Entry extracted from a recording, before the user confirms it"""
    item: str
    amount: float
    paid_by: str
    shared_with: List[str] = field(default_factory=list)
    is_equal_split: bool = True
    itemized_costs: List[ItemizedCost] = field(default_factory=list)
    is_fallback: bool = False


@dataclass
class BillBook:
    """Everything that survives a restart"""
    equal_entries: List[EqualSplitEntry] = field(default_factory=list)
    itemized_entries: List[ItemizedSplitEntry] = field(default_factory=list)
    people: List[str] = field(default_factory=list)
    version: int = 1
