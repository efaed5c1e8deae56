"""
Business logic and computations for VoiceSplit
"""
from __future__ import annotations
from typing import Dict, List, Sequence

from models import (
    OWED,
    PAID,
    BillBook,
    EqualSplitEntry,
    ItemizedSplitEntry,
    LedgerTransaction,
    PersonLedger,
    Settlement,
)

SETTLEMENT_EPS = 0.01


def _ensure_person(ledger: Dict[str, PersonLedger], name: str) -> PersonLedger:
    rec = ledger.get(name)
    if rec is None:
        rec = PersonLedger()
        ledger[name] = rec
    return rec


def aggregate(
    equal_entries: Sequence[EqualSplitEntry],
    itemized_entries: Sequence[ItemizedSplitEntry],
) -> Dict[str, PersonLedger]:
    """
    Fold both entry lists into a per-person ledger.
    Records are created in first-seen order: equal entries (payer, then sharers)
    before itemized entries (payer, then cost persons). Names match exactly.
    """
    ledger: Dict[str, PersonLedger] = {}

    for e in equal_entries:
        for person in [e.paid_by, *e.shared_with]:
            _ensure_person(ledger, person)
    for e in itemized_entries:
        for person in [e.paid_by, *(c.person for c in e.itemized_costs)]:
            _ensure_person(ledger, person)

    for e in equal_entries:
        # +1 for the payer, so never zero
        per_person = e.amount / (len(e.shared_with) + 1)
        payer = ledger[e.paid_by]
        payer.total_paid += e.amount
        payer.total_owed += per_person
        payer.transactions.append(LedgerTransaction(e.item, e.amount, PAID))
        for person in e.shared_with:
            rec = ledger[person]
            rec.total_owed += per_person
            rec.transactions.append(LedgerTransaction(e.item, per_person, OWED))

    for e in itemized_entries:
        payer = ledger[e.paid_by]
        payer.total_paid += e.amount
        payer.transactions.append(LedgerTransaction(e.item, e.amount, PAID))
        for c in e.itemized_costs:
            rec = ledger[c.person]
            rec.total_owed += c.cost
            rec.transactions.append(LedgerTransaction(c.item, c.cost, OWED))

    return ledger


def net_balances(ledger: Dict[str, PersonLedger]) -> Dict[str, float]:
    """Map person -> paid minus owed"""
    return {name: rec.total_paid - rec.total_owed for name, rec in ledger.items()}


def settle(ledger: Dict[str, PersonLedger], eps: float = SETTLEMENT_EPS) -> List[Settlement]:
    """
    Compute transfers to settle debts.
    Greedy two-pointer: largest creditor against most negative debtor.
    Amounts at or below eps are not emitted.
    """
    balances = net_balances(ledger)
    creditors = [[p, v] for p, v in balances.items() if v > 0]
    debtors = [[p, v] for p, v in balances.items() if v < 0]
    creditors.sort(key=lambda x: x[1], reverse=True)
    debtors.sort(key=lambda x: x[1])

    settlements = []
    i = j = 0
    while i < len(creditors) and j < len(debtors):
        creditor = creditors[i]
        debtor = debtors[j]
        amount = min(creditor[1], abs(debtor[1]))
        if amount > eps:
            settlements.append(Settlement(debtor[0], creditor[0], amount))
        creditor[1] -= amount
        debtor[1] += amount
        if creditor[1] < eps:
            i += 1
        if abs(debtor[1]) < eps:
            j += 1

    return settlements


def total_bill_amount(
    equal_entries: Sequence[EqualSplitEntry],
    itemized_entries: Sequence[ItemizedSplitEntry],
) -> float:
    return sum(e.amount for e in equal_entries) + sum(e.amount for e in itemized_entries)


def entry_count(
    equal_entries: Sequence[EqualSplitEntry],
    itemized_entries: Sequence[ItemizedSplitEntry],
) -> int:
    return len(equal_entries) + len(itemized_entries)


def participant_count(ledger: Dict[str, PersonLedger]) -> int:
    return len(ledger)


def itemized_mismatch(entry: ItemizedSplitEntry) -> float:
    """Entry amount minus the sum of its itemized costs (0 when they agree)"""
    return entry.amount - sum(c.cost for c in entry.itemized_costs)


def compute_summary(book: BillBook) -> dict:
    """
    Compute summary statistics for the whole book.
    Returns {"people": {person: {paid, owed, net, transactions}},
             "total_amount", "entry_count", "participant_count", "settlements"}
    """
    ledger = aggregate(book.equal_entries, book.itemized_entries)
    return {
        "people": {
            p: {
                "paid": rec.total_paid,
                "owed": rec.total_owed,
                "net": rec.net_balance,
                "transactions": list(rec.transactions),
            } for p, rec in ledger.items()
        },
        "total_amount": total_bill_amount(book.equal_entries, book.itemized_entries),
        "entry_count": entry_count(book.equal_entries, book.itemized_entries),
        "participant_count": participant_count(ledger),
        "settlements": settle(ledger),
    }
