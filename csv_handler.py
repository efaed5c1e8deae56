"""
CSV export and import functionality for VoiceSplit
"""
from __future__ import annotations
import csv
import json
from typing import List, Tuple

from models import BillBook, EqualSplitEntry, ItemizedCost, ItemizedSplitEntry
from utils import safe_float

EQUAL_KIND = "equal"
ITEMIZED_KIND = "itemized"
HEADER = ['kind', 'id', 'item', 'amount', 'paid_by', 'shared_with', 'itemized_costs']


def _format_costs(costs: List[ItemizedCost]) -> str:
    # same record shape as the JSON store
    return json.dumps([{"person": c.person, "item": c.item, "cost": c.cost} for c in costs], ensure_ascii=False)


def _parse_costs(text: str) -> List[ItemizedCost]:
    if not text:
        return []
    return [
        ItemizedCost(person=c.get("person", ""), item=c.get("item", ""), cost=safe_float(c.get("cost")))
        for c in json.loads(text)
    ]


def export_entries_to_csv(book: BillBook, filepath: str) -> None:
    """
    Export both entry lists to one CSV file
    CSV columns: kind, id, item, amount, paid_by, shared_with, itemized_costs
    shared_with and itemized_costs hold JSON lists so names keep every character
    """
    with open(filepath, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)
        writer.writerow(HEADER)

        for e in book.equal_entries:
            shared = json.dumps(list(e.shared_with), ensure_ascii=False)
            writer.writerow([EQUAL_KIND, e.id, e.item, e.amount, e.paid_by, shared, ''])
        for e in book.itemized_entries:
            writer.writerow([ITEMIZED_KIND, e.id, e.item, e.amount, e.paid_by, '', _format_costs(e.itemized_costs)])


def import_entries_from_csv(filepath: str) -> Tuple[List[EqualSplitEntry], List[ItemizedSplitEntry]]:
    """
    Import entries from CSV file
    Returns (equal entries, itemized entries) in file order
    """
    equal = []
    itemized = []

    with open(filepath, 'r', newline='', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for row in reader:
            kind = (row.get('kind') or EQUAL_KIND).strip()
            if kind == ITEMIZED_KIND:
                itemized.append(ItemizedSplitEntry(
                    id=row['id'],
                    item=row['item'],
                    amount=safe_float(row['amount']),
                    paid_by=row['paid_by'],
                    itemized_costs=_parse_costs(row.get('itemized_costs') or ''),
                ))
            else:
                shared = row.get('shared_with') or ''
                equal.append(EqualSplitEntry(
                    id=row['id'],
                    item=row['item'],
                    amount=safe_float(row['amount']),
                    paid_by=row['paid_by'],
                    shared_with=list(json.loads(shared)) if shared else [],
                ))

    return equal, itemized
