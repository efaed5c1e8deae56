"""
Excel export functionality for VoiceSplit
"""
from __future__ import annotations

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from models import BillBook, OWED
from computations import compute_summary, itemized_mismatch


def _style_header(ws, row=1):
    """Apply header styling to worksheet row"""
    header_font = Font(bold=True, color="FFFFFF")
    fill = PatternFill("solid", fgColor="4F81BD")
    align = Alignment(horizontal="center", vertical="center")
    thin = Side(style="thin", color="A0A0A0")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    for cell in ws[row]:
        cell.font = header_font
        cell.fill = fill
        cell.alignment = align
        cell.border = border


def _autosize_columns(ws, min_width=10, max_width=45):
    """Auto-size columns based on content"""
    for col in range(1, ws.max_column + 1):
        letter = get_column_letter(col)
        max_len = 0
        for cell in ws[letter]:
            if cell.value is None:
                continue
            max_len = max(max_len, len(str(cell.value)))
        ws.column_dimensions[letter].width = max(min_width, min(max_width, max_len + 2))


def _money_format(ws, cols, first_row=2):
    for r in range(first_row, ws.max_row + 1):
        for c in cols:
            ws.cell(r, c).number_format = "0.00"


def export_excel(book: BillBook, filepath: str) -> None:
    """
    Export bill book to Excel file with sheets:
    - Equal Bills: one row per entry with the per-person share
    - Itemized Bills: one row per itemized cost under a bold entry row
    - Summary: paid / owed / net per person plus totals
    - Transfers: settlement plan
    """
    wb = Workbook()
    wb.remove(wb.active)

    ws = wb.create_sheet("Equal Bills")
    ws.append(["item", "amount", "paid by", "shared with", "per person"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for e in book.equal_entries:
        per_person = e.amount / (len(e.shared_with) + 1)
        ws.append([e.item, e.amount, e.paid_by, ", ".join(e.shared_with), per_person])
    _money_format(ws, (2, 5))
    _autosize_columns(ws)

    ws = wb.create_sheet("Itemized Bills")
    ws.append(["item", "amount", "paid by", "person", "sub-item", "cost", "unassigned"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for e in book.itemized_entries:
        ws.append([e.item, e.amount, e.paid_by, "", "", "", itemized_mismatch(e)])
        ws.cell(ws.max_row, 1).font = Font(bold=True)
        ws.cell(ws.max_row, 1).fill = PatternFill("solid", fgColor="D9E1F2")
        for c in e.itemized_costs:
            ws.append(["", "", "", c.person, c.item, c.cost, ""])
    _money_format(ws, (2, 6, 7))
    _autosize_columns(ws)

    summary = compute_summary(book)
    ws = wb.create_sheet("Summary")
    ws.append(["Person", "Paid", "Owed", "Net (Paid-Owed)", "Owed items"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for p, s in summary["people"].items():
        owed_items = ", ".join(t.item for t in s["transactions"] if t.kind == OWED)
        ws.append([p, s["paid"], s["owed"], s["net"], owed_items])
    ws.append([])
    ws.append(["Total amount", summary["total_amount"]])
    ws.append(["Entries", summary["entry_count"]])
    ws.append(["Participants", summary["participant_count"]])
    _money_format(ws, (2, 3, 4))
    ws.cell(ws.max_row - 1, 2).number_format = "0"
    ws.cell(ws.max_row, 2).number_format = "0"
    _autosize_columns(ws)

    ws = wb.create_sheet("Transfers")
    ws.append(["From (Debtor)", "To (Creditor)", "Amount"])
    _style_header(ws, 1)
    ws.freeze_panes = "A2"
    for s in summary["settlements"]:
        ws.append([s.from_person, s.to_person, s.amount])
    _money_format(ws, (3,))
    _autosize_columns(ws)

    wb.save(filepath)
