"""
VoiceSplit command line
- Record who paid for what, either split equally or itemized per person.
- Turn a voice recording into a bill entry with Gemini.
- Show balances and the transfers that settle everyone up.

Run:
  python voice_split.py summary
  python voice_split.py add-equal Pizza 250 John Alice Bob Charlie
  python voice_split.py record drinks.wav --itemized --yes
"""
from __future__ import annotations
import argparse
import logging
import mimetypes
import sys
from typing import List, Optional

from computations import itemized_mismatch
from config import JsonStore, load_api_key, load_settings, save_api_key
from csv_handler import export_entries_to_csv, import_entries_from_csv
from errors import InvalidEntryError, VoiceSplitError
from excel_export import export_excel
from extraction import GeminiExtractor
from models import EqualSplitEntry, ItemizedCost, OWED
from session import BillSession
from utils import format_amount, setup_logging

logger = logging.getLogger(__name__)

SETTLED_EPS = 0.01


def parse_cost_arg(text: str) -> ItemizedCost:
    """
    Parse one 'person:item:cost' argument.
    The person ends at the first ':' and the cost starts after the last one.
    """
    person, sep, rest = text.partition(":")
    item, sep2, cost = rest.rpartition(":")
    if not sep or not sep2 or not person:
        raise InvalidEntryError(f"Expected person:item:cost, got '{text}'")
    try:
        value = float(cost)
    except ValueError:
        raise InvalidEntryError(f"Cost must be a number in '{text}'") from None
    return ItemizedCost(person, item, value)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="voice-split", description="Split shared bills from voice notes")
    p.add_argument("--store", help="path of the JSON store (default: app dir)")
    p.add_argument("--log-level", help="DEBUG, INFO, WARNING, ...")
    sub = p.add_subparsers(dest="command", required=True)

    a = sub.add_parser("add-equal", help="add a bill shared equally")
    a.add_argument("item")
    a.add_argument("amount", type=float)
    a.add_argument("paid_by")
    a.add_argument("shared_with", nargs="*")

    a = sub.add_parser("add-itemized", help="add a bill with per-person costs")
    a.add_argument("item")
    a.add_argument("amount", type=float)
    a.add_argument("paid_by")
    a.add_argument("costs", nargs="+", help="person:item:cost")

    a = sub.add_parser("record", help="extract a bill from an audio file")
    a.add_argument("audio")
    a.add_argument("--itemized", action="store_true")
    a.add_argument("--yes", action="store_true", help="confirm without asking")

    a = sub.add_parser("delete", help="delete an entry by id")
    a.add_argument("entry_id")

    a = sub.add_parser("add-person", help="add a sharer to an equal bill")
    a.add_argument("entry_id")
    a.add_argument("name")

    a = sub.add_parser("remove-person", help="remove a sharer from an equal bill")
    a.add_argument("entry_id")
    a.add_argument("name")

    sub.add_parser("list", help="list entries")
    sub.add_parser("summary", help="per-person totals")
    sub.add_parser("settle", help="who pays whom")

    a = sub.add_parser("export-csv")
    a.add_argument("path")
    a = sub.add_parser("import-csv")
    a.add_argument("path")
    a.add_argument("--replace", action="store_true")
    a = sub.add_parser("export-excel")
    a.add_argument("path")

    a = sub.add_parser("set-key", help="remember the Gemini API key")
    a.add_argument("key")

    sub.add_parser("reset", help="delete every entry")
    return p


def _print_entry(e) -> None:
    if isinstance(e, EqualSplitEntry):
        shared = ", ".join(e.shared_with) or "-"
        print(f"[{e.id}] {e.item}: {format_amount(e.amount)} paid by {e.paid_by}, shared with {shared}")
        return
    print(f"[{e.id}] {e.item}: {format_amount(e.amount)} paid by {e.paid_by} (itemized)")
    for c in e.itemized_costs:
        print(f"    {c.person} - {c.item}: {format_amount(c.cost)}")
    diff = itemized_mismatch(e)
    if abs(diff) > 0.01:
        print(f"    (costs differ from total by {format_amount(diff)})")


def _print_summary(session: BillSession) -> None:
    s = session.summary()
    if not s["people"]:
        print("No bills yet.")
        return
    for name, p in s["people"].items():
        if abs(p["net"]) < SETTLED_EPS:
            state = "settled"
        else:
            state = ("gets " if p["net"] > 0 else "owes ") + format_amount(abs(p["net"]))
        print(f"{name}: paid {format_amount(p['paid'])}, share {format_amount(p['owed'])}, {state}")
        for t in p["transactions"]:
            sign = "-" if t.kind == OWED else "+"
            print(f"    {sign}{format_amount(t.amount)} {t.item}")
    print(f"Total: {format_amount(s['total_amount'])} across {s['entry_count']} items, "
          f"{s['participant_count']} people")


def _print_settlements(session: BillSession) -> None:
    settlements = session.settlements()
    if not settlements:
        print("All settled!")
        return
    for st in settlements:
        print(f"{st.from_person} -> {st.to_person}: {format_amount(st.amount)}")


def _record(session: BillSession, args) -> None:
    with open(args.audio, "rb") as f:
        audio = f.read()
    mime_type = mimetypes.guess_type(args.audio)[0] or "audio/wav"
    equal = not args.itemized
    entry = session.process_audio(audio, mime_type, equal_split=equal)
    _print_entry(entry)
    if args.yes or input("Confirm? [y/N] ").strip().lower() == "y":
        session.confirm_pending(equal)
        print("Added.")
    else:
        session.reject_pending(equal)
        print("Discarded.")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)
    settings = load_settings()
    setup_logging(args.log_level or settings.log_level)

    store = JsonStore(args.store or settings.store_path)
    api_key = settings.api_key or load_api_key(store)
    session = BillSession(store, GeminiExtractor(api_key, settings.model))

    try:
        if args.command == "add-equal":
            _print_entry(session.add_equal_entry(args.item, args.amount, args.paid_by, args.shared_with))
        elif args.command == "add-itemized":
            costs = [parse_cost_arg(c) for c in args.costs]
            _print_entry(session.add_itemized_entry(args.item, args.amount, args.paid_by, costs))
        elif args.command == "set-key":
            if not save_api_key(store, args.key):
                raise VoiceSplitError("API key must not be blank")
            print("API key configured.")
        elif args.command == "record":
            _record(session, args)
        elif args.command == "delete":
            session.delete_entry(args.entry_id)
        elif args.command == "add-person":
            session.add_person_to_bill(args.entry_id, args.name)
        elif args.command == "remove-person":
            session.remove_person_from_bill(args.entry_id, args.name)
        elif args.command == "list":
            for e in [*session.book.equal_entries, *session.book.itemized_entries]:
                _print_entry(e)
        elif args.command == "summary":
            _print_summary(session)
        elif args.command == "settle":
            _print_settlements(session)
        elif args.command == "export-csv":
            export_entries_to_csv(session.book, args.path)
        elif args.command == "import-csv":
            equal, itemized = import_entries_from_csv(args.path)
            session.import_entries(equal, itemized, replace=args.replace)
            print(f"Imported {len(equal) + len(itemized)} entries.")
        elif args.command == "export-excel":
            export_excel(session.book, args.path)
            print(f"Exported: {args.path}")
        elif args.command == "reset":
            session.reset()
    except VoiceSplitError as ex:
        logger.debug("command failed", exc_info=True)
        print(f"error: {ex}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
