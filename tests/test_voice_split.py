import json

import extraction
import voice_split
from config import JsonStore, load_api_key


def run(store, *args):
    return voice_split.main(["--store", store.path, *args])


def test_add_and_settle(store, capsys):
    assert run(store, "add-equal", "Pizza", "250", "John", "Alice", "Bob", "Charlie") == 0
    assert run(store, "add-itemized", "Drinks", "60", "Aryan", "arun:lemon:10", "mohit:soda:20", "gurjot:mojito:30") == 0
    capsys.readouterr()

    assert run(store, "settle") == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == "Alice -> John: 62.50"
    assert out[3] == "gurjot -> Aryan: 30.00"

    assert run(store, "summary") == 0
    out = capsys.readouterr().out
    assert "John: paid 250.00, share 62.50, gets 187.50" in out
    assert "Total: 310.00 across 2 items, 8 people" in out


def test_invalid_entry_reports_error(store, capsys):
    assert run(store, "add-equal", "Tea", "0", "Ann") == 1
    assert "Amount must be positive" in capsys.readouterr().err


def test_record_without_api_key(store, tmp_path, capsys):
    audio = tmp_path / "note.wav"
    audio.write_bytes(b"RIFF")

    assert run(store, "record", str(audio), "--yes") == 1
    assert "API key" in capsys.readouterr().err


def test_empty_book(store, capsys):
    assert run(store, "settle") == 0
    assert run(store, "summary") == 0
    assert capsys.readouterr().out == "All settled!\nNo bills yet.\n"


def test_malformed_cost_is_rejected(store, capsys):
    assert run(store, "add-itemized", "Drinks", "60", "Aryan", "arun:10") == 1
    assert run(store, "add-itemized", "Drinks", "60", "Aryan", "arun:lemon:ten") == 1
    assert "person:item:cost" in capsys.readouterr().err
    assert JsonStore(store.path).get("itemizedBillItems") is None


def test_cost_item_may_contain_colons(store):
    assert run(store, "add-itemized", "Cafe", "5", "Ann", "Bob:tea: large:5") == 0

    cost = JsonStore(store.path).get("itemizedBillItems")[0]["itemizedCosts"][0]
    assert cost == {"person": "Bob", "item": "tea: large", "cost": 5.0}


def test_zero_balance_shows_settled(store, capsys):
    run(store, "add-equal", "Coffee", "5", "Ann")
    capsys.readouterr()

    run(store, "summary")

    assert "Ann: paid 5.00, share 5.00, settled" in capsys.readouterr().out


def test_stored_key_used_by_record(store, tmp_path, monkeypatch, capsys):
    urls = []

    class Reply:
        status_code = 200
        text = json.dumps({"candidates": [{"content": {"parts": [{"text":
            '{"item": "Pizza", "amount": 250, "paidBy": "John", "sharedWith": ["Alice"]}'}]}}]})

    def fake_post(url, json=None, timeout=None):
        urls.append(url)
        return Reply()

    monkeypatch.setattr(extraction.requests, "post", fake_post)
    audio = tmp_path / "note.wav"
    audio.write_bytes(b"RIFF")

    assert run(store, "set-key", "  stored-key  ") == 0
    assert load_api_key(JsonStore(store.path)) == "stored-key"
    assert run(store, "record", str(audio), "--yes") == 0

    assert urls[0].endswith("?key=stored-key")
    assert JsonStore(store.path).get("billItems")[0]["item"] == "Pizza"


def test_blank_key_is_not_stored(store, capsys):
    assert run(store, "set-key", "   ") == 1
    assert load_api_key(JsonStore(store.path)) == ""
