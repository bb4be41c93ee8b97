import sys
import os
from datetime import datetime, timezone

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from calldash.data.defaults import DEFAULT_CALL_DURATION
from calldash.data.models import (
    ChartDatum,
    PersistedRecord,
    clone_dataset,
    dataset_from_payload,
    dataset_to_payload,
    is_valid_email,
    parse_count,
    percentage_view,
)

def _dataset(*counts):
    names = ["0-60s", "60-120s", "120-180s", "180s+"]
    return [ChartDatum(name=n, count=c) for n, c in zip(names, counts)]

def test_value_mirrors_count():
    datum = ChartDatum(name="0-60s", count=12)
    assert datum.value == 12

    # a stale stored value is corrected on load
    datum = ChartDatum.model_validate({"name": "0-60s", "count": 7, "value": 99})
    assert datum.value == 7

    datum.set_count(42)
    assert datum.count == 42 and datum.value == 42

def test_parse_count_never_fails():
    assert parse_count("5000") == 5000
    assert parse_count("  12abc") == 12
    assert parse_count("7.9") == 7
    assert parse_count("abc") == 0
    assert parse_count("") == 0
    assert parse_count(None) == 0
    assert parse_count("-40") == 0
    assert parse_count(15) == 15

def test_email_shape():
    assert is_valid_email("a@b.co")
    assert is_valid_email("u@x.com")
    assert not is_valid_email("not-an-email")
    assert not is_valid_email("a b@c.com")
    assert not is_valid_email("a@bcom")
    assert not is_valid_email("")

def test_percentages():
    df = percentage_view(_dataset(4000, 3000, 2000, 1000))
    assert list(df["percentage"]) == [40.0, 30.0, 20.0, 10.0]
    assert list(df["name"]) == ["0-60s", "60-120s", "120-180s", "180s+"]

def test_percentages_all_zero():
    df = percentage_view(_dataset(0, 0, 0, 0))
    assert list(df["percentage"]) == [0, 0, 0, 0]

def test_clone_is_independent():
    draft = clone_dataset(DEFAULT_CALL_DURATION)
    draft[0].set_count(1)
    assert DEFAULT_CALL_DURATION[0].count == 4000
    assert draft[1] == DEFAULT_CALL_DURATION[1]

def test_payload_keeps_order():
    dataset = _dataset(1, 2, 3, 4)
    payload = dataset_to_payload(dataset)
    assert [p["name"] for p in payload] == ["0-60s", "60-120s", "120-180s", "180s+"]
    assert all(p["value"] == p["count"] for p in payload)
    assert dataset_from_payload(payload) == dataset

def test_malformed_payload_rejected():
    for bad in (None, {"name": "x"}, [{"name": "x", "count": -1}],
                [{"name": "a", "count": 1}, {"name": "a", "count": 2}]):
        try:
            dataset_from_payload(bad)
        except ValueError:
            continue
        raise AssertionError(f"payload accepted: {bad!r}")

def test_persisted_record_document():
    saved_at = datetime(2026, 1, 5, 10, 0, tzinfo=timezone.utc)
    record = PersistedRecord(key="u@x.com", dataset=_dataset(1, 2, 3, 4), saved_at=saved_at)
    document = record.to_document()
    assert document["email"] == "u@x.com"
    assert document["updated_at"] == "2026-01-05T10:00:00+00:00"
    assert PersistedRecord.from_document(document) == record

def test_persisted_record_needs_timestamp():
    for bad in ("garbage", {"email": "u@x.com", "data": dataset_to_payload(_dataset(1, 2, 3, 4))}):
        try:
            PersistedRecord.from_document(bad)
        except ValueError:
            continue
        raise AssertionError(f"document accepted: {bad!r}")
