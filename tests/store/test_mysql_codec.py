import pytest

from src.timewise.timewise.store.document import StoreTimestamp
from src.timewise.timewise.store.mysql_document_store import TIMESTAMP_TAG, _json_path, decode_value, encode_value


def test_timestamps_are_tagged_in_json():
    encoded = encode_value({"startDate": StoreTimestamp(1719822600, 5), "recipients": ("managers",)})

    assert encoded == {
        "startDate": {TIMESTAMP_TAG: {"seconds": 1719822600, "nanoseconds": 5}},
        "recipients": ["managers"],
    }


def test_tagged_maps_decode_to_timestamps():
    decoded = decode_value({"startDate": {TIMESTAMP_TAG: {"seconds": 10, "nanoseconds": 20}}, "title": "Trip"})

    assert decoded == {"startDate": StoreTimestamp(10, 20), "title": "Trip"}


def test_legacy_encodings_pass_through():
    raw = {"startDate": "2024-07-01T00:00:00Z", "endDate": {"seconds": 10, "nanoseconds": 0}}
    assert decode_value(raw) == raw


def test_corrupt_tag_is_left_for_the_caller():
    raw = {TIMESTAMP_TAG: {"seconds": "soon"}}
    assert decode_value(raw) == raw


def test_json_path_rejects_unsafe_field_names():
    assert _json_path("startDate") == "$.startDate"
    with pytest.raises(ValueError):
        _json_path("userId') OR 1=1 --")
