import json

import pytest

from routeledger.data.codec import decode_members, decode_stop_ids, encode_members, encode_stop_ids
from routeledger.errors import InvalidSnapshot
from routeledger.models.domain import SnapshotMember


def test_decode_stop_ids_accepts_lists_and_json_strings():
    assert decode_stop_ids(["s3", "s1", "s2"]) == ["s3", "s1", "s2"]
    assert decode_stop_ids('["s3", "s1", "s2"]') == ["s3", "s1", "s2"]
    assert decode_stop_ids([7, 8]) == ["7", "8"]


def test_decode_stop_ids_drops_blanks_and_duplicates_keeping_first_position():
    assert decode_stop_ids(["a", "", None, "b", "a", " c ", "b"]) == ["a", "b", "c"]


@pytest.mark.parametrize("raw", [None, "", "[]", []])
def test_decode_stop_ids_empty_values(raw):
    assert decode_stop_ids(raw) == []


@pytest.mark.parametrize("raw", ["not json", '{"a": 1}', 42])
def test_decode_stop_ids_rejects_non_lists(raw):
    with pytest.raises(ValueError):
        decode_stop_ids(raw)


def test_members_are_persisted_in_owner_shape_without_reordering():
    members = [
        SnapshotMember(owner_id="D2", owner_name="Driver 2", color="#ff7f0e", stop_ids=("s9", "s1", "s5")),
        SnapshotMember(owner_id="D1", owner_name=None, color=None, stop_ids=("s2",)),
    ]

    encoded = encode_members(members)

    assert encoded == [
        {"ownerId": "D2", "ownerName": "Driver 2", "color": "#ff7f0e", "stopIds": ["s9", "s1", "s5"]},
        {"ownerId": "D1", "ownerName": None, "color": None, "stopIds": ["s2"]},
    ]
    assert decode_members(json.dumps(encoded)) == members


def test_decode_members_reads_legacy_driver_keys():
    raw = [{"driverId": 4, "driverName": "Driver 4", "color": "#2ca02c", "stopIds": ["s1", "s1", "s2"]}]

    (member,) = decode_members(raw)

    assert member.owner_id == "4"
    assert member.owner_name == "Driver 4"
    assert member.stop_ids == ("s1", "s2")


def test_decode_members_skips_entries_without_owner_and_tolerates_missing_lists():
    raw = [{"ownerName": "nobody", "stopIds": ["s1"]}, {"ownerId": "D1", "stopIds": None}]

    assert decode_members(raw) == [SnapshotMember(owner_id="D1", owner_name=None, color=None, stop_ids=())]


@pytest.mark.parametrize("raw", ["{broken", {"ownerId": "D1"}, ["D1"], 12])
def test_decode_members_rejects_malformed_payloads(raw):
    with pytest.raises(InvalidSnapshot):
        decode_members(raw)


def test_encode_stop_ids_copies_into_plain_list():
    assert encode_stop_ids(("a", "b")) == ["a", "b"]
