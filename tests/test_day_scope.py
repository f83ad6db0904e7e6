import pytest

from routeledger.errors import InvalidDay, InvalidInput
from routeledger.services.day_scope import DayScope, natural_key, normalize_day, sort_naturally


@pytest.mark.parametrize(
    "token, expected",
    [
        ("Monday", "monday"),
        ("  SUNDAY ", "sunday"),
        ("all", "all"),
        ("ALL", "all"),
        (None, "all"),
        ("", "all"),
        ("   ", "all"),
    ],
)
def test_normalize_day_accepts_weekdays_and_wildcard(token, expected):
    assert normalize_day(token) == expected


@pytest.mark.parametrize("token", ["mon", "someday", "2024-01-01", 3])
def test_normalize_day_rejects_unknown_tokens(token):
    with pytest.raises(InvalidDay) as excinfo:
        normalize_day(token)
    assert isinstance(excinfo.value, InvalidInput)
    assert isinstance(excinfo.value, ValueError)


def test_weekday_scope_includes_wildcard_owners():
    scope = DayScope.for_day("Tuesday")

    assert scope.day == "tuesday"
    assert scope.day_tokens == ("tuesday", "all")
    assert scope.contains("tuesday")
    assert scope.contains("all")
    assert scope.contains(None)
    assert not scope.contains("monday")


def test_wildcard_scope_only_sees_wildcard_owners():
    scope = DayScope.for_day("all")

    assert scope.day_tokens == ("all",)
    assert scope.contains("all")
    assert not scope.contains("friday")


def test_every_scope_locks_the_wildcard_key():
    assert DayScope.for_day("monday").lock_keys == ("day:monday", "day:all")
    assert DayScope.for_day("all").lock_keys == ("day:all",)


def test_natural_ordering_of_owner_ids():
    ids = ["D10", "D2", "D1", "10", "9", "Driver 0", "driver 11", "Driver 3"]

    ordered = sort_naturally(ids, key=lambda value: value)

    assert ordered == ["9", "10", "D1", "D2", "D10", "Driver 0", "Driver 3", "driver 11"]
    assert natural_key("D2") < natural_key("D10")
