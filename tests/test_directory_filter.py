import pytest

from iwems.directory_filter import filter_directory, parse_capacity_range
from iwems.entities import Vendor, Venue
from iwems.exceptions import ValidationError

VENDORS = [
    Vendor(id="1", business_name="Spice Route", category="catering", price_range="$$", location="Mumbai"),
    Vendor(id="2", business_name="Lens & Light", category="photography", price_range="$$", location="Pune"),
    Vendor(id="3", business_name="Royal Feast", category="catering", price_range="$$$", location="Delhi"),
    Vendor(id="4", business_name="Tandoor Tales", category="catering", price_range="$$",
           description="North Indian buffet"),
]

VENUES = [
    Venue(id="a", name="Garden Court", location="Jaipur", capacity=80),
    Venue(id="b", name="Lakeside Hall", location="Udaipur", capacity=300),
    Venue(id="c", name="Old Fort", location="Jaipur", capacity=None),
    Venue(id="d", name="Palace Grounds", location="Mysore", capacity=1200),
    Venue(id="e", name="Studio Zero", location="Goa", capacity=0),
]


def ids(items):
    return [item.id for item in items]


def test_category_and_price_together():
    result = filter_directory(VENDORS, category="catering", price_range="$$")
    assert ids(result) == ["1", "4"]


def test_all_and_empty_are_noops():
    assert filter_directory(VENDORS, search_text="", category="all", price_range="ALL") == VENDORS


def test_search_is_case_insensitive_across_fields():
    assert ids(filter_directory(VENDORS, search_text="BUFFET")) == ["4"]
    assert ids(filter_directory(VENDORS, search_text="pune")) == ["2"]
    assert ids(filter_directory(VENUES, search_text="jaipur")) == ["a", "c"]


def test_capacity_bounded_range():
    assert ids(filter_directory(VENUES, capacity_range="100-500")) == ["b"]


def test_capacity_open_upper_bound():
    assert ids(filter_directory(VENUES, capacity_range="500")) == ["d"]


def test_missing_capacity_never_matches():
    # Expected: "c" has no capacity, "e" has zero and is a real value.
    assert ids(filter_directory(VENUES, capacity_range=(0, 100))) == ["a", "e"]


def test_dict_items_are_supported():
    rows = [{"name": "A", "category": "florist"}, {"name": "B", "category": "catering"}]
    assert filter_directory(rows, category="catering") == [rows[1]]


def test_inputs_not_mutated():
    snapshot = list(VENUES)
    filter_directory(VENUES, search_text="hall", capacity_range="10-400")
    assert VENUES == snapshot


@pytest.mark.parametrize("value", ["big", "500-100", (1, 2, 3)])
def test_invalid_capacity_range(value):
    with pytest.raises(ValidationError):
        parse_capacity_range(value)


def test_parse_capacity_range():
    assert parse_capacity_range("all") is None
    assert parse_capacity_range("50-150") == (50, 150)
    assert parse_capacity_range("500") == (500, None)
