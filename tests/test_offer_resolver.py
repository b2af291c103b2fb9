from datetime import date, datetime, time
from decimal import Decimal

import pytest

from core.errors import LocationMismatchError
from core.offer_resolver import (
    annotate_menu, combine_date_time, discounted_price,
    is_offer_expired, offer_status_label, resolve_offer,
)
from models.menu_item import MenuItem
from models.offer import Offer


def _item(item_id=1, price="100", location="canteen", name="Samosa"):
    return MenuItem(id=item_id, name=name, price=Decimal(price), category="Snacks", stock=10, location=location)


def _offer(name, pct, items, location="canteen", end_date=None, end_time=None):
    return Offer(
        name=name,
        discount_percentage=Decimal(str(pct)),
        applicable_items=list(items),
        applicable_categories=[],
        location=location,
        end_date=end_date,
        end_time=end_time,
    )


def test_ten_percent_off_hundred_is_ninety():
    info = resolve_offer(_item(price="100"), [_offer("Tea Time", 10, [1])])

    assert info.is_offer is True
    assert info.original_price == Decimal("100")
    assert info.offer_price == Decimal("90")
    assert info.percentage == Decimal("10")
    assert info.offer_name == "Tea Time"


def test_no_matching_offer():
    info = resolve_offer(_item(item_id=1), [_offer("Other", 50, [2, 3])])

    assert info.is_offer is False
    assert info.offer_price is None


def test_empty_offer_list():
    assert resolve_offer(_item(), []).is_offer is False


def test_category_list_does_not_grant_discount():
    offer = _offer("Snack Fest", 20, [])
    offer.applicable_categories = ["Snacks"]

    assert resolve_offer(_item(), [offer]).is_offer is False


def test_first_matching_offer_wins_over_bigger_discount():
    small = _offer("Small", 5, [1])
    big = _offer("Big", 50, [1])

    assert resolve_offer(_item(), [small, big]).offer_name == "Small"
    assert resolve_offer(_item(), [big, small]).offer_name == "Big"


def test_expired_offer_still_resolves():
    expired = _offer("Old", 10, [1], end_date=date(2000, 1, 1))

    assert is_offer_expired(expired, datetime(2024, 1, 1))
    assert resolve_offer(_item(), [expired]).is_offer is True


def test_offer_from_other_location_is_rejected():
    with pytest.raises(LocationMismatchError):
        resolve_offer(_item(location="canteen"), [_offer("Cafe", 10, [1], location="cafeteria")])


@pytest.mark.parametrize("price, pct, expected", [
    ("100", 10, "90"),
    ("25", 10, "23"),      # 22.5 rounds half up
    ("15", 50, "8"),       # 7.5 rounds half up
    ("99.99", 0, "100"),
    ("80", 100, "0"),
    ("0", 30, "0"),
])
def test_discounted_price_rounds_to_whole_units(price, pct, expected):
    assert discounted_price(Decimal(price), pct) == Decimal(expected)


@pytest.mark.parametrize("pct", [0, 1, 33, 50, 99, 100])
def test_offer_price_between_zero_and_original(pct):
    info = resolve_offer(_item(price="37"), [_offer("Any", pct, [1])])

    assert Decimal("0") <= info.offer_price <= info.original_price


def test_annotate_menu_pairs_each_item():
    items = [_item(1, "100"), _item(2, "50", name="Tea")]
    result = annotate_menu(items, [_offer("Half Tea", 50, [2])])

    assert [info.is_offer for _, info in result] == [False, True]
    assert result[1][1].offer_price == Decimal("25")


def test_expiry_with_end_time():
    offer = _offer("Evening", 10, [1], end_date=date(2024, 1, 10), end_time=time(18, 0, 0))

    assert is_offer_expired(offer, datetime(2024, 1, 10, 19, 0)) is True
    assert is_offer_expired(offer, datetime(2024, 1, 10, 17, 0)) is False
    assert offer_status_label(offer, datetime(2024, 1, 10, 19, 0)) == "Expired"
    assert offer_status_label(offer, datetime(2024, 1, 10, 17, 0)) == "Active"


def test_missing_end_time_means_end_of_day():
    offer = _offer("All Day", 10, [1], end_date=date(2024, 1, 10))

    assert combine_date_time(date(2024, 1, 10)) == datetime(2024, 1, 10, 23, 59, 59)
    assert is_offer_expired(offer, datetime(2024, 1, 10, 23, 59, 0)) is False
    assert is_offer_expired(offer, datetime(2024, 1, 11, 0, 0, 0)) is True


def test_missing_end_date_never_expires():
    offer = _offer("Forever", 10, [1], end_time=time(1, 0))

    assert is_offer_expired(offer, datetime(2999, 12, 31, 23, 59)) is False
