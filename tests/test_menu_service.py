from decimal import Decimal

import pytest

from core.errors import DuplicateItemError, NotFoundError, ValidationError
from core.menu_service import (
    create_menu_item, delete_menu_item, find_twin, get_menu_item,
    list_menu_items, set_stock, update_menu_item, upsert_menu_item_by_name,
)
from models.menu_item import MenuItem


def _create(db, location="canteen", name="Samosa", price="20", stock=50, image_ref="/uploads/img1.jpg", **kw):
    return create_menu_item(db, location, name, Decimal(price), kw.pop("category", "Drinks"), stock=stock, image_ref=image_ref, **kw)


def test_list_is_scoped_to_location(db):
    _create(db, "canteen", "Samosa")
    _create(db, "cafeteria", "Samosa")
    _create(db, "cafeteria", "Tea")

    assert [i.name for i in list_menu_items(db, "canteen")] == ["Samosa"]
    assert sorted(i.name for i in list_menu_items(db, "cafeteria")) == ["Samosa", "Tea"]


def test_unknown_location_rejected(db):
    with pytest.raises(ValidationError):
        list_menu_items(db, "both")


def test_create_copies_uploaded_image(db, image_file, upload_dir):
    item = create_menu_item(db, "canteen", "Samosa", Decimal("20"), "Drinks", image_file=image_file)

    assert item.image.startswith("/uploads/")
    assert (upload_dir / item.image.rsplit("/", 1)[1]).exists()


def test_duplicate_name_in_same_location_rejected(db):
    _create(db, "canteen", "Samosa")

    with pytest.raises(DuplicateItemError):
        _create(db, "canteen", "Samosa")


def test_update_keeps_image_and_location(db):
    item = _create(db, "canteen", "Samosa")

    updated = update_menu_item(db, item.id, "Samosa", Decimal("25"), "Drinks", stock=40)

    assert updated.price == Decimal("25")
    assert updated.stock == 40
    assert updated.image == "/uploads/img1.jpg"
    assert updated.location == "canteen"


def test_update_missing_item(db):
    with pytest.raises(NotFoundError):
        update_menu_item(db, 999, "Ghost", Decimal("1"), "Drinks")


def test_upsert_creates_when_missing(db):
    item = upsert_menu_item_by_name(
        db, match_name="Samosa", location="cafeteria", price=Decimal("20"),
        category="Drinks", stock=12, existing_image_ref="/uploads/img1.jpg",
    )

    assert item.location == "cafeteria"
    assert item.stock == 12
    assert item.image == "/uploads/img1.jpg"


def test_upsert_updates_matching_fields_only(db):
    twin = _create(db, "cafeteria", "Samosa", price="20", stock=7, image_ref="/uploads/cafe.jpg")

    item = upsert_menu_item_by_name(
        db, match_name="Samosa", location="cafeteria", price=Decimal("30"),
        category="Lunch", stock=99,
    )

    assert item.id == twin.id
    assert item.price == Decimal("30")
    assert item.category == "Lunch"
    assert item.stock == 7
    assert item.image == "/uploads/cafe.jpg"


def test_upsert_forwards_existing_image(db):
    _create(db, "cafeteria", "Samosa", image_ref=None)

    item = upsert_menu_item_by_name(
        db, match_name="Samosa", location="cafeteria", price=Decimal("20"),
        category="Drinks", existing_image_ref="/uploads/img1.jpg",
    )

    assert item.image == "/uploads/img1.jpg"


def test_upsert_rename(db):
    _create(db, "cafeteria", "Samosa")

    item = upsert_menu_item_by_name(
        db, match_name="Samosa", location="cafeteria", price=Decimal("20"),
        category="Drinks", new_name="Punjabi Samosa",
    )

    assert item.name == "Punjabi Samosa"
    assert [i.name for i in list_menu_items(db, "cafeteria")] == ["Punjabi Samosa"]


def test_ambiguous_twin_is_an_error(db, monkeypatch):
    canteen = _create(db, "canteen", "Samosa")
    twins = [_create(db, "cafeteria", "Samosa"), _create(db, "cafeteria", "Samosa Copy")]
    # Rows written before the (location, name) constraint existed
    monkeypatch.setattr("core.menu_service.find_items_by_name", lambda db, name, location: twins)

    with pytest.raises(DuplicateItemError):
        find_twin(db, canteen.name, "cafeteria")
    with pytest.raises(DuplicateItemError):
        upsert_menu_item_by_name(db, match_name="Samosa", location="cafeteria", price=Decimal("1"), category="Drinks")


def test_find_twin_by_name(db):
    canteen = _create(db, "canteen", "Samosa")
    cafe = _create(db, "cafeteria", "Samosa")

    assert find_twin(db, canteen.name, "cafeteria").id == cafe.id
    assert find_twin(db, _create(db, "canteen", "Tea").name, "cafeteria") is None


def test_delete_leaves_twin(db):
    canteen = _create(db, "canteen", "Samosa")
    cafe = _create(db, "cafeteria", "Samosa")

    delete_menu_item(db, canteen.id)

    with pytest.raises(NotFoundError):
        get_menu_item(db, canteen.id)
    assert get_menu_item(db, cafe.id).name == "Samosa"


def test_set_stock_rejects_negative(db):
    item = _create(db)

    with pytest.raises(ValidationError):
        set_stock(db, item.id, -1)
    assert set_stock(db, item.id, 3).stock == 3
