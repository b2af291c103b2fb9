from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from core import menu_service
from core.errors import ValidationError
from core.menu_service import list_menu_items, set_stock
from core.revenue_service import get_item_revenue, record_order
from core.sync_engine import CREATE, CREATE_SYNC, EDIT, EDIT_SYNC, save_menu_item
from core.validation import MenuItemForm
from models.audit_log import AuditLog


def _form(name="Samosa", price="20", category="Drinks", stock=50, sub_category_id=None):
    return MenuItemForm(name=name, price=price, category=category, stock=stock, sub_category_id=sub_category_id)


def _only(db, location):
    items = list_menu_items(db, location)
    assert len(items) == 1
    return items[0]


def test_create_single_location(db, canteen_ctx, image_file):
    result = save_menu_item(db, canteen_ctx, _form(), image_file=image_file)

    assert result.mode == CREATE
    assert result.ok
    assert result.secondary is None
    assert _only(db, "canteen").stock == 50
    assert list_menu_items(db, "cafeteria") == []


def test_create_sync_makes_independent_twins(db, canteen_ctx, image_file):
    result = save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)

    assert result.mode == CREATE_SYNC
    assert result.ok
    canteen, cafe = _only(db, "canteen"), _only(db, "cafeteria")
    assert canteen.id != cafe.id
    assert (canteen.name, canteen.price, canteen.category) == (cafe.name, cafe.price, cafe.category)
    assert canteen.stock == cafe.stock == 50
    assert canteen.image == cafe.image

    set_stock(db, canteen.id, 10)

    db.expire_all()
    assert _only(db, "cafeteria").stock == 50


def test_create_sync_from_cafeteria_writes_cafeteria_first(db, cafeteria_ctx, image_file):
    result = save_menu_item(db, cafeteria_ctx, _form(), sync_both=True, image_file=image_file)

    assert result.primary.location == "cafeteria"
    assert result.secondary.location == "canteen"


def test_create_sync_second_write_failure_is_reported(db, canteen_ctx, image_file, monkeypatch):
    real_create = menu_service.create_menu_item

    def flaky_create(db, location, *args, **kwargs):
        if location == "cafeteria":
            raise OperationalError("INSERT", {}, Exception("connection lost"))
        return real_create(db, location, *args, **kwargs)

    monkeypatch.setattr("core.sync_engine.create_menu_item", flaky_create)

    result = save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)

    assert result.ok is False
    assert result.primary.ok is True
    assert result.secondary.ok is False
    assert "cafeteria" in result.message
    # first write is not rolled back
    assert _only(db, "canteen").name == "Samosa"
    assert list_menu_items(db, "cafeteria") == []


def test_primary_failure_skips_secondary(db, canteen_ctx, image_file, monkeypatch):
    calls = []

    def failing_create(db, location, *args, **kwargs):
        calls.append(location)
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr("core.sync_engine.create_menu_item", failing_create)

    result = save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)

    assert result.ok is False
    assert result.secondary is None
    assert calls == ["canteen"]
    assert result.message.startswith("Failed to save item")


def test_edit_without_sync_touches_one_record(db, canteen_ctx, image_file):
    save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)
    canteen = _only(db, "canteen")

    result = save_menu_item(db, canteen_ctx, _form(price="25", stock=5), item_id=canteen.id)

    assert result.mode == EDIT
    assert result.ok
    db.expire_all()
    assert _only(db, "canteen").price == Decimal("25")
    assert _only(db, "cafeteria").price == Decimal("20")


def test_edit_sync_updates_twin_but_not_its_stock_or_revenue(db, canteen_ctx, cafeteria_ctx, image_file):
    save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)
    canteen, cafe = _only(db, "canteen"), _only(db, "cafeteria")
    original_image = canteen.image
    record_order(db, "cafeteria", [(cafe.id, 3)])
    revenue_before = get_item_revenue(db, cafe.id)

    result = save_menu_item(db, canteen_ctx, _form(price="25", stock=80), item_id=canteen.id, sync_both=True)

    assert result.mode == EDIT_SYNC
    assert result.ok and result.secondary.ok
    db.expire_all()
    canteen, cafe = _only(db, "canteen"), _only(db, "cafeteria")
    assert canteen.price == cafe.price == Decimal("25")
    assert canteen.stock == 80
    assert cafe.stock == 47
    assert cafe.image == original_image
    assert get_item_revenue(db, cafe.id) == revenue_before


def test_edit_sync_forwards_new_image(db, canteen_ctx, image_file, tmp_path):
    save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)
    canteen = _only(db, "canteen")
    new_image = tmp_path / "new.png"
    new_image.write_bytes(b"\x89PNG")

    save_menu_item(db, canteen_ctx, _form(), item_id=canteen.id, sync_both=True, image_file=str(new_image))

    db.expire_all()
    canteen, cafe = _only(db, "canteen"), _only(db, "cafeteria")
    assert canteen.image.endswith(".png")
    assert cafe.image == canteen.image


def test_edit_sync_creates_missing_twin(db, canteen_ctx, image_file):
    save_menu_item(db, canteen_ctx, _form(stock=9), image_file=image_file)
    canteen = _only(db, "canteen")

    result = save_menu_item(db, canteen_ctx, _form(stock=9), item_id=canteen.id, sync_both=True)

    assert result.secondary.ok
    cafe = _only(db, "cafeteria")
    assert cafe.name == "Samosa"
    assert cafe.stock == 9
    assert cafe.image == canteen.image


def test_edit_sync_rename_follows_twin(db, canteen_ctx, image_file):
    save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)
    canteen = _only(db, "canteen")

    save_menu_item(db, canteen_ctx, _form(name="Jumbo Samosa"), item_id=canteen.id, sync_both=True)

    db.expire_all()
    assert _only(db, "cafeteria").name == "Jumbo Samosa"


def test_edit_sync_secondary_failure_is_swallowed(db, canteen_ctx, image_file, monkeypatch):
    save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)
    canteen = _only(db, "canteen")

    def broken_upsert(*args, **kwargs):
        raise OperationalError("UPDATE", {}, Exception("network error"))

    monkeypatch.setattr("core.sync_engine.upsert_menu_item_by_name", broken_upsert)

    result = save_menu_item(db, canteen_ctx, _form(price="25"), item_id=canteen.id, sync_both=True)

    assert result.ok is True
    assert result.primary.ok is True
    assert result.secondary.ok is False
    assert "sync to cafeteria failed" in result.message
    db.expire_all()
    assert _only(db, "canteen").price == Decimal("25")
    assert _only(db, "cafeteria").price == Decimal("20")
    assert db.query(AuditLog).filter(AuditLog.action.like("Sync failed%")).count() == 1


def test_edit_primary_failure(db, canteen_ctx):
    result = save_menu_item(db, canteen_ctx, _form(), item_id=12345, sync_both=True)

    assert result.ok is False
    assert result.secondary is None


def test_validation_runs_before_any_write(db, canteen_ctx, snacks):
    with pytest.raises(ValidationError) as exc:
        save_menu_item(db, canteen_ctx, _form(category="Snacks"), sync_both=True, image_file="unused.jpg")

    assert exc.value.field == "sub_category_id"
    assert list_menu_items(db, "canteen") == []
    assert list_menu_items(db, "cafeteria") == []


def test_create_requires_image(db, canteen_ctx):
    with pytest.raises(ValidationError) as exc:
        save_menu_item(db, canteen_ctx, _form())

    assert exc.value.field == "image"


def test_snack_sub_category_propagates(db, canteen_ctx, image_file, snacks):
    result = save_menu_item(
        db, canteen_ctx, _form(category="Snacks", sub_category_id=snacks.id), sync_both=True, image_file=image_file
    )

    assert result.ok
    assert _only(db, "cafeteria").sub_category_id == snacks.id


def test_audit_entries_per_location(db, canteen_ctx, image_file):
    save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)

    entries = db.query(AuditLog).order_by(AuditLog.id).all()
    assert [(e.location, e.action) for e in entries] == [
        ("canteen", "Added menu item: Samosa"),
        ("cafeteria", "Added menu item: Samosa"),
    ]


def test_rejected_create_sync_leaves_no_orphan_upload(db, canteen_ctx, image_file, upload_dir):
    save_menu_item(db, canteen_ctx, _form(), image_file=image_file)
    stored = sorted(p.name for p in upload_dir.iterdir())

    result = save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)

    assert result.ok is False
    assert result.secondary is None
    assert sorted(p.name for p in upload_dir.iterdir()) == stored
    assert list_menu_items(db, "cafeteria") == []


def test_partial_create_sync_keeps_shared_upload(db, canteen_ctx, image_file, upload_dir, monkeypatch):
    real_create = menu_service.create_menu_item

    def flaky_create(db, location, *args, **kwargs):
        if location == "cafeteria":
            raise OperationalError("INSERT", {}, Exception("connection lost"))
        return real_create(db, location, *args, **kwargs)

    monkeypatch.setattr("core.sync_engine.create_menu_item", flaky_create)

    save_menu_item(db, canteen_ctx, _form(), sync_both=True, image_file=image_file)

    canteen = _only(db, "canteen")
    assert (upload_dir / canteen.image.rsplit("/", 1)[1]).exists()
