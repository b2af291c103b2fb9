import pytest
from sqlalchemy.exc import OperationalError

from core.errors import DuplicateItemError, NotFoundError, ValidationError
from core.menu_service import create_menu_item, get_menu_item
from core.subcategory_service import (
    create_sub_category, delete_sub_category, get_sub_category, list_sub_categories, update_sub_category
)


def test_create_requires_image(db, canteen_ctx):
    with pytest.raises(ValidationError) as exc:
        create_sub_category(db, canteen_ctx, "Baked", None)

    assert exc.value.field == "image"


def test_create_and_list(db, canteen_ctx, image_file, upload_dir):
    create_sub_category(db, canteen_ctx, "Fried", image_file)
    baked = create_sub_category(db, canteen_ctx, " Baked ", image_file)

    assert baked.name == "Baked"
    assert (upload_dir / baked.image.split("/")[-1]).exists()
    assert [s.name for s in list_sub_categories(db)] == ["Baked", "Fried"]


def test_duplicate_name(db, canteen_ctx, image_file, snacks):
    with pytest.raises(DuplicateItemError):
        create_sub_category(db, canteen_ctx, "Fried", image_file)


def test_rename_keeps_image(db, canteen_ctx, snacks):
    sub = update_sub_category(db, canteen_ctx, snacks.id, "Deep Fried")

    assert sub.name == "Deep Fried"
    assert sub.image == "/uploads/fried.jpg"


def test_delete_refused_while_snacks_use_it(db, canteen_ctx, snacks):
    create_menu_item(db, "canteen", "Samosa", 20, "Snacks", sub_category_id=snacks.id)
    cafe = create_menu_item(db, "cafeteria", "Samosa", 22, "Snacks", sub_category_id=snacks.id)

    with pytest.raises(ValidationError) as exc:
        delete_sub_category(db, canteen_ctx, snacks.id)

    assert exc.value.field == "sub_category_id"
    assert "Samosa (cafeteria)" in str(exc.value)
    assert get_sub_category(db, snacks.id).name == "Fried"
    item = get_menu_item(db, cafe.id)
    assert (item.category, item.sub_category_id) == ("Snacks", snacks.id)


def test_delete_unused_sub_category(db, canteen_ctx, snacks):
    drink = create_menu_item(db, "canteen", "Lassi", 30, "Drinks", sub_category_id=snacks.id)

    delete_sub_category(db, canteen_ctx, snacks.id)

    assert list_sub_categories(db) == []
    assert get_menu_item(db, drink.id).sub_category_id is None
    with pytest.raises(NotFoundError):
        get_sub_category(db, snacks.id)


def test_failed_commit_is_rolled_back(db, canteen_ctx, snacks, monkeypatch):
    rollbacks = []
    real_rollback = db.rollback

    def failing_commit():
        raise OperationalError("UPDATE", {}, Exception("database is locked"))

    def tracking_rollback():
        rollbacks.append(True)
        real_rollback()

    monkeypatch.setattr(db, "commit", failing_commit)
    monkeypatch.setattr(db, "rollback", tracking_rollback)

    with pytest.raises(OperationalError):
        update_sub_category(db, canteen_ctx, snacks.id, "Deep Fried")

    assert rollbacks
    assert get_sub_category(db, snacks.id).name == "Fried"
