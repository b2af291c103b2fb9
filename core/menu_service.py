"""
Location-scoped menu item store.

Each function is one write (one commit) against one location. Cross-location
behaviour lives in core.sync_engine.
"""
import logging
from sqlalchemy.orm import Session
from models.menu_item import MenuItem
from models.sub_category import SubCategory
from core.errors import DuplicateItemError, NotFoundError, ValidationError
from core.image_store import save_image
from core.session_manager import check_location

logger = logging.getLogger(__name__)


def list_menu_items(db: Session, location: str):
    """Get all menu items of one location, ordered by category then name"""
    check_location(location)
    return (
        db.query(MenuItem)
        .filter(MenuItem.location == location)
        .order_by(MenuItem.category, MenuItem.name)
        .all()
    )


def get_menu_item(db: Session, item_id: int) -> MenuItem:
    """Get menu item by ID or raise NotFoundError"""
    item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
    if not item:
        raise NotFoundError(f"Menu item {item_id} not found")
    return item


def find_items_by_name(db: Session, name: str, location: str):
    """All items at `location` whose name equals `name` exactly"""
    return db.query(MenuItem).filter(MenuItem.location == location, MenuItem.name == name).all()


def find_twin(db: Session, name: str, location: str):
    """
    Find the record named `name` at `location`, the twin of a record elsewhere.

    Twins share nothing but the name. Returns None when there is no twin and
    raises DuplicateItemError when the name matches more than one record.
    """
    matches = find_items_by_name(db, name, location)
    if len(matches) > 1:
        raise DuplicateItemError(f"{len(matches)} items named {name!r} at {location}")
    return matches[0] if matches else None


def _check_sub_category(db: Session, sub_category_id):
    if sub_category_id is None:
        return
    if not db.query(SubCategory).filter(SubCategory.id == sub_category_id).first():
        raise ValidationError(f"Sub-category {sub_category_id} not found", "sub_category_id")


def _check_name_free(db: Session, name: str, location: str, exclude_id: int = None):
    query = db.query(MenuItem).filter(MenuItem.location == location, MenuItem.name == name)
    if exclude_id is not None:
        query = query.filter(MenuItem.id != exclude_id)
    if query.first():
        raise DuplicateItemError(f"An item named {name!r} already exists at {location}")


def _commit(db: Session, item: MenuItem) -> MenuItem:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(item)
    return item


def create_menu_item(
    db: Session,
    location: str,
    name: str,
    price,
    category: str,
    sub_category_id: int = None,
    stock: int = 0,
    image_file: str = None,
    image_ref: str = None,
) -> MenuItem:
    """
    Create one menu item at one location.

    `image_file` is a path to a freshly uploaded file (copied into the upload
    directory); `image_ref` is an already stored reference.
    """
    check_location(location)
    _check_name_free(db, name, location)
    _check_sub_category(db, sub_category_id)

    if image_file:
        image_ref = save_image(image_file)

    item = MenuItem(
        name=name,
        price=price,
        category=category,
        sub_category_id=sub_category_id,
        stock=stock,
        location=location,
        image=image_ref,
    )
    db.add(item)
    item = _commit(db, item)
    logger.info("Created menu item %s at %s (id=%s)", name, location, item.id)
    return item


def update_menu_item(
    db: Session,
    item_id: int,
    name: str,
    price,
    category: str,
    sub_category_id: int = None,
    stock: int = None,
    image_file: str = None,
) -> MenuItem:
    """Update one menu item by id. Location never changes; the image is kept unless a new file is given."""
    item = get_menu_item(db, item_id)
    _check_name_free(db, name, item.location, exclude_id=item.id)
    _check_sub_category(db, sub_category_id)

    if image_file:
        item.image = save_image(image_file)
    item.name = name
    item.price = price
    item.category = category
    item.sub_category_id = sub_category_id
    if stock is not None:
        item.stock = stock
    item = _commit(db, item)
    logger.info("Updated menu item %s at %s (id=%s)", item.name, item.location, item.id)
    return item


def upsert_menu_item_by_name(
    db: Session,
    match_name: str,
    location: str,
    price,
    category: str,
    sub_category_id: int = None,
    stock: int = 0,
    image_file: str = None,
    existing_image_ref: str = None,
    new_name: str = None,
) -> MenuItem:
    """
    Create or update the item named `match_name` at `location`.

    On create, `stock` initialises the new record. On update only price,
    category, sub-category, image (and `new_name` on a rename) change; stock
    and order history stay with the location.

    The lookup and the write are separate statements with no lock, so two
    admins upserting the same name concurrently can race.
    """
    check_location(location)
    name = new_name or match_name
    item = find_twin(db, match_name, location)

    if item is None:
        return create_menu_item(
            db, location, name, price, category,
            sub_category_id=sub_category_id,
            stock=stock,
            image_file=image_file,
            image_ref=existing_image_ref,
        )

    if name != item.name:
        _check_name_free(db, name, location, exclude_id=item.id)
    _check_sub_category(db, sub_category_id)

    if image_file:
        item.image = save_image(image_file)
    elif existing_image_ref:
        item.image = existing_image_ref
    item.name = name
    item.price = price
    item.category = category
    item.sub_category_id = sub_category_id
    item = _commit(db, item)
    logger.info("Upserted menu item %s at %s (id=%s)", item.name, location, item.id)
    return item


def delete_menu_item(db: Session, item_id: int) -> MenuItem:
    """Delete one location's record; its twin and order history are left alone"""
    item = get_menu_item(db, item_id)
    db.delete(item)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Deleted menu item %s at %s (id=%s)", item.name, item.location, item_id)
    return item


def set_stock(db: Session, item_id: int, stock: int) -> MenuItem:
    """Set the stock count of a single location's record"""
    if stock < 0:
        raise ValidationError("stock cannot be negative", "stock")
    item = get_menu_item(db, item_id)
    item.stock = stock
    return _commit(db, item)
