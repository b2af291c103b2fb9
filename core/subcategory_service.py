# core/subcategory_service.py
from sqlalchemy.orm import Session
from models.menu_item import MenuItem
from models.sub_category import SubCategory
from core.errors import DuplicateItemError, NotFoundError, ValidationError
from core.image_store import save_image
from core.logger import log_action
from core.session_manager import AdminContext
from core.validation import SUBCATEGORY_REQUIRED_CATEGORY


def list_sub_categories(db: Session):
    """Get all sub-categories sorted by name"""
    return db.query(SubCategory).order_by(SubCategory.name).all()


def get_sub_category(db: Session, sub_category_id: int) -> SubCategory:
    sub = db.query(SubCategory).filter(SubCategory.id == sub_category_id).first()
    if not sub:
        raise NotFoundError(f"Sub-category {sub_category_id} not found")
    return sub


def _clean_name(db: Session, name: str, exclude_id: int = None) -> str:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Sub-category name is required", "name")
    query = db.query(SubCategory).filter(SubCategory.name == name)
    if exclude_id is not None:
        query = query.filter(SubCategory.id != exclude_id)
    if query.first():
        raise DuplicateItemError(f"Sub-category {name!r} already exists")
    return name


def _commit(db: Session):
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def create_sub_category(db: Session, ctx: AdminContext, name: str, image_file: str) -> SubCategory:
    """Create a sub-category; an image is required"""
    name = _clean_name(db, name)
    if not image_file:
        raise ValidationError("Please upload an image for the sub-category.", "image")

    sub = SubCategory(name=name, image=save_image(image_file))
    db.add(sub)
    _commit(db)
    db.refresh(sub)
    log_action(db, ctx.admin_email, f"Added sub-category: {name}")
    return sub


def update_sub_category(db: Session, ctx: AdminContext, sub_category_id: int, name: str, image_file: str = None) -> SubCategory:
    """Rename a sub-category, optionally replacing its image"""
    sub = get_sub_category(db, sub_category_id)
    sub.name = _clean_name(db, name, exclude_id=sub.id)
    if image_file:
        sub.image = save_image(image_file)
    _commit(db)
    log_action(db, ctx.admin_email, f"Updated sub-category: {sub.name}")
    return sub


def delete_sub_category(db: Session, ctx: AdminContext, sub_category_id: int):
    """
    Delete a sub-category.

    Refused while a Snacks item in either location still uses it, since a
    Snacks item cannot exist without one. Other items just lose the reference.
    """
    sub = get_sub_category(db, sub_category_id)
    in_use = db.query(MenuItem).filter(
        MenuItem.sub_category_id == sub.id,
        MenuItem.category == SUBCATEGORY_REQUIRED_CATEGORY,
    ).order_by(MenuItem.location, MenuItem.name).all()
    if in_use:
        names = ", ".join(f"{i.name} ({i.location})" for i in in_use)
        raise ValidationError(f"Sub-category {sub.name!r} is still used by: {names}", "sub_category_id")

    for item in sub.items:
        item.sub_category_id = None
    db.delete(sub)
    _commit(db)
    log_action(db, ctx.admin_email, f"Deleted sub-category: {sub.name}")
