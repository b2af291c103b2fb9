"""
Offer store: location-scoped CRUD for discount offers
"""
import logging
from sqlalchemy.orm import Session
from models.offer import Offer
from models.menu_item import MenuItem
from core.errors import NotFoundError, ValidationError
from core.logger import log_action
from core.session_manager import AdminContext, check_location
from core.validation import OfferForm, validate_offer_form

logger = logging.getLogger(__name__)


def list_offers(db: Session, location: str):
    """Get all offers of one location in creation order"""
    check_location(location)
    return db.query(Offer).filter(Offer.location == location).order_by(Offer.id).all()


def get_offer(db: Session, offer_id: int) -> Offer:
    """Get offer by ID or raise NotFoundError"""
    offer = db.query(Offer).filter(Offer.id == offer_id).first()
    if not offer:
        raise NotFoundError(f"Offer {offer_id} not found")
    return offer


def available_categories(db: Session, location: str):
    """Sorted distinct categories of the location's menu"""
    check_location(location)
    rows = db.query(MenuItem.category).filter(MenuItem.location == location).distinct().all()
    return sorted(category for (category,) in rows if category)


def items_for_categories(db: Session, location: str, categories=None):
    """
    Menu items of `location` in any of `categories` (all items when empty).

    Used by the offer form to turn a category selection into the item list
    that actually decides eligibility.
    """
    check_location(location)
    query = db.query(MenuItem).filter(MenuItem.location == location)
    if categories:
        query = query.filter(MenuItem.category.in_(list(categories)))
    return query.order_by(MenuItem.category, MenuItem.name).all()


def _check_items_at_location(db: Session, item_ids, location: str):
    if not item_ids:
        return
    found = {
        item_id
        for (item_id,) in db.query(MenuItem.id).filter(
            MenuItem.id.in_(item_ids), MenuItem.location == location
        )
    }
    missing = [i for i in item_ids if i not in found]
    if missing:
        raise ValidationError(
            f"Items {missing} are not on the {location} menu", "applicable_items"
        )


def _apply_form(offer: Offer, form: OfferForm):
    offer.name = form.name
    offer.discount_percentage = form.discount_percentage
    offer.start_date = form.start_date
    offer.end_date = form.end_date
    offer.start_time = form.start_time
    offer.end_time = form.end_time
    offer.applicable_categories = list(form.applicable_categories)
    offer.applicable_items = list(form.applicable_items)


def _commit(db: Session, offer: Offer) -> Offer:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(offer)
    return offer


def create_offer(db: Session, ctx: AdminContext, form: OfferForm) -> Offer:
    """Create an offer at the form's location (the admin's current location by default)"""
    form = validate_offer_form(form)
    location = check_location(form.location or ctx.location)
    _check_items_at_location(db, form.applicable_items, location)

    offer = Offer(location=location)
    _apply_form(offer, form)
    db.add(offer)
    offer = _commit(db, offer)

    logger.info("Created offer %s at %s (id=%s)", offer.name, location, offer.id)
    log_action(db, ctx.admin_email, f"Created offer: {offer.name} ({offer.discount_percentage}%)", location)
    return offer


def update_offer(db: Session, ctx: AdminContext, offer_id: int, form: OfferForm) -> Offer:
    """Update an offer; its location cannot change"""
    form = validate_offer_form(form)
    offer = get_offer(db, offer_id)
    if form.location and form.location != offer.location:
        raise ValidationError("An offer cannot move to another location", "location")
    _check_items_at_location(db, form.applicable_items, offer.location)

    _apply_form(offer, form)
    offer = _commit(db, offer)

    logger.info("Updated offer %s at %s (id=%s)", offer.name, offer.location, offer.id)
    log_action(db, ctx.admin_email, f"Updated offer: {offer.name}", offer.location)
    return offer


def delete_offer(db: Session, ctx: AdminContext, offer_id: int):
    """Delete an offer"""
    offer = get_offer(db, offer_id)
    db.delete(offer)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Deleted offer %s at %s (id=%s)", offer.name, offer.location, offer_id)
    log_action(db, ctx.admin_email, f"Deleted offer: {offer.name}", offer.location)
