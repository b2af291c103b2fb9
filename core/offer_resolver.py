"""
Offer resolution: which offer discounts a menu item and at what price.

Everything here is a pure function of its arguments; nothing touches the
database.
"""
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from core.errors import LocationMismatchError

END_OF_DAY = time(23, 59, 59)


@dataclass(frozen=True)
class DiscountInfo:
    is_offer: bool
    original_price: Optional[Decimal] = None
    offer_price: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    offer_name: Optional[str] = None


NO_OFFER = DiscountInfo(is_offer=False)


def discounted_price(price, percentage) -> Decimal:
    """price - price * percentage / 100, rounded half-up to a whole currency unit."""
    price = Decimal(str(price))
    discount = price * Decimal(str(percentage)) / 100
    return (price - discount).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def resolve_offer(item, offers) -> DiscountInfo:
    """
    Return the discount for `item` from the first offer that lists its id.

    `offers` must all belong to the item's location. Order decides ties: the
    earliest matching offer wins regardless of its percentage. Expired offers
    are not skipped here; expiry only drives the status label.
    """
    offers = list(offers)
    for offer in offers:
        if offer.location != item.location:
            raise LocationMismatchError(
                f"Offer {offer.name!r} belongs to {offer.location}, item {item.name!r} to {item.location}"
            )

    for offer in offers:
        if item.id in (offer.applicable_items or []):
            return DiscountInfo(
                is_offer=True,
                original_price=Decimal(str(item.price)),
                offer_price=discounted_price(item.price, offer.discount_percentage),
                percentage=Decimal(str(offer.discount_percentage)),
                offer_name=offer.name,
            )
    return NO_OFFER


def annotate_menu(items, offers):
    """Pair every item with its DiscountInfo, for list and card displays."""
    offers = list(offers)
    return [(item, resolve_offer(item, offers)) for item in items]


def combine_date_time(end_date: date, end_time: Optional[time] = None) -> datetime:
    return datetime.combine(end_date, end_time or END_OF_DAY)


def is_offer_expired(offer, now: datetime = None) -> bool:
    """True once `now` is past the offer's end date and time. No end date means never."""
    if offer.end_date is None:
        return False
    now = now or datetime.now()
    return now > combine_date_time(offer.end_date, offer.end_time)


def offer_status_label(offer, now: datetime = None) -> str:
    return "Expired" if is_offer_expired(offer, now) else "Active"
