"""
Form objects and validation for menu items and offers.

Everything here runs before any database write: a form that fails
validation is never partially applied.
"""
from dataclasses import dataclass, field, replace
from datetime import date, time
from decimal import Decimal, InvalidOperation
from typing import Optional

from core.errors import ValidationError

# Category whose items must carry a sub-category
SUBCATEGORY_REQUIRED_CATEGORY = "Snacks"


@dataclass
class MenuItemForm:
    name: str
    price: object
    category: str
    stock: object = 0
    sub_category_id: Optional[int] = None


@dataclass
class OfferForm:
    name: str
    discount_percentage: object
    start_date: object = None
    end_date: object = None
    start_time: object = None
    end_time: object = None
    applicable_categories: list = field(default_factory=list)
    applicable_items: list = field(default_factory=list)
    location: Optional[str] = None


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_decimal(value, field_name: str) -> Decimal:
    if _blank(value):
        raise ValidationError(f"{field_name} is required", field_name)
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field_name} must be a number", field_name)
    if not number.is_finite():
        raise ValidationError(f"{field_name} must be a number", field_name)
    return number


def parse_stock(value) -> int:
    if _blank(value):
        return 0
    try:
        stock = int(str(value).strip())
    except ValueError:
        raise ValidationError("stock must be a whole number", "stock")
    if stock < 0:
        raise ValidationError("stock cannot be negative", "stock")
    return stock


def parse_date(value, field_name: str) -> Optional[date]:
    """Accept a date, or an ISO string (a datetime string is cut to its date part)."""
    if _blank(value):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"{field_name} must be a YYYY-MM-DD date", field_name)


def parse_time(value, field_name: str) -> Optional[time]:
    """Accept a time, or "HH:MM" / "HH:MM:SS"."""
    if _blank(value):
        return None
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM or HH:MM:SS", field_name)


def validate_menu_form(form: MenuItemForm, is_edit_mode: bool, has_image: bool) -> MenuItemForm:
    """
    Check a menu item form and return a normalised copy.

    Args:
        form: Raw form values
        is_edit_mode: True when editing an existing item
        has_image: True if an image file was uploaded with the form

    Raises:
        ValidationError: on the first invalid field
    """
    name = (form.name or "").strip()
    if not name:
        raise ValidationError("Item name is required", "name")

    if not is_edit_mode and not has_image:
        raise ValidationError("Please upload an image for the new item.", "image")

    category = (form.category or "").strip()
    if not category:
        raise ValidationError("Category is required", "category")

    price = parse_decimal(form.price, "price")
    if price < 0:
        raise ValidationError("price cannot be negative", "price")

    sub_category_id = form.sub_category_id or None
    if category == SUBCATEGORY_REQUIRED_CATEGORY:
        if sub_category_id is None:
            raise ValidationError("Please select or add a subcategory for Snacks.", "sub_category_id")
    else:
        sub_category_id = None

    return replace(
        form,
        name=name,
        price=price,
        category=category,
        stock=parse_stock(form.stock),
        sub_category_id=sub_category_id,
    )


def validate_offer_form(form: OfferForm) -> OfferForm:
    """Check an offer form and return a copy with parsed dates, times and numbers."""
    name = (form.name or "").strip()
    if not name:
        raise ValidationError("Offer name is required", "name")

    percentage = parse_decimal(form.discount_percentage, "discount_percentage")
    if percentage < 0 or percentage > 100:
        raise ValidationError("discount_percentage must be between 0 and 100", "discount_percentage")

    start_date = parse_date(form.start_date, "start_date")
    end_date = parse_date(form.end_date, "end_date")
    if start_date and end_date and end_date < start_date:
        raise ValidationError("end_date cannot be before start_date", "end_date")

    # dict.fromkeys drops duplicates and keeps selection order
    try:
        items = list(dict.fromkeys(int(i) for i in form.applicable_items or []))
    except (TypeError, ValueError):
        raise ValidationError("applicable_items must be menu item ids", "applicable_items")
    categories = list(dict.fromkeys(c for c in form.applicable_categories or [] if c))

    return replace(
        form,
        name=name,
        discount_percentage=percentage,
        start_date=start_date,
        end_date=end_date,
        start_time=parse_time(form.start_time, "start_time"),
        end_time=parse_time(form.end_time, "end_time"),
        applicable_categories=categories,
        applicable_items=items,
    )
