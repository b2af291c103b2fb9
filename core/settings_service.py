"""
Per-location shop settings: open/closed status and meal service hours
"""
import logging
from datetime import time
from sqlalchemy.orm import Session
from models.location_settings import LocationSettings
from core.errors import ValidationError
from core.logger import log_action
from core.session_manager import AdminContext, check_location
from core.validation import parse_time

logger = logging.getLogger(__name__)

MEALS = ("breakfast", "lunch")
DEFAULT_SERVICE_HOURS = {
    "breakfast": (time(8, 0), time(11, 0)),
    "lunch": (time(12, 0), time(15, 0)),
}


def _commit(db: Session, settings: LocationSettings) -> LocationSettings:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(settings)
    return settings


def get_settings(db: Session, location: str) -> LocationSettings:
    """Settings row of a location, created with the defaults on first use"""
    check_location(location)
    settings = db.query(LocationSettings).filter(LocationSettings.location == location).first()
    if settings:
        return settings

    settings = LocationSettings(location=location, is_open=True)
    for meal, (start, end) in DEFAULT_SERVICE_HOURS.items():
        setattr(settings, f"{meal}_start", start)
        setattr(settings, f"{meal}_end", end)
    db.add(settings)
    return _commit(db, settings)


def set_open(db: Session, ctx: AdminContext, is_open: bool) -> LocationSettings:
    """Open or close the admin's current location"""
    settings = get_settings(db, ctx.location)
    settings.is_open = bool(is_open)
    settings = _commit(db, settings)

    status = "OPEN" if settings.is_open else "CLOSED"
    logger.info("%s set to %s", ctx.location, status)
    log_action(db, ctx.admin_email, f"Status set to {status}", ctx.location)
    return settings


def toggle_open(db: Session, ctx: AdminContext) -> LocationSettings:
    return set_open(db, ctx, not get_settings(db, ctx.location).is_open)


def service_hours(settings: LocationSettings) -> dict:
    """{meal: (start, end)} for every meal"""
    return {meal: (getattr(settings, f"{meal}_start"), getattr(settings, f"{meal}_end")) for meal in MEALS}


def set_service_hours(db: Session, ctx: AdminContext, meal: str, start, end) -> LocationSettings:
    """
    Change one meal's service window at the admin's current location.

    Args:
        meal: "breakfast" or "lunch"
        start, end: time values or "HH:MM" strings; end must be after start

    Raises:
        ValidationError: unknown meal, missing or malformed times, empty window
    """
    if meal not in MEALS:
        raise ValidationError(f"Unknown meal {meal!r}; expected one of {', '.join(MEALS)}", "meal")
    start = parse_time(start, "start")
    end = parse_time(end, "end")
    if start is None or end is None:
        raise ValidationError("Both start and end times are required", "start" if start is None else "end")
    if end <= start:
        raise ValidationError(f"{meal.title()} must end after it starts", "end")

    settings = get_settings(db, ctx.location)
    setattr(settings, f"{meal}_start", start)
    setattr(settings, f"{meal}_end", end)
    settings = _commit(db, settings)

    log_action(
        db, ctx.admin_email,
        f"Service hours for {meal}: {start.strftime('%H:%M')}-{end.strftime('%H:%M')}",
        ctx.location,
    )
    return settings
