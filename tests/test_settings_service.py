from datetime import time

import pytest

from core.errors import ValidationError
from core.settings_service import (
    DEFAULT_SERVICE_HOURS, get_settings, service_hours,
    set_open, set_service_hours, toggle_open
)
from models.audit_log import AuditLog


def test_defaults_created_on_first_use(db):
    settings = get_settings(db, "canteen")

    assert settings.is_open is True
    assert service_hours(settings) == DEFAULT_SERVICE_HOURS
    assert get_settings(db, "canteen").id == settings.id


def test_unknown_location(db):
    with pytest.raises(ValidationError):
        get_settings(db, "kiosk")


def test_status_is_per_location(db, canteen_ctx):
    set_open(db, canteen_ctx, False)

    assert get_settings(db, "canteen").is_open is False
    assert get_settings(db, "cafeteria").is_open is True


def test_toggle_open(db, cafeteria_ctx):
    assert toggle_open(db, cafeteria_ctx).is_open is False
    assert toggle_open(db, cafeteria_ctx).is_open is True

    actions = [a.action for a in db.query(AuditLog).order_by(AuditLog.id)]
    assert actions == ["Status set to CLOSED", "Status set to OPEN"]


def test_set_service_hours(db, canteen_ctx):
    settings = set_service_hours(db, canteen_ctx, "lunch", "12:30", "14:45")

    hours = service_hours(settings)
    assert hours["lunch"] == (time(12, 30), time(14, 45))
    assert hours["breakfast"] == DEFAULT_SERVICE_HOURS["breakfast"]
    assert service_hours(get_settings(db, "cafeteria"))["lunch"] == DEFAULT_SERVICE_HOURS["lunch"]


@pytest.mark.parametrize("meal, start, end, field", [
    ("dinner", "18:00", "21:00", "meal"),
    ("lunch", "", "14:00", "start"),
    ("lunch", "12:00", None, "end"),
    ("lunch", "14:00", "12:00", "end"),
    ("breakfast", "09:00", "09:00", "end"),
    ("breakfast", "nine", "10:00", "start"),
])
def test_service_hours_rejections(db, canteen_ctx, meal, start, end, field):
    with pytest.raises(ValidationError) as exc:
        set_service_hours(db, canteen_ctx, meal, start, end)

    assert exc.value.field == field
