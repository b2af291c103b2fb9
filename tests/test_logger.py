from sqlalchemy.exc import OperationalError

from core.logger import log_action
from core.menu_service import create_menu_item, get_menu_item
from models.audit_log import AuditLog


def test_log_action_records_entry(db):
    log_action(db, "admin@test.local", "Added menu item: Tea", "canteen")

    entry = db.query(AuditLog).one()
    assert (entry.user_email, entry.action, entry.location) == ("admin@test.local", "Added menu item: Tea", "canteen")


def test_failed_audit_write_keeps_the_action(db, monkeypatch):
    item = create_menu_item(db, "canteen", "Tea", 10, "Drinks")
    real_commit = db.commit

    def failing_commit():
        raise OperationalError("INSERT", {}, Exception("disk full"))

    monkeypatch.setattr(db, "commit", failing_commit)
    log_action(db, "admin@test.local", "Added menu item: Tea", "canteen")
    monkeypatch.setattr(db, "commit", real_commit)

    assert db.query(AuditLog).count() == 0
    assert get_menu_item(db, item.id).name == "Tea"
