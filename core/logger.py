import logging
from datetime import datetime

from sqlalchemy.orm import Session

from models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def log_action(db: Session, user_email: str, action: str, location: str = None):
    """Record an admin action into the audit log.

    Call after the action itself is committed: a failing audit write is
    rolled back on its own and never undoes the action it describes.
    """
    try:
        db.add(AuditLog(user_email=user_email, action=action, location=location, timestamp=datetime.utcnow()))
        db.commit()
    except Exception:
        logger.exception("Audit log error for %r", action)
        db.rollback()
