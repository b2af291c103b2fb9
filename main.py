import logging
import flet as ft

from core.config import LOG_LEVEL

# Import all models FIRST to ensure SQLAlchemy relationships are registered
from models.sub_category import SubCategory
from models.menu_item import MenuItem
from models.offer import Offer
from models.order import Order, OrderItem
from models.audit_log import AuditLog
from models.location_settings import LocationSettings

from core.db import Base, engine
from core.session_manager import start_session
from ui.admin_view import admin_view

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main(page: ft.Page):
    page.window.width = 1200
    page.window.height = 800
    page.padding = 0
    page.spacing = 0
    page.horizontal_alignment = ft.CrossAxisAlignment.CENTER
    page.vertical_alignment = ft.MainAxisAlignment.START

    ctx = start_session()
    logger.info("Admin panel opened by %s on %s", ctx.admin_email, ctx.location)
    admin_view(page, ctx)


if __name__ == "__main__":
    Base.metadata.create_all(bind=engine)
    ft.app(target=main)
