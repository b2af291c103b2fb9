import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.db import Base
from core.session_manager import AdminContext
from models.sub_category import SubCategory
from models.menu_item import MenuItem
from models.offer import Offer
from models.order import Order, OrderItem
from models.audit_log import AuditLog
from models.location_settings import LocationSettings


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    target = tmp_path / "uploads"
    monkeypatch.setattr("core.image_store.UPLOAD_DIR", str(target))
    return target


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "samosa.jpg"
    path.write_bytes(b"\xff\xd8\xff\xe0fake-jpeg")
    return str(path)


@pytest.fixture
def canteen_ctx():
    return AdminContext(admin_email="admin@test.local", location="canteen")


@pytest.fixture
def cafeteria_ctx():
    return AdminContext(admin_email="admin@test.local", location="cafeteria")


@pytest.fixture
def snacks(db):
    sub = SubCategory(name="Fried", image="/uploads/fried.jpg")
    db.add(sub)
    db.commit()
    return sub
