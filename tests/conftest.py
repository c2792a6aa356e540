import base64
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import app.models  # noqa: F401
from app.celery_app import celery_app
from app.crud import create_user
from app.db import session as db_session
from app.db.base import Base
from app.db.session import enable_sqlite_savepoints, get_db
from app.models.catalog import Category, Product, ProductStatus
from app.services.progress_store import InMemoryProgressStore, set_progress_store

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'catalog_test.db'}",
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def db(session_factory):
    """Session for seeding data; commit before handing control to other sessions."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def progress_store():
    store = InMemoryProgressStore()
    set_progress_store(store)
    yield store
    set_progress_store(None)


@pytest.fixture
def eager_worker(session_factory, progress_store, monkeypatch):
    """Celery tasks run in-process against the test database."""
    monkeypatch.setattr(db_session, "SessionLocal", session_factory)
    monkeypatch.setattr(celery_app.conf, "task_always_eager", True)
    return progress_store


@pytest.fixture
def app_client(session_factory, eager_worker):
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_user(session_factory):
    with session_factory() as session:
        return create_user(
            session,
            username=ADMIN_USERNAME,
            email="admin@example.com",
            password=ADMIN_PASSWORD,
            is_superuser=True,
        )


@pytest.fixture
def auth_headers(admin_user):
    token = base64.b64encode(f"{ADMIN_USERNAME}:{ADMIN_PASSWORD}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


@pytest.fixture
def category(db):
    category = Category(name="Shoes", slug="shoes")
    db.add(category)
    db.commit()
    return category


@pytest.fixture
def make_products(db):
    """Insert `count` products and return their ids."""
    def _make(count, price="10.00", prefix="product"):
        products = [
            Product(
                name=f"{prefix} {i}",
                slug=f"{prefix}-{i}",
                price=Decimal(price),
                stock=1,
                status=ProductStatus.DRAFT,
            )
            for i in range(count)
        ]
        db.add_all(products)
        db.commit()
        return [p.id for p in products]

    return _make
