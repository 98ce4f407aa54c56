"""
Pytest configuration and fixtures for catalog tests.

Every test gets a fresh in-memory SQLite database, so no teardown
beyond dropping the schema is needed.
"""

import os
import tempfile

# Point settings at throwaway locations before any api module is imported
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('UPLOADS_DIR', tempfile.mkdtemp(prefix='wms_uploads_'))
os.environ.setdefault('TEMP_UPLOAD_DIR', tempfile.mkdtemp(prefix='wms_tmp_'))
os.environ.setdefault('LOG_FILE', os.path.join(tempfile.gettempdir(), 'wms_test.log'))

from decimal import Decimal

import openpyxl
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend.models.enums import Brand, Size
from backend.models.schema import Base, Product

QUANTITY_HEADER = ['article', 'name', 'quantity', 'size']


@pytest.fixture(scope='function')
def engine():
    """Create a fresh in-memory database."""
    eng = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope='function')
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope='function')
def session(session_factory):
    """Create a new database session for a test."""
    sess = session_factory()
    yield sess
    sess.close()


@pytest.fixture(scope='function')
def client(session_factory):
    """TestClient whose requests use the test database."""
    from api.dependencies import get_db
    from api.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def _mock_product(article, name, brand, price, quantity, size, user='tester'):
    """Build an unsaved Product."""
    return Product(
        article=article,
        name=name,
        brand=brand,
        price=Decimal(str(price)),
        quantity=quantity,
        size=size,
        created_by=user,
        last_modified_by=user
    )


@pytest.fixture
def mock_product():
    """Factory for unsaved products."""
    return _mock_product


@pytest.fixture
def products():
    """The three reference products used across tests."""
    return [
        _mock_product(120589, 'AAA', Brand.DOLCE, 9, 9, Size.SIZE_50),
        _mock_product(120590, 'BBB', Brand.DOLCE, 15.69, 6, Size.SIZE_100),
        _mock_product(120591, 'CCC', Brand.ENGLISH_LAUNDRY, 55.12, 3, Size.SIZE_100),
    ]


@pytest.fixture
def insert_products(session):
    """Insert products into the test database and commit."""
    def _insert(items):
        session.add_all(items)
        session.commit()
        return items
    return _insert


@pytest.fixture
def make_workbook(tmp_path):
    """
    Write a quantity workbook and return its path.

    Usage:
        path = make_workbook([(120589, 'Eau de Parfum', 7, 50)])
    """
    def _make(rows, header=None, filename='products.xlsx'):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(list(header) if header is not None else QUANTITY_HEADER)
        for row in rows:
            ws.append(list(row))
        path = tmp_path / filename
        wb.save(path)
        return str(path)
    return _make


@pytest.fixture
def quantity_rows():
    """
    Reference upload content:

    article  name           quantity  size   stored  expected
    120589   Eau de Parfum  7         50     9       16
    120590   Eau de Parfum  21        100    6       27
    1647     Eau de Parfum  79        50     -       unmatched
    """
    return [
        (120589, 'Eau de Parfum', 7, 50),
        (120590, 'Eau de Parfum', 21, 100),
        (1647, 'Eau de Parfum', 79, 50),
    ]
