import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog_service.cache.backend import ProductCache
from catalog_service.core.db import Base
from catalog_service import models  # noqa: F401


# Test database setup
TEST_DATABASE_URL = "sqlite:///:memory:"


class InMemoryRedis:
    """Minimal stand-in for the redis client calls the cache makes"""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ex=None):
        self.store[key] = value.encode() if isinstance(value, str) else value
        self.ttls[key] = ex
        return True

    def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    def ping(self):
        return True


@pytest.fixture
def db_session():
    """Create a fresh database session for each test"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def redis_client():
    return InMemoryRedis()


@pytest.fixture
def cache(redis_client):
    return ProductCache(redis_client)


@pytest.fixture
def product_payload():
    """Sample create request"""
    return {
        "user_id": 1,
        "product_name": "Widget",
        "product_description": "A very useful widget",
        "product_price": 9.99,
        "product_images": ["a.jpg", "b.jpg"],
    }
