"""
Pytest fixtures for testing
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from wishshare.config import Settings
from wishshare.infrastructure.db.session import Base
from wishshare.infrastructure.db.models import User


@pytest.fixture
def db_engine():
    """Create in-memory SQLite engine for tests (one shared connection)"""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def make_user(db_session):
    """Фабрика пользователей"""
    def _make_user(username: str) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user


@pytest.fixture
def owner(make_user):
    return make_user("alice")


@pytest.fixture
def other_user(make_user):
    return make_user("bob")


@pytest.fixture
def test_settings():
    """Настройки с маленькими лимитами лент"""
    return Settings(LATEST_WISHES_LIMIT=3, MOST_COPIED_WISHES_LIMIT=2)


@pytest.fixture
def wish_data():
    return {
        "title": "Велосипед",
        "description": "Городской велосипед с корзиной",
        "link": "https://shop.example.com/bike",
        "image": "https://shop.example.com/bike.jpg",
        "price": 100,
    }
