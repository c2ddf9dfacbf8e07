import os
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

# Keep tests off the user's real database and make hashing cheap
os.environ.setdefault("LENDING_DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LENDING_BCRYPT_ROUNDS", "4")

# Add backend directory to Python path FIRST
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Now import after path is set
import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, create_lending_engine
from models import MediaItem, User


@pytest.fixture
def db_session():
    """Create in-memory database for testing (foreign keys enforced)"""
    engine = create_lending_engine('sqlite:///:memory:', poolclass=StaticPool)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()
    yield session
    session.close()
    engine.dispose()


@pytest.fixture
def make_user(db_session):
    """Factory for persisted users"""
    counter = {"n": 0}

    def _make(username=None, email=None, role="MEMBER"):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        user = User(
            username=username,
            email=email or f"{username}@example.com",
            password_hash="not-a-real-hash",
            role=role,
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make


@pytest.fixture
def make_item(db_session):
    """Factory for persisted media items"""
    def _make(title="Java Programming", media_type="BOOK", total_copies=2, available_copies=None,
              late_fees_per_day="1.00", isbn=None, author="Author A", publisher="Test Publisher"):
        item = MediaItem(
            title=title,
            author=author,
            media_type=media_type,
            isbn=isbn,
            publication_date=date(2020, 1, 1),
            publisher=publisher,
            total_copies=total_copies,
            available_copies=total_copies if available_copies is None else available_copies,
            late_fees_per_day=Decimal(late_fees_per_day),
        )
        db_session.add(item)
        db_session.commit()
        return item

    return _make


@pytest.fixture
def user(make_user):
    return make_user("john", "john@example.com")


@pytest.fixture
def book(make_item):
    return make_item()
