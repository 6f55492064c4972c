"""
Pytest-Fixtures: In-Memory-SQLite, Demo-Gilde und TestClient.
"""

import os

# Vor dem Import der App setzen, sonst greift die Standard-Datenbank
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DEBUG", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.auth.jwt import create_access_token
from app.main import app
from app.models import Guild, LootSystem, User, UserRole, WishlistEntry, GearSlot


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def guild(db):
    guild = Guild(name="Testgilde", loot_system=LootSystem.COUNCIL, participation_threshold=3)
    db.add(guild)
    db.commit()
    db.refresh(guild)
    return guild


@pytest.fixture
def make_member(db, guild):
    """Factory für Gildenmitglieder."""
    def _make(username, role=UserRole.MEMBER, points=5, loot_count=0, guild_id=None):
        user = User(
            username=username,
            role=role,
            guild_id=guild_id if guild_id is not None else guild.id,
            participation_points=points,
            loot_received_count=loot_count,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def officer(make_member):
    return make_member("offizier", role=UserRole.OFFICER)


@pytest.fixture
def admin(make_member):
    return make_member("admin", role=UserRole.ADMIN)


@pytest.fixture
def add_wish(db):
    """Factory für Wishlist-Einträge."""
    def _add(user, item_name, priority=1, slot=GearSlot.MAIN_HAND):
        entry = WishlistEntry(user_id=user.id, slot_name=slot, item_name=item_name, item_priority=priority)
        db.add(entry)
        db.commit()
        return entry
    return _add


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Bearer-Header für einen Benutzer."""
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}
    return _headers
