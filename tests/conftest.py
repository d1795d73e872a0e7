import os
import sys
from pathlib import Path

# Ensure project root is on sys.path so `recipebook` can be imported when tests are run
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

# must be set before recipebook reads its settings
os.environ.setdefault("RECIPEBOOK_BCRYPT_ROUNDS", "4")
os.environ.setdefault("RECIPEBOOK_DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from recipebook import app as app_module  # noqa: E402
from recipebook import models, security  # noqa: E402
from recipebook.db import get_db, use_unicode_lower  # noqa: E402

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
# Use StaticPool so the same in-memory database is shared across connections
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
use_unicode_lower(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

OWNER = ("owner@example.com", "owner-pass-1")
OTHER = ("other@example.com", "other-pass-1")


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app_module.app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def fresh_tables():
    models.Base.metadata.create_all(bind=engine)
    yield
    models.Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app_module.app)


def _add_user(username, password):
    session = TestingSessionLocal()
    user = models.User(
        username=username, password=security.hash_password(password), authority="ROLE_USER"
    )
    session.add(user)
    session.commit()
    session.close()


@pytest.fixture
def owner():
    _add_user(*OWNER)
    return OWNER


@pytest.fixture
def other(owner):
    _add_user(*OTHER)
    return OTHER


def recipe_payload(**overrides):
    payload = {
        "name": "Fresh Mint Tea",
        "description": "Light, aromatic, and beautiful",
        "category": "beverage",
        "ingredients": ["boiled water", "honey", "fresh mint leaves"],
        "directions": ["Boil water", "Pour boiling hot water into a mug", "Add honey"],
    }
    payload.update(overrides)
    return payload
