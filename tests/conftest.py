import itertools
import os
from datetime import timedelta

# Must be set before the settings module is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

from shared.core.auth import token_for_user
from shared.core.database import Base, SessionLocal, engine
from shared.core.schemas import UserToken
from shared.models.users import Users
from shared.utils.datetime_utils import utc_now
from inventory_service.app.main import app
from inventory_service.app.crud.inventory import assets_crud, assignments_crud
from inventory_service.app.helpers import revalidation
from inventory_service.app.schemas.inventory.assets_schemas import AssetCreate
from inventory_service.app.schemas.inventory.assignments_schemas import AssignmentCreate


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)
    revalidation.clear_listeners()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    sequence = itertools.count(1)

    def _make(role="user", is_active=True, **kwargs):
        n = next(sequence)
        user = Users(
            name=kwargs.pop("name", f"User {n}"),
            email=kwargs.pop("email", f"user{n}@acme.org"),
            role=role,
            is_active=is_active,
            **kwargs
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


def as_actor(user: Users) -> UserToken:
    return UserToken(
        user_id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        department=user.department
    )


@pytest.fixture
def actor_for():
    return as_actor


@pytest.fixture
def admin(make_user):
    return as_actor(make_user(role="admin", name="Ada Admin"))


@pytest.fixture
def manager(make_user):
    return as_actor(make_user(role="manager", name="Max Manager"))


@pytest.fixture
def employee(make_user):
    return make_user(role="user", name="Erin Employee")


@pytest.fixture
def make_asset(db, manager):
    def _make(name="Dell Latitude", category="laptop", **kwargs):
        return assets_crud.create_asset(
            db, AssetCreate(name=name, category=category, **kwargs), manager)

    return _make


@pytest.fixture
def assign(db, manager):
    def _assign(asset, user, days=7, **kwargs):
        payload = AssignmentCreate(
            asset_id=asset.id,
            user_id=user.id,
            expected_return_at=utc_now() + timedelta(days=days) if days is not None else None,
            **kwargs
        )
        return assignments_crud.create_assignment(db, payload, manager)

    return _assign


@pytest.fixture
def auth_headers():
    def _headers(user: Users):
        return {"Authorization": f"Bearer {token_for_user(user)}"}

    return _headers
