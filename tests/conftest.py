import os
import uuid
from decimal import Decimal

# before collabill.config builds its settings
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

import collabill.models  # noqa: F401  registers every table on Base.metadata
from collabill.auth.passwords import hash_password
from collabill.db import get_db
from collabill.main import create_app
from collabill.models.base import Base
from collabill.models.enums import Role
from collabill.models.user import CollaboratorRate, User, UserRole

PASSWORD = "correct-horse-battery"

@pytest.fixture()
def db_session() -> Session:
    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set")

    engine = create_engine(database_url, pool_pre_ping=True)

    connection = engine.connect()
    transaction = connection.begin()

    # postgres ddl is transactional, so the schema goes away with the rollback
    Base.metadata.create_all(connection)

    TestingSessionLocal = sessionmaker(bind=connection, autoflush=False, autocommit=False)
    session: Session = TestingSessionLocal()

    # savepoint
    session.begin_nested()

    @event.listens_for(session, "after_transaction_end")
    def _restart_savepoint(sess: Session, trans) -> None:  # type: ignore[no-untyped-def]
        if trans.nested and not trans._parent.nested:
            sess.begin_nested()

    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()
        engine.dispose()

@pytest.fixture()
def client(db_session: Session) -> TestClient:
    app = create_app()

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)

def unique_email(prefix: str) -> str:
    return f"{prefix}+{uuid.uuid4().hex[:8]}@example.com"

def create_user(db: Session, email: str, role: Role, name: str = "Test User") -> User:
    u = User(email=email.lower(), name=name, password_hash=hash_password(PASSWORD))
    db.add(u)
    db.flush()
    db.add(UserRole(user_id=u.id, role=role))
    db.commit()
    return u

def login(client, email: str, password: str = PASSWORD) -> str:
    r = client.post("/auth/sign-in", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["access_token"]

def auth(jwt: str) -> dict[str, str]:
    return {"authorization": f"bearer {jwt}"}

class Account:
    def __init__(self, user: User, jwt: str):
        self.user = user
        self.jwt = jwt

    @property
    def id(self) -> str:
        return str(self.user.id)

    @property
    def headers(self) -> dict[str, str]:
        return auth(self.jwt)

@pytest.fixture()
def make_account(client, db_session):
    def _make(prefix: str, role: Role = Role.COLLABORATOR) -> Account:
        email = unique_email(prefix)
        user = create_user(db_session, email, role)
        return Account(user, login(client, email))

    return _make

@pytest.fixture()
def owner(make_account) -> Account:
    return make_account("owner", Role.OWNER)

@pytest.fixture()
def collaborator(make_account) -> Account:
    return make_account("collab")

@pytest.fixture()
def outsider(make_account) -> Account:
    return make_account("outsider")

@pytest.fixture()
def rated_collaborator(collaborator, db_session) -> Account:
    db_session.add(
        CollaboratorRate(
            user_id=collaborator.user.id,
            daily_rate=Decimal("400.00"),
            rate_xs=Decimal("50.00"),
            rate_s=Decimal("120.00"),
            rate_m=Decimal("300.00"),
            rate_l=Decimal("650.00"),
        )
    )
    db_session.commit()
    return collaborator

@pytest.fixture()
def shared_project(client, owner, collaborator) -> dict:
    """A project created by ``owner`` with ``collaborator`` as a member."""
    r = client.post("/projects", json={"name": f"p-{uuid.uuid4().hex[:6]}"}, headers=owner.headers)
    assert r.status_code == 201, r.text
    project = r.json()

    r = client.post(
        f"/projects/{project['id']}/members",
        json={"user_id": collaborator.id},
        headers=owner.headers,
    )
    assert r.status_code == 201, r.text
    return project
