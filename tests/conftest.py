import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_EMAILS"] = "admin@skillverse.io"
os.environ["CLIENT_URL"] = "http://client.skillverse.io"
os.environ.pop("SELF_PING_URL", None)
os.environ.pop("SENTRY_DSN", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from skillverse import models  # noqa: F401
from skillverse.api import deps
from skillverse.core.database import Base, build_engine, get_db
from skillverse.core.exceptions import AuthenticationException, ExternalServiceException
from skillverse.core.security import SecurityUtils
from skillverse.main import app
from skillverse.models import Course, User, UserRole
from skillverse.services.admin import AdminPolicy

API = "/api/v1"


class FakePaymentGateway:
    currency = "inr"

    def __init__(self):
        self.sessions = {}
        self.created = []

    def create_session(self, line_item, success_url, cancel_url, metadata, customer_email=None):
        self.created.append(
            {
                "line_item": line_item,
                "success_url": success_url,
                "cancel_url": cancel_url,
                "metadata": metadata,
                "customer_email": customer_email,
            }
        )
        return f"https://checkout.stripe.com/pay/cs_test_{len(self.created)}"

    def get_session(self, session_id):
        return self.sessions[session_id]


class FakeStorage:
    def __init__(self):
        self.uploads = []
        self.deleted = []

    def upload(self, stream, folder, resource_type="image", filename=None):
        self.uploads.append((folder, resource_type, filename))
        public_id = f"{folder}/{filename or 'file'}-{len(self.uploads)}"
        return {"url": f"https://res.cloudinary.com/demo/{public_id}", "public_id": public_id}

    def delete(self, public_id, resource_type="image"):
        self.deleted.append((public_id, resource_type))
        return True


class FakeMailer:
    def __init__(self, fail=False):
        self.fail = fail
        self.reset_links = []
        self.notifications = []

    async def send_login_notification(self, email, name, via=""):
        self.notifications.append((email, via))

    async def send_password_reset_email(self, email, reset_url):
        if self.fail:
            raise ExternalServiceException("SMTP", "Email could not be sent")
        self.reset_links.append((email, reset_url))


class FakeIdentityVerifier:
    def __init__(self):
        self.identities = {}

    async def verify(self, token):
        if token not in self.identities:
            raise AuthenticationException("Invalid Google credential")
        return self.identities[token]


@pytest.fixture
def session_factory():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def gateway():
    return FakePaymentGateway()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def identity_verifier():
    return FakeIdentityVerifier()


@pytest.fixture
def client(session_factory, gateway, storage, mailer, identity_verifier):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_payment_gateway] = lambda: gateway
    app.dependency_overrides[deps.get_media_storage] = lambda: storage
    app.dependency_overrides[deps.get_mailer] = lambda: mailer
    app.dependency_overrides[deps.get_identity_verifier] = lambda: identity_verifier
    app.dependency_overrides[deps.get_admin_policy] = lambda: AdminPolicy(
        {"admin@skillverse.io"}
    )

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(name=None, email=None, password="secret123", role=UserRole.USER, **fields):
        counter["n"] += 1
        user = User(
            name=name or f"User {counter['n']}",
            email=email or f"user{counter['n']}@skillverse.io",
            hashed_password=SecurityUtils.get_password_hash(password),
            role=role,
            **fields,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {SecurityUtils.create_access_token(user.id)}"}

    return _auth_headers


@pytest.fixture
def make_course(db):
    def _make_course(creator, title="Intro to Python", is_paid=False, price=0.0, **fields):
        course = Course(
            title=title,
            description=fields.pop("description", "Learn the basics"),
            category=fields.pop("category", "programming"),
            is_paid=is_paid,
            price=price,
            creator_id=creator.id,
            **fields,
        )
        db.add(course)
        db.commit()
        db.refresh(course)
        return course

    return _make_course


@pytest.fixture
def lookup_misses_once(monkeypatch):
    """Make a service lookup return None on its first call, as if a concurrent
    writer had inserted the row just after it was read"""

    def _lookup_misses_once(owner, name):
        real = getattr(owner, name)
        calls = []

        def lookup(*args, **kwargs):
            calls.append(args)
            if len(calls) == 1:
                return None
            return real(*args, **kwargs)

        monkeypatch.setattr(owner, name, staticmethod(lookup))
        return calls

    return _lookup_misses_once
