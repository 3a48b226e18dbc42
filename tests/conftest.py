"""
Pytest configuration and shared fixtures.

Fixtures available to all tests:
  • db_session              — in-memory SQLite session with all tables
  • make_user(...)          — persist a User row
  • make_auction(...)       — persist a future / running / closed auction with bids
  • fake_provider           — identity provider keyed by fixed API keys
  • client                  — TestClient wired to the fixtures above
"""

from __future__ import annotations

import os
import sys
from datetime import timedelta
from typing import Dict, List, Optional, Sequence

import pytest

# Ensure the project root is on the path so all micropurchase imports resolve.
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("AUTH_SECRET", "test-secret")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from micropurchase.core.utils import utcnow  # noqa: E402
from micropurchase.database import Auction, Base, Bid, User  # noqa: E402
from micropurchase.domain.errors import ProviderAuthenticationError  # noqa: E402
from micropurchase.metrics import reset_metrics_for_tests  # noqa: E402


VALID_API_KEY = "valid-github-token"
INVALID_API_KEY = "invalid-github-token"
ADMIN_API_KEY = "admin-github-token"
UNKNOWN_USER_API_KEY = "stranger-github-token"

BIDDER_GITHUB_ID = "86790"
ADMIN_GITHUB_ID = "11111"
STRANGER_GITHUB_ID = "55555"


# ---------------------------------------------------------------------------
# Identity provider stand-in
# ---------------------------------------------------------------------------

class FakeIdentityProvider:
    """Maps fixed API keys to GitHub ids; ``INVALID_API_KEY`` is refused."""

    def __init__(self, tokens: Optional[Dict[str, str]] = None):
        self.tokens = tokens if tokens is not None else {
            VALID_API_KEY: BIDDER_GITHUB_ID,
            ADMIN_API_KEY: ADMIN_GITHUB_ID,
            UNKNOWN_USER_API_KEY: STRANGER_GITHUB_ID,
        }
        self.calls: List[str] = []

    def external_id_for(self, credential: str, timeout: Optional[float] = None) -> str:
        self.calls.append(credential)
        if credential not in self.tokens:
            raise ProviderAuthenticationError("Error authenticating via GitHub: 401 - Bad credentials")
        return self.tokens[credential]


@pytest.fixture
def fake_provider():
    return FakeIdentityProvider()


@pytest.fixture(autouse=True)
def _reset_metrics():
    reset_metrics_for_tests()
    yield
    reset_metrics_for_tests()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    Session = sessionmaker(bind=db_engine, autoflush=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture
def make_user(db_session):
    def _factory(github_id: Optional[str] = BIDDER_GITHUB_ID, sam_account: bool = True, name: str = "Vendor") -> User:
        user = User(github_id=github_id, sam_account=sam_account, name=name)
        db_session.add(user)
        db_session.commit()
        return user
    return _factory


@pytest.fixture
def make_auction(db_session, make_user):
    counter = {"n": 0}

    def _factory(
        status: str = "running",
        bid_amounts: Sequence[int] = (100, 120),
        start_price: Optional[int] = 3500,
    ) -> Auction:
        now = utcnow()
        day = timedelta(days=1)
        if status == "future":
            start, end = now + day, now + 2 * day
        elif status == "closed":
            start, end = now - 2 * day, now - day
        else:
            start, end = now - day, now + day

        auction = Auction(title="Fix the build", start_datetime=start, end_datetime=end, start_price=start_price)
        db_session.add(auction)
        db_session.flush()
        for amount in bid_amounts:
            counter["n"] += 1
            rival = make_user(github_id=f"rival-{counter['n']}", name="Rival")
            db_session.add(Bid(auction_id=auction.id, bidder_id=rival.id, amount=amount))
        db_session.commit()
        return auction
    return _factory


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------

@pytest.fixture
def client(db_session, fake_provider):
    from fastapi.testclient import TestClient

    from micropurchase.admins import AdminRegistry
    from micropurchase.api import routes
    from micropurchase.app import app
    from micropurchase.database import get_db

    def _db():
        yield db_session

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[routes.get_identity_provider] = lambda: fake_provider
    app.dependency_overrides[routes.get_admin_registry] = lambda: AdminRegistry({ADMIN_GITHUB_ID})

    yield TestClient(app, follow_redirects=False)

    app.dependency_overrides.clear()
