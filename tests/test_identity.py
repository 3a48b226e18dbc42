from __future__ import annotations

from micropurchase.database import SqlUserDirectory
from micropurchase.domain.enums import ResolutionStatus
from micropurchase.identity import IdentityResolver
from micropurchase.metrics import metrics_snapshot

from conftest import (
    BIDDER_GITHUB_ID,
    INVALID_API_KEY,
    UNKNOWN_USER_API_KEY,
    VALID_API_KEY,
)


def _resolver(db_session, provider):
    return IdentityResolver(users=SqlUserDirectory(db_session), provider=provider)


def test_session_resolves_known_user(db_session, make_user, fake_provider):
    user = make_user()
    res = _resolver(db_session, fake_provider).resolve_by_session(user.id)
    assert res.found is True
    assert res.identity.internal_id == user.id
    assert res.identity.external_id == BIDDER_GITHUB_ID
    assert res.identity.is_admin is False


def test_session_without_user_id_is_not_found(db_session, fake_provider):
    res = _resolver(db_session, fake_provider).resolve_by_session(None)
    assert res.status == ResolutionStatus.NOT_FOUND
    assert res.identity is None


def test_session_with_unknown_user_id_is_not_found(db_session, fake_provider):
    res = _resolver(db_session, fake_provider).resolve_by_session(4242)
    assert res.status == ResolutionStatus.NOT_FOUND


def test_session_path_never_calls_provider(db_session, make_user, fake_provider):
    _resolver(db_session, fake_provider).resolve_by_session(make_user().id)
    assert fake_provider.calls == []


def test_credential_resolves_mapped_user(db_session, make_user, fake_provider):
    user = make_user()
    res = _resolver(db_session, fake_provider).resolve_by_credential(VALID_API_KEY)
    assert res.found is True
    assert res.identity.internal_id == user.id
    assert fake_provider.calls == [VALID_API_KEY]


def test_missing_credential_skips_provider(db_session, fake_provider):
    resolver = _resolver(db_session, fake_provider)
    assert resolver.resolve_by_credential(None).status == ResolutionStatus.NOT_FOUND
    assert resolver.resolve_by_credential("").status == ResolutionStatus.NOT_FOUND
    assert fake_provider.calls == []


def test_credential_for_unknown_github_user_is_not_found(db_session, make_user, fake_provider):
    make_user()
    res = _resolver(db_session, fake_provider).resolve_by_credential(UNKNOWN_USER_API_KEY)
    assert res.status == ResolutionStatus.NOT_FOUND


def test_provider_refusal_is_downgraded_but_distinguishable(db_session, make_user, fake_provider):
    make_user()
    res = _resolver(db_session, fake_provider).resolve_by_credential(INVALID_API_KEY)
    assert res.found is False
    assert res.identity is None
    assert res.status == ResolutionStatus.UPSTREAM_FAILURE
    assert "Bad credentials" in res.detail
    assert metrics_snapshot()["upstream_auth_failures"] == 1
