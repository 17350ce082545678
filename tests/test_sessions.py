"""Unit tests for auth/sessions.py -- refresh token rotation and revocation."""

from __future__ import annotations

import pytest

from auth.errors import TokenIssuanceError
from auth.sessions import SessionRegistry
from auth.store import UserStore
from auth.tokens import TokenIssuer


@pytest.fixture
def ada(store: UserStore):
    return store.find_by_id(store.create("Ada Lovelace", "ada", "ada@x.com", "s3cret"))


def test_establish_persists_refresh_token(sessions: SessionRegistry, store: UserStore, ada) -> None:
    tokens = sessions.establish(ada)
    assert store.find_by_id(ada.id).refresh_token == tokens.refresh_token


def test_establish_overwrites_previous_token(sessions: SessionRegistry, store: UserStore, ada) -> None:
    """Single active session: the newest refresh token replaces the old one."""
    first = sessions.establish(ada)
    second = sessions.establish(ada)
    assert first.refresh_token != second.refresh_token
    assert store.find_by_id(ada.id).refresh_token == second.refresh_token


def test_revoke_is_idempotent(sessions: SessionRegistry, store: UserStore, ada) -> None:
    sessions.establish(ada)
    sessions.revoke(ada.id)
    sessions.revoke(ada.id)
    assert store.find_by_id(ada.id).refresh_token is None


def test_signing_failure_writes_nothing(store: UserStore, ada) -> None:
    registry = SessionRegistry(store, TokenIssuer(""))
    store.set_refresh_token(ada.id, "existing")
    with pytest.raises(TokenIssuanceError):
        registry.establish(ada)
    assert store.find_by_id(ada.id).refresh_token == "existing"
