# tests/unit/services/test_session_manager.py
from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from accounts.services._shared.errors import (
    ConflictError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
)
from accounts.services._shared.ports import TokenClaims, TokenKind
from accounts.services.sessions import CredentialPair, SessionManager
from tests.helpers.utils import TEST_PASSWORD


def _manager(manager: SessionManager, **overrides) -> SessionManager:
    """Copy ``manager`` with some config switches flipped."""
    return SessionManager(
        cfg=replace(manager.cfg, **overrides),
        codec=manager.codec,
        store=manager.store,
        hasher=manager.hasher,
    )


# --------------------------------- Login ----------------------------------- #


@pytest.mark.parametrize("identifier", ["u1", "u1@example.com", "  U1@Example.COM "])
def test_authenticate_issues_pair_and_stores_refresh(manager, store, stored_account, identifier):
    pair = manager.authenticate(identifier, TEST_PASSWORD)

    assert isinstance(pair, CredentialPair)
    assert store.find_account_by_id(stored_account.id).refresh_token == pair.refresh_token


def test_authenticate_access_token_names_the_account(manager, codec, stored_account):
    pair = manager.authenticate("u1", TEST_PASSWORD)

    access = codec.verify(pair.access_token, expected_kind=TokenKind.ACCESS)
    refresh = codec.verify(pair.refresh_token, expected_kind=TokenKind.REFRESH)
    assert isinstance(access, TokenClaims) and isinstance(refresh, TokenClaims)
    assert access.account_id == refresh.account_id == str(stored_account.id)
    assert access.extra == {"username": "u1", "email": "u1@example.com"}
    assert refresh.expires_at - refresh.issued_at == timedelta(days=10)
    assert access.expires_at - access.issued_at == timedelta(minutes=15)


def test_authenticate_unknown_identifier(manager, stored_account):
    with pytest.raises(NotFoundError, match="User does not exist"):
        manager.authenticate("ghost", TEST_PASSWORD)


def test_authenticate_wrong_secret(manager, store, stored_account):
    with pytest.raises(UnauthorizedError, match="Invalid user credentials"):
        manager.authenticate("u1", "wrong-password")
    assert store.find_account_by_id(stored_account.id).refresh_token is None
    assert store.writes == 0


def test_authenticate_with_generic_errors_hides_missing_account(manager, stored_account):
    generic = _manager(manager, generic_auth_errors=True)

    with pytest.raises(UnauthorizedError, match="Invalid user credentials"):
        generic.authenticate("ghost", TEST_PASSWORD)


def test_second_login_supersedes_first_session(manager, stored_account):
    first = manager.authenticate("u1", TEST_PASSWORD)
    second = manager.authenticate("u1", TEST_PASSWORD)

    with pytest.raises(UnauthorizedError):
        manager.rotate(first.refresh_token)
    assert isinstance(manager.rotate(second.refresh_token), CredentialPair)


# -------------------------------- Rotation --------------------------------- #


def test_rotate_replaces_stored_token(manager, store, stored_account):
    pair = manager.authenticate("u1", TEST_PASSWORD)

    rotated = manager.rotate(pair.refresh_token)

    assert rotated.refresh_token != pair.refresh_token
    assert store.find_account_by_id(stored_account.id).refresh_token == rotated.refresh_token


def test_rotate_twice_with_same_token_fails(manager, store, stored_account):
    pair = manager.authenticate("u1", TEST_PASSWORD)
    rotated = manager.rotate(pair.refresh_token)

    with pytest.raises(UnauthorizedError, match="expired or used"):
        manager.rotate(pair.refresh_token)
    # Without revoke-on-reuse the current token survives the replay
    assert store.find_account_by_id(stored_account.id).refresh_token == rotated.refresh_token


def test_login_rotate_replay_scenario(manager, stored_account):
    """Login, rotate, replay the old token, then keep rotating the new one."""
    r1 = manager.authenticate("u1", TEST_PASSWORD).refresh_token
    r2 = manager.rotate(r1).refresh_token

    with pytest.raises(UnauthorizedError):
        manager.rotate(r1)

    r3 = manager.rotate(r2).refresh_token
    assert len({r1, r2, r3}) == 3


def test_rotate_without_session_fails(manager, codec, stored_account):
    """A well-formed refresh token is useless when the account never logged in."""
    token = codec.issue(stored_account.id, TokenKind.REFRESH, timedelta(days=1))

    with pytest.raises(UnauthorizedError):
        manager.rotate(token)


def test_logout_then_rotate_fails(manager, stored_account):
    pair = manager.authenticate("u1", TEST_PASSWORD)
    manager.logout(stored_account.id)

    with pytest.raises(UnauthorizedError):
        manager.rotate(pair.refresh_token)


@pytest.mark.parametrize("token", [None, "", "garbage", "a.b.c"])
def test_rotate_rejects_missing_or_malformed_token(manager, stored_account, token):
    with pytest.raises(UnauthorizedError):
        manager.rotate(token)


def test_rotate_rejects_access_token(manager, stored_account):
    pair = manager.authenticate("u1", TEST_PASSWORD)

    with pytest.raises(UnauthorizedError, match="Invalid refresh token"):
        manager.rotate(pair.access_token)


def test_rotate_rejects_expired_token(manager, clock, stored_account):
    pair = manager.authenticate("u1", TEST_PASSWORD)
    clock.advance(days=10)

    with pytest.raises(UnauthorizedError, match="Invalid refresh token"):
        manager.rotate(pair.refresh_token)


def test_rotate_rejects_token_for_unknown_account(manager, codec):
    token = codec.issue(999, TokenKind.REFRESH, timedelta(days=1))

    with pytest.raises(UnauthorizedError):
        manager.rotate(token)


def test_rotate_rejects_non_numeric_subject(manager, codec):
    token = codec.issue("not-a-number", TokenKind.REFRESH, timedelta(days=1))

    with pytest.raises(UnauthorizedError):
        manager.rotate(token)


def test_revoke_on_reuse_clears_the_session(manager, store, stored_account):
    strict = _manager(manager, revoke_on_reuse=True)
    r1 = strict.authenticate("u1", TEST_PASSWORD).refresh_token
    r2 = strict.rotate(r1).refresh_token

    with pytest.raises(UnauthorizedError):
        strict.rotate(r1)

    assert store.find_account_by_id(stored_account.id).refresh_token is None
    with pytest.raises(UnauthorizedError):
        strict.rotate(r2)


# ------------------------------ Concurrency -------------------------------- #


def _stale_reads(store, monkeypatch, account_id):
    """Make the store keep answering with the current snapshot (a racing reader)."""
    stale = store.find_account_by_id(account_id)
    monkeypatch.setattr(store, "find_account_by_id", lambda _id: stale)


def test_concurrent_rotation_loses_with_compare_and_swap(manager, store, stored_account, monkeypatch):
    r1 = manager.authenticate("u1", TEST_PASSWORD).refresh_token
    _stale_reads(store, monkeypatch, stored_account.id)

    winner = manager.rotate(r1)
    with pytest.raises(ConflictError):
        manager.rotate(r1)

    monkeypatch.undo()
    assert store.find_account_by_id(stored_account.id).refresh_token == winner.refresh_token


def test_concurrent_rotation_last_writer_wins_without_compare_and_swap(
    manager, store, stored_account, monkeypatch
):
    lax = _manager(manager, compare_and_swap=False)
    r1 = lax.authenticate("u1", TEST_PASSWORD).refresh_token
    _stale_reads(store, monkeypatch, stored_account.id)

    lax.rotate(r1)
    loser = lax.rotate(r1)

    monkeypatch.undo()
    assert store.find_account_by_id(stored_account.id).refresh_token == loser.refresh_token


def test_store_failure_is_reported_as_internal_error(manager, store, stored_account, monkeypatch):
    def boom(*_args, **_kwargs):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(store, "update_refresh_credential", boom)

    with pytest.raises(InternalError) as excinfo:
        manager.authenticate("u1", TEST_PASSWORD)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


# --------------------------- Logout / password ----------------------------- #


def test_logout_is_idempotent(manager, store, stored_account):
    manager.authenticate("u1", TEST_PASSWORD)

    manager.logout(stored_account.id)
    manager.logout(stored_account.id)

    assert store.find_account_by_id(stored_account.id).refresh_token is None


def test_change_secret_replaces_password(manager, stored_account):
    manager.change_secret(stored_account.id, TEST_PASSWORD, "n3w-Passw0rd")

    with pytest.raises(UnauthorizedError):
        manager.authenticate("u1", TEST_PASSWORD)
    assert isinstance(manager.authenticate("u1", "n3w-Passw0rd"), CredentialPair)


def test_change_secret_keeps_existing_refresh_token(manager, stored_account):
    pair = manager.authenticate("u1", TEST_PASSWORD)

    manager.change_secret(stored_account.id, TEST_PASSWORD, "n3w-Passw0rd")

    assert isinstance(manager.rotate(pair.refresh_token), CredentialPair)


def test_change_secret_rejects_wrong_old_password(manager, stored_account):
    with pytest.raises(UnauthorizedError, match="Invalid old password"):
        manager.change_secret(stored_account.id, "nope", "n3w-Passw0rd")


def test_change_secret_unknown_account(manager):
    with pytest.raises(NotFoundError):
        manager.change_secret(404, TEST_PASSWORD, "n3w-Passw0rd")
