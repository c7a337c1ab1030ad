# tests/unit/services/test_account_service.py
from __future__ import annotations

import pytest

from accounts.models.account import Account
from accounts.services._shared.errors import ConflictError, NotFoundError, ValidationError
from accounts.services.accounts import AccountPublicOut, AccountRegisterIn, AccountService
from tests.factories.account import AccountFactory
from tests.helpers.utils import TEST_PASSWORD


@pytest.fixture()
def service(session, hasher) -> AccountService:
    return AccountService(hasher=hasher, session=session)


def _dto(**overrides) -> AccountRegisterIn:
    data = {
        "username": "NewUser",
        "email": "New.User@Example.com",
        "full_name": " New User ",
        "password": TEST_PASSWORD,
    }
    data.update(overrides)
    return AccountRegisterIn(**data)


def test_register_persists_normalised_account(service, session, hasher):
    out = service.register(_dto())

    assert isinstance(out, AccountPublicOut)
    assert (out.username, out.email, out.full_name) == ("newuser", "new.user@example.com", "New User")

    row = session.get(Account, out.id)
    assert row.refresh_token is None
    assert row.password_hash != TEST_PASSWORD
    assert hasher.verify(TEST_PASSWORD, row.password_hash)


@pytest.mark.parametrize(
    "overrides",
    [{"username": "TAKEN"}, {"email": "taken@example.com"}],
    ids=["username", "email"],
)
def test_register_rejects_duplicates(service, session, overrides):
    AccountFactory(username="taken", email="taken@example.com")

    with pytest.raises(ConflictError, match="already exists"):
        service.register(_dto(**overrides))


@pytest.mark.parametrize("field", ["username", "email", "full_name", "password"])
def test_register_requires_every_field(service, field):
    with pytest.raises(ValidationError, match="All fields are required"):
        service.register(_dto(**{field: "   " if field != "password" else ""}))


def test_get_account(service, session):
    account = AccountFactory(full_name="Ada Lovelace")

    out = service.get_account(account.id)

    assert out == AccountPublicOut(
        id=account.id, username=account.username, email=account.email, full_name="Ada Lovelace"
    )


def test_get_account_unknown(service, session):
    with pytest.raises(NotFoundError):
        service.get_account(12345)


def test_find_by_identifier(service, session):
    account = AccountFactory(username="grace", email="grace@example.com")

    assert service.find_by_identifier("GRACE").id == account.id
    assert service.find_by_identifier("grace@example.com").id == account.id
    with pytest.raises(NotFoundError):
        service.find_by_identifier("nobody")
