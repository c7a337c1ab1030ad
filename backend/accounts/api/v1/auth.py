"""Authentication endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, g, request

from accounts.api.deps import (
    clear_credential_cookies,
    get_account_service,
    get_session_manager,
    json_response,
    presented_refresh_token,
    require_auth,
    set_credential_cookies,
    timing,
)
from accounts.schemas import (
    AccountSchema,
    ChangePasswordSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
)
from accounts.services._shared.errors import ValidationError
from accounts.services.accounts import AccountRegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
change_password_schema = ChangePasswordSchema()
account_schema = AccountSchema()
token_schema = TokenPairSchema()


@bp.post("/register")
@timing
def register():
    """Register a new account and return its public representation."""

    data = register_schema.load(request.get_json(silent=True) or {})
    account = get_account_service().register(AccountRegisterIn(**data))
    return json_response({"data": account_schema.dump(account)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate and deliver the credential pair in the body and as cookies."""

    data = login_schema.load(request.get_json(silent=True) or {})
    identifier = data.get("email") or data["username"]

    pair = get_session_manager().authenticate(identifier, data["password"])
    account = get_account_service().find_by_identifier(identifier)

    body = {"data": {"account": account_schema.dump(account), **token_schema.dump(pair)}}
    return set_credential_cookies(json_response(body), pair)


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the refresh token (cookie preferred, body accepted)."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    token = presented_refresh_token(data)
    if not token:
        raise ValidationError("refresh_token is required")

    pair = get_session_manager().rotate(token)
    return set_credential_cookies(json_response({"data": token_schema.dump(pair)}), pair)


@bp.post("/logout")
@require_auth
@timing
def logout():
    """End the session: clear the stored refresh token and both cookies."""

    get_session_manager().logout(g.account_id)
    return clear_credential_cookies(json_response({"data": {}}))


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    """Replace the password after checking the current one."""

    data = change_password_schema.load(request.get_json(silent=True) or {})
    get_session_manager().change_secret(g.account_id, data["old_password"], data["new_password"])
    return json_response({"data": {}})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated account."""

    account = get_account_service().get_account(g.account_id)
    return json_response({"data": account_schema.dump(account)})
