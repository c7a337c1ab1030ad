"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, ValidationError, fields, validate, validates_schema


class RegisterSchema(Schema):
    """Input payload for account registration.

    Blank names pass through; the account service rejects them with ``400``.
    """

    username = fields.String(required=True, validate=validate.Length(max=50))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    full_name = fields.String(required=True, validate=validate.Length(max=100))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class LoginSchema(Schema):
    """Input payload for logging in with an email *or* a username."""

    email = fields.String(load_default=None, validate=validate.Length(max=254))
    username = fields.String(load_default=None, validate=validate.Length(max=50))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))

    @validates_schema
    def _require_identifier(self, data: dict[str, Any], **kwargs: Any) -> None:
        if not (data.get("email") or data.get("username")):
            raise ValidationError("email or username is required", field_name="email")


class RefreshSchema(Schema):
    """Optional body carrying the refresh token when no cookie is sent."""

    refresh_token = fields.String(load_default=None)


class ChangePasswordSchema(Schema):
    """Input payload for changing the current password."""

    old_password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    new_password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class AccountSchema(Schema):
    """Public account representation."""

    id = fields.Integer(required=True)
    username = fields.String(required=True)
    email = fields.Email(required=True)
    full_name = fields.String(required=True)


class TokenPairSchema(Schema):
    """Response payload with both tokens."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(dump_default="bearer")
