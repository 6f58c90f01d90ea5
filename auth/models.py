"""
Data model for the credential core.

``UserRecord.password_hash`` is excluded from every dump and from ``repr``,
so a record passed above the core never carries the hash outward.
"""

from __future__ import annotations

from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from auth.errors import ValidationError


class Credentials(BaseModel):
    """Transient login / registration input.  Never persisted."""

    model_config = ConfigDict(frozen=True)

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1, repr=False)

    @classmethod
    def coerce(cls, value: Union["Credentials", Mapping[str, Any]]) -> "Credentials":
        """Accept a ``Credentials`` or a raw mapping; raise ``ValidationError`` on bad shape."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise ValidationError("credentials must be a mapping")
        try:
            return cls.model_validate(dict(value))
        except PydanticValidationError as exc:
            fields = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
            raise ValidationError(f"missing or empty fields: {', '.join(fields)}") from exc


class UserRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    identity_id: str
    password_hash: str = Field(..., exclude=True, repr=False)


class AuthenticatedIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    identity_id: str


# Opaque signed string produced by ``TokenIssuer.issue``.
SessionToken = str
