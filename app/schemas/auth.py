"""
Pydantic v2 schemas for the authentication endpoints.

Covers the JWT token response and the public user representation
returned by ``GET /api/auth/me``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """Response body returned after a successful authentication.

    Attributes:
        access_token: Signed JWT to send in ``Authorization: Bearer <token>``.
        token_type: Always ``"bearer"`` per OAuth2 convention.
    """

    access_token: str = Field(..., description="JWT de acceso firmado con HS256")
    token_type: str = Field(default="bearer", description="Tipo de token OAuth2")


class UserResponse(BaseModel):
    """Public representation of an authenticated user.

    ``password_hash`` is never part of this schema.

    Attributes:
        id: Database primary key.
        username: Unique login name.
        email: Email address on record.
        nombre_completo: Full display name.
        rol: Role code, e.g. "ADMIN" or "CONSTRUCCION".
        activo: Whether the account is currently active.
    """

    id: int
    username: str
    email: str
    nombre_completo: str | None = None
    rol: str | None = None
    activo: bool

    model_config = ConfigDict(from_attributes=True)
