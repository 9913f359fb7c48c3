"""
Authentication business logic for the Cronograma de Obra backend.

Provides:
- ``authenticate_user`` — credential verification against the DB.
- ``get_current_user`` — FastAPI dependency resolving the Bearer JWT.
- ``require_role`` — dependency factory enforcing role-based access on
  top of ``get_current_user``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.models.usuario import Usuario
from app.utils.security import verify_password, verify_token

logger = logging.getLogger(__name__)

# ``tokenUrl`` must match the login endpoint path mounted in ``main.py``.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{get_settings().API_PREFIX}/auth/login")


def authenticate_user(db: Session, username: str, password: str) -> Usuario | None:
    """Verify username/password credentials against the database.

    Returns ``None`` instead of raising so that the router controls the
    HTTP error response.

    Args:
        db: Active SQLAlchemy session.
        username: Login name submitted by the client.
        password: Plain-text password submitted by the client.

    Returns:
        The ``Usuario`` on success, or ``None`` for an unknown or inactive
        user or a wrong password.
    """
    user: Usuario | None = (
        db.query(Usuario)
        .filter(Usuario.username == username, Usuario.activo.is_(True))
        .first()
    )

    if user is None or not verify_password(password, user.password_hash):
        logger.debug("authenticate_user: rejected credentials for '%s'", username)
        return None

    # Last-access timestamp is best effort
    try:
        user.ultimo_acceso = datetime.now(timezone.utc)
        db.commit()
    except SQLAlchemyError:  # pragma: no cover
        db.rollback()
        logger.warning("Could not update ultimo_acceso for user '%s'", username)

    return user


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> Usuario:
    """Resolve the caller's identity from the ``Authorization`` header.

    Raises:
        HTTPException 401: If the token is missing, invalid, or expired, or
                           if the user no longer exists or is inactive.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="No se pudo validar las credenciales",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = verify_token(token)
        user_id = int(payload["sub"])
    except (ValueError, KeyError, TypeError):
        raise credentials_exception

    user: Usuario | None = (
        db.query(Usuario)
        .filter(Usuario.id == user_id, Usuario.activo.is_(True))
        .first()
    )
    if user is None:
        raise credentials_exception

    return user


def require_role(*roles: str):
    """Return a dependency that admits only users whose ``rol`` is in *roles*.

    .. code-block:: python

        @router.post("/barras")
        def create(user: Usuario = Depends(require_role("ADMIN", "CONSTRUCCION"))):
            ...

    Raises:
        HTTPException 403: If the authenticated user's role is not allowed.
    """
    allowed = frozenset(roles)

    def _check_role(
        current_user: Annotated[Usuario, Depends(get_current_user)],
    ) -> Usuario:
        if current_user.rol not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=(
                    f"Acceso denegado. Se requiere uno de los roles: "
                    f"{sorted(allowed)}"
                ),
            )
        return current_user

    return _check_role
