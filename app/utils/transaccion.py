"""Commit helper shared by the write paths of the service layer."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)


def commit_or_500(db: Session, operacion: str) -> None:
    """Commit the session, or roll back and raise HTTP 500 naming *operacion*.

    The session stays usable after a failed commit.
    """
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("%s: commit failed", operacion)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"No se pudo completar la operación: {operacion}.",
        )
