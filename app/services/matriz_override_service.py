"""
Manual override store for the Gantt financial matrix.

Overrides are keyed by (cliente, proyecto, mes, concepto).  Saving an
existing key overwrites it (last write wins, no conflict detection);
deleting it reverts the cell to the calculated value on the next read.
``valor`` is stored exactly as received: the calculator decides how to
interpret it.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.models import CronogramaMatrizManual, Usuario
from app.schemas.cronograma import OverrideUpsert
from app.services.matriz_calculator import OverrideMatriz
from app.utils.transaccion import commit_or_500

logger = logging.getLogger(__name__)


def _query_proyecto(db: Session, cliente_id: int, proyecto_id: int):
    return db.query(CronogramaMatrizManual).filter(
        CronogramaMatrizManual.cliente_id == cliente_id,
        CronogramaMatrizManual.proyecto_id == proyecto_id,
    )


def _upsert(
    db: Session,
    cliente_id: int,
    proyecto_id: int,
    data: OverrideUpsert,
    usuario: Usuario,
) -> CronogramaMatrizManual:
    override: CronogramaMatrizManual | None = (
        _query_proyecto(db, cliente_id, proyecto_id)
        .filter(
            CronogramaMatrizManual.mes == data.mes,
            CronogramaMatrizManual.concepto == data.concepto,
        )
        .first()
    )
    if override is None:
        override = CronogramaMatrizManual(
            cliente_id=cliente_id,
            proyecto_id=proyecto_id,
            mes=data.mes,
            concepto=data.concepto,
        )
        db.add(override)

    override.valor = data.valor
    override.sobrescribe = data.sobrescribe
    override.created_by = usuario.id
    return override


# ---------------------------------------------------------------------------
# Read
# ---------------------------------------------------------------------------


def list_overrides(
    db: Session, cliente_id: int, proyecto_id: int
) -> list[CronogramaMatrizManual]:
    """Return every stored override of the project ordered by month."""
    return (
        _query_proyecto(db, cliente_id, proyecto_id)
        .order_by(CronogramaMatrizManual.mes, CronogramaMatrizManual.concepto)
        .all()
    )


def get_overrides_matriz(
    db: Session, cliente_id: int, proyecto_id: int
) -> list[OverrideMatriz]:
    """Return the project's overrides as calculator input records."""
    return [
        OverrideMatriz(
            mes=row.mes,
            concepto=row.concepto,
            valor=row.valor,
            sobrescribe=bool(row.sobrescribe),
        )
        for row in list_overrides(db, cliente_id, proyecto_id)
    ]


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


def save_override(
    db: Session,
    cliente_id: int,
    proyecto_id: int,
    data: OverrideUpsert,
    usuario: Usuario,
) -> CronogramaMatrizManual:
    """Insert or overwrite one manual cell."""
    override = _upsert(db, cliente_id, proyecto_id, data, usuario)
    commit_or_500(db, "guardar valor manual de la matriz")
    db.refresh(override)
    logger.info(
        "save_override: proyecto=%d mes=%d concepto=%s user=%s",
        proyecto_id, data.mes, data.concepto, usuario.username,
    )
    return override


def save_overrides(
    db: Session,
    cliente_id: int,
    proyecto_id: int,
    overrides: list[OverrideUpsert],
    usuario: Usuario,
) -> list[CronogramaMatrizManual]:
    """Insert or overwrite several manual cells in a single commit.

    When the same (mes, concepto) appears more than once in *overrides*
    the last occurrence wins.
    """
    saved: dict[tuple[int, str], CronogramaMatrizManual] = {}
    for data in overrides:
        saved[(data.mes, data.concepto)] = _upsert(db, cliente_id, proyecto_id, data, usuario)
        db.flush()

    commit_or_500(db, "guardar matriz manual")
    rows = list(saved.values())
    for row in rows:
        db.refresh(row)

    logger.info(
        "save_overrides: proyecto=%d celdas=%d user=%s",
        proyecto_id, len(rows), usuario.username,
    )
    return rows


def delete_override(
    db: Session, cliente_id: int, proyecto_id: int, mes: int, concepto: str
) -> None:
    """Delete one manual cell so the calculated value shows again.

    Raises:
        HTTPException 404: If no override exists for the key.
    """
    deleted = (
        _query_proyecto(db, cliente_id, proyecto_id)
        .filter(
            CronogramaMatrizManual.mes == mes,
            CronogramaMatrizManual.concepto == concepto,
        )
        .delete(synchronize_session=False)
    )
    if deleted == 0:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No existe valor manual para el mes {mes} y concepto '{concepto}'.",
        )
    commit_or_500(db, "eliminar valor manual de la matriz")
    logger.info(
        "delete_override: proyecto=%d mes=%d concepto=%s", proyecto_id, mes, concepto
    )


def reset_mes(db: Session, cliente_id: int, proyecto_id: int, mes: int) -> int:
    """Delete every manual cell of one month; returns how many were removed."""
    deleted = (
        _query_proyecto(db, cliente_id, proyecto_id)
        .filter(CronogramaMatrizManual.mes == mes)
        .delete(synchronize_session=False)
    )
    commit_or_500(db, "restablecer mes de la matriz")
    logger.info("reset_mes: proyecto=%d mes=%d eliminados=%d", proyecto_id, mes, deleted)
    return deleted
