"""
Cronograma de Obra router (Gantt bars + monthly financial matrix).

Mounts under ``/api/cronograma`` (prefix set in ``main.py``).

All endpoints require a valid JWT token.  Write endpoints additionally
require role ADMIN or CONSTRUCCION.  Read endpoints accept an optional
``referencia`` date whose month is month 1 of the grid; it defaults to
today.

Endpoints
---------
GET    /mayores                                       — Construction budget lines.
GET    /{cliente_id}/{proyecto_id}/barras             — Bars with grid coordinates.
POST   /{cliente_id}/{proyecto_id}/barras             — Create bar from coordinates.
POST   /{cliente_id}/{proyecto_id}/barras/fechas      — Create bar from dates.
GET    /barras/{barra_id}                             — Single bar.
PUT    /barras/{barra_id}                             — Partial update.
DELETE /barras/{barra_id}                             — Delete bar.
GET    /{cliente_id}/{proyecto_id}/matriz             — Six monthly series + total.
GET    /{cliente_id}/{proyecto_id}/overrides          — Stored manual cells.
PUT    /{cliente_id}/{proyecto_id}/overrides          — Upsert manual cells.
DELETE /{cliente_id}/{proyecto_id}/overrides/{mes}/{concepto} — Revert one cell.
DELETE /{cliente_id}/{proyecto_id}/overrides/{mes}    — Revert a whole month.
"""

from __future__ import annotations

import datetime
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.usuario import Usuario
from app.schemas.common import MessageResponse
from app.schemas.cronograma import (
    BarraGanttCoordenadasCreate,
    BarraGanttFechasCreate,
    BarraGanttResponse,
    BarraGanttUpdate,
    ConceptoMatriz,
    MatrizMensualResponse,
    MayorResponse,
    OverrideBulkUpsert,
    OverrideResponse,
)
from app.services import cronograma_service, matriz_override_service
from app.services.auth_service import get_current_user, require_role
from app.utils.constants import ROLES_EDICION_CRONOGRAMA

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Cronograma"])

_editor = require_role(*ROLES_EDICION_CRONOGRAMA)


# ---------------------------------------------------------------------------
# Shared dependency — reference date of the grid
# ---------------------------------------------------------------------------


def _referencia(
    referencia: Annotated[
        datetime.date | None,
        Query(description="Fecha cuyo mes es el mes 1 del cronograma. Por defecto hoy."),
    ] = None,
) -> datetime.date:
    return referencia or datetime.date.today()


# ---------------------------------------------------------------------------
# GET /mayores
# ---------------------------------------------------------------------------


@router.get(
    "/mayores",
    response_model=list[MayorResponse],
    summary="Mayores del departamento de construcción",
)
def get_mayores(
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> list[MayorResponse]:
    return cronograma_service.get_mayores_construccion(db)


# ---------------------------------------------------------------------------
# Gantt bars
# ---------------------------------------------------------------------------


@router.get(
    "/{cliente_id}/{proyecto_id}/barras",
    response_model=list[BarraGanttResponse],
    summary="Actividades del cronograma",
    description=(
        "Retorna las barras del Gantt del proyecto con sus coordenadas "
        "(mes, semana) calculadas respecto a la fecha de referencia."
    ),
)
def get_barras(
    cliente_id: int,
    proyecto_id: int,
    referencia: Annotated[datetime.date, Depends(_referencia)],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> list[BarraGanttResponse]:
    logger.debug(
        "GET /cronograma/%d/%d/barras referencia=%s", cliente_id, proyecto_id, referencia
    )
    return cronograma_service.get_barras(db, cliente_id, proyecto_id, referencia)


@router.post(
    "/{cliente_id}/{proyecto_id}/barras",
    response_model=BarraGanttResponse,
    status_code=201,
    summary="Crear actividad por coordenadas",
    responses={
        403: {"description": "Rol insuficiente (requiere ADMIN o CONSTRUCCION)."},
        422: {"description": "Mayor inexistente o coordenadas inválidas."},
    },
)
def create_barra(
    cliente_id: int,
    proyecto_id: int,
    data: BarraGanttCoordenadasCreate,
    referencia: Annotated[datetime.date, Depends(_referencia)],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(_editor)],
) -> BarraGanttResponse:
    """Create a bar placed on the grid of ``referencia``."""
    barra = cronograma_service.create_barra_por_coordenadas(
        db, cliente_id, proyecto_id, data, referencia, current_user
    )
    return cronograma_service.get_barra(db, barra.id, referencia)


@router.post(
    "/{cliente_id}/{proyecto_id}/barras/fechas",
    response_model=BarraGanttResponse,
    status_code=201,
    summary="Crear actividad por fechas",
    responses={
        403: {"description": "Rol insuficiente (requiere ADMIN o CONSTRUCCION)."},
        422: {"description": "Mayor inexistente o fechas inválidas."},
    },
)
def create_barra_por_fechas(
    cliente_id: int,
    proyecto_id: int,
    data: BarraGanttFechasCreate,
    referencia: Annotated[datetime.date, Depends(_referencia)],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(_editor)],
) -> BarraGanttResponse:
    barra = cronograma_service.create_barra_por_fechas(
        db, cliente_id, proyecto_id, data, current_user
    )
    return cronograma_service.get_barra(db, barra.id, referencia)


@router.get(
    "/barras/{barra_id}",
    response_model=BarraGanttResponse,
    summary="Detalle de una actividad",
    responses={404: {"description": "Actividad no encontrada."}},
)
def get_barra(
    barra_id: int,
    referencia: Annotated[datetime.date, Depends(_referencia)],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> BarraGanttResponse:
    return cronograma_service.get_barra(db, barra_id, referencia)


@router.put(
    "/barras/{barra_id}",
    response_model=BarraGanttResponse,
    summary="Actualizar actividad",
    description=(
        "Actualiza parcialmente una barra. La posición se envía como las cuatro "
        "coordenadas (mes, semana) o como fecha_inicio y fecha_fin."
    ),
    responses={
        404: {"description": "Actividad no encontrada."},
        422: {"description": "Mayor inexistente o posición inválida."},
    },
)
def update_barra(
    barra_id: int,
    data: BarraGanttUpdate,
    referencia: Annotated[datetime.date, Depends(_referencia)],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(_editor)],
) -> BarraGanttResponse:
    logger.info("PUT /cronograma/barras/%d user=%s", barra_id, current_user.username)
    cronograma_service.update_barra(db, barra_id, data, referencia)
    return cronograma_service.get_barra(db, barra_id, referencia)


@router.delete(
    "/barras/{barra_id}",
    response_model=MessageResponse,
    summary="Eliminar actividad",
    responses={404: {"description": "Actividad no encontrada."}},
)
def delete_barra(
    barra_id: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(_editor)],
) -> MessageResponse:
    logger.info("DELETE /cronograma/barras/%d user=%s", barra_id, current_user.username)
    cronograma_service.delete_barra(db, barra_id)
    return MessageResponse(message="Actividad eliminada del cronograma.")


# ---------------------------------------------------------------------------
# GET /matriz
# ---------------------------------------------------------------------------


@router.get(
    "/{cliente_id}/{proyecto_id}/matriz",
    response_model=MatrizMensualResponse,
    summary="Matriz financiera mensual",
    description=(
        "Calcula gasto de obra, avance parcial y acumulado, ministraciones, "
        "inversión acumulada y fechas de pago por mes, aplicando los valores "
        "manuales guardados. Los meses sin datos no aparecen en las series."
    ),
)
def get_matriz(
    cliente_id: int,
    proyecto_id: int,
    referencia: Annotated[datetime.date, Depends(_referencia)],
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> MatrizMensualResponse:
    logger.debug(
        "GET /cronograma/%d/%d/matriz referencia=%s", cliente_id, proyecto_id, referencia
    )
    return cronograma_service.get_matriz(db, cliente_id, proyecto_id, referencia)


# ---------------------------------------------------------------------------
# Manual overrides
# ---------------------------------------------------------------------------


@router.get(
    "/{cliente_id}/{proyecto_id}/overrides",
    response_model=list[OverrideResponse],
    summary="Valores manuales de la matriz",
)
def get_overrides(
    cliente_id: int,
    proyecto_id: int,
    db: Annotated[Session, Depends(get_db)],
    _current_user: Annotated[Usuario, Depends(get_current_user)],
) -> list[OverrideResponse]:
    rows = matriz_override_service.list_overrides(db, cliente_id, proyecto_id)
    return [OverrideResponse.model_validate(row) for row in rows]


@router.put(
    "/{cliente_id}/{proyecto_id}/overrides",
    response_model=list[OverrideResponse],
    summary="Guardar valores manuales",
    description=(
        "Inserta o sobrescribe celdas de la matriz identificadas por (mes, concepto). "
        "El valor se guarda tal como se envía."
    ),
    responses={403: {"description": "Rol insuficiente (requiere ADMIN o CONSTRUCCION)."}},
)
def save_overrides(
    cliente_id: int,
    proyecto_id: int,
    data: OverrideBulkUpsert,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(_editor)],
) -> list[OverrideResponse]:
    if len(data.overrides) == 1:
        rows = [
            matriz_override_service.save_override(
                db, cliente_id, proyecto_id, data.overrides[0], current_user
            )
        ]
    else:
        rows = matriz_override_service.save_overrides(
            db, cliente_id, proyecto_id, data.overrides, current_user
        )
    return [OverrideResponse.model_validate(row) for row in rows]


@router.delete(
    "/{cliente_id}/{proyecto_id}/overrides/{mes}/{concepto}",
    response_model=MessageResponse,
    summary="Revertir una celda al valor calculado",
    responses={404: {"description": "No existe valor manual para la celda."}},
)
def delete_override(
    cliente_id: int,
    proyecto_id: int,
    mes: int,
    concepto: Annotated[ConceptoMatriz, Path(description="Fila de la matriz.")],
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(_editor)],
) -> MessageResponse:
    logger.info(
        "DELETE override proyecto=%d mes=%d concepto=%s user=%s",
        proyecto_id, mes, concepto, current_user.username,
    )
    matriz_override_service.delete_override(db, cliente_id, proyecto_id, mes, concepto)
    return MessageResponse(message="Valor manual eliminado; se usa el valor calculado.")


@router.delete(
    "/{cliente_id}/{proyecto_id}/overrides/{mes}",
    response_model=MessageResponse,
    summary="Restablecer un mes completo",
)
def reset_mes(
    cliente_id: int,
    proyecto_id: int,
    mes: int,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[Usuario, Depends(_editor)],
) -> MessageResponse:
    eliminados = matriz_override_service.reset_mes(db, cliente_id, proyecto_id, mes)
    logger.info(
        "reset_mes proyecto=%d mes=%d user=%s", proyecto_id, mes, current_user.username
    )
    return MessageResponse(
        message=f"Mes {mes} restablecido a los valores calculados.",
        detail=f"{eliminados} valores manuales eliminados.",
    )
