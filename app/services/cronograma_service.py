"""
Cronograma de Obra service layer.

All database access for the Gantt bars and the financial matrix under
``/api/cronograma`` lives here.  Functions receive a SQLAlchemy ``Session``
and return schema instances or ORM objects ready for serialisation by
FastAPI.

Design notes
------------
- Bars are persisted with absolute dates only.  Grid coordinates are a pure
  function of (bar, ``referencia``) computed on every read, so a caller that
  fixes the reference date always sees the same coordinates.
- Installment due dates are mapped to months with the same reference-relative
  offset as the bars, so both halves of the matrix share one month axis.
- The matrix is recomputed from fresh rows on every call; nothing is cached.
- Write failures roll the session back and surface as HTTP 500 for that
  operation only.
"""

from __future__ import annotations

import datetime
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models import CronogramaGantt, Mayor, ParcialidadPago, PlanPago, PresupuestoParametrico, Usuario
from app.schemas.cronograma import (
    BarraGanttCoordenadasCreate,
    BarraGanttFechasCreate,
    BarraGanttResponse,
    BarraGanttUpdate,
    MatrizMensualResponse,
    MayorResponse,
)
from app.services import matriz_override_service
from app.services.matriz_calculator import (
    BarraMatriz,
    MontoPresupuesto,
    ParcialidadMatriz,
    calcular_matriz,
)
from app.utils.calendario import (
    coordenada_a_rango,
    duracion_semanas,
    fecha_a_coordenada,
    mes_relativo,
)
from app.utils.constants import TIPO_PLAN_PAGO_CONSTRUCCION
from app.utils.transaccion import commit_or_500

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _duracion_dias(fecha_inicio: datetime.date, fecha_fin: datetime.date) -> int:
    return (fecha_fin - fecha_inicio).days + 1


def _build_response(barra: CronogramaGantt, referencia: datetime.date) -> BarraGanttResponse:
    """Project a stored bar onto the grid of *referencia*."""
    start_month, start_week = fecha_a_coordenada(barra.fecha_inicio, referencia)
    end_month, end_week = fecha_a_coordenada(barra.fecha_fin, referencia)
    return BarraGanttResponse(
        id=barra.id,
        cliente_id=barra.cliente_id,
        proyecto_id=barra.proyecto_id,
        departamento=barra.departamento,
        mayor_id=barra.mayor_id,
        mayor_codigo=barra.mayor.codigo if barra.mayor else None,
        mayor_nombre=barra.mayor.nombre if barra.mayor else None,
        fecha_inicio=barra.fecha_inicio,
        fecha_fin=barra.fecha_fin,
        duracion=barra.duracion,
        start_month=start_month,
        start_week=start_week,
        end_month=end_month,
        end_week=end_week,
        duration_weeks=duracion_semanas(start_month, start_week, end_month, end_week),
    )


def _get_barra_or_404(db: Session, barra_id: int) -> CronogramaGantt:
    barra: CronogramaGantt | None = (
        db.query(CronogramaGantt).filter(CronogramaGantt.id == barra_id).first()
    )
    if barra is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Actividad del cronograma con ID {barra_id} no encontrada.",
        )
    return barra


def _validar_mayor(db: Session, mayor_id: int) -> None:
    if not db.query(Mayor).filter(Mayor.id == mayor_id).first():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Mayor con ID {mayor_id} no existe.",
        )


# ---------------------------------------------------------------------------
# Public service functions — read operations
# ---------------------------------------------------------------------------


def get_mayores_construccion(db: Session) -> list[MayorResponse]:
    """Return the active budget lines of the construction department, by code."""
    departamento = get_settings().DEPARTAMENTO_CONSTRUCCION
    rows = (
        db.query(Mayor)
        .filter(Mayor.departamento == departamento, Mayor.activo.is_(True))
        .order_by(Mayor.codigo)
        .all()
    )
    logger.debug("get_mayores_construccion: %d mayores", len(rows))
    return [MayorResponse.model_validate(row) for row in rows]


def get_barras(
    db: Session,
    cliente_id: int,
    proyecto_id: int,
    referencia: datetime.date,
) -> list[BarraGanttResponse]:
    """Return the project's bars, oldest first, with grid coordinates.

    Args:
        db: Active SQLAlchemy session.
        cliente_id: Owning client.
        proyecto_id: Owning project.
        referencia: Date whose month is month 1 of the grid.

    Returns:
        One ``BarraGanttResponse`` per stored bar, ordered by creation.
    """
    rows = (
        db.query(CronogramaGantt)
        .filter(
            CronogramaGantt.cliente_id == cliente_id,
            CronogramaGantt.proyecto_id == proyecto_id,
        )
        .order_by(CronogramaGantt.created_at, CronogramaGantt.id)
        .all()
    )
    logger.debug(
        "get_barras: cliente=%d proyecto=%d barras=%d", cliente_id, proyecto_id, len(rows)
    )
    return [_build_response(row, referencia) for row in rows]


def get_presupuestos(
    db: Session, cliente_id: int, proyecto_id: int
) -> list[MontoPresupuesto]:
    """Return every parametric budget row of the project."""
    rows = (
        db.query(PresupuestoParametrico.mayor_id, PresupuestoParametrico.monto_total)
        .filter(
            PresupuestoParametrico.cliente_id == cliente_id,
            PresupuestoParametrico.proyecto_id == proyecto_id,
        )
        .all()
    )
    return [
        MontoPresupuesto(
            mayor_id=row.mayor_id,
            monto_total=float(row.monto_total) if row.monto_total is not None else None,
        )
        for row in rows
    ]


def get_parcialidades_plan_actual(
    db: Session, proyecto_id: int, referencia: datetime.date
) -> list[ParcialidadMatriz]:
    """Return the dated installments of the project's current construction plan.

    Installments without ``fecha_vencimiento`` are skipped.  Each
    installment's month is its offset from *referencia*.
    """
    rows = (
        db.query(ParcialidadPago)
        .join(PlanPago, ParcialidadPago.plan_pago_id == PlanPago.id)
        .filter(
            PlanPago.proyecto_id == proyecto_id,
            PlanPago.tipo_plan == TIPO_PLAN_PAGO_CONSTRUCCION,
            PlanPago.es_plan_actual.is_(True),
            ParcialidadPago.fecha_vencimiento.isnot(None),
        )
        .order_by(ParcialidadPago.fecha_vencimiento, ParcialidadPago.numero)
        .all()
    )
    return [
        ParcialidadMatriz(
            mes=mes_relativo(row.fecha_vencimiento, referencia),
            monto=float(row.monto or 0),
            etiqueta=row.nombre or f"Pago {row.numero}",
        )
        for row in rows
    ]


def get_matriz(
    db: Session,
    cliente_id: int,
    proyecto_id: int,
    referencia: datetime.date,
) -> MatrizMensualResponse:
    """Load the four matrix inputs and derive the monthly series.

    Args:
        db: Active SQLAlchemy session.
        cliente_id: Owning client.
        proyecto_id: Owning project.
        referencia: Date whose month is month 1 for bars and installments.

    Returns:
        The six derived monthly series, ``total_presupuesto`` and the
        reference date used.
    """
    barras = [
        BarraMatriz(
            mayor_id=barra.mayor_id,
            start_month=barra.start_month,
            start_week=barra.start_week,
            end_month=barra.end_month,
            end_week=barra.end_week,
            duration_weeks=barra.duration_weeks,
        )
        for barra in get_barras(db, cliente_id, proyecto_id, referencia)
    ]
    presupuestos = get_presupuestos(db, cliente_id, proyecto_id)
    parcialidades = get_parcialidades_plan_actual(db, proyecto_id, referencia)
    overrides = matriz_override_service.get_overrides_matriz(db, cliente_id, proyecto_id)

    matriz = calcular_matriz(barras, presupuestos, parcialidades, overrides)
    logger.debug(
        "get_matriz: cliente=%d proyecto=%d referencia=%s total=%.2f",
        cliente_id, proyecto_id, referencia, matriz.total_presupuesto,
    )
    return matriz.model_copy(update={"referencia": referencia})


# ---------------------------------------------------------------------------
# Public service functions — write operations
# ---------------------------------------------------------------------------


def create_barra_por_fechas(
    db: Session,
    cliente_id: int,
    proyecto_id: int,
    data: BarraGanttFechasCreate,
    usuario: Usuario,
) -> CronogramaGantt:
    """Persist a new bar from absolute dates.

    Raises:
        HTTPException 422: If ``mayor_id`` does not exist.
        HTTPException 500: If the insert cannot be committed.
    """
    _validar_mayor(db, data.mayor_id)

    barra = CronogramaGantt(
        cliente_id=cliente_id,
        proyecto_id=proyecto_id,
        departamento=data.departamento,
        mayor_id=data.mayor_id,
        fecha_inicio=data.fecha_inicio,
        fecha_fin=data.fecha_fin,
        duracion=_duracion_dias(data.fecha_inicio, data.fecha_fin),
        created_by=usuario.id,
    )
    db.add(barra)
    commit_or_500(db, "crear actividad del cronograma")
    db.refresh(barra)

    logger.info(
        "create_barra: id=%d proyecto=%d mayor=%d %s..%s user=%s",
        barra.id, proyecto_id, data.mayor_id, data.fecha_inicio, data.fecha_fin,
        usuario.username,
    )
    return barra


def create_barra_por_coordenadas(
    db: Session,
    cliente_id: int,
    proyecto_id: int,
    data: BarraGanttCoordenadasCreate,
    referencia: datetime.date,
    usuario: Usuario,
) -> CronogramaGantt:
    """Persist a new bar placed on the grid of *referencia*.

    The coordinates are converted to the first day of the start bucket and
    the last day of the end bucket before storage.
    """
    fecha_inicio, fecha_fin = coordenada_a_rango(
        data.start_month, data.start_week, data.end_month, data.end_week, referencia
    )
    return create_barra_por_fechas(
        db,
        cliente_id,
        proyecto_id,
        BarraGanttFechasCreate(
            mayor_id=data.mayor_id,
            departamento=data.departamento,
            fecha_inicio=fecha_inicio,
            fecha_fin=fecha_fin,
        ),
        usuario,
    )


def update_barra(
    db: Session,
    barra_id: int,
    data: BarraGanttUpdate,
    referencia: datetime.date,
) -> CronogramaGantt:
    """Apply a partial update to a bar.

    Only fields present in the payload are written.  A new position may
    arrive as grid coordinates (resolved against *referencia*) or as
    absolute dates.

    Raises:
        HTTPException 404: If the bar does not exist.
        HTTPException 422: If ``mayor_id`` is supplied but does not exist.
        HTTPException 500: If the update cannot be committed.
    """
    barra = _get_barra_or_404(db, barra_id)

    if data.mayor_id is not None:
        _validar_mayor(db, data.mayor_id)
        barra.mayor_id = data.mayor_id
    if data.departamento is not None:
        barra.departamento = data.departamento

    if data.coordenadas is not None:
        barra.fecha_inicio, barra.fecha_fin = coordenada_a_rango(*data.coordenadas, referencia)
    elif data.fecha_inicio is not None:
        barra.fecha_inicio, barra.fecha_fin = data.fecha_inicio, data.fecha_fin
    barra.duracion = _duracion_dias(barra.fecha_inicio, barra.fecha_fin)

    commit_or_500(db, "actualizar actividad del cronograma")
    db.refresh(barra)

    logger.info(
        "update_barra: id=%d fields=%s",
        barra_id, list(data.model_dump(exclude_unset=True).keys()),
    )
    return barra


def delete_barra(db: Session, barra_id: int) -> None:
    """Delete a bar.

    Raises:
        HTTPException 404: If the bar does not exist.
        HTTPException 500: If the delete cannot be committed.
    """
    barra = _get_barra_or_404(db, barra_id)
    db.delete(barra)
    commit_or_500(db, "eliminar actividad del cronograma")
    logger.info("delete_barra: id=%d", barra_id)


def get_barra(db: Session, barra_id: int, referencia: datetime.date) -> BarraGanttResponse:
    """Return a single bar with grid coordinates, or raise HTTP 404."""
    return _build_response(_get_barra_or_404(db, barra_id), referencia)
