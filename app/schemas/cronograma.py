"""
Pydantic v2 schemas for the Cronograma de Obra (Gantt + matriz) module.

These models define the exact JSON shapes consumed and returned by every
endpoint in ``app/routers/cronograma.py``.  They are deliberately free of
SQLAlchemy imports so that the schema layer stays decoupled from ORM internals.

Domain context
--------------
A construction project's Gantt is made of activity bars, each tagged to a
budget line (mayor).  Bars are stored with absolute dates and shown on a
month/week grid relative to a reference month.  Under the Gantt sits a
monthly financial matrix with six rows (conceptos):

1. ``gasto_obra``          — spend allocated from the bars.
2. ``avance_parcial``      — spend as % of the total budget.
3. ``avance_acumulado``    — running progress %, capped at 100.
4. ``ministraciones``      — payment-plan installments due in the month.
5. ``inversion_acumulada`` — running installments as % of the budget.
6. ``fecha_pago``          — installment labels due in the month.

Any cell can be replaced by a manual override.
"""

from __future__ import annotations

import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.utils.calendario import coordenadas_validas
from app.utils.constants import CONCEPTOS_MATRIZ

# Accepts exactly the matrix rows listed in ``CONCEPTOS_MATRIZ``
ConceptoMatriz = Literal[CONCEPTOS_MATRIZ]  # type: ignore[valid-type]


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------


class MayorResponse(BaseModel):
    """Budget line offered in the Gantt activity picker."""

    id: int
    codigo: str
    nombre: str
    departamento: str

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Input schemas — Gantt bars
# ---------------------------------------------------------------------------


class BarraGanttCoordenadasCreate(BaseModel):
    """Payload for creating a bar from grid coordinates (POST /barras).

    Attributes:
        mayor_id: Budget line the activity spends.
        departamento: Department label, defaults to "Construcción".
        start_month: 1-based month offset of the first week bucket.
        start_week: Week bucket (1–4) the activity starts in.
        end_month: 1-based month offset of the last week bucket.
        end_week: Week bucket (1–4) the activity ends in.
    """

    mayor_id: int = Field(..., ge=1, description="ID del mayor (partida presupuestal).")
    departamento: str = Field(
        default="Construcción",
        max_length=100,
        description="Departamento responsable de la actividad.",
    )
    start_month: int = Field(..., ge=1, description="Mes de inicio (1 = mes de referencia).")
    start_week: int = Field(..., ge=1, le=4, description="Semana de inicio (1–4).")
    end_month: int = Field(..., ge=1, description="Mes de fin (1 = mes de referencia).")
    end_week: int = Field(..., ge=1, le=4, description="Semana de fin (1–4).")

    @model_validator(mode="after")
    def _fin_no_anterior_al_inicio(self) -> "BarraGanttCoordenadasCreate":
        if not coordenadas_validas(
            self.start_month, self.start_week, self.end_month, self.end_week
        ):
            raise ValueError("La semana de fin no puede ser anterior a la semana de inicio.")
        return self

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "mayor_id": 3,
                "departamento": "Construcción",
                "start_month": 1,
                "start_week": 3,
                "end_month": 2,
                "end_week": 2,
            }
        }
    )


class BarraGanttFechasCreate(BaseModel):
    """Payload for creating a bar from absolute dates (POST /barras/fechas)."""

    mayor_id: int = Field(..., ge=1, description="ID del mayor (partida presupuestal).")
    departamento: str = Field(default="Construcción", max_length=100)
    fecha_inicio: datetime.date = Field(..., description="Primer día de la actividad.")
    fecha_fin: datetime.date = Field(..., description="Último día de la actividad.")

    @model_validator(mode="after")
    def _fechas_ordenadas(self) -> "BarraGanttFechasCreate":
        if self.fecha_fin < self.fecha_inicio:
            raise ValueError("fecha_fin no puede ser anterior a fecha_inicio.")
        return self


class BarraGanttUpdate(BaseModel):
    """Partial update of a bar (PUT /barras/{id}).

    The position may be changed either by the four grid coordinates or by
    the two absolute dates, never both at once.  Each group must be sent
    complete.
    """

    mayor_id: int | None = Field(default=None, ge=1)
    departamento: str | None = Field(default=None, max_length=100)
    start_month: int | None = Field(default=None, ge=1)
    start_week: int | None = Field(default=None, ge=1, le=4)
    end_month: int | None = Field(default=None, ge=1)
    end_week: int | None = Field(default=None, ge=1, le=4)
    fecha_inicio: datetime.date | None = None
    fecha_fin: datetime.date | None = None

    @property
    def coordenadas(self) -> tuple[int, int, int, int] | None:
        if self.start_month is None:
            return None
        return (self.start_month, self.start_week, self.end_month, self.end_week)

    @model_validator(mode="after")
    def _grupos_completos(self) -> "BarraGanttUpdate":
        coords = (self.start_month, self.start_week, self.end_month, self.end_week)
        fechas = (self.fecha_inicio, self.fecha_fin)
        tiene_coords = any(v is not None for v in coords)
        tiene_fechas = any(v is not None for v in fechas)

        if tiene_coords and tiene_fechas:
            raise ValueError("Envíe coordenadas o fechas, no ambas.")
        if tiene_coords:
            if any(v is None for v in coords):
                raise ValueError(
                    "start_month, start_week, end_month y end_week deben enviarse juntos."
                )
            if not coordenadas_validas(*coords):
                raise ValueError("La semana de fin no puede ser anterior a la semana de inicio.")
        if tiene_fechas:
            if any(v is None for v in fechas):
                raise ValueError("fecha_inicio y fecha_fin deben enviarse juntas.")
            if self.fecha_fin < self.fecha_inicio:
                raise ValueError("fecha_fin no puede ser anterior a fecha_inicio.")
        return self


# ---------------------------------------------------------------------------
# Output schemas — Gantt bars
# ---------------------------------------------------------------------------


class BarraGanttResponse(BaseModel):
    """A stored bar plus its grid coordinates for the requested reference.

    Attributes:
        id: Primary key.
        cliente_id: Owning client.
        proyecto_id: Owning project.
        departamento: Department label.
        mayor_id: Budget line.
        mayor_codigo: Code of the budget line, if loaded.
        mayor_nombre: Name of the budget line, if loaded.
        fecha_inicio: Stored first day.
        fecha_fin: Stored last day.
        duracion: Stored duration in days.
        start_month: Month offset of ``fecha_inicio``.
        start_week: Week bucket of ``fecha_inicio``.
        end_month: Month offset of ``fecha_fin``.
        end_week: Week bucket of ``fecha_fin``.
        duration_weeks: Inclusive week-bucket span of the bar.
    """

    id: int
    cliente_id: int
    proyecto_id: int
    departamento: str | None = None
    mayor_id: int
    mayor_codigo: str | None = None
    mayor_nombre: str | None = None
    fecha_inicio: datetime.date
    fecha_fin: datetime.date
    duracion: int
    start_month: int
    start_week: int
    end_month: int
    end_week: int
    duration_weeks: int


# ---------------------------------------------------------------------------
# Manual overrides
# ---------------------------------------------------------------------------


class OverrideUpsert(BaseModel):
    """One manual cell value to save.

    ``valor`` is stored as entered; it is not validated against the
    concepto's numeric type.
    """

    mes: int = Field(..., description="Mes de la matriz (1 = mes de referencia).")
    concepto: ConceptoMatriz = Field(..., description="Fila de la matriz.")
    valor: str = Field(..., max_length=2000, description="Valor manual tal como se ingresó.")
    sobrescribe: bool = Field(default=True, description="Si está activo reemplaza al valor calculado.")


class OverrideBulkUpsert(BaseModel):
    """Several manual cells saved in a single request."""

    overrides: list[OverrideUpsert] = Field(..., min_length=1)


class OverrideResponse(BaseModel):
    id: int
    cliente_id: int
    proyecto_id: int
    mes: int
    concepto: str
    valor: str
    sobrescribe: bool
    updated_at: datetime.datetime | None = None

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------------
# Monthly financial matrix
# ---------------------------------------------------------------------------


class MatrizMensualResponse(BaseModel):
    """The six derived monthly series plus the project's budget total.

    Every mapping is sparse: a month with no contribution and no override is
    absent rather than zero.

    Attributes:
        gasto_por_mes: Spend per month.
        avance_parcial: Spend as % of ``total_presupuesto``.
        avance_acumulado: Running progress %, never above 100.
        ministraciones: Installment amounts due per month.
        inversion_acumulada: Running installments as % of ``total_presupuesto``.
        fechas_pago: Installment labels per month.
        total_presupuesto: Sum of every budget line.
        referencia: Reference date whose month is month 1.
    """

    gasto_por_mes: dict[int, float] = Field(default_factory=dict)
    avance_parcial: dict[int, float] = Field(default_factory=dict)
    avance_acumulado: dict[int, float] = Field(default_factory=dict)
    ministraciones: dict[int, float] = Field(default_factory=dict)
    inversion_acumulada: dict[int, float] = Field(default_factory=dict)
    fechas_pago: dict[int, list[str]] = Field(default_factory=dict)
    total_presupuesto: float = 0.0
    referencia: datetime.date | None = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "gasto_por_mes": {"1": 2000.0, "2": 2000.0},
                "avance_parcial": {"1": 50.0, "2": 50.0},
                "avance_acumulado": {"1": 50.0, "2": 100.0},
                "ministraciones": {"1": 1500.0},
                "inversion_acumulada": {"1": 37.5},
                "fechas_pago": {"1": ["Anticipo"]},
                "total_presupuesto": 4000.0,
                "referencia": "2026-01-15",
            }
        }
    )
