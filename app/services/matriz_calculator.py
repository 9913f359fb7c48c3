"""
Monthly financial matrix calculator for the construction Gantt.

Pure, synchronous derivation with no database access: the caller
(``cronograma_service``) loads bars, budget rows, installments and manual
overrides, resolves every date to a month offset, and hands plain records
to ``calcular_matriz``.

Design notes
------------
- Every series is a sparse ``dict[int, ...]`` keyed by month: a month with
  no contribution and no override is absent, not zero.
- Each ratio is guarded so that a zero budget yields ``0.0``, never
  ``NaN``/``inf``.
- Months are always processed in ascending numeric order, independent of
  the order in which bars or installments were supplied.
- A manual override replaces the value shown for its (mes, concepto) cell.
  Spend and ministraciones overrides flow into the percentages derived
  from them; a percentage override replaces only its own cell and the
  running totals keep accumulating the underlying derived values.
- Inputs are never mutated.
"""

from __future__ import annotations

import logging
import math
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from app.schemas.cronograma import MatrizMensualResponse
from app.utils.constants import (
    CONCEPTO_AVANCE_ACUMULADO,
    CONCEPTO_AVANCE_PARCIAL,
    CONCEPTO_FECHA_PAGO,
    CONCEPTO_GASTO_OBRA,
    CONCEPTO_INVERSION_ACUMULADA,
    CONCEPTO_MINISTRACIONES,
    PORCENTAJE_MAXIMO,
    SEMANAS_POR_MES,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BarraMatriz:
    """A Gantt bar already projected onto the (mes, semana) grid."""

    mayor_id: int
    start_month: int
    start_week: int
    end_month: int
    end_week: int
    duration_weeks: int


@dataclass(frozen=True)
class MontoPresupuesto:
    """One parametric budget row; several rows may share a ``mayor_id``."""

    mayor_id: int
    monto_total: float | None


@dataclass(frozen=True)
class ParcialidadMatriz:
    """A payment installment whose due date is already resolved to a month."""

    mes: int
    monto: float
    etiqueta: str


@dataclass(frozen=True)
class OverrideMatriz:
    """A stored manual cell; ``valor`` is the raw text as entered."""

    mes: int
    concepto: str
    valor: str
    sobrescribe: bool = True


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _clave(mes: int, concepto: str) -> str:
    return f"{mes}-{concepto}"


def _construir_lookup(overrides: Iterable[OverrideMatriz]) -> dict[str, str]:
    """Index active overrides by ``"{mes}-{concepto}"``; later rows win.

    A blank ``valor`` leaves the calculated cell in place.
    """
    lookup: dict[str, str] = {}
    for override in overrides:
        if override.sobrescribe and str(override.valor).strip():
            lookup[_clave(override.mes, override.concepto)] = override.valor
    return lookup


def _meses_con_override(lookup: Mapping[str, str], concepto: str) -> set[int]:
    sufijo = f"-{concepto}"
    meses: set[int] = set()
    for clave in lookup:
        if clave.endswith(sufijo):
            meses.add(int(clave[: -len(sufijo)]))
    return meses


def parse_valor_numerico(valor: str) -> float:
    """Parse an override's raw text as a number.

    Text that is not a number, or that parses to ``NaN``/``inf``, counts as
    ``0.0`` so that a malformed manual entry never poisons the matrix.
    """
    try:
        numero = float(str(valor).strip())
    except ValueError:
        logger.warning("Override con valor no numérico %r; se usa 0", valor)
        return 0.0
    if not math.isfinite(numero):
        logger.warning("Override con valor no finito %r; se usa 0", valor)
        return 0.0
    return numero


def parse_etiquetas(valor: str) -> list[str]:
    """Split a ``fecha_pago`` override into its comma-separated labels."""
    return [parte.strip() for parte in str(valor).split(",") if parte.strip()]


def _valor_numerico(
    lookup: Mapping[str, str], mes: int, concepto: str, automatico: float
) -> float:
    clave = _clave(mes, concepto)
    if clave in lookup:
        return parse_valor_numerico(lookup[clave])
    return automatico


def _safe_pct(numerator: float, denominator: float) -> float:
    """Return numerator / denominator × 100, or 0.0 if denominator is zero."""
    if denominator == 0:
        return 0.0
    return (numerator / denominator) * 100


def semanas_en_mes(barra: BarraMatriz, mes: int) -> int:
    """Number of the bar's week buckets that fall inside *mes*."""
    if mes == barra.start_month and mes == barra.end_month:
        return barra.end_week - barra.start_week + 1
    if mes == barra.start_month:
        return SEMANAS_POR_MES + 1 - barra.start_week
    if mes == barra.end_month:
        return barra.end_week
    return SEMANAS_POR_MES


# ---------------------------------------------------------------------------
# Calculation steps
# ---------------------------------------------------------------------------


def totales_por_mayor(presupuestos: Iterable[MontoPresupuesto]) -> dict[int, float]:
    """Sum parametric budget amounts per budget line (NULL counts as 0)."""
    totales: dict[int, float] = defaultdict(float)
    for fila in presupuestos:
        totales[fila.mayor_id] += float(fila.monto_total or 0)
    return dict(totales)


def gasto_automatico(
    barras: Iterable[BarraMatriz], totales: Mapping[int, float]
) -> dict[int, float]:
    """Spread every bar's budget-line total over the months it spans.

    Each bar spends ``total / duration_weeks`` per week bucket.  Bars whose
    line has no budget, or whose duration is zero, contribute nothing.
    """
    gasto: dict[int, float] = defaultdict(float)
    for barra in barras:
        total_mayor = totales.get(barra.mayor_id, 0.0)
        if total_mayor == 0 or barra.duration_weeks == 0:
            continue

        tasa_semanal = total_mayor / barra.duration_weeks
        for mes in range(barra.start_month, barra.end_month + 1):
            gasto[mes] += tasa_semanal * semanas_en_mes(barra, mes)
    return dict(gasto)


def _aplicar_override_serie(
    automatico: Mapping[int, float], lookup: Mapping[str, str], concepto: str
) -> dict[int, float]:
    meses = set(automatico) | _meses_con_override(lookup, concepto)
    return {
        mes: _valor_numerico(lookup, mes, concepto, automatico.get(mes, 0.0))
        for mes in sorted(meses)
    }


def _avances(
    gasto: Mapping[int, float],
    total_presupuesto: float,
    lookup: Mapping[str, str],
) -> tuple[dict[int, float], dict[int, float]]:
    avance_parcial: dict[int, float] = {}
    avance_acumulado: dict[int, float] = {}
    acumulado = 0.0

    for mes in sorted(gasto):
        parcial = _safe_pct(gasto[mes], total_presupuesto)
        acumulado += parcial
        avance_parcial[mes] = _valor_numerico(lookup, mes, CONCEPTO_AVANCE_PARCIAL, parcial)
        avance_acumulado[mes] = _valor_numerico(
            lookup, mes, CONCEPTO_AVANCE_ACUMULADO, min(acumulado, PORCENTAJE_MAXIMO)
        )

    # Percentage overrides on months without spend still show up
    for concepto, serie in (
        (CONCEPTO_AVANCE_PARCIAL, avance_parcial),
        (CONCEPTO_AVANCE_ACUMULADO, avance_acumulado),
    ):
        for mes in _meses_con_override(lookup, concepto) - set(serie):
            serie[mes] = parse_valor_numerico(lookup[_clave(mes, concepto)])

    return dict(sorted(avance_parcial.items())), dict(sorted(avance_acumulado.items()))


def _ministraciones(
    parcialidades: Iterable[ParcialidadMatriz], lookup: Mapping[str, str]
) -> tuple[dict[int, float], dict[int, list[str]]]:
    montos: dict[int, float] = defaultdict(float)
    etiquetas: dict[int, list[str]] = defaultdict(list)
    for parcialidad in parcialidades:
        montos[parcialidad.mes] += float(parcialidad.monto or 0)
        etiquetas[parcialidad.mes].append(parcialidad.etiqueta)

    ministraciones = _aplicar_override_serie(montos, lookup, CONCEPTO_MINISTRACIONES)

    fechas_pago: dict[int, list[str]] = {mes: list(etiquetas[mes]) for mes in etiquetas}
    for mes in _meses_con_override(lookup, CONCEPTO_FECHA_PAGO):
        fechas_pago[mes] = parse_etiquetas(lookup[_clave(mes, CONCEPTO_FECHA_PAGO)])

    return ministraciones, dict(sorted(fechas_pago.items()))


def _inversion_acumulada(
    ministraciones: Mapping[int, float],
    total_presupuesto: float,
    lookup: Mapping[str, str],
) -> dict[int, float]:
    inversion: dict[int, float] = {}
    acumulado = 0.0
    for mes in sorted(ministraciones):
        acumulado += ministraciones[mes]
        inversion[mes] = _valor_numerico(
            lookup,
            mes,
            CONCEPTO_INVERSION_ACUMULADA,
            _safe_pct(acumulado, total_presupuesto),
        )

    for mes in _meses_con_override(lookup, CONCEPTO_INVERSION_ACUMULADA) - set(inversion):
        inversion[mes] = parse_valor_numerico(
            lookup[_clave(mes, CONCEPTO_INVERSION_ACUMULADA)]
        )
    return dict(sorted(inversion.items()))


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def calcular_matriz(
    barras: Iterable[BarraMatriz],
    presupuestos: Iterable[MontoPresupuesto],
    parcialidades: Iterable[ParcialidadMatriz],
    overrides: Iterable[OverrideMatriz] = (),
) -> MatrizMensualResponse:
    """Derive the six monthly series of the financial matrix.

    Args:
        barras: Gantt bars on the (mes, semana) grid.
        presupuestos: Parametric budget rows of the project.
        parcialidades: Installments of the current construction payment
            plan, each already resolved to its month.
        overrides: Manual cells; inactive ones are ignored.

    Returns:
        A ``MatrizMensualResponse`` with spend, partial and cumulative
        progress %, ministraciones, cumulative investment %, payment
        labels, and the project's ``total_presupuesto``.
    """
    lookup = _construir_lookup(overrides)

    totales = totales_por_mayor(presupuestos)
    total_presupuesto = sum(totales.values())

    gasto = _aplicar_override_serie(
        gasto_automatico(barras, totales), lookup, CONCEPTO_GASTO_OBRA
    )
    avance_parcial, avance_acumulado = _avances(gasto, total_presupuesto, lookup)
    ministraciones, fechas_pago = _ministraciones(parcialidades, lookup)
    inversion_acumulada = _inversion_acumulada(ministraciones, total_presupuesto, lookup)

    logger.debug(
        "calcular_matriz: meses_gasto=%d meses_pago=%d total=%.2f overrides=%d",
        len(gasto), len(ministraciones), total_presupuesto, len(lookup),
    )

    return MatrizMensualResponse(
        gasto_por_mes=gasto,
        avance_parcial=avance_parcial,
        avance_acumulado=avance_acumulado,
        ministraciones=ministraciones,
        inversion_acumulada=inversion_acumulada,
        fechas_pago=fechas_pago,
        total_presupuesto=total_presupuesto,
    )
