"""
Gantt calendar helpers: absolute dates <-> (mes, semana) view coordinates.

Bars are stored with absolute dates.  The Gantt grid shows them on a
month/week lattice where ``mes`` is a 1-based offset from the month of a
*reference date* and ``semana`` is one of 4 uniform buckets per month
(days 1–7, 8–14, 15–21, 22–end).  Every conversion takes the reference
date explicitly so that the same stored bar always maps to the same
coordinates for a given reference.
"""

from __future__ import annotations

import calendar
from datetime import date

from app.utils.constants import DIAS_POR_SEMANA, SEMANAS_POR_MES


def _indice_mes(fecha: date) -> int:
    """Absolute month index (year * 12 + zero-based month)."""
    return fecha.year * 12 + fecha.month - 1


def _desde_indice_mes(indice: int) -> tuple[int, int]:
    return indice // 12, indice % 12 + 1


def mes_relativo(fecha: date, referencia: date) -> int:
    """Return the 1-based month offset of *fecha* relative to *referencia*.

    The reference month itself is month 1; earlier months yield 0 or
    negative offsets.
    """
    return _indice_mes(fecha) - _indice_mes(referencia) + 1


def semana_del_mes(fecha: date) -> int:
    """Return the week bucket (1–4) a day of the month falls into."""
    return min((fecha.day - 1) // DIAS_POR_SEMANA + 1, SEMANAS_POR_MES)


def fecha_a_coordenada(fecha: date, referencia: date) -> tuple[int, int]:
    return mes_relativo(fecha, referencia), semana_del_mes(fecha)


def inicio_de_semana(mes: int, semana: int, referencia: date) -> date:
    """First calendar day of bucket (*mes*, *semana*)."""
    anio, mes_calendario = _desde_indice_mes(_indice_mes(referencia) + mes - 1)
    return date(anio, mes_calendario, (semana - 1) * DIAS_POR_SEMANA + 1)


def fin_de_semana(mes: int, semana: int, referencia: date) -> date:
    """Last calendar day of bucket (*mes*, *semana*).

    The fourth bucket absorbs the remainder of the month (days 29–31).
    """
    anio, mes_calendario = _desde_indice_mes(_indice_mes(referencia) + mes - 1)
    if semana >= SEMANAS_POR_MES:
        return date(anio, mes_calendario, calendar.monthrange(anio, mes_calendario)[1])
    return date(anio, mes_calendario, semana * DIAS_POR_SEMANA)


def coordenada_a_rango(
    start_month: int,
    start_week: int,
    end_month: int,
    end_week: int,
    referencia: date,
) -> tuple[date, date]:
    """Convert a bar's view coordinates into its absolute ``(inicio, fin)`` dates.

    Args:
        start_month: 1-based month offset of the first bucket.
        start_week: Week bucket (1–4) of the first bucket.
        end_month: 1-based month offset of the last bucket.
        end_week: Week bucket (1–4) of the last bucket.
        referencia: Date whose month is month 1.

    Returns:
        The first day of the start bucket and the last day of the end
        bucket.  Mapping both back through ``fecha_a_coordenada`` with the
        same reference yields the original coordinates.
    """
    return (
        inicio_de_semana(start_month, start_week, referencia),
        fin_de_semana(end_month, end_week, referencia),
    )


def duracion_semanas(
    start_month: int, start_week: int, end_month: int, end_week: int
) -> int:
    """Inclusive number of week buckets spanned by a bar."""
    return (
        (end_month - start_month) * SEMANAS_POR_MES
        + end_week
        - start_week
        + 1
    )


def coordenadas_validas(
    start_month: int, start_week: int, end_month: int, end_week: int
) -> bool:
    """True when the end bucket is not before the start bucket."""
    if end_month != start_month:
        return end_month > start_month
    return end_week >= start_week
