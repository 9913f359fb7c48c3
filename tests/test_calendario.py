"""Tests for the date <-> (mes, semana) grid conversions."""

from datetime import date

import pytest

from app.utils.calendario import (
    coordenada_a_rango,
    coordenadas_validas,
    duracion_semanas,
    fecha_a_coordenada,
    mes_relativo,
    semana_del_mes,
)


class TestFechaACoordenada:

    def test_month_offset_and_week_bucket(self):
        assert fecha_a_coordenada(date(2026, 3, 22), date(2026, 1, 15)) == (3, 4)

    @pytest.mark.parametrize(
        "dia,semana",
        [(1, 1), (7, 1), (8, 2), (14, 2), (15, 3), (21, 3), (22, 4), (28, 4), (31, 4)],
    )
    def test_week_buckets(self, dia, semana):
        assert semana_del_mes(date(2026, 1, dia)) == semana

    def test_reference_day_does_not_matter(self):
        assert mes_relativo(date(2026, 2, 1), date(2026, 1, 1)) == 2
        assert mes_relativo(date(2026, 2, 1), date(2026, 1, 31)) == 2

    def test_month_before_reference(self):
        assert mes_relativo(date(2025, 12, 31), date(2026, 1, 1)) == 0

    def test_year_boundary(self):
        assert fecha_a_coordenada(date(2027, 1, 10), date(2026, 11, 1)) == (3, 2)


class TestCoordenadaARango:

    def test_range_spans_first_to_last_bucket_day(self):
        assert coordenada_a_rango(1, 3, 2, 2, date(2026, 1, 10)) == (
            date(2026, 1, 15),
            date(2026, 2, 14),
        )

    def test_fourth_week_ends_on_month_end(self):
        inicio, fin = coordenada_a_rango(2, 1, 2, 4, date(2026, 1, 1))
        assert inicio == date(2026, 2, 1)
        assert fin == date(2026, 2, 28)

    def test_wraps_into_next_year(self):
        inicio, fin = coordenada_a_rango(3, 1, 3, 4, date(2026, 11, 1))
        assert inicio == date(2027, 1, 1)
        assert fin == date(2027, 1, 31)

    @pytest.mark.parametrize(
        "coords", [(1, 1, 1, 1), (1, 3, 2, 2), (2, 4, 6, 1), (12, 2, 14, 4)]
    )
    def test_stored_range_maps_back_to_same_coordinates(self, coords):
        referencia = date(2026, 5, 20)
        inicio, fin = coordenada_a_rango(*coords, referencia)

        assert fecha_a_coordenada(inicio, referencia) + fecha_a_coordenada(fin, referencia) == coords


class TestDuracion:

    def test_duration_in_week_buckets(self):
        assert duracion_semanas(1, 3, 2, 2) == 4
        assert duracion_semanas(1, 1, 1, 4) == 4
        assert duracion_semanas(1, 1, 1, 1) == 1

    def test_valid_coordinates(self):
        assert coordenadas_validas(1, 3, 2, 1)
        assert coordenadas_validas(2, 2, 2, 2)
        assert not coordenadas_validas(2, 3, 2, 2)
        assert not coordenadas_validas(3, 1, 2, 4)
