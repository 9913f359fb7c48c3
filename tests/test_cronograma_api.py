"""End-to-end tests for /api/cronograma against an in-memory database."""

from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.models import Mayor, ParcialidadPago, PlanPago, PresupuestoParametrico
from app.utils.constants import CONCEPTOS_MATRIZ, TIPO_PLAN_PAGO_CONSTRUCCION

BASE = "/api/cronograma"
REF = {"referencia": "2026-01-01"}


@pytest.fixture
def presupuesto(db_session, mayor):
    fila = PresupuestoParametrico(
        cliente_id=1, proyecto_id=1, mayor_id=mayor.id, monto_total=Decimal("1200.00")
    )
    db_session.add(fila)
    db_session.commit()
    return fila


@pytest.fixture
def plan_pago(db_session):
    plan = PlanPago(
        proyecto_id=1,
        nombre="Plan de obra",
        tipo_plan=TIPO_PLAN_PAGO_CONSTRUCCION,
        es_plan_actual=True,
    )
    plan.parcialidades = [
        ParcialidadPago(numero=1, nombre="Anticipo", monto=Decimal("600.00"),
                        fecha_vencimiento=date(2026, 2, 10)),
        ParcialidadPago(numero=2, monto=Decimal("300.00"),
                        fecha_vencimiento=date(2026, 2, 25)),
        ParcialidadPago(numero=3, monto=Decimal("300.00"), fecha_vencimiento=None),
    ]
    db_session.add(plan)
    db_session.commit()
    return plan


def _crear_barra(client, headers, mayor_id, coords=(3, 1, 3, 4)):
    start_month, start_week, end_month, end_week = coords
    return client.post(
        f"{BASE}/1/1/barras",
        params=REF,
        headers=headers,
        json={
            "mayor_id": mayor_id,
            "start_month": start_month,
            "start_week": start_week,
            "end_month": end_month,
            "end_week": end_week,
        },
    )


class TestMayores:

    def test_only_active_construction_lines(self, client, db_session, admin_headers, mayor):
        db_session.add_all([
            Mayor(codigo="6100", nombre="Honorarios", departamento="Diseño"),
            Mayor(codigo="5900", nombre="Obsoleto", departamento=mayor.departamento, activo=False),
        ])
        db_session.commit()

        resp = client.get(f"{BASE}/mayores", headers=admin_headers)

        assert resp.status_code == 200
        assert [m["codigo"] for m in resp.json()] == ["5200"]


class TestBarras:

    def test_create_from_coordinates_stores_dates(self, client, admin_headers, mayor):
        resp = _crear_barra(client, admin_headers, mayor.id, (1, 3, 2, 2))

        assert resp.status_code == 201
        body = resp.json()
        assert body["fecha_inicio"] == "2026-01-15"
        assert body["fecha_fin"] == "2026-02-14"
        assert body["duracion"] == 31
        assert (body["start_month"], body["start_week"]) == (1, 3)
        assert (body["end_month"], body["end_week"]) == (2, 2)
        assert body["duration_weeks"] == 4
        assert body["mayor_codigo"] == "5200"

    def test_create_from_dates(self, client, admin_headers, mayor):
        resp = client.post(
            f"{BASE}/1/1/barras/fechas",
            params=REF,
            headers=admin_headers,
            json={"mayor_id": mayor.id, "fecha_inicio": "2026-03-22", "fecha_fin": "2026-04-03"},
        )

        assert resp.status_code == 201
        body = resp.json()
        assert (body["start_month"], body["start_week"]) == (3, 4)
        assert (body["end_month"], body["end_week"]) == (4, 1)
        assert body["departamento"] == "Construcción"

    def test_coordinates_follow_reference_date(self, client, admin_headers, mayor):
        barra_id = _crear_barra(client, admin_headers, mayor.id).json()["id"]

        resp = client.get(
            f"{BASE}/barras/{barra_id}",
            params={"referencia": "2026-02-20"},
            headers=admin_headers,
        )

        assert resp.json()["start_month"] == 2
        assert resp.json()["fecha_inicio"] == "2026-03-01"

    def test_list_is_scoped_to_project(self, client, admin_headers, mayor):
        _crear_barra(client, admin_headers, mayor.id)
        _crear_barra(client, admin_headers, mayor.id, (1, 1, 1, 2))

        resp = client.get(f"{BASE}/1/1/barras", params=REF, headers=admin_headers)
        otro = client.get(f"{BASE}/1/2/barras", params=REF, headers=admin_headers)

        assert len(resp.json()) == 2
        assert otro.json() == []

    def test_unknown_mayor_is_rejected(self, client, admin_headers, mayor):
        resp = _crear_barra(client, admin_headers, mayor.id + 100)
        assert resp.status_code == 422

    def test_end_before_start_is_rejected(self, client, admin_headers, mayor):
        resp = _crear_barra(client, admin_headers, mayor.id, (2, 3, 2, 1))
        assert resp.status_code == 422

    def test_week_out_of_range_is_rejected(self, client, admin_headers, mayor):
        resp = _crear_barra(client, admin_headers, mayor.id, (1, 1, 1, 5))
        assert resp.status_code == 422

    def test_update_moves_bar(self, client, admin_headers, mayor):
        barra_id = _crear_barra(client, admin_headers, mayor.id).json()["id"]

        resp = client.put(
            f"{BASE}/barras/{barra_id}",
            params=REF,
            headers=admin_headers,
            json={"start_month": 2, "start_week": 1, "end_month": 2, "end_week": 2},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["fecha_inicio"] == "2026-02-01"
        assert body["fecha_fin"] == "2026-02-14"
        assert body["duracion"] == 14

    def test_update_with_partial_coordinates_is_rejected(self, client, admin_headers, mayor):
        barra_id = _crear_barra(client, admin_headers, mayor.id).json()["id"]

        resp = client.put(
            f"{BASE}/barras/{barra_id}",
            params=REF,
            headers=admin_headers,
            json={"start_month": 2},
        )

        assert resp.status_code == 422

    def test_delete_then_missing(self, client, admin_headers, mayor):
        barra_id = _crear_barra(client, admin_headers, mayor.id).json()["id"]

        assert client.delete(f"{BASE}/barras/{barra_id}", headers=admin_headers).status_code == 200
        assert client.get(f"{BASE}/barras/{barra_id}", headers=admin_headers).status_code == 404
        assert client.delete(f"{BASE}/barras/{barra_id}", headers=admin_headers).status_code == 404


class TestPermisos:

    def test_token_required(self, client, mayor):
        assert client.get(f"{BASE}/1/1/barras").status_code == 401

    def test_invalid_token_rejected(self, client, mayor):
        resp = client.get(f"{BASE}/1/1/barras", headers={"Authorization": "Bearer basura"})
        assert resp.status_code == 401

    def test_read_only_role_cannot_write(self, client, consulta_headers, mayor):
        assert _crear_barra(client, consulta_headers, mayor.id).status_code == 403
        resp = client.put(
            f"{BASE}/1/1/overrides",
            headers=consulta_headers,
            json={"overrides": [{"mes": 1, "concepto": "gasto_obra", "valor": "1"}]},
        )
        assert resp.status_code == 403

    def test_read_only_role_can_read_matrix(self, client, consulta_headers):
        resp = client.get(f"{BASE}/1/1/matriz", params=REF, headers=consulta_headers)
        assert resp.status_code == 200


class TestMatriz:

    def test_spend_from_bar(self, client, admin_headers, mayor, presupuesto):
        _crear_barra(client, admin_headers, mayor.id)

        body = client.get(f"{BASE}/1/1/matriz", params=REF, headers=admin_headers).json()

        assert body["gasto_por_mes"] == {"3": pytest.approx(1200)}
        assert body["avance_parcial"]["3"] == pytest.approx(100)
        assert body["avance_acumulado"]["3"] == pytest.approx(100)
        assert body["total_presupuesto"] == pytest.approx(1200)
        assert body["referencia"] == "2026-01-01"

    def test_override_then_revert(self, client, admin_headers, mayor, presupuesto):
        _crear_barra(client, admin_headers, mayor.id)
        url = f"{BASE}/1/1/matriz"

        resp = client.put(
            f"{BASE}/1/1/overrides",
            headers=admin_headers,
            json={"overrides": [{"mes": 3, "concepto": "gasto_obra", "valor": "5000"}]},
        )
        assert resp.status_code == 200
        assert resp.json()[0]["valor"] == "5000"
        assert client.get(url, params=REF, headers=admin_headers).json()["gasto_por_mes"]["3"] == 5000

        resp = client.delete(f"{BASE}/1/1/overrides/3/gasto_obra", headers=admin_headers)
        assert resp.status_code == 200
        assert client.get(url, params=REF, headers=admin_headers).json()["gasto_por_mes"]["3"] == pytest.approx(1200)

    def test_override_upsert_keeps_one_row(self, client, admin_headers):
        for valor in ("10", "20"):
            client.put(
                f"{BASE}/1/1/overrides",
                headers=admin_headers,
                json={"overrides": [{"mes": 1, "concepto": "ministraciones", "valor": valor}]},
            )

        rows = client.get(f"{BASE}/1/1/overrides", headers=admin_headers).json()

        assert len(rows) == 1
        assert rows[0]["valor"] == "20"

    def test_bulk_save_last_duplicate_wins(self, client, admin_headers):
        resp = client.put(
            f"{BASE}/1/1/overrides",
            headers=admin_headers,
            json={"overrides": [
                {"mes": 2, "concepto": "gasto_obra", "valor": "1"},
                {"mes": 2, "concepto": "fecha_pago", "valor": "10 feb"},
                {"mes": 2, "concepto": "gasto_obra", "valor": "3"},
            ]},
        )

        assert resp.status_code == 200
        rows = client.get(f"{BASE}/1/1/overrides", headers=admin_headers).json()
        assert {(r["concepto"], r["valor"]) for r in rows} == {("gasto_obra", "3"), ("fecha_pago", "10 feb")}

    def test_unknown_concept_is_rejected(self, client, admin_headers):
        resp = client.put(
            f"{BASE}/1/1/overrides",
            headers=admin_headers,
            json={"overrides": [{"mes": 1, "concepto": "utilidad", "valor": "1"}]},
        )
        assert resp.status_code == 422

    def test_delete_missing_override(self, client, admin_headers):
        resp = client.delete(f"{BASE}/1/1/overrides/4/gasto_obra", headers=admin_headers)
        assert resp.status_code == 404

    def test_installments_feed_ministraciones(self, client, admin_headers, presupuesto, plan_pago):
        body = client.get(f"{BASE}/1/1/matriz", params=REF, headers=admin_headers).json()

        assert body["ministraciones"] == {"2": pytest.approx(900)}
        assert body["fechas_pago"] == {"2": ["Anticipo", "Pago 2"]}
        assert body["inversion_acumulada"]["2"] == pytest.approx(75)

    def test_installments_of_other_plans_are_ignored(self, client, db_session, admin_headers, presupuesto):
        db_session.add(
            PlanPago(
                proyecto_id=1,
                tipo_plan=TIPO_PLAN_PAGO_CONSTRUCCION,
                es_plan_actual=False,
                parcialidades=[
                    ParcialidadPago(numero=1, monto=Decimal("100"), fecha_vencimiento=date(2026, 1, 5))
                ],
            )
        )
        db_session.commit()

        body = client.get(f"{BASE}/1/1/matriz", params=REF, headers=admin_headers).json()

        assert body["ministraciones"] == {}

    def test_reset_month(self, client, admin_headers, mayor, presupuesto):
        _crear_barra(client, admin_headers, mayor.id)
        client.put(
            f"{BASE}/1/1/overrides",
            headers=admin_headers,
            json={"overrides": [
                {"mes": 3, "concepto": "gasto_obra", "valor": "1"},
                {"mes": 3, "concepto": "avance_parcial", "valor": "2"},
                {"mes": 4, "concepto": "gasto_obra", "valor": "3"},
            ]},
        )

        resp = client.delete(f"{BASE}/1/1/overrides/3", headers=admin_headers)

        assert resp.status_code == 200
        rows = client.get(f"{BASE}/1/1/overrides", headers=admin_headers).json()
        assert [(r["mes"], r["concepto"]) for r in rows] == [(4, "gasto_obra")]
        body = client.get(f"{BASE}/1/1/matriz", params=REF, headers=admin_headers).json()
        assert body["gasto_por_mes"]["3"] == pytest.approx(1200)
        assert body["gasto_por_mes"]["4"] == 3

    def test_empty_project(self, client, admin_headers):
        body = client.get(f"{BASE}/9/9/matriz", params=REF, headers=admin_headers).json()

        assert body["gasto_por_mes"] == {}
        assert body["total_presupuesto"] == 0

    def test_every_matrix_concept_is_accepted(self, client, admin_headers):
        resp = client.put(
            f"{BASE}/1/1/overrides",
            headers=admin_headers,
            json={"overrides": [
                {"mes": 1, "concepto": concepto, "valor": "1"} for concepto in CONCEPTOS_MATRIZ
            ]},
        )

        assert resp.status_code == 200
        assert sorted(r["concepto"] for r in resp.json()) == sorted(CONCEPTOS_MATRIZ)


def _commit_fallido():
    raise OperationalError("COMMIT", {}, Exception("database is locked"))


class TestFallosDeEscritura:
    """A failed commit rolls back and answers 500 for that operation only."""

    def test_override_commit_failure(self, client, db_session, admin_headers, monkeypatch, caplog):
        monkeypatch.setattr(db_session, "commit", _commit_fallido)

        resp = client.put(
            f"{BASE}/1/1/overrides",
            headers=admin_headers,
            json={"overrides": [{"mes": 3, "concepto": "gasto_obra", "valor": "5000"}]},
        )

        assert resp.status_code == 500
        assert resp.json()["detail"] == (
            "No se pudo completar la operación: guardar valor manual de la matriz."
        )
        assert any(r.levelname == "ERROR" for r in caplog.records)

        monkeypatch.undo()
        listado = client.get(f"{BASE}/1/1/overrides", headers=admin_headers)
        assert listado.status_code == 200
        assert listado.json() == []

    def test_bulk_override_commit_failure(self, client, db_session, admin_headers, monkeypatch):
        monkeypatch.setattr(db_session, "commit", _commit_fallido)

        resp = client.put(
            f"{BASE}/1/1/overrides",
            headers=admin_headers,
            json={"overrides": [
                {"mes": 3, "concepto": "gasto_obra", "valor": "1"},
                {"mes": 4, "concepto": "gasto_obra", "valor": "2"},
            ]},
        )

        assert resp.status_code == 500
        assert resp.json()["detail"] == "No se pudo completar la operación: guardar matriz manual."
        monkeypatch.undo()
        assert client.get(f"{BASE}/1/1/overrides", headers=admin_headers).json() == []

    def test_bar_commit_failure(self, client, db_session, admin_headers, mayor, monkeypatch):
        monkeypatch.setattr(db_session, "commit", _commit_fallido)

        resp = _crear_barra(client, admin_headers, mayor.id)

        assert resp.status_code == 500
        assert resp.json()["detail"] == (
            "No se pudo completar la operación: crear actividad del cronograma."
        )

        monkeypatch.undo()
        assert client.get(f"{BASE}/1/1/barras", params=REF, headers=admin_headers).json() == []
        assert _crear_barra(client, admin_headers, mayor.id).status_code == 201
