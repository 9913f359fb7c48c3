"""Seed demo data for the construction Gantt and its financial matrix.

Creates construction mayores, a parametric budget, a current construction
payment plan, and a few Gantt bars for one demo client project.  Run it
after ``alembic upgrade head``.

Usage:
    py seed_cronograma_demo.py
"""

from __future__ import annotations

import sys
import os
from datetime import date
from decimal import Decimal

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from app.config import get_settings  # noqa: E402
from app.database import SessionLocal  # noqa: E402
from app.models import (  # noqa: E402
    CronogramaGantt,
    Mayor,
    ParcialidadPago,
    PlanPago,
    PresupuestoParametrico,
)
from app.utils.constants import TIPO_PLAN_PAGO_CONSTRUCCION  # noqa: E402

CLIENTE_ID = 1
PROYECTO_ID = 1
ANIO = 2026


def _dec(v):
    return Decimal(str(round(v, 2)))


def seed_mayores(session) -> list[Mayor]:
    if session.query(Mayor).count() > 0:
        print("  [SKIP] Mayor — ya tiene datos.")
        return session.query(Mayor).order_by(Mayor.codigo).all()

    departamento = get_settings().DEPARTAMENTO_CONSTRUCCION
    registros = [
        Mayor(codigo="5100", nombre="Preliminares", departamento=departamento),
        Mayor(codigo="5200", nombre="Cimentación", departamento=departamento),
        Mayor(codigo="5300", nombre="Estructura", departamento=departamento),
        Mayor(codigo="5400", nombre="Instalaciones", departamento=departamento),
        Mayor(codigo="5500", nombre="Acabados", departamento=departamento),
    ]
    session.add_all(registros)
    session.flush()
    print(f"  [OK] Mayor — {len(registros)} registros.")
    return registros


def seed_presupuesto(session, mayores: list[Mayor]) -> None:
    if session.query(PresupuestoParametrico).filter_by(proyecto_id=PROYECTO_ID).count() > 0:
        print("  [SKIP] PresupuestoParametrico — ya tiene datos.")
        return

    montos = [120_000, 480_000, 1_250_000, 640_000, 910_000]
    for mayor, monto in zip(mayores, montos):
        session.add(
            PresupuestoParametrico(
                cliente_id=CLIENTE_ID,
                proyecto_id=PROYECTO_ID,
                mayor_id=mayor.id,
                monto_total=_dec(monto),
            )
        )
    print(f"  [OK] PresupuestoParametrico — {len(montos)} partidas.")


def seed_plan_pago(session) -> None:
    if session.query(PlanPago).filter_by(proyecto_id=PROYECTO_ID).count() > 0:
        print("  [SKIP] PlanPago — ya tiene datos.")
        return

    plan = PlanPago(
        proyecto_id=PROYECTO_ID,
        nombre="Plan de pagos de obra",
        tipo_plan=TIPO_PLAN_PAGO_CONSTRUCCION,
        es_plan_actual=True,
    )
    plan.parcialidades = [
        ParcialidadPago(numero=1, nombre="Anticipo", monto=_dec(680_000), fecha_vencimiento=date(ANIO, 1, 10)),
        ParcialidadPago(numero=2, monto=_dec(850_000), fecha_vencimiento=date(ANIO, 3, 10)),
        ParcialidadPago(numero=3, monto=_dec(850_000), fecha_vencimiento=date(ANIO, 5, 10)),
        ParcialidadPago(numero=4, nombre="Finiquito", monto=_dec(1_020_000), fecha_vencimiento=date(ANIO, 7, 10)),
    ]
    session.add(plan)
    print("  [OK] PlanPago — 1 plan, 4 parcialidades.")


def seed_barras(session, mayores: list[Mayor]) -> None:
    if session.query(CronogramaGantt).filter_by(proyecto_id=PROYECTO_ID).count() > 0:
        print("  [SKIP] CronogramaGantt — ya tiene datos.")
        return

    fechas = [
        (date(ANIO, 1, 1), date(ANIO, 1, 14)),
        (date(ANIO, 1, 15), date(ANIO, 2, 28)),
        (date(ANIO, 3, 1), date(ANIO, 5, 14)),
        (date(ANIO, 4, 15), date(ANIO, 6, 30)),
        (date(ANIO, 6, 1), date(ANIO, 7, 31)),
    ]
    for mayor, (inicio, fin) in zip(mayores, fechas):
        session.add(
            CronogramaGantt(
                cliente_id=CLIENTE_ID,
                proyecto_id=PROYECTO_ID,
                departamento=mayor.departamento,
                mayor_id=mayor.id,
                fecha_inicio=inicio,
                fecha_fin=fin,
                duracion=(fin - inicio).days + 1,
            )
        )
    print(f"  [OK] CronogramaGantt — {len(fechas)} actividades.")


def main() -> None:
    session = SessionLocal()
    try:
        print("Sembrando datos de demostración del cronograma...")
        mayores = seed_mayores(session)
        seed_presupuesto(session, mayores)
        seed_plan_pago(session)
        seed_barras(session, mayores)
        session.commit()
        print(f"Listo. Consulte /api/cronograma/{CLIENTE_ID}/{PROYECTO_ID}/matriz?referencia={ANIO}-01-01")
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


if __name__ == "__main__":
    main()
