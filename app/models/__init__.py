"""SQLAlchemy models package for the Cronograma de Obra backend.

Importing all models here ensures that SQLAlchemy's mapper registry is
populated before ``Base.metadata.create_all()`` or Alembic migrations run.
The import order follows the foreign-key dependency graph so that parent
tables are always registered before their children.

Usage from other modules:
    from app.models import CronogramaGantt, Mayor
"""

# Leaf tables (no FK dependencies on other domain models)
from app.models.usuario import Usuario  # noqa: F401
from app.models.mayor import Mayor  # noqa: F401

# Budget and payment inputs of the financial matrix
from app.models.presupuesto_parametrico import PresupuestoParametrico  # noqa: F401
from app.models.plan_pago import ParcialidadPago, PlanPago  # noqa: F401

# Gantt schedule and its manual matrix layer
from app.models.cronograma_gantt import CronogramaGantt  # noqa: F401
from app.models.cronograma_matriz_manual import CronogramaMatrizManual  # noqa: F401

__all__ = [
    "Usuario",
    "Mayor",
    "PresupuestoParametrico",
    "PlanPago",
    "ParcialidadPago",
    "CronogramaGantt",
    "CronogramaMatrizManual",
]
