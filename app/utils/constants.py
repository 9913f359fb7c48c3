"""
Application-wide constants for the Cronograma de Obra backend.

Defines domain enumerations and calendar rules used across routers,
services, and models.
"""

from typing import Final

# ---------------------------------------------------------------------------
# User roles
# ---------------------------------------------------------------------------

# Roles allowed to edit the schedule and the manual matrix
ROLES_EDICION_CRONOGRAMA: Final[tuple[str, ...]] = ("ADMIN", "CONSTRUCCION")

# ---------------------------------------------------------------------------
# Financial matrix concepts (one row of the matrix under the Gantt each)
# ---------------------------------------------------------------------------

CONCEPTO_GASTO_OBRA: Final[str] = "gasto_obra"
CONCEPTO_AVANCE_PARCIAL: Final[str] = "avance_parcial"
CONCEPTO_AVANCE_ACUMULADO: Final[str] = "avance_acumulado"
CONCEPTO_MINISTRACIONES: Final[str] = "ministraciones"
CONCEPTO_INVERSION_ACUMULADA: Final[str] = "inversion_acumulada"
CONCEPTO_FECHA_PAGO: Final[str] = "fecha_pago"

# Row order of the matrix; also the set of valid override conceptos
CONCEPTOS_MATRIZ: Final[tuple[str, ...]] = (
    CONCEPTO_GASTO_OBRA,
    CONCEPTO_AVANCE_PARCIAL,
    CONCEPTO_AVANCE_ACUMULADO,
    CONCEPTO_MINISTRACIONES,
    CONCEPTO_INVERSION_ACUMULADA,
    CONCEPTO_FECHA_PAGO,
)

# ---------------------------------------------------------------------------
# Payment plans
# ---------------------------------------------------------------------------

# Only the current plan of this type feeds the ministraciones row
TIPO_PLAN_PAGO_CONSTRUCCION: Final[str] = "PAGO_CONSTRUCCION"

# ---------------------------------------------------------------------------
# Gantt calendar: every month is split into 4 uniform week buckets
# ---------------------------------------------------------------------------

SEMANAS_POR_MES: Final[int] = 4
DIAS_POR_SEMANA: Final[int] = 7
PORCENTAJE_MAXIMO: Final[float] = 100.0
