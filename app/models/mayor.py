"""Mayor model — budget line (cuenta de mayor) of the chart of accounts."""

from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from app.database import Base


class Mayor(Base):
    """Budget line that parametric budgets and Gantt activities are tagged to.

    Attributes:
        id: Primary key.
        codigo: Account code, e.g. "5100".
        nombre: Display name, e.g. "Cimentación".
        departamento: Owning department, e.g. "Construcción".
        activo: Soft-delete flag.
    """

    __tablename__ = "mayor"

    id = Column(Integer, primary_key=True, autoincrement=True)
    codigo = Column(String(20), nullable=False, unique=True)
    nombre = Column(String(300), nullable=False)
    departamento = Column(String(100), nullable=False)
    activo = Column(Boolean, default=True, nullable=False)

    # Relationships
    presupuestos_parametricos = relationship(
        "PresupuestoParametrico", back_populates="mayor", lazy="select"
    )
    actividades_gantt = relationship(
        "CronogramaGantt", back_populates="mayor", lazy="select"
    )
