"""CronogramaGantt model — one activity bar of the construction Gantt."""

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class CronogramaGantt(Base):
    """Gantt activity tagged to a budget line, stored with absolute dates.

    The (mes, semana) grid coordinates shown by the frontend are computed
    at read time from ``fecha_inicio``/``fecha_fin`` and a reference date
    (see ``app.utils.calendario``); they are never persisted.

    Attributes:
        id: Primary key.
        cliente_id: Owning client.
        proyecto_id: Owning client project.
        departamento: Department label, normally "Construcción".
        mayor_id: FK to Mayor (budget line whose amount the bar spends).
        fecha_inicio: First day of the activity.
        fecha_fin: Last day of the activity.
        duracion: Calendar duration in days.
        created_by: FK to the Usuario that created the bar.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "cronograma_gantt"
    __table_args__ = (
        CheckConstraint("fecha_fin >= fecha_inicio", name="ck_cronograma_gantt_fechas"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    cliente_id = Column(Integer, nullable=False, index=True)
    proyecto_id = Column(Integer, nullable=False, index=True)
    departamento = Column(String(100), nullable=True)
    mayor_id = Column(Integer, ForeignKey("mayor.id"), nullable=False)
    fecha_inicio = Column(Date, nullable=False)
    fecha_fin = Column(Date, nullable=False)
    duracion = Column(Integer, nullable=False, default=0)  # days
    created_by = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    mayor = relationship("Mayor", back_populates="actividades_gantt", lazy="joined")
    creador = relationship("Usuario", back_populates="actividades_gantt", lazy="select")
