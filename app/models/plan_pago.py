"""PlanPago / ParcialidadPago models — project payment plans and installments."""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.database import Base


class PlanPago(Base):
    """Payment plan of a client project.

    Only one plan per project and ``tipo_plan`` is flagged as current; the
    current construction plan feeds the ministraciones row of the matrix.

    Attributes:
        id: Primary key.
        proyecto_id: Owning client project.
        nombre: Display name of the plan.
        tipo_plan: "PAGO_DISENO" or "PAGO_CONSTRUCCION".
        es_plan_actual: Whether this is the plan in force.
        created_at: Record creation timestamp.
    """

    __tablename__ = "plan_pago"

    id = Column(Integer, primary_key=True, autoincrement=True)
    proyecto_id = Column(Integer, nullable=False, index=True)
    nombre = Column(String(200), nullable=True)
    tipo_plan = Column(String(50), nullable=False)
    es_plan_actual = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    # Relationships
    parcialidades = relationship(
        "ParcialidadPago",
        back_populates="plan_pago",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ParcialidadPago.numero",
    )


class ParcialidadPago(Base):
    """Single scheduled installment of a payment plan.

    Attributes:
        id: Primary key.
        plan_pago_id: FK to PlanPago.
        numero: Sequential installment number within the plan.
        nombre: Optional display label (falls back to "Pago {numero}").
        monto: Installment amount.
        fecha_vencimiento: Due date; installments without one are ignored
            by the matrix.
    """

    __tablename__ = "parcialidad_pago"

    id = Column(Integer, primary_key=True, autoincrement=True)
    plan_pago_id = Column(Integer, ForeignKey("plan_pago.id"), nullable=False)
    numero = Column(Integer, nullable=False)
    nombre = Column(String(200), nullable=True)
    monto = Column(Numeric(15, 2), default=0, nullable=False)
    fecha_vencimiento = Column(Date, nullable=True)

    # Relationships
    plan_pago = relationship("PlanPago", back_populates="parcialidades", lazy="select")
