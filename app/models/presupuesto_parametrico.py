"""PresupuestoParametrico model — parametric budget amount per budget line."""

from sqlalchemy import Column, ForeignKey, Integer, Numeric
from sqlalchemy.orm import relationship

from app.database import Base


class PresupuestoParametrico(Base):
    """One parametric budget row of a client project.

    Several rows may share a ``mayor_id``; the Gantt matrix sums them into
    a single total per budget line.

    Attributes:
        id: Primary key.
        cliente_id: Owning client.
        proyecto_id: Owning client project.
        mayor_id: FK to Mayor (budget line).
        monto_total: Monetary amount assigned to the line.
    """

    __tablename__ = "presupuesto_parametrico"

    id = Column(Integer, primary_key=True, autoincrement=True)
    cliente_id = Column(Integer, nullable=False, index=True)
    proyecto_id = Column(Integer, nullable=False, index=True)
    mayor_id = Column(Integer, ForeignKey("mayor.id"), nullable=False)
    monto_total = Column(Numeric(15, 2), default=0, nullable=True)

    # Relationships
    mayor = relationship(
        "Mayor", back_populates="presupuestos_parametricos", lazy="select"
    )
