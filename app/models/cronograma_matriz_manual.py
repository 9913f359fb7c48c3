"""CronogramaMatrizManual model — manual overrides of the financial matrix."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.sql import func

from app.database import Base


class CronogramaMatrizManual(Base):
    """User-supplied value that replaces one calculated cell of the matrix.

    A cell is identified by (cliente, proyecto, mes, concepto).  Saving the
    same key again overwrites the previous value (last write wins);
    deleting the row reverts the cell to its calculated value.

    Attributes:
        id: Primary key.
        cliente_id: Owning client.
        proyecto_id: Owning client project.
        mes: 1-based month offset of the matrix column.
        concepto: One of ``constants.CONCEPTOS_MATRIZ``.
        valor: Raw text as entered; numeric concepts parse it as a number,
            ``fecha_pago`` keeps it as comma-separated labels.
        sobrescribe: Active flag; inactive rows are ignored by the matrix.
        created_by: FK to the Usuario that last saved the value.
        created_at: Record creation timestamp.
        updated_at: Last modification timestamp.
    """

    __tablename__ = "cronograma_matriz_manual"
    __table_args__ = (
        UniqueConstraint(
            "cliente_id", "proyecto_id", "mes", "concepto",
            name="uq_cronograma_matriz_manual_celda",
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    cliente_id = Column(Integer, nullable=False, index=True)
    proyecto_id = Column(Integer, nullable=False, index=True)
    mes = Column(Integer, nullable=False)
    concepto = Column(String(50), nullable=False)
    valor = Column(Text, nullable=False, default="")
    sobrescribe = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("usuario.id"), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now(), nullable=False)
