"""cronograma_inicial

Crea las tablas del cronograma de obra: usuarios, mayores, presupuesto
paramétrico, planes de pago con sus parcialidades, barras del Gantt y la
matriz manual.

Revision ID: 4c7e2a91d0b3
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4c7e2a91d0b3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "usuario",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(100), nullable=False, unique=True),
        sa.Column("email", sa.String(200), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(200), nullable=False),
        sa.Column("nombre_completo", sa.String(300), nullable=True),
        sa.Column("rol", sa.String(50), nullable=True),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("ultimo_acceso", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "mayor",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("codigo", sa.String(20), nullable=False, unique=True),
        sa.Column("nombre", sa.String(300), nullable=False),
        sa.Column("departamento", sa.String(100), nullable=False),
        sa.Column("activo", sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        "presupuesto_parametrico",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("cliente_id", sa.Integer(), nullable=False, index=True),
        sa.Column("proyecto_id", sa.Integer(), nullable=False, index=True),
        sa.Column("mayor_id", sa.Integer(), sa.ForeignKey("mayor.id"), nullable=False),
        sa.Column("monto_total", sa.Numeric(15, 2), nullable=True),
    )

    op.create_table(
        "plan_pago",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("proyecto_id", sa.Integer(), nullable=False, index=True),
        sa.Column("nombre", sa.String(200), nullable=True),
        sa.Column("tipo_plan", sa.String(50), nullable=False),
        sa.Column("es_plan_actual", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "parcialidad_pago",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("plan_pago_id", sa.Integer(), sa.ForeignKey("plan_pago.id"), nullable=False),
        sa.Column("numero", sa.Integer(), nullable=False),
        sa.Column("nombre", sa.String(200), nullable=True),
        sa.Column("monto", sa.Numeric(15, 2), nullable=False, server_default="0"),
        sa.Column("fecha_vencimiento", sa.Date(), nullable=True),
    )

    op.create_table(
        "cronograma_gantt",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("cliente_id", sa.Integer(), nullable=False, index=True),
        sa.Column("proyecto_id", sa.Integer(), nullable=False, index=True),
        sa.Column("departamento", sa.String(100), nullable=True),
        sa.Column("mayor_id", sa.Integer(), sa.ForeignKey("mayor.id"), nullable=False),
        sa.Column("fecha_inicio", sa.Date(), nullable=False),
        sa.Column("fecha_fin", sa.Date(), nullable=False),
        sa.Column("duracion", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("usuario.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("fecha_fin >= fecha_inicio", name="ck_cronograma_gantt_fechas"),
    )

    op.create_table(
        "cronograma_matriz_manual",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("cliente_id", sa.Integer(), nullable=False, index=True),
        sa.Column("proyecto_id", sa.Integer(), nullable=False, index=True),
        sa.Column("mes", sa.Integer(), nullable=False),
        sa.Column("concepto", sa.String(50), nullable=False),
        sa.Column("valor", sa.Text(), nullable=False, server_default=""),
        sa.Column("sobrescribe", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("usuario.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "cliente_id", "proyecto_id", "mes", "concepto",
            name="uq_cronograma_matriz_manual_celda",
        ),
    )


def downgrade() -> None:
    op.drop_table("cronograma_matriz_manual")
    op.drop_table("cronograma_gantt")
    op.drop_table("parcialidad_pago")
    op.drop_table("plan_pago")
    op.drop_table("presupuesto_parametrico")
    op.drop_table("mayor")
    op.drop_table("usuario")
