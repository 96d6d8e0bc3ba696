"""create delivery_data table

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:30:00
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None

_COUNTERS = (
    "numero_minimo_de_entregadores_regulares_na_escala",
    "numero_de_corridas_ofertadas",
    "numero_de_corridas_aceitas",
    "numero_de_corridas_rejeitadas",
    "numero_de_corridas_completadas",
    "numero_de_corridas_canceladas_pela_pessoa_entregadora",
    "numero_de_pedidos_aceitos_e_concluidos",
)


def upgrade() -> None:
    op.create_table(
        "delivery_data",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("data_do_periodo", sa.Date(), nullable=False),
        sa.Column("periodo", sa.Text(), nullable=False),
        sa.Column("duracao_do_periodo", sa.String(length=16), nullable=False),
        sa.Column("tag", sa.Text(), nullable=False),
        sa.Column("id_da_pessoa_entregadora", sa.Text(), nullable=False),
        sa.Column("pessoa_entregadora", sa.Text(), nullable=False),
        sa.Column("praca", sa.Text(), nullable=False, comment="Region"),
        sa.Column("sub_praca", sa.Text(), nullable=False, comment="Sub-region"),
        sa.Column("origem", sa.Text(), nullable=False, comment="Origin channel"),
        sa.Column("tempo_disponivel_escalado", sa.String(length=16), nullable=False),
        sa.Column("tempo_disponivel_absoluto", sa.String(length=16), nullable=False),
        *(sa.Column(name, sa.Integer(), nullable=False) for name in _COUNTERS),
        sa.Column("soma_das_taxas_das_corridas_aceitas", sa.Numeric(14, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_delivery_data"),
    )
    op.create_index("ix_delivery_data_data_do_periodo", "delivery_data", ["data_do_periodo"], unique=False)
    op.create_index("ix_delivery_data_praca", "delivery_data", ["praca"], unique=False)
    op.create_index(
        "ix_delivery_data_praca_data_do_periodo",
        "delivery_data",
        ["praca", "data_do_periodo"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_delivery_data_praca_data_do_periodo", table_name="delivery_data")
    op.drop_index("ix_delivery_data_praca", table_name="delivery_data")
    op.drop_index("ix_delivery_data_data_do_periodo", table_name="delivery_data")
    op.drop_table("delivery_data")
