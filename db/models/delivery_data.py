"""
db/models/delivery_data.py

Persisted delivery-driver shift record.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import BigInteger, Date, DateTime, Index, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base

# BIGSERIAL on Postgres; SQLite only autoincrements INTEGER primary keys.
_ID_TYPE = BigInteger().with_variant(Integer(), "sqlite")


class DeliveryData(Base):
    __tablename__ = "delivery_data"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    data_do_periodo: Mapped[date] = mapped_column(Date, nullable=False)
    periodo: Mapped[str] = mapped_column(Text, nullable=False, default="")
    duracao_do_periodo: Mapped[str] = mapped_column(String(16), nullable=False, default="00:00:00")
    numero_minimo_de_entregadores_regulares_na_escala: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    tag: Mapped[str] = mapped_column(Text, nullable=False, default="")
    id_da_pessoa_entregadora: Mapped[str] = mapped_column(Text, nullable=False, default="")
    pessoa_entregadora: Mapped[str] = mapped_column(Text, nullable=False)
    praca: Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Region")
    sub_praca: Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Sub-region")
    origem: Mapped[str] = mapped_column(Text, nullable=False, default="", comment="Origin channel")
    tempo_disponivel_escalado: Mapped[str] = mapped_column(String(16), nullable=False, default="00:00:00")
    tempo_disponivel_absoluto: Mapped[str] = mapped_column(String(16), nullable=False, default="00:00:00")
    numero_de_corridas_ofertadas: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    numero_de_corridas_aceitas: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    numero_de_corridas_rejeitadas: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    numero_de_corridas_completadas: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    numero_de_corridas_canceladas_pela_pessoa_entregadora: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    numero_de_pedidos_aceitos_e_concluidos: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    soma_das_taxas_das_corridas_aceitas: Mapped[Decimal] = mapped_column(
        Numeric(14, 2),
        nullable=False,
        default=0,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    __table_args__ = (
        Index("ix_delivery_data_data_do_periodo", "data_do_periodo"),
        Index("ix_delivery_data_praca", "praca"),
        Index("ix_delivery_data_praca_data_do_periodo", "praca", "data_do_periodo"),
    )
