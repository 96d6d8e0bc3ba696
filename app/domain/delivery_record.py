"""
app/domain/delivery_record.py

Domain models used by the delivery spreadsheet import flow.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping

RawRow = Mapping[str, Any]

DATE_COLUMN = "data_do_periodo"
DRIVER_NAME_COLUMN = "pessoa_entregadora"

TIME_COLUMNS: tuple[str, ...] = (
    "duracao_do_periodo",
    "tempo_disponivel_escalado",
    "tempo_disponivel_absoluto",
)

STRING_COLUMNS: tuple[str, ...] = (
    "periodo",
    "tag",
    "id_da_pessoa_entregadora",
    "pessoa_entregadora",
    "praca",
    "sub_praca",
    "origem",
)

COUNTER_COLUMNS: tuple[str, ...] = (
    "numero_minimo_de_entregadores_regulares_na_escala",
    "numero_de_corridas_ofertadas",
    "numero_de_corridas_aceitas",
    "numero_de_corridas_rejeitadas",
    "numero_de_corridas_completadas",
    "numero_de_corridas_canceladas_pela_pessoa_entregadora",
    "numero_de_pedidos_aceitos_e_concluidos",
)

FEE_COLUMN = "soma_das_taxas_das_corridas_aceitas"

# Header order of the upstream export.
DELIVERY_COLUMNS: tuple[str, ...] = (
    "data_do_periodo",
    "periodo",
    "duracao_do_periodo",
    "numero_minimo_de_entregadores_regulares_na_escala",
    "tag",
    "id_da_pessoa_entregadora",
    "pessoa_entregadora",
    "praca",
    "sub_praca",
    "origem",
    "tempo_disponivel_escalado",
    "tempo_disponivel_absoluto",
    "numero_de_corridas_ofertadas",
    "numero_de_corridas_aceitas",
    "numero_de_corridas_rejeitadas",
    "numero_de_corridas_completadas",
    "numero_de_corridas_canceladas_pela_pessoa_entregadora",
    "numero_de_pedidos_aceitos_e_concluidos",
    "soma_das_taxas_das_corridas_aceitas",
)


@dataclass(frozen=True)
class DeliveryRecord:
    """
    One driver's activity in one period/sub-region, ready for persistence.
    """

    data_do_periodo: str
    pessoa_entregadora: str
    periodo: str = ""
    duracao_do_periodo: str = "00:00:00"
    numero_minimo_de_entregadores_regulares_na_escala: int = 0
    tag: str = ""
    id_da_pessoa_entregadora: str = ""
    praca: str = ""
    sub_praca: str = ""
    origem: str = ""
    tempo_disponivel_escalado: str = "00:00:00"
    tempo_disponivel_absoluto: str = "00:00:00"
    numero_de_corridas_ofertadas: int = 0
    numero_de_corridas_aceitas: int = 0
    numero_de_corridas_rejeitadas: int = 0
    numero_de_corridas_completadas: int = 0
    numero_de_corridas_canceladas_pela_pessoa_entregadora: int = 0
    numero_de_pedidos_aceitos_e_concluidos: int = 0
    soma_das_taxas_das_corridas_aceitas: float = 0.0

    def to_payload(self) -> dict[str, Any]:
        """
        Column-name keyed payload in upstream header order.
        """

        values = asdict(self)
        return {column: values[column] for column in DELIVERY_COLUMNS}


@dataclass(frozen=True)
class InsertOutcome:
    """
    Tagged result of one storage insert call.
    """

    inserted: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class BatchResult:
    """
    End-of-run commit tally.
    """

    success_count: int = 0
    error_count: int = 0
    error_details: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success_count,
            "errors": self.error_count,
            "errorDetails": list(self.error_details),
        }


@dataclass(frozen=True)
class IngestionReport:
    """
    Validated records plus the counts observed while reading the sheet.
    """

    records: list[DeliveryRecord]
    rows_read: int

    @property
    def rows_skipped(self) -> int:
        return self.rows_read - len(self.records)


@dataclass(frozen=True)
class ImportSummary:
    """
    Result of ingesting and committing one uploaded file.
    """

    rows_read: int
    rows_skipped: int
    result: BatchResult


@dataclass(frozen=True)
class TableStatus:
    exists: bool
    error: str | None = None


@dataclass(frozen=True)
class DeliveryStats:
    """
    Ride counter totals over every stored record.
    """

    total_records: int = 0
    total_ofertadas: int = 0
    total_aceitas: int = 0
    total_rejeitadas: int = 0
    total_completadas: int = 0
