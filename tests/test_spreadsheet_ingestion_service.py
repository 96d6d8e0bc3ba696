from __future__ import annotations

from datetime import date

import pytest

from app.domain.delivery_record import RawRow
from app.exceptions import EmptyResultError, SpreadsheetParseError
from app.services.batch_committer import BatchCommitter
from app.services.spreadsheet_ingestion_service import SpreadsheetIngestionService
from app.validators.delivery_row_validator import DeliveryRowValidator
from conftest import FakeDeliveryStorage, build_workbook, row_from_mapping

pytestmark = pytest.mark.anyio


def _three_row_workbook() -> bytes:
    return build_workbook(
        [
            row_from_mapping(
                {
                    "data_do_periodo": "2024-03-15",
                    "duracao_do_periodo": "8:30",
                    "pessoa_entregadora": "Ana",
                    "numero_de_corridas_ofertadas": 10,
                }
            ),
            row_from_mapping({"data_do_periodo": "2024-03-15", "pessoa_entregadora": ""}),
            row_from_mapping(
                {
                    "data_do_periodo": 45000,
                    "duracao_do_periodo": 0.5,
                    "pessoa_entregadora": "Carla",
                    "soma_das_taxas_das_corridas_aceitas": "R$ 45.50",
                }
            ),
        ]
    )


async def test_valid_rows_survive_in_sheet_order() -> None:
    service = SpreadsheetIngestionService()

    records = await service.ingest(_three_row_workbook())

    assert [record.pessoa_entregadora for record in records] == ["Ana", "Carla"]
    assert records[0].data_do_periodo == "2024-03-15"
    assert records[0].duracao_do_periodo == "8:30:00"
    assert records[0].numero_de_corridas_ofertadas == 10
    assert records[1].data_do_periodo == "2023-03-15"
    assert records[1].duracao_do_periodo == "12:00:00"
    assert records[1].soma_das_taxas_das_corridas_aceitas == pytest.approx(45.5)


async def test_report_counts_skipped_rows() -> None:
    report = await SpreadsheetIngestionService().ingest_with_report(_three_row_workbook())

    assert report.rows_read == 3
    assert report.rows_skipped == 1


async def test_no_valid_rows_raises_empty_result() -> None:
    content = build_workbook([row_from_mapping({"data_do_periodo": "2024-03-15", "praca": "RIO"})])

    with pytest.raises(EmptyResultError) as excinfo:
        await SpreadsheetIngestionService().ingest(content)

    assert excinfo.value.rows_read == 1


async def test_unreadable_file_raises_parse_error() -> None:
    with pytest.raises(SpreadsheetParseError):
        await SpreadsheetIngestionService().ingest(b"not a workbook")


async def test_custom_parser_and_validator_are_used() -> None:
    async def parser(content: bytes) -> list[RawRow]:
        assert content == b"payload"
        return [{"data_do_periodo": "??", "pessoa_entregadora": "Ana"}]

    service = SpreadsheetIngestionService(
        parser=parser,
        validator=DeliveryRowValidator(today=date(2026, 10, 19)),
    )

    [record] = await service.ingest(b"payload")

    assert record.data_do_periodo == "2026-10-19"


async def test_import_file_commits_valid_records() -> None:
    storage = FakeDeliveryStorage()
    committer = BatchCommitter(storage, pause_seconds=0)

    summary = await SpreadsheetIngestionService().import_file(_three_row_workbook(), committer)

    assert summary.rows_read == 3
    assert summary.rows_skipped == 1
    assert summary.result.success_count == 2
    assert summary.result.error_count == 0
    assert [record.pessoa_entregadora for record in storage.stored] == ["Ana", "Carla"]


async def test_importing_same_file_twice_inserts_twice() -> None:
    content = _three_row_workbook()
    storage = FakeDeliveryStorage()
    committer = BatchCommitter(storage, pause_seconds=0)
    service = SpreadsheetIngestionService()

    await service.import_file(content, committer)
    await service.import_file(content, committer)

    assert len(storage.bulk_calls) == 2
    assert storage.bulk_calls[0] == storage.bulk_calls[1]
    assert len(storage.stored) == 4
