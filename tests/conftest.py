"""
Shared fixtures for delivery import tests.
"""

from __future__ import annotations

import io
import zipfile
from collections.abc import Callable, Sequence
from typing import Any

import openpyxl
import pytest

from app.domain.delivery_record import DELIVERY_COLUMNS, DeliveryRecord, InsertOutcome


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def build_workbook(
    rows: Sequence[Sequence[Any]],
    *,
    headers: Sequence[Any] = DELIVERY_COLUMNS,
    extra_sheets: dict[str, Sequence[Sequence[Any]]] | None = None,
) -> bytes:
    """Serialize `headers` + `rows` as an in-memory .xlsx payload."""
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.title = "dados"
    sheet.append(list(headers))
    for row in rows:
        sheet.append(list(row))
    for title, sheet_rows in (extra_sheets or {}).items():
        extra = workbook.create_sheet(title)
        for row in sheet_rows:
            extra.append(list(row))

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def rewrite_sheet_xml(content: bytes, transform: Callable[[bytes], bytes]) -> bytes:
    """Return a copy of an .xlsx payload with the first sheet's XML passed through `transform`."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(content)) as source, zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as target:
        for item in source.infolist():
            data = source.read(item.filename)
            if item.filename == "xl/worksheets/sheet1.xml":
                data = transform(data)
            target.writestr(item, data)
    return buffer.getvalue()


def row_from_mapping(values: dict[str, Any]) -> list[Any]:
    """Lay out a column->value mapping in header order."""
    return [values.get(column) for column in DELIVERY_COLUMNS]


def make_record(index: int, **overrides: Any) -> DeliveryRecord:
    values: dict[str, Any] = {
        "data_do_periodo": "2024-03-15",
        "pessoa_entregadora": f"Entregador {index}",
        "id_da_pessoa_entregadora": str(index),
        "praca": "SAO PAULO",
        "numero_de_corridas_ofertadas": 10,
        "numero_de_corridas_aceitas": 8,
    }
    values.update(overrides)
    return DeliveryRecord(**values)


class FakeDeliveryStorage:
    """
    In-memory storage that rejects any insert containing a record matched by
    `reject`, the way a table constraint fails a whole statement.
    """

    def __init__(self, *, reject: Callable[[DeliveryRecord], bool] | None = None) -> None:
        self._reject = reject or (lambda record: False)
        self.bulk_calls: list[list[DeliveryRecord]] = []
        self.single_calls: list[DeliveryRecord] = []
        self.stored: list[DeliveryRecord] = []

    async def insert_many(self, records: Sequence[DeliveryRecord]) -> InsertOutcome:
        batch = list(records)
        self.bulk_calls.append(batch)
        rejected = [record for record in batch if self._reject(record)]
        if rejected:
            return InsertOutcome(error=f"check constraint violated by {rejected[0].pessoa_entregadora}")
        self.stored.extend(batch)
        return InsertOutcome(inserted=len(batch))

    async def insert_one(self, record: DeliveryRecord) -> InsertOutcome:
        self.single_calls.append(record)
        if self._reject(record):
            return InsertOutcome(error=f"check constraint violated by {record.pessoa_entregadora}")
        self.stored.append(record)
        return InsertOutcome(inserted=1)


@pytest.fixture
def workbook_factory() -> Callable[..., bytes]:
    return build_workbook
