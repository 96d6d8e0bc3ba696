from __future__ import annotations

import re
from datetime import datetime

import pytest

from app.exceptions import SpreadsheetParseError
from app.parsers.spreadsheet_parser import parse_spreadsheet, read_spreadsheet_rows
from conftest import build_workbook, rewrite_sheet_xml


def test_rows_are_keyed_by_header() -> None:
    content = build_workbook(
        [["2024-03-15", "Ana", 12], ["2024-03-16", "Bruno", 7]],
        headers=["data_do_periodo", "pessoa_entregadora", "numero_de_corridas_ofertadas"],
    )

    rows = read_spreadsheet_rows(content)

    assert rows == [
        {"data_do_periodo": "2024-03-15", "pessoa_entregadora": "Ana", "numero_de_corridas_ofertadas": 12},
        {"data_do_periodo": "2024-03-16", "pessoa_entregadora": "Bruno", "numero_de_corridas_ofertadas": 7},
    ]


def test_blank_cells_and_blank_rows_are_left_out() -> None:
    content = build_workbook(
        [["2024-03-15", None, 3], [None, None, None], ["2024-03-16", "Bruno", None]],
        headers=["data_do_periodo", "pessoa_entregadora", "numero_de_corridas_ofertadas"],
    )

    rows = read_spreadsheet_rows(content)

    assert rows == [
        {"data_do_periodo": "2024-03-15", "numero_de_corridas_ofertadas": 3},
        {"data_do_periodo": "2024-03-16", "pessoa_entregadora": "Bruno"},
    ]


def test_column_without_header_is_dropped() -> None:
    content = build_workbook(
        [["2024-03-15", "orphan", "Ana"]],
        headers=["data_do_periodo", None, "pessoa_entregadora"],
    )

    assert read_spreadsheet_rows(content) == [
        {"data_do_periodo": "2024-03-15", "pessoa_entregadora": "Ana"},
    ]


def test_only_first_sheet_is_read() -> None:
    content = build_workbook(
        [["2024-03-15", "Ana"]],
        headers=["data_do_periodo", "pessoa_entregadora"],
        extra_sheets={"resumo": [["data_do_periodo", "pessoa_entregadora"], ["2020-01-01", "Outro"]]},
    )

    assert read_spreadsheet_rows(content) == [
        {"data_do_periodo": "2024-03-15", "pessoa_entregadora": "Ana"},
    ]


def test_date_formatted_cell_comes_back_as_datetime() -> None:
    content = build_workbook(
        [[datetime(2024, 3, 15), "Ana"]],
        headers=["data_do_periodo", "pessoa_entregadora"],
    )

    [row] = read_spreadsheet_rows(content)

    assert row["data_do_periodo"] == datetime(2024, 3, 15)


def test_empty_payload_is_rejected() -> None:
    with pytest.raises(SpreadsheetParseError):
        read_spreadsheet_rows(b"")


def test_non_workbook_payload_is_rejected() -> None:
    with pytest.raises(SpreadsheetParseError, match="not a readable spreadsheet"):
        read_spreadsheet_rows(b"data_do_periodo,pessoa_entregadora\n2024-03-15,Ana\n")


def test_legacy_xls_is_rejected_with_hint() -> None:
    payload = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 512

    with pytest.raises(SpreadsheetParseError, match=r"\.xls"):
        read_spreadsheet_rows(payload)


def test_header_only_sheet_is_rejected() -> None:
    content = build_workbook([], headers=["data_do_periodo", "pessoa_entregadora"])

    with pytest.raises(SpreadsheetParseError, match="no data rows"):
        read_spreadsheet_rows(content)


def test_understated_sheet_dimension_does_not_hide_rows() -> None:
    content = build_workbook(
        [["2024-03-15", "Ana", 12], ["2024-03-16", "Bruno", 7], ["2024-03-17", "Carla", 3]],
        headers=["data_do_periodo", "pessoa_entregadora", "numero_de_corridas_ofertadas"],
    )
    understated = rewrite_sheet_xml(
        content,
        lambda xml: re.sub(rb'<dimension ref="[^"]*"\s*/>', b'<dimension ref="A1:B2"/>', xml),
    )

    rows = read_spreadsheet_rows(understated)

    assert [row["pessoa_entregadora"] for row in rows] == ["Ana", "Bruno", "Carla"]
    assert [row["numero_de_corridas_ofertadas"] for row in rows] == [12, 7, 3]


def test_corrupt_sheet_xml_is_a_parse_error() -> None:
    content = build_workbook(
        [["2024-03-15", "Ana"], ["2024-03-16", "Bruno"]],
        headers=["data_do_periodo", "pessoa_entregadora"],
    )
    truncated = rewrite_sheet_xml(content, lambda xml: xml[: len(xml) // 2])

    with pytest.raises(SpreadsheetParseError, match="could not be read"):
        read_spreadsheet_rows(truncated)


@pytest.mark.anyio
async def test_async_parse_matches_sync_parse() -> None:
    content = build_workbook(
        [["2024-03-15", "Ana"]],
        headers=["data_do_periodo", "pessoa_entregadora"],
    )

    assert await parse_spreadsheet(content) == read_spreadsheet_rows(content)
