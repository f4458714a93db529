from __future__ import annotations

import pytest

from survey_insights.stage1_ingest import (
    EmptyWorkbookError,
    InvalidFileFormatError,
    ParseError,
    SheetReadError,
    WorkbookReader,
    is_no_answer,
    read_workbook,
)


@pytest.mark.parametrize("value", [None, "", "   ", "(空)", " (空) ", "no answer", "No Answer"])
def test_is_no_answer_true(value):
    assert is_no_answer(value)


@pytest.mark.parametrize("value", ["Answer", "0", 0, "no answers here"])
def test_is_no_answer_false(value):
    assert not is_no_answer(value)


def test_is_no_answer_custom_sentinels():
    assert is_no_answer("N/A", sentinels=["n/a"])
    assert not is_no_answer("(空)", sentinels=["n/a"])


def test_read_bytes_first_sheet(survey_bytes):
    reader = WorkbookReader(survey_bytes, filename="survey.xlsx")
    rows = reader.read()

    assert reader.columns == ["Name", "ID", "Dept", "Q1_text", "Q2_single_choice", "Q3_text"]
    assert len(rows) == 15
    assert rows[0]["Name"] == "Person 0"
    assert rows[0]["ID"] == "1000"
    assert rows[0]["Q1_text"] == "Answer 0"
    assert rows[12]["Q1_text"] == "(空)"
    # Empty cells come back as ''
    assert rows[13]["Q1_text"] == ""


def test_read_from_path(survey_file):
    rows = read_workbook(survey_file)
    assert len(rows) == 15


def test_drops_all_blank_rows(workbook_factory):
    content = workbook_factory({
        "Name": ["Alice", None, "Bob"],
        "Q1_text": ["Fine", None, "Slow delivery"],
    })
    rows = read_workbook(content, filename="survey.xlsx")
    assert [r["Name"] for r in rows] == ["Alice", "Bob"]


def test_header_only_sheet_is_empty(workbook_factory):
    content = workbook_factory({"Name": [], "Q1_text": []})
    with pytest.raises(EmptyWorkbookError):
        read_workbook(content, filename="empty.xlsx")


def test_rejects_non_excel_extension(survey_bytes):
    with pytest.raises(InvalidFileFormatError):
        WorkbookReader(survey_bytes, filename="survey.csv")


def test_rejects_bytes_without_filename(survey_bytes):
    with pytest.raises(InvalidFileFormatError):
        WorkbookReader(survey_bytes)


def test_corrupt_workbook_raises_sheet_read_error():
    with pytest.raises(SheetReadError):
        read_workbook(b"definitely not a zip archive", filename="broken.xlsx")


def test_all_reader_errors_are_parse_errors():
    for exc in (InvalidFileFormatError, SheetReadError, EmptyWorkbookError):
        assert issubclass(exc, ParseError)
