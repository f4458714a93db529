from __future__ import annotations

from survey_insights.models import DatasetStatus
from survey_insights.stage2_analyst.projector import build_dataset, project_rows


RAW_ROWS = [
    {"Name": "Alice", "ID": "1", "Dept": "Ops", "Q1_text": "Too slow"},
    {"Name": "Bob", "ID": "2", "Dept": "Ops", "Q1_text": ""},
    {"Name": "Cara", "ID": "3", "Dept": "Sales", "Q1_text": "(空)"},
    {"Name": "Dan", "ID": "4", "Q1_text": "  Great support  "},
    {"Name": "Eve", "ID": "5", "Dept": "Sales", "Q1_text": "No answer"},
]


def test_project_rows_drops_blank_and_sentinel_answers():
    rows = project_rows(RAW_ROWS, ["Name", "ID", "Dept"], "Q1_text")
    assert [r["Name"] for r in rows] == ["Alice", "Dan"]


def test_project_rows_keys_are_ordinals_of_kept_rows():
    rows = project_rows(RAW_ROWS, ["Name", "ID", "Dept"], "Q1_text")
    assert [r["key"] for r in rows] == [0, 1]


def test_project_rows_fills_missing_identity_and_keeps_answer_verbatim():
    rows = project_rows(RAW_ROWS, ["Name", "ID", "Dept"], "Q1_text")
    dan = rows[1]
    assert dan["Dept"] == ""
    assert dan["Q1_text"] == "  Great support  "
    assert set(dan) == {"key", "Name", "ID", "Dept", "Q1_text"}


def test_project_rows_custom_sentinels():
    rows = project_rows(RAW_ROWS, ["Name"], "Q1_text", sentinels=["too slow"])
    assert [r["Name"] for r in rows] == ["Cara", "Dan", "Eve"]


def test_build_dataset():
    dataset = build_dataset(RAW_ROWS, ["Name", "ID", "Dept"], "Q1_text")
    assert dataset.name == "Q1_text (2 rows)"
    assert dataset.target_column == "Q1_text"
    assert dataset.identity_columns == ["Name", "ID", "Dept"]
    assert dataset.row_count == 2
    assert dataset.status == DatasetStatus.IDLE
    assert dataset.narrative_summary is None
    assert dataset.classification_topics == ()


def test_build_dataset_excludes_target_from_identity():
    dataset = build_dataset(RAW_ROWS, ["Name", "Q1_text"], "Q1_text")
    assert dataset.identity_columns == ["Name"]
