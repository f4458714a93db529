from __future__ import annotations

import pytest

from survey_insights.stage2_analyst.config import (
    CLASSIFICATION_FAILED_MARKER,
    EMPTY_CONTENT_MARKER,
    NO_ANSWERS_SUMMARY,
)
from survey_insights.stage2_analyst.exceptions import LLMError
from survey_insights.stage2_analyst.pipelines import classify_row, classify_rows, parse_topics


def _topic_responder(system, user, number):
    # Aggregation prompts carry batch sections; everything else is a row
    if "=== Batch" in user:
        return "themed report"
    return "Scheduling"


@pytest.mark.parametrize("text,expected", [
    ("Scheduling、Pay、Training", ["Scheduling", "Pay", "Training"]),
    ("Pay, Hours，Culture; Tools；Food", ["Pay", "Hours", "Culture", "Tools", "Food"]),
    ("Pay\nHours\n\n", ["Pay", "Hours"]),
    (" Pay 、、 Pay 、Hours ", ["Pay", "Hours"]),
    ("", []),
    ("、 , ;", []),
])
def test_parse_topics(text, expected):
    assert parse_topics(text) == expected


def test_classify_row_blank_makes_no_call(fake_llm):
    assert classify_row(fake_llm, "   ", "Q1_text", ["Pay"]) == EMPTY_CONTENT_MARKER
    assert classify_row(fake_llm, None, "Q1_text", ["Pay"]) == EMPTY_CONTENT_MARKER
    assert fake_llm.calls == []


def test_classify_rows_one_call_per_row_plus_aggregation(fake_llm_factory, rows_factory):
    llm = fake_llm_factory(responder=_topic_responder)
    rows = rows_factory(7)

    result = classify_rows(rows, "Q1_text", ["Name", "ID"], ["Scheduling", "Pay"], llm, batch_size=300)

    assert len(llm.calls) == 8
    assert result["topics_analysis"] == "themed report"
    assert [r["classification"] for r in result["rows"]] == ["Scheduling"] * 7
    assert result["stats"] == {"total_rows": 7, "failed_rows": 0, "empty_rows": 0, "llm_calls": 8}
    # Input rows are not mutated
    assert "classification" not in rows[0]


def test_blank_row_is_marked_empty_without_a_call(fake_llm_factory, rows_factory):
    llm = fake_llm_factory(responder=_topic_responder)
    rows = rows_factory(3)
    rows[1]["Q1_text"] = "  "

    result = classify_rows(rows, "Q1_text", ["Name"], ["Pay"], llm)

    assert result["rows"][1]["classification"] == EMPTY_CONTENT_MARKER
    assert result["stats"]["empty_rows"] == 1
    assert len(llm.calls) == 3


def test_failed_row_gets_marker_and_run_continues(fake_llm_factory, rows_factory):
    llm = fake_llm_factory(fail_on={2}, responder=_topic_responder)
    result = classify_rows(rows_factory(4), "Q1_text", ["Name"], ["Pay"], llm)

    classifications = [r["classification"] for r in result["rows"]]
    assert classifications == ["Scheduling", CLASSIFICATION_FAILED_MARKER, "Scheduling", "Scheduling"]
    assert result["stats"]["failed_rows"] == 1
    assert result["topics_analysis"] == "themed report"


def test_empty_model_reply_counts_as_failure(fake_llm_factory, rows_factory):
    llm = fake_llm_factory(responder=lambda s, u, n: "themed report" if "=== Batch" in u else "")
    result = classify_rows(rows_factory(2), "Q1_text", ["Name"], ["Pay"], llm)
    assert [r["classification"] for r in result["rows"]] == [CLASSIFICATION_FAILED_MARKER] * 2
    assert result["stats"]["failed_rows"] == 2


def test_reply_matching_empty_marker_still_counts_as_a_call(fake_llm_factory, rows_factory):
    llm = fake_llm_factory(responder=lambda s, u, n: "themed report" if "=== Batch" in u else EMPTY_CONTENT_MARKER)
    result = classify_rows(rows_factory(2), "Q1_text", ["Name"], ["Pay"], llm)

    assert len(llm.calls) == 3
    assert result["stats"] == {"total_rows": 2, "failed_rows": 0, "empty_rows": 0, "llm_calls": 3}


def test_empty_rows_make_no_calls(fake_llm):
    result = classify_rows([], "Q1_text", ["Name"], ["Pay"], fake_llm)

    assert fake_llm.calls == []
    assert result["rows"] == []
    assert result["topics_analysis"] == NO_ANSWERS_SUMMARY
    assert result["stats"]["llm_calls"] == 0


def test_aggregation_is_seeded_with_topics_and_classified_rows(fake_llm_factory, rows_factory):
    llm = fake_llm_factory(responder=_topic_responder)
    classify_rows(rows_factory(3), "Q1_text", ["Name", "ID"], ["Scheduling", "Pay"], llm)

    aggregation = llm.calls[-1]["user"]
    assert "Scheduling、Pay" in aggregation
    assert '* Person 0 - 1000 | Answer: "Answer 0" | Themes: Scheduling' in aggregation


def test_aggregation_sections_follow_batch_size(fake_llm_factory, rows_factory):
    llm = fake_llm_factory(responder=_topic_responder)
    classify_rows(rows_factory(5), "Q1_text", ["Name"], ["Pay"], llm, batch_size=2)
    aggregation = llm.calls[-1]["user"]
    assert "=== Batch 3 ===" in aggregation
    assert "=== Batch 4 ===" not in aggregation


def test_aggregation_failure_propagates(fake_llm_factory, rows_factory):
    llm = fake_llm_factory(fail_on={4}, responder=_topic_responder)
    with pytest.raises(LLMError):
        classify_rows(rows_factory(3), "Q1_text", ["Name"], ["Pay"], llm)


def test_requires_topics(fake_llm, rows_factory):
    with pytest.raises(ValueError):
        classify_rows(rows_factory(3), "Q1_text", ["Name"], [], fake_llm)
    assert fake_llm.calls == []


def test_progress_every_five_rows_and_at_end(fake_llm_factory, rows_factory):
    llm = fake_llm_factory(responder=_topic_responder)
    events = []
    landed = []

    classify_rows(
        rows_factory(12), "Q1_text", ["Name"], ["Pay"], llm,
        batch_size=300,
        progress_interval=5,
        progress_callback=lambda stage, percent, message: events.append((stage, message)),
        row_callback=lambda position, row: landed.append(position)
    )

    messages = [m for stage, m in events if stage == "classification"]
    assert messages == [
        "Classifying 12 answers",
        "Classified 5/12 answers",
        "Classified 10/12 answers",
        "Classified 12/12 answers",
    ]
    assert events[-1][0] == "aggregation"
    assert landed == list(range(1, 13))


def test_progress_at_batch_boundaries(fake_llm_factory, rows_factory):
    llm = fake_llm_factory(responder=_topic_responder)
    events = []

    classify_rows(
        rows_factory(8), "Q1_text", ["Name"], ["Pay"], llm,
        batch_size=3,
        progress_interval=5,
        progress_callback=lambda stage, percent, message: events.append(message)
    )

    assert "Classified 3/8 answers" in events
    assert "Classified 5/8 answers" in events
    assert "Classified 6/8 answers" in events
    assert "Classified 8/8 answers" in events
    assert "Classified 4/8 answers" not in events
