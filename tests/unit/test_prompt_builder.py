from __future__ import annotations

import json

from survey_insights.stage2_analyst.prompt_builder import (
    Prompt,
    build_aggregation_prompt,
    build_batch_prompt,
    build_classification_prompt,
    load_prompt_template,
    render_classified_batch,
    serialize_batch,
)


BATCH = [
    {"key": 0, "Name": "张三", "ID": "1001", "Q1_text": "排班太乱"},
    {"key": 1, "Name": "Bob", "ID": "1002", "Q1_text": "More training please"},
]


def test_templates_are_bundled():
    for name in (
        "batch_analysis_system", "batch_analysis_user",
        "classification_system", "classification_user",
        "aggregation_system", "aggregation_user",
    ):
        assert load_prompt_template(name)


def test_serialize_batch_keeps_non_ascii():
    text = serialize_batch(BATCH)
    assert "排班太乱" in text
    assert json.loads(text) == BATCH


def test_batch_prompt_contains_rows_and_column():
    prompt = build_batch_prompt(BATCH, "Q1_text", ["Name", "ID"], batch_number=2, batch_count=3)
    assert isinstance(prompt, Prompt)
    assert prompt.system == load_prompt_template("batch_analysis_system")
    assert '"Q1_text"' in prompt.user
    assert "batch 2 of 3" in prompt.user
    assert "Name, ID" in prompt.user
    assert "张三" in prompt.user
    assert "More training please" in prompt.user


def test_classification_prompt():
    prompt = build_classification_prompt("  Shifts change too often ", "Q1_text", ["Scheduling", "Pay"])
    assert prompt.system == load_prompt_template("classification_system")
    assert "Answer: Shifts change too often" in prompt.user
    assert "Scheduling、Pay" in prompt.user


def test_aggregation_prompt_labels_batches_in_order():
    prompt = build_aggregation_prompt(["first report", "[Batch 2 analysis failed: boom]"], "Q1_text")
    assert prompt.system == load_prompt_template("aggregation_system")
    assert "2 partial reports" in prompt.user
    assert prompt.user.index("=== Batch 1 ===\nfirst report") < prompt.user.index("=== Batch 2 ===")
    assert "first-level themes" not in prompt.user


def test_aggregation_prompt_seeded_with_topics():
    prompt = build_aggregation_prompt(["r"], "Q1_text", topics=["Scheduling", "Pay"])
    assert "first-level themes: Scheduling、Pay" in prompt.user


def test_render_classified_batch():
    rows = [dict(BATCH[0], classification="Scheduling"), dict(BATCH[1], classification="Training")]
    text = render_classified_batch(rows, "Q1_text", ["Name", "ID"])
    lines = text.splitlines()
    assert lines[0] == '* 张三 - 1001 | Answer: "排班太乱" | Themes: Scheduling'
    assert lines[1].endswith("Themes: Training")


def test_render_classified_batch_without_identity_uses_row_key():
    text = render_classified_batch([dict(BATCH[1], classification="x")], "Q1_text", [])
    assert text.startswith("* row 1 |")
