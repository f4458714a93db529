from __future__ import annotations

import pytest

from survey_insights.stage2_analyst.exceptions import TransportError
from survey_insights.stage2_analyst.prompt_builder import load_prompt_template
from survey_insights.stage2_analyst.summarizer import summarize


def test_summarize_makes_one_call(fake_llm):
    text = summarize(fake_llm, ["a", "b", "c"], "Q1_text", model_id="m")
    assert text == "report 1"
    assert len(fake_llm.calls) == 1
    call = fake_llm.calls[0]
    assert call["system"] == load_prompt_template("aggregation_system")
    assert call["model"] == "m"
    assert "=== Batch 3 ===\nc" in call["user"]


def test_summarize_with_topics(fake_llm):
    summarize(fake_llm, ["a"], "Q1_text", topics=("Pay", "Hours"))
    assert "Pay、Hours" in fake_llm.calls[0]["user"]


def test_summarize_has_no_fallback(fake_llm_factory):
    llm = fake_llm_factory(fail_on={1})
    with pytest.raises(TransportError):
        summarize(llm, ["a"], "Q1_text")
