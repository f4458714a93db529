# Shared pytest fixtures
from __future__ import annotations

import io
from concurrent.futures import Future
from typing import Callable, Dict, List, Optional

import pandas as pd
import pytest

from survey_insights.stage2_analyst.exceptions import TransportError


class FakeLLMClient:
    """Stands in for LLMClient: records every call, fails on chosen call numbers"""

    def __init__(
        self,
        reply: str = "report",
        fail_on: Optional[set] = None,
        responder: Optional[Callable[[str, str, int], str]] = None
    ):
        self.reply = reply
        self.fail_on = set(fail_on or ())
        self.responder = responder
        self.calls: List[Dict[str, Optional[str]]] = []

    def complete(self, system_prompt: str, user_prompt: str, model_id: Optional[str] = None) -> str:
        self.calls.append({"system": system_prompt, "user": user_prompt, "model": model_id})
        number = len(self.calls)
        if number in self.fail_on:
            raise TransportError(f"LLM API HTTP error (500): call {number} failed", status_code=500)
        if self.responder:
            return self.responder(system_prompt, user_prompt, number)
        return f"{self.reply} {number}"


class SyncExecutor:
    """Executor that runs submitted work immediately on the calling thread"""

    def submit(self, fn, *args, **kwargs) -> Future:
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


def make_workbook_bytes(columns: Dict[str, list]) -> bytes:
    """Write a single-sheet .xlsx in memory (first row = header)"""
    buffer = io.BytesIO()
    pd.DataFrame(columns).to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


def make_rows(count: int, column: str = "Q1_text") -> List[dict]:
    """Projected row records with identity fields and distinct answers"""
    return [
        {"key": i, "Name": f"Person {i}", "ID": str(1000 + i), column: f"Answer {i}"}
        for i in range(count)
    ]


@pytest.fixture()
def fake_llm_factory():
    return FakeLLMClient


@pytest.fixture()
def fake_llm() -> FakeLLMClient:
    return FakeLLMClient()


@pytest.fixture()
def sync_executor(monkeypatch) -> SyncExecutor:
    executor = SyncExecutor()
    monkeypatch.setattr("api.services.run_manager.executor", executor)
    return executor


@pytest.fixture()
def survey_columns() -> Dict[str, list]:
    """
    15 respondents:
    - Q1_text: 12 distinct answers, one '(空)', one blank, one duplicate → admitted, 13 rows
    - Q2_single_choice: 15 distinct options → rejected by name
    - Q3_text: 3 distinct answers → rejected by threshold
    """
    q1 = [f"Answer {i}" for i in range(12)] + ["(空)", None, "Answer 0"]
    return {
        "Name": [f"Person {i}" for i in range(15)],
        "ID": [1000 + i for i in range(15)],
        "Dept": ["Sales" if i % 2 else "Ops" for i in range(15)],
        "Q1_text": q1,
        "Q2_single_choice": [f"Option {i}" for i in range(15)],
        "Q3_text": [["yes", "no", "maybe"][i % 3] for i in range(15)],
    }


@pytest.fixture()
def survey_bytes(survey_columns) -> bytes:
    return make_workbook_bytes(survey_columns)


@pytest.fixture()
def survey_file(tmp_path, survey_bytes):
    path = tmp_path / "survey.xlsx"
    path.write_bytes(survey_bytes)
    return path


@pytest.fixture()
def rows_factory():
    return make_rows


@pytest.fixture()
def workbook_factory():
    return make_workbook_bytes
