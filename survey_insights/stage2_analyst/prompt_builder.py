"""
Prompt construction for the three request shapes:
- batch narrative (one batch of answers → thematic report)
- single-row classification (one answer → matching themes)
- aggregation (partial reports → final report)

Templates live in ./prompts/*.txt. Everything here is pure: no I/O besides
reading the bundled templates.
"""

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Sequence

from ..models import CLASSIFICATION_FIELD, ROW_KEY

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent / "prompts"

TOPIC_JOINER = '、'


@dataclass(frozen=True)
class Prompt:
    """A system + user message pair ready for LLMClient.complete()"""
    system: str
    user: str


@lru_cache(maxsize=None)
def load_prompt_template(name: str) -> str:
    """Load a bundled prompt template by name (without .txt)"""
    prompt_path = PROMPTS_DIR / f"{name}.txt"
    with open(prompt_path, 'r', encoding='utf-8') as f:
        return f.read().strip()


def serialize_batch(batch: Sequence[dict]) -> str:
    """Render batch rows as indented JSON, keeping non-ASCII text readable"""
    return json.dumps(list(batch), ensure_ascii=False, indent=2, default=str)


def build_batch_prompt(
    batch: Sequence[dict],
    column_name: str,
    identity_columns: Sequence[str],
    batch_number: int = 1,
    batch_count: int = 1
) -> Prompt:
    """
    Build the narrative-analysis prompt for one batch

    Args:
        batch: Projected row records (identity fields + answer)
        column_name: The survey question being analyzed
        identity_columns: Names of the identity fields present in each row
        batch_number: 1-based index of this batch
        batch_count: Total number of batches for the column

    Returns:
        Prompt with the analyst persona and the serialized batch
    """
    user = load_prompt_template("batch_analysis_user").format(
        column_name=column_name,
        batch_number=batch_number,
        batch_count=batch_count,
        row_count=len(batch),
        identity_fields=", ".join(identity_columns) or "none",
        batch_json=serialize_batch(batch)
    )
    return Prompt(system=load_prompt_template("batch_analysis_system"), user=user)


def build_classification_prompt(content: str, column_name: str, topics: Sequence[str]) -> Prompt:
    """
    Build the single-answer classification prompt

    Args:
        content: The answer text
        column_name: The survey question
        topics: Candidate theme names supplied by the user

    Returns:
        Prompt asking for matching theme names or a terse summary
    """
    user = load_prompt_template("classification_user").format(
        column_name=column_name,
        content=str(content).strip(),
        topics=TOPIC_JOINER.join(topics)
    )
    return Prompt(system=load_prompt_template("classification_system"), user=user)


def build_aggregation_prompt(
    batch_outputs: Sequence[str],
    column_name: str,
    topics: Optional[Sequence[str]] = None
) -> Prompt:
    """
    Build the reduce prompt that merges per-batch reports

    Args:
        batch_outputs: One text per batch, in batch order (failures included)
        column_name: The survey question
        topics: Optional user themes used to seed the merged report

    Returns:
        Prompt with the summarizer persona and the labeled batch sections
    """
    sections = [
        f"=== Batch {number} ===\n{output}"
        for number, output in enumerate(batch_outputs, 1)
    ]

    topics_block = ""
    if topics:
        topics_block = (
            f"\nThe user has defined these first-level themes: {TOPIC_JOINER.join(topics)}.\n"
            "Use them as the primary common issues, in this order when counts tie; "
            "report answers that match none of them as additional issues.\n"
        )

    user = load_prompt_template("aggregation_user").format(
        column_name=column_name,
        batch_count=len(batch_outputs),
        topics_block=topics_block,
        batch_sections="\n\n".join(sections)
    )
    return Prompt(system=load_prompt_template("aggregation_system"), user=user)


def render_classified_batch(
    batch: Sequence[dict],
    column_name: str,
    identity_columns: Sequence[str]
) -> str:
    """
    Render classified rows as one partial report for the aggregation step

    Each line: identity fields | answer | assigned themes
    """
    lines: List[str] = []
    for row in batch:
        identity = " - ".join(str(row.get(col, '')) for col in identity_columns) or f"row {row.get(ROW_KEY, '')}"
        answer = str(row.get(column_name, '')).strip()
        classification = row.get(CLASSIFICATION_FIELD, '')
        lines.append(f"* {identity} | Answer: \"{answer}\" | Themes: {classification}")

    return "\n".join(lines)
