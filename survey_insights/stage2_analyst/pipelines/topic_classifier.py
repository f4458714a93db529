"""
Topic Classifier - tags every answer in a column with user-supplied themes

Flow:
1. Classify each row sequentially with its own LLM call
   (blank rows are marked without a call; failed rows get a failure marker)
2. Aggregate the classified rows into one themed report, seeded with the topics
"""

import logging
import re
import time
from typing import Any, Dict, List, Optional, Sequence

from ...models import CLASSIFICATION_FIELD
from ..batchers import chunk_rows
from ..config import (
    CLASSIFICATION_FAILED_MARKER,
    CLASSIFICATION_PROGRESS_INTERVAL,
    DEFAULT_BATCH_SIZE,
    EMPTY_CONTENT_MARKER,
    NO_ANSWERS_SUMMARY,
    TOPIC_SEPARATORS,
)
from ..exceptions import LLMError
from ..prompt_builder import build_classification_prompt, render_classified_batch
from ..summarizer import summarize
from .progress import ProgressCallback, RowCallback, report_progress

logger = logging.getLogger(__name__)


def parse_topics(topics_text: str) -> List[str]:
    """
    Split user-entered theme text into theme names

    Accepts 、 , ， ; ； and newlines as separators; drops blanks and
    repeated names while keeping first-seen order.
    """
    topics: List[str] = []
    for part in re.split(TOPIC_SEPARATORS, topics_text or ''):
        name = part.strip()
        if name and name not in topics:
            topics.append(name)
    return topics


def is_blank(content) -> bool:
    return content is None or str(content).strip() == ''


def classify_row(llm_client, content, column_name: str, topics: Sequence[str], model_id: Optional[str] = None) -> str:
    """
    Classify a single answer

    Returns:
        Matching theme names / terse summary from the model,
        EMPTY_CONTENT_MARKER for blank answers (no call made)

    Raises:
        LLMError: On client failure
    """
    if is_blank(content):
        return EMPTY_CONTENT_MARKER

    prompt = build_classification_prompt(content, column_name, topics)
    return llm_client.complete(prompt.system, prompt.user, model_id)


def classify_rows(
    rows: Sequence[dict],
    column_name: str,
    identity_columns: Sequence[str],
    topics: Sequence[str],
    llm_client,
    batch_size: int = DEFAULT_BATCH_SIZE,
    progress_interval: int = CLASSIFICATION_PROGRESS_INTERVAL,
    model_id: Optional[str] = None,
    progress_callback: Optional[ProgressCallback] = None,
    row_callback: Optional[RowCallback] = None
) -> Dict[str, Any]:
    """
    Classify every row against the topics, then aggregate

    Args:
        rows: Projected row records for the column
        column_name: The survey question
        identity_columns: Identity fields present in each row
        topics: Non-empty list of theme names
        llm_client: Object exposing complete(system_prompt, user_prompt, model_id)
        batch_size: Rows per section of the aggregation input
        progress_interval: Emit progress every N rows
        model_id: Model override
        progress_callback: Function(stage, percent, message)
        row_callback: Function(position, annotated_row) called as each row is classified

    Returns:
        Dictionary with:
        - rows: copies of the input rows with a 'classification' field
        - topics_analysis: aggregated themed report
        - stats: processing statistics

    Raises:
        ValueError: If topics is empty
        LLMError: If the final aggregation call fails
    """
    topics = tuple(topics)
    if not topics:
        raise ValueError("At least one topic is required for classification")
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    progress_interval = max(progress_interval, 1)

    logger.info(f"=== Topic Classification: '{column_name}' ({len(rows)} rows, {len(topics)} topics) ===")

    total = len(rows)
    annotated: List[Dict[str, Any]] = []
    failed = 0
    empty = 0
    llm_calls = 0
    start_time = time.time()

    report_progress(progress_callback, "classification", 0, f"Classifying {total} answers")

    for position, row in enumerate(rows, 1):
        content = row.get(column_name)

        if is_blank(content):
            classification = EMPTY_CONTENT_MARKER
            empty += 1
        else:
            llm_calls += 1
            try:
                classification = classify_row(llm_client, content, column_name, topics, model_id)
                if not (classification or '').strip():
                    classification = CLASSIFICATION_FAILED_MARKER
                    failed += 1
            except LLMError as e:
                failed += 1
                classification = CLASSIFICATION_FAILED_MARKER
                logger.warning(f"  ⚠️ Row {position} classification failed, continuing: {e}")

        annotated.append({**row, CLASSIFICATION_FIELD: classification})
        if row_callback:
            row_callback(position, annotated[-1])

        if position % progress_interval == 0 or position % batch_size == 0 or position == total:
            report_progress(
                progress_callback,
                "classification",
                int(position * 100 / (total + 1)),
                f"Classified {position}/{total} answers"
            )

    logger.info(f"Classified {total} rows in {time.time() - start_time:.2f}s ({failed} failed, {empty} empty)")

    if not annotated:
        logger.warning(f"No rows to classify for '{column_name}'")
        topics_analysis = NO_ANSWERS_SUMMARY
    else:
        # Aggregate over the full classified set, one section per batch
        sections = [
            render_classified_batch(batch, column_name, identity_columns)
            for batch in chunk_rows(annotated, batch_size)
        ]

        report_progress(progress_callback, "aggregation", int(total * 100 / (total + 1)), "Summarizing classified answers")
        topics_analysis = summarize(llm_client, sections, column_name, topics=topics, model_id=model_id)
        llm_calls += 1

    logger.info("=== Topic Classification: Complete ===")

    return {
        "rows": annotated,
        "topics_analysis": topics_analysis,
        "stats": {
            "total_rows": total,
            "failed_rows": failed,
            "empty_rows": empty,
            "llm_calls": llm_calls
        }
    }
