"""
Reduce step: merge per-batch reports into one final narrative
"""

import logging
import time
from typing import Optional, Sequence

from .prompt_builder import build_aggregation_prompt

logger = logging.getLogger(__name__)


def summarize(
    llm_client,
    batch_outputs: Sequence[str],
    column_name: str,
    topics: Optional[Sequence[str]] = None,
    model_id: Optional[str] = None
) -> str:
    """
    Merge batch outputs with a single aggregation call

    Args:
        llm_client: Object exposing complete(system_prompt, user_prompt, model_id)
        batch_outputs: Per-batch texts in batch order (failure placeholders included)
        column_name: The survey question
        topics: Optional user themes that seed the merged report
        model_id: Model override

    Returns:
        Final narrative text

    Raises:
        LLMError: Aggregation has no fallback; any client failure propagates
    """
    logger.info(f"Aggregating {len(batch_outputs)} batch report(s) for '{column_name}'")

    prompt = build_aggregation_prompt(batch_outputs, column_name, topics=topics)

    start_time = time.time()
    final_text = llm_client.complete(prompt.system, prompt.user, model_id)

    logger.info(f"✅ Aggregation complete in {time.time() - start_time:.2f}s ({len(final_text)} characters)")
    return final_text
