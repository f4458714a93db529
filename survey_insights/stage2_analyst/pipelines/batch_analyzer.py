"""
Batch Analyzer - map/reduce narrative analysis of one survey column

Flow:
1. Chunk the column's rows into batches
2. For each batch, sequentially: build prompt → call LLM
   (a failed batch contributes a placeholder instead of aborting)
3. Merge all batch outputs with one aggregation call
"""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from ..batchers import chunk_rows, get_batch_stats
from ..config import BATCH_FAILED_TEMPLATE, DEFAULT_BATCH_SIZE, NO_ANSWERS_SUMMARY
from ..exceptions import LLMError
from ..prompt_builder import build_batch_prompt
from ..summarizer import summarize
from .progress import BatchCallback, ProgressCallback, report_progress

logger = logging.getLogger(__name__)


def analyze_column(
    rows: Sequence[dict],
    column_name: str,
    identity_columns: Sequence[str],
    llm_client,
    batch_size: int = DEFAULT_BATCH_SIZE,
    model_id: Optional[str] = None,
    progress_callback: Optional[ProgressCallback] = None,
    batch_callback: Optional[BatchCallback] = None
) -> Dict[str, Any]:
    """
    Run batched narrative analysis over a column's rows

    Args:
        rows: Projected row records for the column
        column_name: The survey question being analyzed
        identity_columns: Identity fields present in each row
        llm_client: Object exposing complete(system_prompt, user_prompt, model_id)
        batch_size: Rows per LLM request
        model_id: Model override
        progress_callback: Function(stage, percent, message) called after every batch
        batch_callback: Function(batch_number, output, success) called as each batch lands

    Returns:
        Dictionary with:
        - summary: final aggregated narrative
        - batch_outputs: per-batch texts (failure placeholders included)
        - batch_results: per-batch status records
        - stats: processing statistics

    Raises:
        LLMError: If the aggregation call fails
    """
    logger.info(f"=== Batch Analysis: '{column_name}' ({len(rows)} rows) ===")

    batches = chunk_rows(rows, batch_size)
    batch_stats = get_batch_stats(batches)

    if not batches:
        logger.warning(f"No rows to analyze for '{column_name}'")
        return {
            "summary": NO_ANSWERS_SUMMARY,
            "batch_outputs": [],
            "batch_results": [],
            "stats": {**batch_stats, "failed_batches": 0, "llm_calls": 0}
        }

    batch_outputs: List[str] = []
    batch_results: List[Dict[str, Any]] = []
    total = len(batches)

    report_progress(progress_callback, "analysis", 0, f"Analyzing {len(rows)} answers in {total} batch(es)")

    # Sequential on purpose: batch order feeds the reduce step's tie-break
    for batch_number, batch in enumerate(batches, 1):
        logger.info(f"  Processing batch {batch_number}/{total} ({len(batch)} rows)")
        prompt = build_batch_prompt(batch, column_name, identity_columns, batch_number, total)

        start_time = time.time()
        try:
            output = llm_client.complete(prompt.system, prompt.user, model_id)
            batch_results.append({
                "batch": batch_number,
                "rows": len(batch),
                "success": True,
                "duration_s": round(time.time() - start_time, 2)
            })
            logger.info(f"  ✅ Batch {batch_number}: {len(batch)} rows → {len(output)} characters")
        except LLMError as e:
            output = BATCH_FAILED_TEMPLATE.format(batch_number=batch_number, error=e)
            batch_results.append({
                "batch": batch_number,
                "rows": len(batch),
                "success": False,
                "error": str(e)
            })
            logger.warning(f"  ⚠️ Batch {batch_number} failed, continuing: {e}")

        batch_outputs.append(output)
        if batch_callback:
            batch_callback(batch_number, output, batch_results[-1]["success"])
        report_progress(
            progress_callback,
            "analysis",
            int(batch_number * 100 / (total + 1)),
            f"Batch {batch_number}/{total} done"
        )

    failed = sum(1 for r in batch_results if not r["success"])

    report_progress(progress_callback, "aggregation", int(total * 100 / (total + 1)), f"Merging {total} batch report(s)")
    summary = summarize(llm_client, batch_outputs, column_name, model_id=model_id)

    logger.info("=== Batch Analysis: Complete ===")
    logger.info(f"{total} batches ({failed} failed) + 1 aggregation call")

    return {
        "summary": summary,
        "batch_outputs": batch_outputs,
        "batch_results": batch_results,
        "stats": {
            **batch_stats,
            "failed_batches": failed,
            "llm_calls": total + 1
        }
    }
