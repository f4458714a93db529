"""
Utility for splitting a column dataset's rows into fixed-size batches
"""

import logging
from typing import List, Sequence, TypeVar

from ..config import DEFAULT_BATCH_SIZE

logger = logging.getLogger(__name__)

T = TypeVar('T')


def chunk_rows(rows: Sequence[T], batch_size: int = DEFAULT_BATCH_SIZE) -> List[List[T]]:
    """
    Split rows into consecutive batches for LLM processing

    Args:
        rows: Ordered row records
        batch_size: Maximum rows per batch (default 300)

    Returns:
        List of batches; the last one may be shorter, empty input gives []
        Example: 25 rows with batch_size=10 → [[10 rows], [10 rows], [5 rows]]

    Raises:
        ValueError: If batch_size < 1
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    batches = [list(rows[i:i + batch_size]) for i in range(0, len(rows), batch_size)]

    if len(batches) > 1:
        logger.info(f"Split {len(rows)} rows into {len(batches)} batches of up to {batch_size} rows")

    return batches


def get_batch_stats(batches: List[List[T]]) -> dict:
    """
    Get statistics about a batch split

    Args:
        batches: Output of chunk_rows()

    Returns:
        Statistics dictionary with batch and row counts
    """
    return {
        "total_batches": len(batches),
        "total_rows": sum(len(batch) for batch in batches),
        "batch_sizes": [len(batch) for batch in batches],
    }
