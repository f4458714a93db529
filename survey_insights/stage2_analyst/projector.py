"""
Row projection: raw sheet rows → one working dataset per analyzable column
"""

import logging
from typing import Dict, Iterable, List, Sequence

from ..models import ROW_KEY, ColumnDataset, dataset_label
from ..stage1_ingest.config import NO_ANSWER_SENTINELS
from ..stage1_ingest.excel_reader import is_no_answer

logger = logging.getLogger(__name__)


def project_rows(
    rows: Sequence[dict],
    identity_columns: Sequence[str],
    target_column: str,
    sentinels: Iterable[str] = NO_ANSWER_SENTINELS
) -> List[Dict]:
    """
    Build the per-column row records

    Rows whose target value is blank or a "no answer" sentinel are dropped.
    Kept rows carry an ordinal key, the identity fields ('' when absent) and
    the target value verbatim, in source order.

    Args:
        rows: Raw row records from the workbook
        identity_columns: Respondent identity columns
        target_column: Column being analyzed
        sentinels: "No answer" markers

    Returns:
        List of projected row dicts
    """
    sentinels = list(sentinels)
    projected = []

    for row in rows:
        value = row.get(target_column)
        if is_no_answer(value, sentinels):
            continue

        record = {ROW_KEY: len(projected)}
        for col in identity_columns:
            identity_value = row.get(col)
            record[col] = identity_value if identity_value is not None else ''
        record[target_column] = value

        projected.append(record)

    logger.debug(f"Projected {len(projected)}/{len(rows)} rows for column '{target_column}'")
    return projected


def build_dataset(
    rows: Sequence[dict],
    identity_columns: Sequence[str],
    target_column: str,
    sentinels: Iterable[str] = NO_ANSWER_SENTINELS
) -> ColumnDataset:
    """Project rows for one column and wrap them in a fresh ColumnDataset"""
    identity = [c for c in identity_columns if c != target_column]
    projected = project_rows(rows, identity, target_column, sentinels)

    dataset = ColumnDataset(
        name=dataset_label(target_column, len(projected)),
        identity_columns=identity,
        target_column=target_column,
        rows=projected
    )
    logger.info(f"Built dataset '{dataset.name}'")
    return dataset
