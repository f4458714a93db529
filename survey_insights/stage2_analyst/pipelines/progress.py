"""
Progress events published by the analysis pipelines
"""

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

# Signature: (stage, percent, message)
ProgressCallback = Callable[[str, int, str], None]

# Signature: (batch_number, output, success)
BatchCallback = Callable[[int, str, bool], None]

# Signature: (position, annotated_row)
RowCallback = Callable[[int, dict], None]


def report_progress(progress_callback: Optional[ProgressCallback], stage: str, percent: int, message: str):
    """Forward a progress event to the caller, if one is listening"""
    if progress_callback:
        progress_callback(stage, percent, message)
    logger.debug(f"{stage}: {percent}% - {message}")
