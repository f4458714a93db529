"""
Per-column dataset state shared between the pipeline stages and the controller
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

# Field names added to projected row records
ROW_KEY = 'key'
CLASSIFICATION_FIELD = 'classification'


class DatasetStatus(enum.Enum):
    """Dataset status enumeration"""
    IDLE = "idle"
    SELECTING_TOPICS = "selecting-topics"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    CLASSIFYING = "classifying"
    CLASSIFIED = "classified"
    FAILED = "failed"


@dataclass
class ColumnDataset:
    """
    One analyzable survey column: identity fields + answer text per respondent.

    Narrative analysis and per-row classification are tracked as two
    independent sub-states; `status` folds them into one value for display.
    """
    name: str
    identity_columns: List[str]
    target_column: str
    rows: List[Dict[str, Any]] = field(default_factory=list)

    analysis_status: DatasetStatus = DatasetStatus.IDLE
    classification_status: DatasetStatus = DatasetStatus.IDLE

    narrative_summary: Optional[str] = None
    batch_outputs: List[str] = field(default_factory=list)

    classification_topics: Tuple[str, ...] = ()
    topics_analysis: Optional[str] = None

    progress_message: str = ""
    analysis_error: Optional[str] = None
    classification_error: Optional[str] = None

    @property
    def status(self) -> DatasetStatus:
        """Combined status: running > failed > finished > topics pending > idle"""
        if self.classification_status == DatasetStatus.CLASSIFYING:
            return DatasetStatus.CLASSIFYING
        if self.analysis_status == DatasetStatus.ANALYZING:
            return DatasetStatus.ANALYZING
        if DatasetStatus.FAILED in (self.analysis_status, self.classification_status):
            return DatasetStatus.FAILED
        if self.classification_status == DatasetStatus.CLASSIFIED:
            return DatasetStatus.CLASSIFIED
        if self.analysis_status == DatasetStatus.ANALYZED:
            return DatasetStatus.ANALYZED
        if self.classification_status == DatasetStatus.SELECTING_TOPICS:
            return DatasetStatus.SELECTING_TOPICS
        return DatasetStatus.IDLE

    @property
    def last_error(self) -> Optional[str]:
        """Cause of whichever sub-state is failed, analysis first"""
        if self.analysis_status == DatasetStatus.FAILED and self.analysis_error:
            return self.analysis_error
        if self.classification_status == DatasetStatus.FAILED and self.classification_error:
            return self.classification_error
        return None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def is_analysis_running(self) -> bool:
        return self.analysis_status == DatasetStatus.ANALYZING

    @property
    def is_classification_running(self) -> bool:
        return self.classification_status == DatasetStatus.CLASSIFYING


def dataset_label(target_column: str, row_count: int) -> str:
    """Display name for a dataset, e.g. "Q3_text (42 rows)" """
    return f"{target_column} ({row_count} rows)"
