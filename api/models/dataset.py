"""
Pydantic models for dataset-related API requests and responses
"""
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field

from survey_insights.models import ColumnDataset


class ColumnReport(BaseModel):
    """Column selection outcome for one candidate column"""
    column: str = Field(..., description="Column header")
    skip: bool = Field(..., description="True if the column was not turned into a dataset")
    reason: str = Field(..., description="Why the column was admitted or skipped")
    distinct_values: int = Field(..., description="Distinct non-empty answers (0 if rejected by name)")


class DatasetSummary(BaseModel):
    """Summary information for dataset listing"""
    index: int = Field(..., description="Dataset index (position in the list)")
    name: str = Field(..., description="Display name, e.g. 'Q3_text (42 rows)'")
    target_column: str = Field(..., description="Survey question column")
    row_count: int = Field(..., description="Number of answers")
    status: str = Field(..., description="Combined status")
    progress_message: str = Field("", description="Latest progress message")

    @classmethod
    def from_dataset(cls, index: int, dataset: ColumnDataset) -> "DatasetSummary":
        return cls(
            index=index,
            name=dataset.name,
            target_column=dataset.target_column,
            row_count=dataset.row_count,
            status=dataset.status.value,
            progress_message=dataset.progress_message
        )


class DatasetDetail(DatasetSummary):
    """Full dataset state including rows and reports"""
    identity_columns: List[str] = Field(default_factory=list, description="Identity fields carried by each row")
    analysis_status: str = Field(..., description="Narrative analysis sub-status")
    classification_status: str = Field(..., description="Topic classification sub-status")
    narrative_summary: Optional[str] = Field(None, description="Aggregated narrative report")
    batch_outputs: List[str] = Field(default_factory=list, description="Per-batch reports, in batch order")
    classification_topics: List[str] = Field(default_factory=list, description="User-supplied themes")
    topics_analysis: Optional[str] = Field(None, description="Aggregated themed report")
    error: Optional[str] = Field(None, description="Cause of the failed status, if any")
    analysis_error: Optional[str] = Field(None, description="Error from the last failed analysis run")
    classification_error: Optional[str] = Field(None, description="Error from the last failed classification run")
    rows: List[Dict[str, Any]] = Field(default_factory=list, description="Row records (with classification once run)")

    @classmethod
    def from_dataset(cls, index: int, dataset: ColumnDataset) -> "DatasetDetail":
        return cls(
            index=index,
            name=dataset.name,
            target_column=dataset.target_column,
            row_count=dataset.row_count,
            status=dataset.status.value,
            progress_message=dataset.progress_message,
            identity_columns=list(dataset.identity_columns),
            analysis_status=dataset.analysis_status.value,
            classification_status=dataset.classification_status.value,
            narrative_summary=dataset.narrative_summary,
            batch_outputs=list(dataset.batch_outputs),
            classification_topics=list(dataset.classification_topics),
            topics_analysis=dataset.topics_analysis,
            error=dataset.last_error,
            analysis_error=dataset.analysis_error,
            classification_error=dataset.classification_error,
            rows=list(dataset.rows)
        )


class DatasetListResponse(BaseModel):
    """Response for dataset listing"""
    source_filename: Optional[str] = Field(None, description="Uploaded workbook name")
    datasets: List[DatasetSummary] = Field(..., description="List of datasets")
    total: int = Field(..., description="Total number of datasets")
    error: Optional[str] = Field(None, description="Last ingestion error, if any")


class IngestResponse(BaseModel):
    """Response for workbook upload"""
    source_filename: Optional[str] = Field(None, description="Uploaded workbook name")
    identity_columns: List[str] = Field(..., description="Identity columns used for every dataset")
    datasets: List[DatasetSummary] = Field(..., description="One dataset per analyzable column")
    columns: List[ColumnReport] = Field(..., description="Selection outcome for every candidate column")
    message: str = Field(..., description="Status message")


class ClassifyRequest(BaseModel):
    """Request body for topic classification"""
    topics: Optional[str] = Field(
        None,
        description="Theme names separated by 、 or commas; omit to reuse the current topics"
    )


class RunResponse(BaseModel):
    """Response for analysis / classification submission"""
    index: int = Field(..., description="Dataset index")
    status: str = Field(..., description="Combined status after submission")
    message: str = Field(..., description="Status message")
    topics: List[str] = Field(default_factory=list, description="Topics in use for classification")
