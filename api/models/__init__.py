"""Pydantic models for API requests and responses"""
from .dataset import (
    ClassifyRequest,
    ColumnReport,
    DatasetDetail,
    DatasetListResponse,
    DatasetSummary,
    IngestResponse,
    RunResponse
)

__all__ = [
    "ClassifyRequest",
    "ColumnReport",
    "DatasetDetail",
    "DatasetListResponse",
    "DatasetSummary",
    "IngestResponse",
    "RunResponse"
]
