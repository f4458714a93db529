"""
Survey Insights - LLM-assisted analysis of free-text survey answers

Stage 1 reads the survey export workbook into row records.
Stage 2 selects analyzable columns and drives the LLM over them in batches.
"""

from .models import ColumnDataset, DatasetStatus

__all__ = [
    'ColumnDataset',
    'DatasetStatus',
]
