"""
Analysis pipelines run over one column dataset
"""

from .batch_analyzer import analyze_column
from .topic_classifier import classify_rows, classify_row, parse_topics
from .progress import BatchCallback, ProgressCallback, RowCallback, report_progress

__all__ = [
    'analyze_column',
    'classify_rows',
    'classify_row',
    'parse_topics',
    'BatchCallback',
    'ProgressCallback',
    'RowCallback',
    'report_progress',
]
