"""
Batchers for splitting row data into bounded LLM requests
"""

from .row_batcher import chunk_rows, get_batch_stats

__all__ = [
    'chunk_rows',
    'get_batch_stats',
]
