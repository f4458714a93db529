"""
Per-run event logging for analysis and classification
"""
from .run_logger import RunEvent, RunEventLevel, RunLogger

__all__ = ["RunEvent", "RunEventLevel", "RunLogger"]
