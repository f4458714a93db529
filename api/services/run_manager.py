"""
Run manager - executes analysis and classification runs in the background
"""
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional
import logging

from .pipeline_controller import PipelineController
from ..config import settings

logger = logging.getLogger(__name__)

# Thread pool for background runs; each run makes sequential LLM calls
executor = ThreadPoolExecutor(
    max_workers=settings.MAX_CONCURRENT_RUNS,
    thread_name_prefix="insights_worker"
)


class RunManager:
    """Submits controller runs to the worker pool"""

    @staticmethod
    def submit_analysis(controller: PipelineController, index: int) -> Optional[Future]:
        """
        Submit narrative analysis of a dataset for background processing

        Returns:
            The run's future, or None if the dataset was already analyzed or running
        """
        if not controller.start_analysis(index):
            return None

        future = executor.submit(RunManager._execute_analysis, controller, index)
        logger.info(f"Submitted analysis of dataset {index} to executor")
        return future

    @staticmethod
    def submit_classification(
        controller: PipelineController,
        index: int,
        topics_text: Optional[str] = None
    ) -> Optional[Future]:
        """
        Submit topic classification of a dataset for background processing

        Returns:
            The run's future, or None if a classification was already running

        Raises:
            ValueError: If no topics are available
        """
        if not controller.start_classification(index, topics_text):
            return None

        future = executor.submit(RunManager._execute_classification, controller, index)
        logger.info(f"Submitted classification of dataset {index} to executor")
        return future

    @staticmethod
    def _execute_analysis(controller: PipelineController, index: int):
        """Execute analysis in background thread"""
        try:
            return controller.execute_analysis(index)
        except Exception:
            logger.exception(f"Analysis of dataset {index} failed")

    @staticmethod
    def _execute_classification(controller: PipelineController, index: int):
        """Execute classification in background thread"""
        try:
            return controller.execute_classification(index)
        except Exception:
            logger.exception(f"Classification of dataset {index} failed")
