"""
Pipeline controller - owns per-column dataset state for the session

Sequences ingestion → column selection → projection, and runs narrative
analysis / topic classification on a dataset when asked. This is the only
place that mutates ColumnDataset state; the pipelines report back through
progress and per-item callbacks.
"""
import logging
import threading
from typing import Any, BinaryIO, Dict, List, Optional, Tuple, Union
from pathlib import Path

from survey_insights.models import CLASSIFICATION_FIELD, ColumnDataset, DatasetStatus
from survey_insights.stage1_ingest import ParseError, WorkbookReader
from survey_insights.stage2_analyst import (
    LLMClient,
    LLMError,
    build_admission_policy,
    build_dataset,
    classify_columns,
    select_identity_columns,
)
from survey_insights.stage2_analyst.pipelines import analyze_column, classify_rows, parse_topics

from ..config import Settings, settings as default_settings
from ..logging.run_logger import RunLogger

logger = logging.getLogger(__name__)

ALREADY_ANALYZED_MESSAGE = "Dataset already analyzed"


class DatasetNotFoundError(IndexError):
    """Raised when a dataset index does not exist"""
    pass


class RunInProgressError(RuntimeError):
    """Raised when topics are changed while a classification run is active"""
    pass


class PipelineController:
    """Session-scoped controller for one uploaded survey"""

    def __init__(self, settings: Optional[Settings] = None, llm_client=None):
        """
        Initialize the controller.

        Args:
            settings: Application settings (defaults to the global instance)
            llm_client: Object exposing complete(system_prompt, user_prompt, model_id);
                built from settings when omitted
        """
        self.settings = settings or default_settings

        if llm_client is None:
            if not self.settings.LLM_API_KEY:
                logger.warning("LLM_API_KEY not set - LLM calls will fail")
            llm_client = LLMClient(
                api_key=self.settings.LLM_API_KEY,
                model=self.settings.LLM_MODEL,
                endpoint=self.settings.LLM_API_URL,
                temperature=self.settings.LLM_TEMPERATURE,
                timeout=self.settings.LLM_TIMEOUT_SECONDS
            )
        self.llm_client = llm_client

        self.policy = build_admission_policy(
            self.settings.COLUMN_ADMISSION_POLICY,
            markers=self.settings.COLUMN_MARKERS,
            patterns=self.settings.COLUMN_BLACKLIST_PATTERNS
        )

        self.datasets: List[ColumnDataset] = []
        self.column_report: Dict[str, Dict] = {}
        self.identity_columns: List[str] = []
        self.source_filename: Optional[str] = None
        self.last_error: Optional[str] = None
        self._run_logs: Dict[int, List[RunLogger]] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(
        self,
        source: Union[str, Path, bytes, BinaryIO],
        filename: Optional[str] = None
    ) -> List[ColumnDataset]:
        """
        Read a workbook and replace all datasets with one per analyzable column

        Args:
            source: Workbook path, bytes or binary file object
            filename: Original filename (for extension gating)

        Returns:
            The new list of datasets

        Raises:
            ParseError: Workbook unreadable or empty (prior datasets are kept)
        """
        logger.info("=== Ingestion: Starting ===")

        try:
            reader = WorkbookReader(source, filename=filename)
            rows = reader.read()
        except ParseError as e:
            self.last_error = str(e)
            logger.error(f"❌ Ingestion failed: {e}")
            raise

        columns = reader.columns
        identity_columns = select_identity_columns(
            columns,
            self.settings.IDENTITY_COLUMNS,
            self.settings.IDENTITY_COLUMN_COUNT
        )
        logger.info(f"Identity columns: {identity_columns}")

        report = classify_columns(
            columns,
            rows,
            identity_columns=identity_columns,
            policy=self.policy,
            threshold=self.settings.UNIQUE_VALUE_THRESHOLD,
            sentinels=self.settings.NO_ANSWER_SENTINELS
        )

        datasets = [
            build_dataset(rows, identity_columns, column, self.settings.NO_ANSWER_SENTINELS)
            for column, result in report.items()
            if not result['skip']
        ]

        with self._lock:
            self.datasets = datasets
            self.column_report = report
            self.identity_columns = identity_columns
            self.source_filename = reader.filename
            self.last_error = None
            self._run_logs = {}

        logger.info("=== Ingestion: Complete ===")
        logger.info(f"{len(rows)} rows, {len(report)} candidate columns → {len(datasets)} datasets")

        return datasets

    def get_dataset(self, index: int) -> ColumnDataset:
        """Get dataset by index"""
        if index < 0 or index >= len(self.datasets):
            raise DatasetNotFoundError(f"Dataset {index} not found ({len(self.datasets)} available)")
        return self.datasets[index]

    # ------------------------------------------------------------------
    # Narrative analysis
    # ------------------------------------------------------------------

    def run_analysis(self, index: int) -> Optional[str]:
        """
        Run batched narrative analysis on one dataset

        No-op when the dataset is already analyzed or an analysis is running.

        Returns:
            The narrative summary, or None if the run failed or was skipped
        """
        if not self.start_analysis(index):
            return self.get_dataset(index).narrative_summary
        return self.execute_analysis(index)

    def start_analysis(self, index: int) -> bool:
        """
        Claim a dataset for analysis

        Returns:
            False if the dataset is already analyzed or an analysis is
            running; True once it is marked as analyzing
        """
        dataset = self.get_dataset(index)

        with self._lock:
            if dataset.narrative_summary is not None:
                logger.info(f"Dataset {index} already analyzed, skipping")
                dataset.progress_message = ALREADY_ANALYZED_MESSAGE
                return False

            if dataset.is_analysis_running:
                logger.info(f"Dataset {index} analysis already in progress, skipping")
                return False

            dataset.analysis_status = DatasetStatus.ANALYZING
            dataset.batch_outputs = []
            dataset.analysis_error = None
            dataset.progress_message = f"Starting analysis of '{dataset.target_column}'"

        return True

    def execute_analysis(self, index: int) -> Optional[str]:
        """Run the analysis of a dataset claimed with start_analysis()"""
        dataset = self.get_dataset(index)

        run_logger = self._new_run_logger(index, "analysis")
        run_logger.begin_stage("batch_analysis", {
            "column": dataset.target_column,
            "rows": dataset.row_count,
            "batch_size": self.settings.BATCH_SIZE
        })

        def on_batch(batch_number: int, output: str, success: bool):
            dataset.batch_outputs.append(output)
            if success:
                run_logger.info("batch", f"Batch {batch_number} complete", {"characters": len(output)})
            else:
                run_logger.warning("batch", f"Batch {batch_number} failed", {"placeholder": output})

        try:
            result = analyze_column(
                dataset.rows,
                dataset.target_column,
                dataset.identity_columns,
                self.llm_client,
                batch_size=self.settings.BATCH_SIZE,
                model_id=self.settings.LLM_MODEL,
                progress_callback=self._progress_handler(dataset, run_logger),
                batch_callback=on_batch
            )
        except LLMError as e:
            dataset.analysis_error = f"Aggregation failed: {e}"
            dataset.analysis_status = DatasetStatus.FAILED
            self._fail(dataset, run_logger, "batch_analysis", dataset.analysis_error)
            return None
        except Exception as e:
            logger.exception(f"Dataset {index} analysis crashed")
            dataset.analysis_error = f"Unexpected error: {e}"
            dataset.analysis_status = DatasetStatus.FAILED
            self._fail(dataset, run_logger, "batch_analysis", dataset.analysis_error)
            raise

        dataset.batch_outputs = result["batch_outputs"]
        dataset.narrative_summary = result["summary"]
        dataset.analysis_status = DatasetStatus.ANALYZED

        failed = result["stats"]["failed_batches"]
        message = f"Analysis complete in {run_logger.duration_seconds:.2f}s"
        if failed:
            message += f" ({failed} of {result['stats']['total_batches']} batches failed)"
        dataset.progress_message = message

        run_logger.end_stage("batch_analysis", result["stats"])
        run_logger.close(success=True)
        logger.info(f"✅ Dataset {index}: {message}")

        return dataset.narrative_summary

    # ------------------------------------------------------------------
    # Topic classification
    # ------------------------------------------------------------------

    def set_topics(self, index: int, topics_text: str) -> Tuple[str, ...]:
        """
        Parse and store the user's theme list for a dataset

        Raises:
            ValueError: If no topic names are found
            RunInProgressError: If a classification run is active
        """
        dataset = self.get_dataset(index)

        if dataset.is_classification_running:
            raise RunInProgressError(f"Dataset {index} is being classified; topics cannot change mid-run")

        topics = parse_topics(topics_text)
        if not topics:
            raise ValueError("Enter at least one topic (separate topics with 、 or commas)")

        topics = tuple(topics)
        if topics != dataset.classification_topics:
            # Results built with the old topics no longer apply
            dataset.rows = [
                {key: value for key, value in row.items() if key != CLASSIFICATION_FIELD}
                for row in dataset.rows
            ]
            dataset.topics_analysis = None
            dataset.classification_error = None
            dataset.classification_status = DatasetStatus.SELECTING_TOPICS
        elif dataset.classification_status == DatasetStatus.IDLE:
            dataset.classification_status = DatasetStatus.SELECTING_TOPICS

        dataset.classification_topics = topics
        dataset.progress_message = f"{len(topics)} topic(s) set"

        logger.info(f"Dataset {index} topics: {list(topics)}")
        return dataset.classification_topics

    def run_classification(self, index: int, topics_text: Optional[str] = None) -> Optional[str]:
        """
        Classify every answer in a dataset against its topics, then aggregate

        Args:
            index: Dataset index
            topics_text: Theme names separated by 、/commas; when omitted the
                previously set topics are used

        Returns:
            The themed aggregate report, or None if the run failed or was skipped

        Raises:
            ValueError: If no topics are available
        """
        if not self.start_classification(index, topics_text):
            return None
        return self.execute_classification(index)

    def start_classification(self, index: int, topics_text: Optional[str] = None) -> bool:
        """
        Claim a dataset for classification, setting topics first if given

        Returns:
            False if a classification is running;
            True once it is marked as classifying

        Raises:
            ValueError: If no topics are available
        """
        dataset = self.get_dataset(index)

        with self._lock:
            if dataset.is_classification_running:
                logger.info(f"Dataset {index} classification already in progress, skipping")
                return False

            if topics_text is not None:
                self.set_topics(index, topics_text)

            if not dataset.classification_topics:
                raise ValueError("Enter at least one topic before classifying")

            dataset.classification_status = DatasetStatus.CLASSIFYING
            dataset.classification_error = None
            dataset.progress_message = f"Classifying {dataset.row_count} answers"

        return True

    def execute_classification(self, index: int) -> Optional[str]:
        """Run the classification of a dataset claimed with start_classification()"""
        dataset = self.get_dataset(index)
        topics = dataset.classification_topics

        run_logger = self._new_run_logger(index, "classification")
        run_logger.begin_stage("topic_classification", {
            "column": dataset.target_column,
            "rows": dataset.row_count,
            "topics": list(topics)
        })

        def on_row(position: int, row: Dict[str, Any]):
            # Publish each classification as it lands so partial results stay visible
            if position - 1 < len(dataset.rows):
                dataset.rows[position - 1] = {
                    **dataset.rows[position - 1],
                    CLASSIFICATION_FIELD: row[CLASSIFICATION_FIELD]
                }

        try:
            result = classify_rows(
                dataset.rows,
                dataset.target_column,
                dataset.identity_columns,
                topics,
                self.llm_client,
                batch_size=self.settings.BATCH_SIZE,
                progress_interval=self.settings.CLASSIFICATION_PROGRESS_INTERVAL,
                model_id=self.settings.LLM_MODEL,
                progress_callback=self._progress_handler(dataset, run_logger),
                row_callback=on_row
            )
        except LLMError as e:
            dataset.classification_error = f"Topic summary failed: {e}"
            dataset.classification_status = DatasetStatus.FAILED
            self._fail(dataset, run_logger, "topic_classification", dataset.classification_error)
            return None
        except Exception as e:
            logger.exception(f"Dataset {index} classification crashed")
            dataset.classification_error = f"Unexpected error: {e}"
            dataset.classification_status = DatasetStatus.FAILED
            self._fail(dataset, run_logger, "topic_classification", dataset.classification_error)
            raise

        dataset.rows = result["rows"]
        dataset.topics_analysis = result["topics_analysis"]
        dataset.classification_status = DatasetStatus.CLASSIFIED

        failed = result["stats"]["failed_rows"]
        message = f"Classification complete in {run_logger.duration_seconds:.2f}s"
        if failed:
            message += f" ({failed} of {result['stats']['total_rows']} answers failed)"
        dataset.progress_message = message

        run_logger.end_stage("topic_classification", result["stats"])
        run_logger.close(success=True)
        logger.info(f"✅ Dataset {index}: {message}")

        return dataset.topics_analysis

    # ------------------------------------------------------------------
    # Run logs
    # ------------------------------------------------------------------

    def get_run_logs(self, index: int) -> List[Dict[str, Any]]:
        """Structured logs of every run on a dataset, oldest first"""
        self.get_dataset(index)
        return [run.snapshot() for run in self._run_logs.get(index, [])]

    def _new_run_logger(self, index: int, kind: str) -> RunLogger:
        with self._lock:
            runs = self._run_logs.setdefault(index, [])
            run_logger = RunLogger(f"dataset-{index}-{kind}-{len(runs) + 1}", kind)
            runs.append(run_logger)
        return run_logger

    def _progress_handler(self, dataset: ColumnDataset, run_logger: RunLogger):
        """Build the progress callback that folds pipeline events into dataset state"""
        def on_progress(stage: str, percent: int, message: str):
            dataset.progress_message = message
            run_logger.progress(stage, percent, message)
        return on_progress

    def _fail(self, dataset: ColumnDataset, run_logger: RunLogger, stage: str, error_message: str):
        """Record a failed run; the caller has already marked the sub-state failed"""
        dataset.progress_message = f"Failed: {error_message[:100]}"
        run_logger.error(stage, error_message)
        run_logger.end_stage(stage, ok=False)
        run_logger.close(success=False, error=error_message)
        logger.error(f"❌ {dataset.target_column}: {error_message}")


# Session-wide controller instance (single user, in memory)
_controller: Optional[PipelineController] = None


def get_controller() -> PipelineController:
    """FastAPI dependency returning the session controller"""
    global _controller
    if _controller is None:
        _controller = PipelineController()
    return _controller
