"""
Dataset API endpoints: upload, listing, analysis, classification, run logs
"""
from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile, File
from typing import Optional
import logging

from survey_insights.stage1_ingest import ParseError
from survey_insights.models import ColumnDataset

from ..services.pipeline_controller import (
    ALREADY_ANALYZED_MESSAGE,
    DatasetNotFoundError,
    PipelineController,
    RunInProgressError,
    get_controller
)
from ..services.run_manager import RunManager
from ..services.input_handlers import FileUploadHandler, UploadRejectedError
from ..models.dataset import (
    ClassifyRequest, ColumnReport, DatasetDetail, DatasetListResponse,
    DatasetSummary, IngestResponse, RunResponse
)
from ..config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_dataset_or_404(controller: PipelineController, index: int) -> ColumnDataset:
    try:
        return controller.get_dataset(index)
    except DatasetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/datasets/upload", response_model=IngestResponse)
async def upload_workbook(
    file: UploadFile = File(...),
    controller: PipelineController = Depends(get_controller)
):
    """
    Upload a survey export workbook (.xlsx / .xls).

    The first sheet is read; every column that passes the name policy and
    has enough distinct answers becomes a dataset. Replaces any previously
    uploaded survey. A rejected upload leaves the current datasets untouched.
    """
    try:
        handler = FileUploadHandler(file.file, file.filename, settings.MAX_FILE_SIZE_MB)
        content = handler.read()
        datasets = controller.ingest(content, handler.filename)
    except (ParseError, UploadRejectedError) as e:
        raise HTTPException(status_code=400, detail=str(e))

    columns = [
        ColumnReport(column=column, **result)
        for column, result in controller.column_report.items()
    ]

    if datasets:
        message = f"Found {len(datasets)} analyzable column(s)"
    else:
        message = "No analyzable columns found"

    return IngestResponse(
        source_filename=controller.source_filename,
        identity_columns=controller.identity_columns,
        datasets=[DatasetSummary.from_dataset(i, d) for i, d in enumerate(datasets)],
        columns=columns,
        message=message
    )


@router.get("/datasets", response_model=DatasetListResponse)
async def list_datasets(controller: PipelineController = Depends(get_controller)):
    """List datasets of the current survey with their status"""
    datasets = controller.datasets
    return DatasetListResponse(
        source_filename=controller.source_filename,
        datasets=[DatasetSummary.from_dataset(i, d) for i, d in enumerate(datasets)],
        total=len(datasets),
        error=controller.last_error
    )


@router.get("/datasets/{index}", response_model=DatasetDetail)
async def get_dataset(index: int, controller: PipelineController = Depends(get_controller)):
    """
    Get full dataset state.

    Poll this while a run is in progress: `progress_message` and the
    partial `batch_outputs` / row classifications update as the run advances.
    """
    dataset = _get_dataset_or_404(controller, index)
    return DatasetDetail.from_dataset(index, dataset)


@router.post("/datasets/{index}/analyze", response_model=RunResponse, status_code=202)
async def analyze_dataset(
    index: int,
    response: Response,
    controller: PipelineController = Depends(get_controller)
):
    """
    Start narrative analysis of a dataset.

    Returns 202 when a run is queued, 200 if the dataset is already analyzed
    (no LLM calls are made), 409 if an analysis is already running.
    """
    dataset = _get_dataset_or_404(controller, index)

    if dataset.is_analysis_running:
        raise HTTPException(status_code=409, detail=f"Dataset {index} is already being analyzed")

    future = RunManager.submit_analysis(controller, index)
    if future is None:
        if dataset.narrative_summary is None:
            raise HTTPException(status_code=409, detail=f"Dataset {index} is already being analyzed")
        response.status_code = 200
        message = ALREADY_ANALYZED_MESSAGE
    else:
        message = "Analysis queued"

    return RunResponse(index=index, status=dataset.status.value, message=message)


@router.post("/datasets/{index}/classify", response_model=RunResponse, status_code=202)
async def classify_dataset(
    index: int,
    request: Optional[ClassifyRequest] = None,
    controller: PipelineController = Depends(get_controller)
):
    """
    Start topic classification of a dataset.

    Body: `{"topics": "price、service、delivery"}`. Topics are required the
    first time; omit them to re-run with the current topics.
    """
    dataset = _get_dataset_or_404(controller, index)

    if dataset.is_classification_running:
        raise HTTPException(status_code=409, detail=f"Dataset {index} is already being classified")

    topics_text = request.topics if request else None
    try:
        future = RunManager.submit_classification(controller, index, topics_text)
    except RunInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if future is None:
        raise HTTPException(status_code=409, detail=f"Dataset {index} is already being classified")

    return RunResponse(
        index=index,
        status=dataset.status.value,
        message="Classification queued",
        topics=list(dataset.classification_topics)
    )


@router.get("/datasets/{index}/logs")
async def get_dataset_logs(index: int, controller: PipelineController = Depends(get_controller)):
    """Structured logs of every analysis / classification run on a dataset"""
    _get_dataset_or_404(controller, index)
    return {
        "index": index,
        "runs": controller.get_run_logs(index)
    }
