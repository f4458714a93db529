"""Business logic services"""
from .pipeline_controller import PipelineController, get_controller
from .run_manager import RunManager
from .input_handlers import FileUploadHandler

__all__ = [
    "PipelineController",
    "get_controller",
    "RunManager",
    "FileUploadHandler"
]
