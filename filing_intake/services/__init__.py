from .upload_store import UploadStore, LocalUploadStore, S3UploadStore, create_upload_store
from .document_analyzer import DocumentAnalyzer
from .strategy_extractor import StrategyExtractor
from .intake_pipeline import IntakePipeline
from .submission_store import SubmissionStore

__all__ = [
    "UploadStore",
    "LocalUploadStore",
    "S3UploadStore",
    "create_upload_store",
    "DocumentAnalyzer",
    "StrategyExtractor",
    "IntakePipeline",
    "SubmissionStore"
]
