from .routes import router
from .dependencies import get_upload_store, get_document_analyzer, get_intake_pipeline

__all__ = ["router", "get_upload_store", "get_document_analyzer", "get_intake_pipeline"]
