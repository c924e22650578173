from fastapi import Depends

from filing_intake.config import settings, Settings
from filing_intake.services.upload_store import UploadStore, create_upload_store
from filing_intake.services.document_analyzer import DocumentAnalyzer
from filing_intake.services.strategy_extractor import StrategyExtractor
from filing_intake.services.intake_pipeline import IntakePipeline
from filing_intake.services.submission_store import SubmissionStore

def get_settings() -> Settings:
    """Dependency to get application settings"""
    return settings

def get_upload_store(config: Settings = Depends(get_settings)) -> UploadStore:
    """Dependency to get the configured UploadStore"""
    return create_upload_store(config)

def get_document_analyzer(
    upload_store: UploadStore = Depends(get_upload_store),
    config: Settings = Depends(get_settings)
) -> DocumentAnalyzer:
    """Dependency to get DocumentAnalyzer instance"""
    return DocumentAnalyzer(upload_store, config=config)

def get_strategy_extractor() -> StrategyExtractor:
    """Dependency to get StrategyExtractor instance"""
    return StrategyExtractor()

def get_intake_pipeline(
    upload_store: UploadStore = Depends(get_upload_store),
    analyzer: DocumentAnalyzer = Depends(get_document_analyzer),
    extractor: StrategyExtractor = Depends(get_strategy_extractor)
) -> IntakePipeline:
    """Dependency to get IntakePipeline instance"""
    return IntakePipeline(upload_store, analyzer, extractor)

def get_submission_store(config: Settings = Depends(get_settings)) -> SubmissionStore:
    """Dependency to get SubmissionStore instance"""
    return SubmissionStore(data_dir=config.DATA_DIR)
