from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence

from filing_intake.models.document import AnalysisResult, Strategy, UploadedDocument
from filing_intake.services.document_analyzer import DocumentAnalyzer
from filing_intake.services.strategy_extractor import StrategyExtractor
from filing_intake.services.upload_store import UploadStore
from filing_intake.utils.logger import get_logger
from filing_intake.utils.exceptions import ValidationError

logger = get_logger(__name__)


class IntakeStage(str, Enum):
    RECEIVED = "received"
    UPLOADING = "uploading"
    ANALYZING = "analyzing"
    EXTRACTING = "extracting"
    RESPONDED = "responded"


@dataclass(frozen=True)
class IncomingFile:
    """A file as received from the client, before it is stored"""
    filename: str
    content: bytes
    content_type: str


@dataclass
class IntakeOutcome:
    documents: List[UploadedDocument]
    results: List[AnalysisResult]
    strategies: List[Strategy]

    @property
    def analyzed_count(self) -> int:
        return sum(1 for r in self.results if r.succeeded)


class IntakePipeline:
    """
    Runs one intake request: store every file, analyze the stored documents,
    extract strategies from the analyses.

    Files are stored one at a time and the first StorageError aborts the
    request before any analysis. Analysis failures never abort: they come back
    as error results and the pipeline still responds. Nothing is persisted
    between stages, so a failed request must be retried from the start.
    """

    def __init__(self, upload_store: UploadStore, analyzer: DocumentAnalyzer,
                 extractor: StrategyExtractor):
        self.logger = logger
        self.upload_store = upload_store
        self.analyzer = analyzer
        self.extractor = extractor

    async def run(self, files: Sequence[IncomingFile]) -> IntakeOutcome:
        self._enter(IntakeStage.RECEIVED, f"{len(files)} file(s)")
        if not files:
            raise ValidationError("No files provided")

        self._enter(IntakeStage.UPLOADING)
        documents = await self.store_all(files)

        self._enter(IntakeStage.ANALYZING, f"{len(documents)} document(s)")
        results = await self.analyzer.analyze(documents)

        self._enter(IntakeStage.EXTRACTING)
        strategies = self.extractor.extract(results)

        outcome = IntakeOutcome(documents=documents, results=results, strategies=strategies)
        self._enter(
            IntakeStage.RESPONDED,
            f"{outcome.analyzed_count}/{len(results)} analyzed, {len(strategies)} strategies"
        )
        return outcome

    async def store_all(self, files: Sequence[IncomingFile]) -> List[UploadedDocument]:
        """Store files in order; a StorageError propagates and stops the remaining uploads"""
        documents = []
        for incoming in files:
            try:
                document = await self.upload_store.store(
                    incoming.content, incoming.filename, incoming.content_type
                )
            except Exception as e:
                self.logger.error(f"Failed to upload file {incoming.filename}: {str(e)}")
                raise
            documents.append(document)
        return documents

    def _enter(self, stage: IntakeStage, detail: str = "") -> None:
        self.logger.info(f"Intake stage -> {stage.value}" + (f" ({detail})" if detail else ""))
