from typing import List, Optional, Sequence

from filing_intake.models.document import CamelModel, AnalysisResult, Strategy
from filing_intake.services.strategy_extractor import StrategyExtractor


class InsightsView(CamelModel):
    """What the client-facing insights panel renders for one intake"""
    summary_line: str
    warning: Optional[str] = None
    strategies: List[Strategy]
    analyzed: List[AnalysisResult]
    failed: List[AnalysisResult]


def build_insights_view(results: Sequence[AnalysisResult],
                        extractor: Optional[StrategyExtractor] = None) -> InsightsView:
    """
    Summary line, soft warning and strategy cards for a batch of results.

    The warning is set only when there were results and none of them was
    analyzed; it echoes the first underlying error.
    """
    extractor = extractor or StrategyExtractor()
    analyzed = [r for r in results if r.succeeded]
    failed = [r for r in results if not r.succeeded]

    count = len(results)
    summary_line = f"Received {count} document{'s' if count != 1 else ''}"
    document_types = []
    for result in analyzed:
        document_type = result.analysis.document_type
        if document_type and document_type != "Unknown" and document_type not in document_types:
            document_types.append(document_type)
    if document_types:
        summary_line += f": {', '.join(document_types)}"

    warning = None
    if results and not analyzed:
        first_error = next((r.error for r in failed if r.error), "Unknown error")
        warning = f"We couldn't analyze your documents yet: {first_error}"

    return InsightsView(
        summary_line=summary_line,
        warning=warning,
        strategies=extractor.extract(analyzed),
        analyzed=analyzed,
        failed=failed,
    )
