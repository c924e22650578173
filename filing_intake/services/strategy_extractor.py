import re
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Sequence

from filing_intake.models.document import AnalysisResult, DocumentAnalysis, Strategy
from filing_intake.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StrategyRule:
    """
    One keyword category of the extraction table.

    The rule matches an analysis when any of ``match_terms`` and all of
    ``required_terms`` occur in its text starting at a word boundary, so
    inflected forms such as "deferrals" or "businesses" count.
    """
    category: str
    match_terms: FrozenSet[str]
    template: Strategy
    required_terms: FrozenSet[str] = field(default_factory=frozenset)

    def matches(self, text: str) -> bool:
        return (
            any(_contains_term(text, term) for term in self.match_terms)
            and all(_contains_term(text, term) for term in self.required_terms)
        )


# Terms shorter than this ("ira", "sep") must also end at a word boundary
SHORT_TERM_LENGTH = 4


def _contains_term(text: str, term: str) -> bool:
    pattern = rf"(?<!\w){re.escape(term)}"
    if len(term) < SHORT_TERM_LENGTH:
        pattern += r"(?!\w)"
    return re.search(pattern, text) is not None


STRATEGY_RULES: Sequence[StrategyRule] = (
    StrategyRule(
        category="retirement",
        match_terms=frozenset({
            "retirement", "401k", "401(k)", "403b", "403(b)", "ira", "iras",
            "roth", "sep", "sep-ira", "sep ira", "solo 401k", "pension",
        }),
        template=Strategy(
            title="Retirement Contribution Optimization",
            description="Consider maximizing retirement contributions to reduce taxable income and build long-term wealth.",
            potential_savings="Up to $6,500-$7,500 in tax savings (IRA) or $22,500+ (401k)",
        ),
    ),
    StrategyRule(
        category="deductions",
        match_terms=frozenset({
            "deduction", "deductions", "deductible", "expense", "expenses", "business",
        }),
        template=Strategy(
            title="Deduction Maximization",
            description="Identify additional business expenses and deductions to reduce your taxable income.",
            potential_savings="Varies based on expenses",
        ),
    ),
    StrategyRule(
        category="income_timing",
        match_terms=frozenset({"timing", "defer", "deferral", "deferred", "deferring"}),
        required_terms=frozenset({"income"}),
        template=Strategy(
            title="Income Timing Strategy",
            description="Optimize when income is recognized to minimize tax liability across years.",
        ),
    ),
    StrategyRule(
        category="itemized",
        match_terms=frozenset({
            "mortgage", "mortgage interest", "itemize", "itemized", "itemizing",
            "property tax", "property taxes", "charitable",
        }),
        template=Strategy(
            title="Itemized Deduction Review",
            description="Compare itemizing mortgage interest, property taxes and charitable gifts against the standard deduction.",
            potential_savings="Depends on how far itemized deductions exceed the standard deduction",
        ),
    ),
)


class StrategyExtractor:
    """
    Derives a short, deduplicated list of strategy suggestions from analyses.

    This is a keyword heuristic over each analysis's summary and notes; it does
    not score or rank. Results without an analysis are ignored.
    """

    def __init__(self, rules: Sequence[StrategyRule] = STRATEGY_RULES):
        self.rules = tuple(rules)
        self.logger = logger

    def extract(self, results: Iterable[AnalysisResult]) -> List[Strategy]:
        matched: List[Strategy] = []
        for result in results:
            if result.analysis is None:
                continue
            text = self.analysis_text(result.analysis)
            matched.extend(rule.template for rule in self.rules if rule.matches(text))

        strategies = self.deduplicate(matched)
        self.logger.debug(f"Extracted {len(strategies)} strategies from {len(matched)} matches")
        return strategies

    @staticmethod
    def analysis_text(analysis: DocumentAnalysis) -> str:
        return f"{analysis.summary} {' '.join(analysis.notes)}".lower()

    @staticmethod
    def deduplicate(strategies: Iterable[Strategy]) -> List[Strategy]:
        """Keep the first strategy for each title, preserving order"""
        seen = set()
        unique = []
        for strategy in strategies:
            if strategy.title in seen:
                continue
            seen.add(strategy.title)
            unique.append(strategy)
        return unique
