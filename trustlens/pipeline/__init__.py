# Pipeline module

from .extractor import (
    FALLBACK_TEXT_SELECTORS,
    PRIMARY_TEXT_SELECTOR,
    ReviewTextExtractor,
    extract_review_text,
)
from .models import (
    AnalysisRun,
    CandidateReview,
    Issue,
    PageDocument,
    ReviewResult,
    ScoreOutcome,
    SubScores,
)
from .orchestrator import AnalysisOrchestrator
from .response_parser import extract_json_object, parse_sub_scores, validate_sub_scores
from .scorer import (
    ISSUE_RULES,
    WEIGHTS,
    ReviewScorer,
    build_review_result,
    compute_suspicion_score,
    derive_issues,
    truncate_text,
)

__all__ = [
    # Models
    "AnalysisRun",
    "CandidateReview",
    "Issue",
    "PageDocument",
    "ReviewResult",
    "ScoreOutcome",
    "SubScores",
    # Extractor
    "PRIMARY_TEXT_SELECTOR",
    "FALLBACK_TEXT_SELECTORS",
    "ReviewTextExtractor",
    "extract_review_text",
    # Response parser
    "extract_json_object",
    "parse_sub_scores",
    "validate_sub_scores",
    # Scorer
    "WEIGHTS",
    "ISSUE_RULES",
    "ReviewScorer",
    "build_review_result",
    "compute_suspicion_score",
    "derive_issues",
    "truncate_text",
    # Orchestrator
    "AnalysisOrchestrator",
]
