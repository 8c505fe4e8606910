"""External-service boundary: classifier, advisor and bet-slip extractor.

Public API
----------
Contracts:
    IWagerClassifier, ClassificationRequest, ClassificationCorrection,
    IRecommendationAdvisor, RecommendationRequest, RecentWager,
    IBetSlipExtractor

Reconciliation:
    ClassificationReconciler, merge_corrections

Advice:
    build_recommendation_request

Errors:
    LLMError, ServiceUnavailableError, ClassificationError,
    RecommendationError, ExtractionError
"""

from bankroll_ledger.llm.advisor import build_recommendation_request
from bankroll_ledger.llm.contracts import (
    ClassificationCorrection,
    ClassificationRequest,
    IBetSlipExtractor,
    IRecommendationAdvisor,
    IWagerClassifier,
    RecentWager,
    RecommendationRequest,
    decode_correction,
    decode_recommendation,
)
from bankroll_ledger.llm.errors import (
    ClassificationError,
    ExtractionError,
    LLMError,
    RecommendationError,
    ServiceUnavailableError,
)
from bankroll_ledger.llm.reconciler import ClassificationReconciler, merge_corrections

__all__ = [
    "ClassificationCorrection",
    "ClassificationError",
    "ClassificationReconciler",
    "ClassificationRequest",
    "ExtractionError",
    "IBetSlipExtractor",
    "IRecommendationAdvisor",
    "IWagerClassifier",
    "LLMError",
    "RecentWager",
    "RecommendationError",
    "RecommendationRequest",
    "ServiceUnavailableError",
    "build_recommendation_request",
    "decode_correction",
    "decode_recommendation",
    "merge_corrections",
]
