"""Admin endpoints for cost usage, rate limits, and classification accuracy."""

from typing import Annotated

from fastapi import APIRouter, Depends

from quillstack.api.dependencies import (
    get_classification_log,
    get_cost_ledger,
    get_rate_limiter,
)
from quillstack.models import BudgetResponse, ClassificationStatsResponse, RateWindowStats
from quillstack.stores.classification_log import ClassificationLog
from quillstack.stores.cost import CostLedger
from quillstack.stores.rate_limit import RateLimiter

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/usage", response_model=BudgetResponse)
async def get_usage(
    cost_ledger: Annotated[CostLedger, Depends(get_cost_ledger)],
) -> BudgetResponse:
    """Token, call and dollar tallies per horizon, with the current budget status."""
    status = cost_ledger.status()
    return BudgetResponse(
        usage=cost_ledger.usage(),
        status=status,
        alert_message=status.alert_message,
    )


@router.post("/usage/reset", response_model=BudgetResponse)
async def reset_usage(
    cost_ledger: Annotated[CostLedger, Depends(get_cost_ledger)],
) -> BudgetResponse:
    """Clear every cost horizon, including lifetime totals."""
    cost_ledger.reset()
    status = cost_ledger.status()
    return BudgetResponse(usage=cost_ledger.usage(), status=status, alert_message=None)


@router.get("/rate-limits", response_model=dict[str, RateWindowStats])
async def get_rate_limits(
    rate_limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> dict[str, RateWindowStats]:
    """Current count and limit for the minute, hour and day windows."""
    return rate_limiter.stats()


@router.get("/classification-stats", response_model=ClassificationStatsResponse)
async def get_classification_stats(
    classification_log: Annotated[ClassificationLog, Depends(get_classification_log)],
) -> ClassificationStatsResponse:
    """Correction rate, common misclassifications, and accuracy per prompt version."""
    return ClassificationStatsResponse(
        total=classification_log.total(),
        correction_rate=classification_log.correction_rate(),
        by_method=classification_log.counts_by_method(),
        misclassifications=classification_log.misclassification_patterns(),
        accuracy_by_prompt_version=classification_log.accuracy_by_prompt_version(),
    )
