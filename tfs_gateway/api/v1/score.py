"""POST /v1/score - TFS Score endpoint"""

from fastapi import APIRouter, Request

from tfs_gateway.api.dependencies import get_request_id
from tfs_gateway.api.v1.schemas import ScoreComponents, ScoreRequest, ScoreResponse
from tfs_gateway.domain.scoring import (
    calculate_score,
    credit_component,
    get_score_band,
    get_score_description,
    income_component,
    payment_capacity_component,
    savings_component,
)
from tfs_gateway.infrastructure.observability.logging import log_score
from tfs_gateway.infrastructure.observability.metrics import record_score

router = APIRouter()


@router.post("/score", response_model=ScoreResponse)
def create_score(request_body: ScoreRequest, request: Request):
    """
    Calculate the TFS Score for a financial profile.

    Returns the composite score, its color band, a description, and the
    four weighted sub-scores it was built from.
    """
    score = calculate_score(
        income=request_body.annual_income,
        credit_score=request_body.credit_score,
        available_monthly=request_body.available_monthly,
        monthly_savings=request_body.monthly_savings,
    )
    band = get_score_band(score)

    record_score(score, band.value)
    log_score(get_request_id(request), score, band.value)

    return ScoreResponse(
        score=score,
        band=band.value,
        description=get_score_description(score),
        components=ScoreComponents(
            credit=round(credit_component(request_body.credit_score), 2),
            income=round(income_component(request_body.annual_income), 2),
            payment_capacity=round(
                payment_capacity_component(request_body.available_monthly, request_body.annual_income), 2
            ),
            savings=round(savings_component(request_body.monthly_savings, request_body.annual_income), 2),
        ),
    )
