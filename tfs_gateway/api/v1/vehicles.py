"""GET /v1/vehicles and POST /v1/vehicles/rank - Catalog and AI-assisted ranking"""

import dataclasses
import logging
import time
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request

from tfs_gateway.api.dependencies import get_ranking_client, get_request_id, get_vehicle_catalog
from tfs_gateway.api.v1.schemas import (
    RankedVehicleSchema,
    RankRequest,
    RankResponse,
    VehicleListResponse,
    VehicleSchema,
)
from tfs_gateway.config import settings
from tfs_gateway.domain.exceptions import MaxRetriesExceededError, MissingAPIKeyError
from tfs_gateway.domain.models import FinancialProfile, Vehicle
from tfs_gateway.infrastructure.clients.ranking import VehicleRankingClient
from tfs_gateway.infrastructure.observability.logging import log_ranking
from tfs_gateway.infrastructure.observability.metrics import ranking_failures_counter

router = APIRouter()


def _vehicle_schema(vehicle: Vehicle) -> VehicleSchema:
    return VehicleSchema(**dataclasses.asdict(vehicle))


@router.get("/vehicles", response_model=VehicleListResponse)
def list_vehicles(catalog: List[Vehicle] = Depends(get_vehicle_catalog)):
    """Return the vehicle catalog in catalog order"""
    return VehicleListResponse(vehicles=[_vehicle_schema(v) for v in catalog])


@router.post("/vehicles/rank", response_model=RankResponse)
async def rank_vehicles(
    request_body: RankRequest,
    request: Request,
    catalog: List[Vehicle] = Depends(get_vehicle_catalog),
    ranking_client: VehicleRankingClient = Depends(get_ranking_client),
):
    """
    Rank the catalog for a financial profile.

    Flow:
    1. Build the profile from the request
    2. Ask Gemini for an affordable/stretch ordering (with retries)
    3. Return every catalog vehicle in ranked order
    """
    start_time = time.time()
    request_id = get_request_id(request)

    profile = FinancialProfile(
        annual_income=request_body.annual_income,
        credit_score=request_body.credit_score,
        available_monthly=request_body.available_monthly,
        monthly_savings=request_body.monthly_savings,
    )
    tax_rate = request_body.tax_rate if request_body.tax_rate is not None else settings.default_tax_rate

    try:
        ranked = await ranking_client.rank_vehicles(catalog, profile, tax_rate)

    except MissingAPIKeyError as e:
        logging.error(f"Ranking unavailable: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Ranking service not configured")

    except MaxRetriesExceededError as e:
        ranking_failures_counter.inc()
        log_ranking(request_id, len(catalog), False, (time.time() - start_time) * 1000)
        logging.error(f"Ranking failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Ranking service unavailable")

    log_ranking(request_id, len(ranked), True, (time.time() - start_time) * 1000)

    return RankResponse(
        vehicles=[
            RankedVehicleSchema(
                vehicle=_vehicle_schema(item.vehicle),
                reason=item.reason,
                category=item.category,
            )
            for item in ranked
        ]
    )
