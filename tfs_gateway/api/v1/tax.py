"""POST /v1/tax/lookup - County and sales tax for a location"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from tfs_gateway.api.dependencies import get_request_id, get_tax_client
from tfs_gateway.api.v1.schemas import TaxInfoResponse, TaxLookupRequest
from tfs_gateway.domain.exceptions import (
    InvalidResponseError,
    LocationNotFoundError,
    MissingAPIKeyError,
    ParsingFailedError,
)
from tfs_gateway.domain.models import GeoLocation
from tfs_gateway.infrastructure.clients.tax import TaxLookupClient

router = APIRouter()


@router.post("/tax/lookup", response_model=TaxInfoResponse)
async def lookup_tax(
    request_body: TaxLookupRequest,
    request: Request,
    tax_client: TaxLookupClient = Depends(get_tax_client),
):
    """
    Resolve county and sales tax percentage for a coordinate.

    Tax is returned in percentage points (8.25 means 8.25%).
    """
    request_id = get_request_id(request)

    try:
        tax_info = await tax_client.fetch_county_and_tax(
            GeoLocation(latitude=request_body.latitude, longitude=request_body.longitude)
        )
    except LocationNotFoundError as e:
        logging.warning(f"Location not found: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=404, detail=str(e))

    except MissingAPIKeyError as e:
        logging.error(f"Tax lookup unavailable: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Tax lookup service not configured")

    except (InvalidResponseError, ParsingFailedError) as e:
        logging.error(f"Gemini error during tax lookup: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail="Tax lookup service unavailable")

    return TaxInfoResponse(
        county=tax_info.county,
        sales_tax_percentage=tax_info.sales_tax_percentage,
        zip_code=tax_info.zip_code,
    )
