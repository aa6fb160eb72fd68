"""County and sales tax lookup: geocode to ZIP, then ask Gemini"""

import asyncio
import logging
from typing import Protocol
from tfs_gateway.config import settings
from tfs_gateway.domain.exceptions import GeminiAPIError, InvalidResponseError, LocationNotFoundError
from tfs_gateway.domain.models import GeoLocation, TaxInfo
from tfs_gateway.domain.tax import build_tax_prompt, parse_tax_response
from tfs_gateway.infrastructure.clients.gemini import GeminiClient
from tfs_gateway.infrastructure.clients.geocoding import NominatimGeocoder
from tfs_gateway.infrastructure.observability.metrics import tax_lookup_counter


class PostalCodeResolver(Protocol):
    async def resolve_postal_code(self, location: GeoLocation) -> str: ...


class TaxLookupClient:
    """Resolves county and sales tax percentage for a device location"""

    def __init__(
        self,
        gemini: GeminiClient | None = None,
        geocoder: PostalCodeResolver | None = None,
        location_timeout: float | None = None,
    ):
        self.gemini = gemini or GeminiClient()
        self.geocoder = geocoder or NominatimGeocoder()
        self.location_timeout = settings.location_timeout_seconds if location_timeout is None else location_timeout

    async def fetch_county_and_tax(self, location: GeoLocation) -> TaxInfo:
        """
        Look up county and sales tax for a coordinate.

        Flow:
        1. Reverse geocode to a ZIP code (bounded by the location watchdog)
        2. Ask Gemini for 'County:' / 'Tax:' lines
        3. Parse leniently, normalizing fractional tax to percentage points

        Raises:
            LocationNotFoundError: No ZIP code resolved in time
            MissingAPIKeyError: No Gemini key configured
            InvalidResponseError: Non-200 status or body not JSON
            ParsingFailedError: Response has no text part
        """
        try:
            zip_code = await self._resolve_zip(location)
            self.gemini.require_api_key()

            try:
                text = await self.gemini.generate_text(build_tax_prompt(zip_code), operation="tax_lookup")
            except GeminiAPIError as e:
                raise InvalidResponseError(str(e)) from e

            tax_info = parse_tax_response(text, zip_code=zip_code)
        except Exception:
            tax_lookup_counter.labels(outcome="error").inc()
            raise

        tax_lookup_counter.labels(outcome="success").inc()
        logging.info(
            "Tax lookup completed",
            extra={
                "zip_code": tax_info.zip_code,
                "county": tax_info.county,
                "sales_tax_percentage": tax_info.sales_tax_percentage,
            },
        )
        return tax_info

    async def _resolve_zip(self, location: GeoLocation) -> str:
        try:
            zip_code = await asyncio.wait_for(
                self.geocoder.resolve_postal_code(location),
                timeout=self.location_timeout,
            )
        except asyncio.TimeoutError as e:
            raise LocationNotFoundError(
                "Unable to determine location. Please try again or skip."
            ) from e

        if not zip_code:
            raise LocationNotFoundError()
        return zip_code
