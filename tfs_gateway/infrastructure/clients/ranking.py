"""Vehicle ranking client with fixed-delay retry logic"""

import asyncio
import logging
from typing import List
from tfs_gateway.config import settings
from tfs_gateway.domain.exceptions import (
    InvalidJSONFormatError,
    InvalidResponseError,
    MaxRetriesExceededError,
    ParsingFailedError,
)
from tfs_gateway.domain.models import FinancialProfile, RankedVehicle, Vehicle
from tfs_gateway.domain.ranking import (
    GENERATION_CONFIG,
    build_ranking_prompt,
    parse_ranked_json,
    reorder_vehicles,
    validate_ranking,
)
from tfs_gateway.infrastructure.clients.gemini import GeminiClient
from tfs_gateway.infrastructure.observability.metrics import ranking_attempts_counter


class VehicleRankingClient:
    """Ranks a vehicle catalog for a financial profile using Gemini"""

    def __init__(
        self,
        gemini: GeminiClient | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
    ):
        self.gemini = gemini or GeminiClient()
        self.max_retries = settings.ranking_max_retries if max_retries is None else max_retries
        self.retry_delay = settings.ranking_retry_delay_seconds if retry_delay is None else retry_delay

    async def rank_vehicles(
        self,
        vehicles: List[Vehicle],
        profile: FinancialProfile,
        tax_rate: float,
    ) -> List[RankedVehicle]:
        """
        Reorder vehicles by AI-assisted affordability (about 2 affordable per 1 stretch).

        Retry strategy:
        - Up to max_retries attempts (default 3)
        - Fixed delay between attempts (default 1s), no backoff
        - Retries on any error; later prompts add strict-JSON instructions

        Raises:
            MissingAPIKeyError: No Gemini key configured (not retried)
            MaxRetriesExceededError: Every attempt failed; chained to the last error
        """
        self.gemini.require_api_key()

        attempt = 0
        while True:
            attempt += 1
            try:
                logging.info(
                    f"Ranking vehicles (attempt {attempt}/{self.max_retries})",
                    extra={"attempt": attempt, "vehicle_count": len(vehicles)},
                )
                ranked = await self._perform_ranking(vehicles, profile, tax_rate, attempt)
                ranking_attempts_counter.labels(outcome="success").inc()
                return ranked

            except Exception as e:
                outcome = "invalid_json" if isinstance(e, InvalidJSONFormatError) else "error"
                ranking_attempts_counter.labels(outcome=outcome).inc()
                logging.warning(
                    f"Ranking attempt {attempt} failed: {e}",
                    extra={"attempt": attempt, "error_type": type(e).__name__},
                )

                if attempt >= self.max_retries:
                    raise MaxRetriesExceededError(attempt) from e

                await asyncio.sleep(self.retry_delay)

    async def _perform_ranking(
        self,
        vehicles: List[Vehicle],
        profile: FinancialProfile,
        tax_rate: float,
        attempt: int,
    ) -> List[RankedVehicle]:
        prompt = build_ranking_prompt(vehicles, profile, tax_rate, is_retry=attempt > 1)

        try:
            text = await self.gemini.generate_text(
                prompt,
                generation_config=GENERATION_CONFIG,
                operation="vehicle_ranking",
            )
        except ParsingFailedError as e:
            raise InvalidResponseError("Invalid response from Gemini API") from e

        logging.debug("Gemini ranking response", extra={"response_preview": text[:500]})

        entries = parse_ranked_json(text)
        ranked = reorder_vehicles(vehicles, entries, profile, tax_rate)
        validate_ranking(ranked, profile, tax_rate)
        return ranked
