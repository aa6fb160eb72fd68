"""Vehicle ranking: prompt construction, model output parsing, reorder and validation"""

import json
import logging
from typing import List, Optional, Tuple

from pydantic import BaseModel, ValidationError, field_validator

from tfs_gateway.domain.exceptions import InvalidJSONFormatError
from tfs_gateway.domain.financing import FinancingCalculator, affordability_ratio
from tfs_gateway.domain.models import FinancialProfile, RankedVehicle, Vehicle, vehicle_identity
from tfs_gateway.utils.text_utils import strip_code_fences

AFFORDABLE = "affordable"
STRETCH = "stretch"

AFFORDABLE_MAX_RATIO = 0.7  # Payment <= 70% of the monthly budget
VALIDATION_WINDOW = 9
EXPECTED_AFFORDABLE = 6  # 2:1 pattern over the first 9
AFFORDABLE_TOLERANCE = 2

GENERATION_CONFIG = {
    "temperature": 0.3,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 8192,
}

_RETRY_INSTRUCTIONS = """
IMPORTANT: Your previous response had an invalid JSON format. Please ensure:
- Return ONLY valid JSON, no markdown, no explanations, no code blocks
- Use the exact structure specified below
- Include all vehicles from the input array
"""

_RESPONSE_EXAMPLE = """{
  "ranked_vehicles": [
    {
      "year": 2025,
      "make": "Toyota",
      "model": "Camry",
      "trim": "LE",
      "reason": "Affordable hybrid with excellent value",
      "category": "affordable"
    },
    {
      "year": 2025,
      "make": "Toyota",
      "model": "RAV4",
      "trim": "LE",
      "reason": "Popular SUV, well within budget",
      "category": "affordable"
    },
    {
      "year": 2025,
      "make": "Toyota",
      "model": "Highlander",
      "trim": "LE",
      "reason": "Premium SUV, stretch but achievable",
      "category": "stretch"
    }
  ]
}"""


class RankedEntry(BaseModel):
    """One vehicle as returned by the model"""

    year: int
    make: str
    model: str
    trim: str
    reason: str = ""
    category: str

    @field_validator("category")
    @classmethod
    def _known_category(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in (AFFORDABLE, STRETCH):
            raise ValueError(f"category must be '{AFFORDABLE}' or '{STRETCH}', got '{value}'")
        return normalized

    @property
    def identity(self) -> Tuple[int, str, str, str]:
        return vehicle_identity(self.year, self.make, self.model, self.trim)


class RankedVehiclesPayload(BaseModel):
    """Top-level JSON object the model must return"""

    ranked_vehicles: List[RankedEntry]


def _vehicle_prompt_record(vehicle: Vehicle) -> dict:
    return {
        "year": vehicle.year,
        "make": vehicle.make,
        "model": vehicle.model,
        "trim": vehicle.trim,
        "msrp_usd_est": vehicle.msrp_usd,
        "horsepower_hp": vehicle.horsepower_hp or 0,
        "body_style": vehicle.body_style,
        "powertrain": vehicle.powertrain,
        "drivetrain": vehicle.drivetrain,
        "image_url": vehicle.image_url,
    }


def build_ranking_prompt(
    vehicles: List[Vehicle],
    profile: FinancialProfile,
    tax_rate: float,
    is_retry: bool = False,
) -> str:
    """Natural-language ranking instructions with the full catalog embedded as JSON"""
    vehicles_json = json.dumps([_vehicle_prompt_record(v) for v in vehicles], indent=2)
    retry_instructions = _RETRY_INSTRUCTIONS if is_retry else ""

    return f"""You are a Toyota Financial Services AI advisor. Your task is to intelligently rank vehicles for a customer based on their financial profile.

CUSTOMER FINANCIAL PROFILE:
- Annual Income: ${profile.annual_income:.0f}
- Credit Score: {profile.credit_score}
- Available Monthly Payment: ${profile.available_monthly:.0f}
- Sales Tax Rate: {tax_rate:.2f}%

APR RATES (based on credit score):
- 750+: 3.99% (Excellent)
- 700-749: 5.49% (Very Good)
- 650-699: 7.99% (Good)
- Below 650: 11.99% (Fair)

AVAILABLE VEHICLES (JSON format):
{vehicles_json}

YOUR TASK:
Rank these vehicles in order of recommendation for this customer. Follow these rules strictly:

1. AFFORDABILITY PATTERN: For every 3 vehicles, 2 should be AFFORDABLE and 1 should be a STRETCH.
   - AFFORDABLE: Monthly payment (60-month loan) is <= 70% of available monthly payment
   - STRETCH: Monthly payment is 70-95% of available monthly payment (challenging but possible)

2. Calculate estimated monthly payments using:
   - Total Price = MSRP x (1 + tax_rate/100)
   - Down Payment = 10% of total price
   - Financed Amount = Total Price - Down Payment
   - Monthly Payment = Standard loan formula with 60 months and appropriate APR

3. Consider:
   - Value proposition (features, fuel efficiency, practicality)
   - Popular models that hold value
   - Mix of vehicle types (sedans, SUVs, trucks)
   - Customer's likely preferences based on income level

4. Pattern examples:
   [Affordable, Affordable, Stretch, Affordable, Affordable, Stretch, ...]
{retry_instructions}
RESPONSE FORMAT:
Return ONLY a valid JSON object with this exact structure (no markdown, no extra text):

{_RESPONSE_EXAMPLE}

IMPORTANT:
- Include ALL vehicles from the input
- Use "category" field: either "affordable" or "stretch"
- Maintain the 2:1 ratio (approximately 2 affordable for every 1 stretch)
- year, make, model, and trim must EXACTLY match the input vehicles
- Return ONLY the JSON object, nothing else
"""


def parse_ranked_json(text: str) -> List[RankedEntry]:
    """
    Decode model output into ranked entries.

    Raises:
        InvalidJSONFormatError: Output is not valid ranking JSON or the list is empty
    """
    cleaned = strip_code_fences(text)
    if not cleaned:
        raise InvalidJSONFormatError("Empty response text")

    try:
        payload = RankedVehiclesPayload.model_validate_json(cleaned)
    except ValidationError as e:
        raise InvalidJSONFormatError(f"Decoding error: {e.error_count()} validation error(s): {e.errors()[0]['msg']}") from e

    if not payload.ranked_vehicles:
        raise InvalidJSONFormatError("Empty ranked_vehicles array")

    return payload.ranked_vehicles


def categorize(
    vehicle: Vehicle,
    profile: FinancialProfile,
    tax_rate: float,
    calculator: Optional[FinancingCalculator] = None,
) -> str:
    """Affordability category from the payment/budget ratio"""
    calc = calculator or FinancingCalculator()
    payment = calc.calculate_monthly_payment(vehicle.msrp_usd, profile.credit_score, tax_rate)
    ratio = affordability_ratio(payment, profile.available_monthly)
    return AFFORDABLE if ratio <= AFFORDABLE_MAX_RATIO else STRETCH


def reorder_vehicles(
    vehicles: List[Vehicle],
    ranked: List[RankedEntry],
    profile: FinancialProfile,
    tax_rate: float,
) -> List[RankedVehicle]:
    """
    Reorder the catalog to follow the model's ranking.

    Entries are matched on (year, make, model, trim), case-insensitively.
    Unmatched or repeated entries are dropped; vehicles the model never
    mentioned are appended in catalog order with a computed category.

    Raises:
        InvalidJSONFormatError: Result size differs from the catalog size
    """
    remaining = list(vehicles)
    result: List[RankedVehicle] = []

    for entry in ranked:
        match = next((v for v in remaining if v.identity == entry.identity), None)
        if match is None:
            logging.warning(
                "Ranked vehicle not found in catalog",
                extra={"vehicle": f"{entry.year} {entry.make} {entry.model} {entry.trim}"},
            )
            continue
        remaining.remove(match)
        result.append(RankedVehicle(vehicle=match, reason=entry.reason, category=entry.category))

    for vehicle in remaining:
        result.append(
            RankedVehicle(
                vehicle=vehicle,
                reason="",
                category=categorize(vehicle, profile, tax_rate),
            )
        )

    if len(result) != len(vehicles):
        raise InvalidJSONFormatError("Ranked list doesn't match input vehicle count")

    return result


def validate_ranking(ranked: List[RankedVehicle], profile: FinancialProfile, tax_rate: float) -> Tuple[int, int]:
    """
    Advisory check of the 2:1 affordable:stretch pattern over the first 9 vehicles.

    Ratios are computed with a default FinancingCalculator. Logs a warning when
    the affordable count is more than 2 away from 6; never raises.

    Returns: (affordable_count, stretch_count)
    """
    calculator = FinancingCalculator()
    affordable_count = 0
    stretch_count = 0

    for item in ranked[:VALIDATION_WINDOW]:
        if categorize(item.vehicle, profile, tax_rate, calculator) == AFFORDABLE:
            affordable_count += 1
        else:
            stretch_count += 1

    logging.info(
        "Ranking validation",
        extra={"affordable_count": affordable_count, "stretch_count": stretch_count},
    )

    if abs(affordable_count - EXPECTED_AFFORDABLE) > AFFORDABLE_TOLERANCE:
        logging.warning(
            f"Ranking doesn't follow 2:1 pattern (expected ~{EXPECTED_AFFORDABLE} affordable, got {affordable_count})",
            extra={"affordable_count": affordable_count, "stretch_count": stretch_count},
        )

    return affordable_count, stretch_count
