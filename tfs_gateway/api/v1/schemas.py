"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from typing import List, Optional


class ScoreRequest(BaseModel):
    """Request body for POST /v1/score"""

    annual_income: float = Field(..., ge=0, description="Annual income in USD")
    credit_score: int = Field(..., ge=300, le=850, description="Bureau credit score")
    available_monthly: float = Field(..., description="Monthly payment capacity in USD")
    monthly_savings: float = Field(..., description="Monthly savings in USD")


class ScoreComponents(BaseModel):
    credit: float
    income: float
    payment_capacity: float
    savings: float


class ScoreResponse(BaseModel):
    """Response for POST /v1/score"""

    score: int
    band: str
    description: str
    components: ScoreComponents


class FinancingQuoteRequest(BaseModel):
    """Request body for POST /v1/financing/quote"""

    msrp: float = Field(..., ge=0, description="Vehicle MSRP in USD")
    credit_score: int = Field(..., ge=300, le=850)
    tax_rate: float = Field(..., ge=0, le=100, description="Sales tax in percentage points, e.g. 8.25")
    down_payment_percentage: float = Field(10.0, ge=0, le=100)
    lease_mode: bool = False
    loan_term_months: int = Field(60, ge=1, le=120)
    lease_term_months: int = Field(36, ge=1, le=60)


class FinancingQuoteResponse(BaseModel):
    """Response for POST /v1/financing/quote"""

    monthly_payment: float
    total_price: float
    down_payment: float
    apr: float
    credit_tier: str
    lease_mode: bool
    term_months: int


class TaxLookupRequest(BaseModel):
    """Request body for POST /v1/tax/lookup"""

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class TaxInfoResponse(BaseModel):
    county: str
    sales_tax_percentage: float
    zip_code: str


class VehicleSchema(BaseModel):
    year: int
    make: str
    model: str
    trim: str
    msrp_usd: float
    horsepower_hp: Optional[int] = None
    drivetrain: str
    powertrain: str
    body_style: str
    image_url: str


class VehicleListResponse(BaseModel):
    """Response for GET /v1/vehicles"""

    vehicles: List[VehicleSchema]


class RankRequest(BaseModel):
    """Request body for POST /v1/vehicles/rank"""

    annual_income: float = Field(..., ge=0)
    credit_score: int = Field(..., ge=300, le=850)
    available_monthly: float = Field(..., ge=0)
    monthly_savings: float = Field(0.0, ge=0)
    tax_rate: Optional[float] = Field(None, ge=0, le=100, description="Defaults to the configured tax rate")


class RankedVehicleSchema(BaseModel):
    vehicle: VehicleSchema
    reason: str
    category: str


class RankResponse(BaseModel):
    """Response for POST /v1/vehicles/rank"""

    vehicles: List[RankedVehicleSchema]
