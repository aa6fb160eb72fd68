"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class ScoreBand(str, Enum):
    """TFS Score color band"""

    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"


@dataclass(frozen=True)
class FinancialProfile:
    """Inputs to the TFS Score and affordability checks"""

    annual_income: float
    credit_score: int
    available_monthly: float
    monthly_savings: float


@dataclass(frozen=True)
class Vehicle:
    """Catalog vehicle, matched downstream by (year, make, model, trim)"""

    year: int
    make: str
    model: str
    trim: str
    msrp_usd: float
    horsepower_hp: Optional[int]
    drivetrain: str
    powertrain: str
    body_style: str
    image_url: str

    @property
    def identity(self) -> Tuple[int, str, str, str]:
        return vehicle_identity(self.year, self.make, self.model, self.trim)

    @property
    def display_name(self) -> str:
        return f"{self.year} {self.make} {self.model}"

    @property
    def full_name(self) -> str:
        return f"{self.year} {self.make} {self.model} {self.trim}"


@dataclass(frozen=True)
class RankedVehicle:
    """Vehicle placed by the ranking client"""

    vehicle: Vehicle
    reason: str
    category: str  # "affordable" or "stretch"


@dataclass(frozen=True)
class TaxInfo:
    """County and sales tax for a postal code (percentage points, 8.25 == 8.25%)"""

    county: str
    sales_tax_percentage: float
    zip_code: str

    @property
    def formatted_tax_percentage(self) -> str:
        return f"{self.sales_tax_percentage:.2f}%"


@dataclass(frozen=True)
class GeoLocation:
    """Coordinate handed over by the device location provider"""

    latitude: float
    longitude: float


@dataclass
class EquifaxCreditData:
    """Credit bureau record pulled during onboarding"""

    credit_score: Optional[int] = None
    credit_band: Optional[str] = None
    top_factors: List[str] = field(default_factory=list)
    accounts_open: Optional[int] = None
    credit_utilization: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return self.credit_score is not None

    @property
    def credit_rating(self) -> str:
        if self.credit_score is None:
            return "Unknown"
        if self.credit_score >= 800:
            return "Exceptional"
        if self.credit_score >= 740:
            return "Very Good"
        if self.credit_score >= 670:
            return "Good"
        if self.credit_score >= 580:
            return "Fair"
        return "Poor"


@dataclass
class PlaidFinancialData:
    """Income and spending pulled from the linked bank account"""

    income: Optional[float] = None
    average_spending: Optional[float] = None

    @property
    def has_data(self) -> bool:
        return self.income is not None and self.average_spending is not None


def vehicle_identity(year: int, make: str, model: str, trim: str) -> Tuple[int, str, str, str]:
    """Normalized matching key: case-insensitive, surrounding whitespace ignored"""
    return (int(year), make.strip().lower(), model.strip().lower(), trim.strip().lower())
