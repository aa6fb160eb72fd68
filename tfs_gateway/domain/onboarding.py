"""Onboarding session and swipe deck state"""

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import List, Optional

from tfs_gateway.domain.exceptions import InvalidTaxInfoError
from tfs_gateway.domain.financing import FinancingCalculator, affordability_ratio
from tfs_gateway.domain.models import (
    EquifaxCreditData,
    FinancialProfile,
    PlaidFinancialData,
    TaxInfo,
    Vehicle,
)
from tfs_gateway.domain.scoring import calculate_profile_score, monthly_savings, spending_capacity

# Profile fallbacks when a data source was skipped
DEFAULT_INCOME = 100_000.0
DEFAULT_CREDIT_SCORE = 650
DEFAULT_AVAILABLE_MONTHLY = 1_000.0
DEFAULT_MONTHLY_SAVINGS = 500.0

# Pre-approval fallbacks
PRE_APPROVAL_TAX_RATE = 8.25
PRE_APPROVAL_CREDIT_SCORE = 700
PRE_APPROVAL_AVAILABLE_MONTHLY = 1_400.0
PRE_APPROVAL_MAX_RATIO = 0.75
PRE_APPROVAL_MIN_SCORE = 80

IMAGE_PREFETCH_COUNT = 5


class OnboardingStep(IntEnum):
    WELCOME = 0
    LOCATION = 1
    PLAID = 2
    EQUIFAX = 3
    COMPLETE = 4

    @property
    def progress(self) -> float:
        return self.value / (len(OnboardingStep) - 1)


class SkipWarning(str, Enum):
    """Warning shown before skipping a data connection"""

    PLAID = "plaid"
    EQUIFAX = "equifax"

    @property
    def title(self) -> str:
        if self is SkipWarning.PLAID:
            return "Skip Income Verification?"
        return "Skip Credit Check?"

    @property
    def message(self) -> str:
        if self is SkipWarning.PLAID:
            return "Manual review may take additional time and you may not receive pre-approved offers immediately."
        return "Without a credit check, we won't be able to provide personalized pre-approved offers right away."


def simulated_equifax_record() -> EquifaxCreditData:
    """Bureau record returned by the simulated soft pull"""
    return EquifaxCreditData(
        credit_score=742,
        credit_band="Good to Very Good",
        top_factors=[
            "Low credit utilization (18%)",
            "No recent delinquencies",
            "Good payment history",
            "Established credit age (8+ years)",
        ],
        accounts_open=7,
        credit_utilization=18.3,
    )


@dataclass
class OnboardingSession:
    """
    Linear onboarding flow: welcome -> location -> Plaid -> Equifax -> complete.

    Holds the data each step produced and derives the financial profile
    used for scoring, falling back to defaults for skipped steps.
    """

    current_step: OnboardingStep = OnboardingStep.WELCOME
    has_granted_location: bool = False
    has_connected_plaid: bool = False
    has_connected_equifax: bool = False
    pending_skip_warning: Optional[SkipWarning] = None
    tax: Optional[TaxInfo] = None
    plaid: PlaidFinancialData = field(default_factory=PlaidFinancialData)
    equifax: EquifaxCreditData = field(default_factory=EquifaxCreditData)

    def next_step(self) -> OnboardingStep:
        if self.current_step < OnboardingStep.COMPLETE:
            self.current_step = OnboardingStep(self.current_step + 1)
        self.pending_skip_warning = None
        return self.current_step

    def request_skip(self) -> Optional[SkipWarning]:
        """Skipping Plaid or Equifax needs confirmation; other steps skip silently"""
        if self.current_step == OnboardingStep.PLAID:
            self.pending_skip_warning = SkipWarning.PLAID
        elif self.current_step == OnboardingStep.EQUIFAX:
            self.pending_skip_warning = SkipWarning.EQUIFAX
        else:
            self.pending_skip_warning = None
        return self.pending_skip_warning

    def skip_current_step(self) -> OnboardingStep:
        return self.next_step()

    def apply_tax_info(self, tax: TaxInfo) -> None:
        self.has_granted_location = True
        self.tax = tax

    def edit_tax_info(self, county: str, tax_percentage: float) -> TaxInfo:
        """
        Replace the looked-up county and tax with user-entered values.

        The resolved ZIP code is kept.

        Raises:
            InvalidTaxInfoError: Blank county, or tax not strictly between 0 and 100
        """
        county = county.strip()
        if not county:
            raise InvalidTaxInfoError("County name is required")
        if not (math.isfinite(tax_percentage) and 0 < tax_percentage < 100):
            raise InvalidTaxInfoError("Tax percentage must be between 0 and 100")

        zip_code = self.tax.zip_code if self.tax else ""
        self.tax = TaxInfo(county=county, sales_tax_percentage=tax_percentage, zip_code=zip_code)
        return self.tax

    def connect_plaid(self, income: float, average_spending: float) -> None:
        self.has_connected_plaid = True
        self.plaid = PlaidFinancialData(income=income, average_spending=average_spending)

    def connect_equifax(self, record: Optional[EquifaxCreditData] = None) -> None:
        self.has_connected_equifax = True
        self.equifax = record or simulated_equifax_record()

    @property
    def spending_capacity(self) -> float:
        if not self.plaid.has_data:
            return 0.0
        return spending_capacity(self.plaid.income, self.plaid.average_spending)

    def financial_profile(self) -> FinancialProfile:
        if self.plaid.income is not None:
            income = self.plaid.income
            available = self.spending_capacity
            savings = monthly_savings(income)
        else:
            income = DEFAULT_INCOME
            available = DEFAULT_AVAILABLE_MONTHLY
            savings = DEFAULT_MONTHLY_SAVINGS

        credit_score = self.equifax.credit_score if self.equifax.credit_score is not None else DEFAULT_CREDIT_SCORE

        return FinancialProfile(
            annual_income=income,
            credit_score=credit_score,
            available_monthly=available,
            monthly_savings=savings,
        )

    @property
    def tfs_score(self) -> int:
        return calculate_profile_score(self.financial_profile())

    def is_pre_approved(self, vehicle: Vehicle, calculator: FinancingCalculator) -> bool:
        """Pre-approved when the payment is under 75% of budget and the TFS Score is 80+"""
        tax_rate = self.tax.sales_tax_percentage if self.tax else PRE_APPROVAL_TAX_RATE
        credit_score = (
            self.equifax.credit_score if self.equifax.credit_score is not None else PRE_APPROVAL_CREDIT_SCORE
        )
        available = self.spending_capacity if self.plaid.income is not None else PRE_APPROVAL_AVAILABLE_MONTHLY

        payment = calculator.calculate_monthly_payment(vehicle.msrp_usd, credit_score, tax_rate)
        ratio = affordability_ratio(payment, available)

        return ratio < PRE_APPROVAL_MAX_RATIO and self.tfs_score >= PRE_APPROVAL_MIN_SCORE


@dataclass
class VehicleDeck:
    """
    Swipe deck over a (usually ranked) vehicle list.

    Swipes return the image URLs the prefetcher should warm next.
    """

    vehicles: List[Vehicle]
    current_index: int = 0
    wishlist: List[Vehicle] = field(default_factory=list)
    denied: List[Vehicle] = field(default_factory=list)

    @property
    def current_vehicle(self) -> Optional[Vehicle]:
        if self.current_index < len(self.vehicles):
            return self.vehicles[self.current_index]
        return None

    @property
    def has_more_vehicles(self) -> bool:
        return self.current_index < len(self.vehicles)

    def initial_prefetch(self) -> List[str]:
        return [v.image_url for v in self.vehicles[:IMAGE_PREFETCH_COUNT]]

    def swipe_right(self) -> List[str]:
        """Save current vehicle to the wishlist"""
        return self._advance(self.wishlist)

    def swipe_left(self) -> List[str]:
        return self._advance(self.denied)

    def _advance(self, bucket: List[Vehicle]) -> List[str]:
        vehicle = self.current_vehicle
        if vehicle is None:
            return []

        bucket.append(vehicle)
        self.current_index += 1

        # Last slot of the window starting at the new position; index + 5 would skip one image
        next_index = self.current_index + IMAGE_PREFETCH_COUNT - 1
        if next_index < len(self.vehicles):
            return [self.vehicles[next_index].image_url]
        return []
