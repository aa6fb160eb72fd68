"""Loan and lease monthly payment calculator"""

import math
from dataclasses import dataclass

LEASE_RESIDUAL_PERCENTAGE = 0.55  # Residual value after a 36-month lease
LEASE_MONEY_FACTOR = 0.002  # ~5% APR equivalent


def _clean(value: float) -> float:
    """Clamp negative and NaN inputs to zero"""
    if value is None or math.isnan(value) or value < 0:
        return 0.0
    return float(value)


def get_apr(credit_score: int) -> float:
    """
    Tiered APR lookup:
    - 750+:    3.99% (Excellent)
    - 700-749: 5.49% (Very Good)
    - 650-699: 7.99% (Good)
    - <650:    11.99% (Poor)
    """
    if credit_score >= 750:
        return 3.99
    elif credit_score >= 700:
        return 5.49
    elif credit_score >= 650:
        return 7.99
    else:
        return 11.99


def get_credit_tier(credit_score: int) -> str:
    if credit_score >= 750:
        return "Excellent"
    elif credit_score >= 700:
        return "Very Good"
    elif credit_score >= 650:
        return "Good"
    else:
        return "Poor"


def amortized_payment(principal: float, apr: float, months: int) -> float:
    """
    Standard amortization: M = P * r(1+r)^n / ((1+r)^n - 1)

    r is the monthly rate (APR / 100 / 12). A zero rate degrades to P / n.
    """
    n = max(1, int(months))
    monthly_rate = apr / 100.0 / 12.0

    if monthly_rate == 0:
        return principal / n

    factor = (1 + monthly_rate) ** n
    return principal * monthly_rate * factor / (factor - 1)


def affordability_ratio(monthly_payment: float, available_monthly: float) -> float:
    """Monthly payment as a share of the monthly budget"""
    if not available_monthly > 0:
        return math.inf
    return monthly_payment / available_monthly


@dataclass
class FinancingCalculator:
    """Calculator configuration, mutated by the caller between computations"""

    down_payment_percentage: float = 10.0
    is_lease_mode: bool = False
    loan_term_months: int = 60
    lease_term_months: int = 36

    def get_apr(self, credit_score: int) -> float:
        return get_apr(credit_score)

    def get_credit_tier(self, credit_score: int) -> str:
        return get_credit_tier(credit_score)

    def get_total_price(self, msrp: float, tax_rate: float) -> float:
        """MSRP with sales tax applied (tax_rate in percentage points)"""
        return _clean(msrp) * (1 + _clean(tax_rate) / 100.0)

    def get_down_payment_amount(self, msrp: float, tax_rate: float) -> float:
        return self.get_total_price(msrp, tax_rate) * (_clean(self.down_payment_percentage) / 100.0)

    def calculate_monthly_payment(self, msrp: float, credit_score: int, tax_rate: float) -> float:
        """
        Monthly payment for the current mode.

        Loan mode amortizes (total price - down payment) over loan_term_months
        at the credit-tier APR. Lease mode uses the simplified lease model.
        """
        total_price = self.get_total_price(msrp, tax_rate)
        down_payment = self.get_down_payment_amount(msrp, tax_rate)

        if self.is_lease_mode:
            return self._lease_payment(_clean(msrp), _clean(tax_rate), down_payment)

        principal = total_price - down_payment
        return amortized_payment(principal, self.get_apr(credit_score), self.loan_term_months)

    def _lease_payment(self, msrp: float, tax_rate: float, down_payment: float) -> float:
        residual_value = msrp * LEASE_RESIDUAL_PERCENTAGE
        depreciation = msrp - residual_value
        term = max(1, int(self.lease_term_months))

        monthly_depreciation = (depreciation - down_payment) / term
        monthly_finance_charge = (msrp + residual_value) * LEASE_MONEY_FACTOR
        monthly_tax = (monthly_depreciation + monthly_finance_charge) * (tax_rate / 100.0)

        return monthly_depreciation + monthly_finance_charge + monthly_tax
