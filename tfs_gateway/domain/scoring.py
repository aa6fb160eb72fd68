"""TFS Score engine - composite 0-100 financing readiness rating"""

import math

from tfs_gateway.domain.models import FinancialProfile, ScoreBand

# Weight factors (total = 100%)
CREDIT_WEIGHT = 0.40
INCOME_WEIGHT = 0.25
PAYMENT_CAPACITY_WEIGHT = 0.20
SAVINGS_WEIGHT = 0.15

SAVINGS_RATE = 0.20  # Share of monthly income set aside before spending

MIN_CREDIT_SCORE = 300
MAX_CREDIT_SCORE = 850


def calculate_score(
    income: float,
    credit_score: int,
    available_monthly: float,
    monthly_savings: float,
) -> int:
    """
    Calculate TFS Score from a financial profile.

    Scoring weights:
    - 40%: Credit score
    - 25%: Annual income
    - 20%: Payment capacity (available monthly / monthly income)
    - 15%: Savings rate (monthly savings / monthly income)

    Each factor is mapped to 0-100 through piecewise-linear bands, then
    combined, rounded half away from zero and clamped to 0-100.
    """
    total = (
        credit_component(credit_score) * CREDIT_WEIGHT
        + income_component(income) * INCOME_WEIGHT
        + payment_capacity_component(available_monthly, income) * PAYMENT_CAPACITY_WEIGHT
        + savings_component(monthly_savings, income) * SAVINGS_WEIGHT
    )
    if math.isnan(total):
        return 0

    return max(0, min(100, int(math.floor(total + 0.5))))


def calculate_profile_score(profile: FinancialProfile) -> int:
    """Score a FinancialProfile"""
    return calculate_score(
        income=profile.annual_income,
        credit_score=profile.credit_score,
        available_monthly=profile.available_monthly,
        monthly_savings=profile.monthly_savings,
    )


def credit_component(credit_score: int) -> float:
    """
    Excellent (750+): 95-100
    Very Good (700-749): 80-94
    Good (650-699): 65-79
    Fair (600-649): 50-64
    Poor (<600): 0-49
    """
    score = max(MIN_CREDIT_SCORE, min(MAX_CREDIT_SCORE, int(credit_score)))

    if score >= 750:
        return 95 + (score - 750) / 100.0 * 5
    elif score >= 700:
        return 80 + (score - 700) / 50.0 * 14
    elif score >= 650:
        return 65 + (score - 650) / 50.0 * 14
    elif score >= 600:
        return 50 + (score - 600) / 50.0 * 14
    else:
        return (score - MIN_CREDIT_SCORE) / 300.0 * 49


def income_component(income: float) -> float:
    """
    Excellent ($180K+): 90-100
    Very Good ($140K-$179K): 75-89
    Good ($100K-$139K): 60-74
    Fair ($70K-$99K): 40-59
    Limited (<$70K): 20-39
    """
    if income >= 180_000:
        return 90 + min(1.0, (income - 180_000) / 120_000) * 10
    elif income >= 140_000:
        return 75 + (income - 140_000) / 40_000 * 14
    elif income >= 100_000:
        return 60 + (income - 100_000) / 40_000 * 14
    elif income >= 70_000:
        return 40 + (income - 70_000) / 30_000 * 19
    else:
        return 20 + max(0.0, min(1.0, income / 70_000)) * 19


def payment_capacity_component(available_monthly: float, income: float) -> float:
    """
    Available monthly payment as a percentage of monthly income.

    Excellent (12%+): 90-100
    Very Good (9-11%): 75-89
    Good (6-8%): 60-74
    Fair (3-5%): 40-59
    Limited (<3%): 20-39
    """
    monthly_income = income / 12.0
    if not monthly_income > 0:
        return 0.0

    ratio = available_monthly / monthly_income * 100

    if ratio >= 12:
        return 90 + min(1.0, (ratio - 12) / 8) * 10
    elif ratio >= 9:
        return 75 + (ratio - 9) / 3 * 14
    elif ratio >= 6:
        return 60 + (ratio - 6) / 3 * 14
    elif ratio >= 3:
        return 40 + (ratio - 3) / 3 * 19
    else:
        return 20 + max(0.0, min(1.0, ratio / 3)) * 19


def savings_component(monthly_savings: float, income: float) -> float:
    """
    Monthly savings as a percentage of monthly income.

    Excellent (20%+): 90-100
    Very Good (15-19%): 75-89
    Good (10-14%): 60-74
    Fair (5-9%): 40-59
    Limited (<5%): 20-39
    """
    monthly_income = income / 12.0
    if not monthly_income > 0:
        return 0.0

    ratio = monthly_savings / monthly_income * 100

    if ratio >= 20:
        return 90 + min(1.0, (ratio - 20) / 10) * 10
    elif ratio >= 15:
        return 75 + (ratio - 15) / 5 * 14
    elif ratio >= 10:
        return 60 + (ratio - 10) / 5 * 14
    elif ratio >= 5:
        return 40 + (ratio - 5) / 5 * 19
    else:
        return 20 + max(0.0, min(1.0, ratio / 5)) * 19


def get_score_band(score: int) -> ScoreBand:
    """Map score to GREEN (75+), YELLOW (50-74) or RED"""
    if score >= 75:
        return ScoreBand.GREEN
    elif score >= 50:
        return ScoreBand.YELLOW
    else:
        return ScoreBand.RED


def get_score_description(score: int) -> str:
    if score >= 90:
        return "Exceptional"
    elif score >= 75:
        return "Excellent"
    elif score >= 60:
        return "Very Good"
    elif score >= 50:
        return "Good"
    elif score >= 35:
        return "Fair"
    else:
        return "Needs Improvement"


def monthly_savings(income: float) -> float:
    """Fixed 20% of monthly income"""
    return income / 12.0 * SAVINGS_RATE


def spending_capacity(income: float, average_spending: float) -> float:
    """Monthly income, minus the 20% savings allocation, minus average monthly spending"""
    after_savings = income / 12.0 * (1 - SAVINGS_RATE)
    return max(after_savings - average_spending, 0.0)
