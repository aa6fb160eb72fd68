"""POST /v1/financing/quote - Loan/lease payment quote"""

from fastapi import APIRouter

from tfs_gateway.api.v1.schemas import FinancingQuoteRequest, FinancingQuoteResponse
from tfs_gateway.domain.financing import FinancingCalculator

router = APIRouter()


@router.post("/financing/quote", response_model=FinancingQuoteResponse)
def create_quote(request_body: FinancingQuoteRequest):
    """Monthly payment, total price and down payment for one vehicle price"""
    calculator = FinancingCalculator(
        down_payment_percentage=request_body.down_payment_percentage,
        is_lease_mode=request_body.lease_mode,
        loan_term_months=request_body.loan_term_months,
        lease_term_months=request_body.lease_term_months,
    )

    monthly_payment = calculator.calculate_monthly_payment(
        msrp=request_body.msrp,
        credit_score=request_body.credit_score,
        tax_rate=request_body.tax_rate,
    )

    return FinancingQuoteResponse(
        monthly_payment=round(monthly_payment, 2),
        total_price=round(calculator.get_total_price(request_body.msrp, request_body.tax_rate), 2),
        down_payment=round(calculator.get_down_payment_amount(request_body.msrp, request_body.tax_rate), 2),
        apr=calculator.get_apr(request_body.credit_score),
        credit_tier=calculator.get_credit_tier(request_body.credit_score),
        lease_mode=request_body.lease_mode,
        term_months=request_body.lease_term_months if request_body.lease_mode else request_body.loan_term_months,
    )
