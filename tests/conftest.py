"""Pytest fixtures for testing"""

import pytest
from typing import Callable, List
import httpx
from fastapi.testclient import TestClient
from tfs_gateway.api.main import create_app
from tfs_gateway.domain.models import FinancialProfile, Vehicle
from tfs_gateway.domain.scoring import monthly_savings, spending_capacity
from tests.helpers import make_vehicle



@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    app = create_app()
    return TestClient(app)


@pytest.fixture
def sample_vehicles() -> List[Vehicle]:
    """Three catalog vehicles at different price points"""
    return [
        make_vehicle("Corolla", 22_995),
        make_vehicle("Camry", 28_700),
        make_vehicle("Highlander", 40_970),
    ]


@pytest.fixture
def demo_profile() -> FinancialProfile:
    """Demo profile: $134,217 income, 742 credit, $7,614 monthly spending"""
    income = 134_217.0
    return FinancialProfile(
        annual_income=income,
        credit_score=742,
        available_monthly=spending_capacity(income, 7_614.0),
        monthly_savings=monthly_savings(income),
    )


@pytest.fixture
def gemini_transport() -> Callable[..., httpx.MockTransport]:
    """Build an httpx MockTransport that records requests and replays responses in order"""

    def factory(*responses: httpx.Response, requests: list | None = None) -> httpx.MockTransport:
        queue = list(responses)

        def handler(request: httpx.Request) -> httpx.Response:
            if requests is not None:
                requests.append(request)
            template = queue.pop(0) if len(queue) > 1 else queue[0]
            return httpx.Response(template.status_code, headers=template.headers, content=template.content)

        return httpx.MockTransport(handler)

    return factory
