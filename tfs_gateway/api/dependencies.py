"""Dependency injection for FastAPI endpoints"""

from functools import lru_cache
from typing import List
from fastapi import Request
from tfs_gateway.config import settings
from tfs_gateway.domain.catalog import load_vehicles
from tfs_gateway.domain.models import Vehicle
from tfs_gateway.infrastructure.clients.ranking import VehicleRankingClient
from tfs_gateway.infrastructure.clients.tax import TaxLookupClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache(maxsize=1)
def _catalog() -> tuple:
    return tuple(load_vehicles(settings.vehicle_catalog_path))


def get_vehicle_catalog() -> List[Vehicle]:
    """Provide the vehicle catalog, loaded once per process"""
    return list(_catalog())


def get_tax_client() -> TaxLookupClient:
    """Provide tax lookup client instance"""
    return TaxLookupClient()


def get_ranking_client() -> VehicleRankingClient:
    """Provide vehicle ranking client instance"""
    return VehicleRankingClient()
