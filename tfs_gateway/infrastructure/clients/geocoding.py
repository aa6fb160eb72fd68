"""Reverse geocoding: coordinate to postal code"""

import httpx
from typing import Optional
from tfs_gateway.config import settings
from tfs_gateway.domain.exceptions import LocationNotFoundError
from tfs_gateway.domain.models import GeoLocation


class NominatimGeocoder:
    """Client for the OpenStreetMap Nominatim reverse endpoint"""

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.timeout = settings.http_timeout_seconds if timeout is None else timeout
        self.transport = transport

    async def resolve_postal_code(self, location: GeoLocation) -> str:
        """
        Resolve a coordinate to a postal code.

        Raises:
            LocationNotFoundError: Lookup failed or the place has no postal code
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.base_url}/reverse",
                    params={
                        "lat": location.latitude,
                        "lon": location.longitude,
                        "format": "jsonv2",
                        "addressdetails": 1,
                    },
                    headers={"User-Agent": self.user_agent},
                )
                response.raise_for_status()
                data = response.json()
            except httpx.TimeoutException as e:
                raise LocationNotFoundError(f"Geocoder timeout after {self.timeout}s") from e
            except (httpx.HTTPStatusError, httpx.RequestError) as e:
                raise LocationNotFoundError(f"Geocoder error: {e}") from e
            except ValueError as e:
                raise LocationNotFoundError("Invalid geocoder response") from e

        postal_code = _postal_code(data)
        if not postal_code:
            raise LocationNotFoundError()
        return postal_code


def _postal_code(data: object) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    address = data.get("address")
    if not isinstance(address, dict):
        return None
    postcode = address.get("postcode")
    if not isinstance(postcode, str) or not postcode.strip():
        return None
    # US ZIP+4 -> 5-digit ZIP
    return postcode.strip().split("-")[0]
