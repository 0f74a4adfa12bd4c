import httpx
import logging
from typing import Optional, Union

from pydantic import ValidationError

from routing.models import ReservationData

logger = logging.getLogger(__name__)


class HospitableReservationClient:
    """Client for Hospitable reservation lookups"""

    def __init__(self, api_token: Optional[str] = None, base_url: str = "https://public.api.hospitable.com",
                 http_client: Optional[httpx.AsyncClient] = None):
        self.api_token = api_token
        self.base_url = base_url
        self.http_client = http_client

        if not self.api_token:
            logger.warning("Hospitable API token not configured")

    async def _get(self, url: str, headers: dict) -> httpx.Response:
        if self.http_client is not None:
            return await self.http_client.get(url, headers=headers)
        async with httpx.AsyncClient() as client:
            return await client.get(url, headers=headers)

    async def get(self, reservation_id: Union[int, str]) -> Optional[ReservationData]:
        """
        Fetch stay metadata for a reservation.

        Returns None when the reservation is unavailable: non-success status,
        transport failure, an unreadable body or one without reservation data.
        Never raises.
        """
        url = f"{self.base_url}/v2/reservations/{reservation_id}"
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.api_token}",
        }

        try:
            response = await self._get(url, headers)
            response.raise_for_status()
            data = response.json().get("data")
            if not isinstance(data, dict):
                logger.warning(f"Reservation {reservation_id} response has no data")
                return None
            return ReservationData.model_validate(data)

        except httpx.HTTPStatusError as e:
            logger.error(f"Error fetching reservation data: {e.response.status_code}")
        except ValidationError as e:
            logger.error(f"Unexpected reservation data for {reservation_id}: {e}")
        except Exception as e:
            logger.error(f"Error fetching reservation data: {e}")
        return None
