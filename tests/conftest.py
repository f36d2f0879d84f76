"""Pytest configuration and shared fixtures."""

from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from documentdb_agent.api.app import app
from documentdb_agent.documents.models import Hotel


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create async test client for FastAPI app.

    The lifespan does not run under ASGITransport, so no pipeline is open
    unless a test sets ``app.state.pipeline``.

    Yields:
        AsyncClient configured for testing.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.state.pipeline = None


@pytest.fixture
def hotel_data() -> dict[str, Any]:
    """One entry of the hotel data file, as it is on disk."""
    return {
        "HotelId": "1",
        "HotelName": "Stay-Kay City Hotel",
        "Description": (
            "This classic hotel is fully-refurbished and ideally located on the "
            "main commercial artery of the city in the heart of New York."
        ),
        "Description_fr": "Cet hôtel classique entièrement rénové est idéalement situé.",
        "Category": "Boutique",
        "Tags": ["view", "air conditioning", "concierge"],
        "ParkingIncluded": False,
        "IsDeleted": False,
        "LastRenovationDate": "2022-01-18T00:00:00Z",
        "Rating": 3.6,
        "Address": {
            "StreetAddress": "677 5th Ave",
            "City": "New York",
            "StateProvince": "NY",
            "PostalCode": "10022",
            "Country": "USA",
        },
        "Location": {"type": "Point", "coordinates": [-73.975403, 40.760586]},
        "Rooms": [{"Description": "Budget Room, 1 Queen Bed (Cityside)"}],
    }


@pytest.fixture
def make_hotel() -> Callable[..., Hotel]:
    """Factory for hotels with only the fields a test cares about."""

    def _make(hotel_id: str, name: str | None = None, **fields: Any) -> Hotel:
        return Hotel(
            hotel_id=hotel_id,
            hotel_name=name or f"Hotel {hotel_id}",
            description=fields.pop("description", f"Description of hotel {hotel_id}"),
            **fields,
        )

    return _make
