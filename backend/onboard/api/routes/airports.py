"""
Airport directory endpoints. Public, served from the in-process directory.
"""

from fastapi import APIRouter, Depends, Query

from onboard.api.deps import get_directory
from onboard.core.exceptions import NotFoundError
from onboard.schemas.airport import AirportEnvelope, AirportListResponse, AirportResponse, RegionListResponse
from onboard.services.airport_directory import AirportDirectory

router = APIRouter(prefix="/airports", tags=["Airports"])


def _listing(airports) -> AirportListResponse:
    return AirportListResponse(airports=[AirportResponse.model_validate(a) for a in airports])


@router.get("", response_model=AirportListResponse)
async def search_airports(
    search: str = Query("", max_length=100),
    limit: int = Query(10, ge=1, le=50),
    directory: AirportDirectory = Depends(get_directory),
):
    """Search by code, city or name."""
    return _listing(directory.search(search, limit))


@router.get("/regions", response_model=RegionListResponse)
async def list_regions(directory: AirportDirectory = Depends(get_directory)):
    return RegionListResponse(regions=directory.regions())


@router.get("/regions/{region}", response_model=AirportListResponse)
async def airports_by_region(
    region: str,
    limit: int = Query(20, ge=1, le=100),
    directory: AirportDirectory = Depends(get_directory),
):
    return _listing(directory.by_region(region, limit))


@router.get("/{code}", response_model=AirportEnvelope)
async def get_airport(code: str, directory: AirportDirectory = Depends(get_directory)):
    airport = directory.get(code)
    if airport is None:
        raise NotFoundError("Airport not found")
    return AirportEnvelope(airport=AirportResponse.model_validate(airport))
