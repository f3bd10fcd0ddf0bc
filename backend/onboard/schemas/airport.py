from pydantic import BaseModel

from onboard.schemas.common import CamelModel


class AirportResponse(CamelModel):
    code: str
    name: str
    city: str
    country: str
    region: str


class AirportListResponse(BaseModel):
    success: bool = True
    airports: list[AirportResponse]


class AirportEnvelope(BaseModel):
    success: bool = True
    airport: AirportResponse


class RegionListResponse(BaseModel):
    success: bool = True
    regions: list[str]
