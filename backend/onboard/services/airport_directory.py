"""
In-memory airport directory.

Backs client autocomplete and server-side resolution of IATA codes to
metadata. The table is immutable, so a single module-level instance is shared
by every request and by both storage backends.
"""

from dataclasses import dataclass
from typing import Optional

from onboard.data.airports import AIRPORTS

DEFAULT_SEARCH_LIMIT = 10
DEFAULT_REGION_LIMIT = 20
MIN_KEYWORD_LENGTH = 2


@dataclass(frozen=True)
class AirportInfo:
    code: str
    name: str
    city: str
    country: str
    region: str


class AirportDirectory:
    def __init__(self, airports: tuple[AirportInfo, ...]):
        self._airports = airports
        self._by_code = {airport.code: airport for airport in airports}

    def __len__(self) -> int:
        return len(self._airports)

    def __iter__(self):
        return iter(self._airports)

    def get(self, code: Optional[str]) -> Optional[AirportInfo]:
        if not code:
            return None
        return self._by_code.get(code.strip().upper())

    def search(self, keyword: Optional[str], limit: int = DEFAULT_SEARCH_LIMIT) -> list[AirportInfo]:
        """
        Case-insensitive substring match on code, name, city and country.

        Ranking: exact code, then code prefix, then city prefix, then name
        prefix, otherwise directory order. Keywords shorter than two
        characters return the head of the directory.
        """
        if not keyword or len(keyword.strip()) < MIN_KEYWORD_LENGTH:
            return list(self._airports[:limit])

        term = keyword.strip().lower()
        matches = [
            airport
            for airport in self._airports
            if term in airport.code.lower()
            or term in airport.name.lower()
            or term in airport.city.lower()
            or term in airport.country.lower()
        ]

        def rank(airport: AirportInfo) -> int:
            if airport.code.lower() == term:
                return 0
            if airport.code.lower().startswith(term):
                return 1
            if airport.city.lower().startswith(term):
                return 2
            if airport.name.lower().startswith(term):
                return 3
            return 4

        # sorted() is stable, so ties keep directory order
        return sorted(matches, key=rank)[:limit]

    def by_region(self, region: str, limit: int = DEFAULT_REGION_LIMIT) -> list[AirportInfo]:
        return [airport for airport in self._airports if airport.region == region][:limit]

    def regions(self) -> list[str]:
        return list(dict.fromkeys(airport.region for airport in self._airports))


directory = AirportDirectory(tuple(AirportInfo(*row) for row in AIRPORTS))


def get_airport_directory() -> AirportDirectory:
    return directory
