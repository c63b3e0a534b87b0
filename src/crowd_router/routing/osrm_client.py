"""
OSRM Client
===========

Adapter for an OSRM-compatible routing provider.

Sole responsibility: talk to the provider over HTTP and return normalized
route geometry. It encapsulates the provider-specific details:
    - coordinate order: internal (lat, lng) <-> provider (lng, lat)
    - URL construction for /route/v1/{profile}/{coordinates}
    - timeouts and error handling
    - parsing GeoJSON geometry into internal point lists

It contains no crowd logic and no scoring.

Request:
    GET {base_url}/route/v1/driving/{lng1},{lat1};{lng2},{lat2}
        ?overview=full&geometries=geojson[&alternatives=true]

Response:
    {
        "code": "Ok",
        "routes": [
            {"geometry": {"coordinates": [[lng, lat], ...]}},
            ...
        ]
    }
"""

import logging
from typing import Any, List, Optional, Sequence

import requests

from crowd_router.errors import InvalidArgument, ProviderUnavailable
from crowd_router.models.geo import LatLng


logger = logging.getLogger(__name__)


DEFAULT_BASE_URL = "https://router.project-osrm.org"


def to_provider_order(points: Sequence[LatLng]) -> List[List[float]]:
    """Convert internal (lat, lng) points to provider [lng, lat] pairs."""
    return [[lng, lat] for lat, lng in points]


def from_provider_order(coordinates: Sequence[Sequence[float]]) -> List[LatLng]:
    """Convert provider [lng, lat] pairs to internal (lat, lng) points."""
    return [(float(coord[1]), float(coord[0])) for coord in coordinates]


class OSRMClient:
    """
    HTTP client for the provider's route service.

    Attributes:
        base_url: Provider root URL, without trailing slash
        profile: Routing profile (driving, walking, cycling)
        timeout: Seconds to wait for a response before giving up

    Example:
        with OSRMClient("https://router.project-osrm.org") as client:
            routes = client.fetch_routes([(23.18, 75.78), (23.19, 75.79)])
            best = routes[0]
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        profile: str = "driving",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not base_url:
            raise ValueError("Routing provider base URL is not set")
        if timeout <= 0:
            raise ValueError("timeout must be positive")

        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout = timeout
        self._session = session or requests.Session()

        logger.info(
            f"OSRMClient initialized: base_url={self.base_url}, "
            f"profile={profile}, timeout={timeout}s"
        )

    # -------------------------------------------------------------------------
    # Coordinate formatting
    # -------------------------------------------------------------------------

    @staticmethod
    def format_coordinates(points: Sequence[LatLng]) -> str:
        """Convert (lat, lng) points to 'lng,lat;lng,lat;...'."""
        return ";".join(f"{lng},{lat}" for lng, lat in to_provider_order(points))

    def build_url(self, points: Sequence[LatLng]) -> str:
        return f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(points)}"

    # -------------------------------------------------------------------------
    # Route service
    # -------------------------------------------------------------------------

    def fetch_routes(
        self,
        points: Sequence[LatLng],
        alternatives: bool = False,
    ) -> List[List[LatLng]]:
        """
        Request routes visiting `points` in order.

        Args:
            points: Start, optional waypoints, end as (lat, lng)
            alternatives: Ask the provider for alternative paths

        Returns:
            Route geometries in provider rank order, each a list of (lat, lng)

        Raises:
            InvalidArgument: If fewer than two points are given
            ProviderUnavailable: On network failure, an error status, an
                unparseable body, a non-"Ok" code or missing geometry
        """
        if len(points) < 2:
            raise InvalidArgument("At least two points are required to compute a route")

        params = {"overview": "full", "geometries": "geojson"}
        if alternatives:
            params["alternatives"] = "true"

        url = self.build_url(points)
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise ProviderUnavailable(f"Routing request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderUnavailable(
                f"Routing provider returned invalid JSON (HTTP {response.status_code})"
            ) from e

        if not isinstance(data, dict):
            raise ProviderUnavailable("Routing provider returned an unexpected payload")

        if data.get("code") != "Ok":
            raise ProviderUnavailable(
                f"OSRM error: {data.get('message', data.get('code', 'Unknown error'))}"
            )

        if not response.ok:
            raise ProviderUnavailable(f"Routing provider returned HTTP {response.status_code}")

        return self._parse_routes(data)

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self._session.close()

    def __enter__(self) -> "OSRMClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    @staticmethod
    def _parse_routes(data: dict) -> List[List[LatLng]]:
        routes: Any = data.get("routes")
        if not isinstance(routes, list) or not routes:
            raise ProviderUnavailable("Routing provider returned no routes")

        parsed = []
        for index, route in enumerate(routes):
            try:
                coordinates = route["geometry"]["coordinates"]
                points = from_provider_order(coordinates)
            except (KeyError, IndexError, TypeError, ValueError) as e:
                raise ProviderUnavailable(
                    f"Route {index} has missing or malformed geometry: {e}"
                ) from e

            if len(points) < 2:
                raise ProviderUnavailable(
                    f"Route {index} geometry has {len(points)} points, need at least 2"
                )
            parsed.append(points)
        return parsed
