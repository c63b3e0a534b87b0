"""
Errors
======

Exception taxonomy for the crowd router.

Propagation rules:
    - InvalidCoordinate / InvalidArgument are raised at the point of entry,
      before any state is mutated.
    - ProviderUnavailable is isolated per candidate branch and only ever
      surfaces to callers as a missing candidate.
    - NoRouteFound is a normal, user-visible empty state.
"""


class CrowdRouterError(Exception):
    """Base class for all crowd router errors."""
    pass


class InvalidCoordinate(CrowdRouterError, ValueError):
    """Latitude/longitude is non-numeric, non-finite or out of range."""
    pass


class InvalidArgument(CrowdRouterError, ValueError):
    """A non-coordinate argument is invalid (e.g. non-positive crowd count)."""
    pass


class ProviderUnavailable(CrowdRouterError):
    """The external routing provider could not produce a usable route."""
    pass


class NoRouteFound(CrowdRouterError):
    """No candidate route is available for the requested trip."""
    pass
