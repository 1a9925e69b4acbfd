"""
Exceptions raised by the safe routing pipeline.

Gateway errors never escape SafeRouteService: each one is logged and the
attempt counts as producing no candidate. InvalidInputError subclasses
ValueError so the API layer can keep its existing ValueError -> 400 mapping.
"""


class RoutingError(Exception):
    """Base class for routing failures."""


class InvalidInputError(RoutingError, ValueError):
    """Request is missing coordinates or carries invalid values."""


class GatewayError(RoutingError):
    """The external road router could not produce routes."""


class GatewayUnavailableError(GatewayError):
    """Router unreachable, returned an error code, or sent an unreadable body."""


class GatewayTimeoutError(GatewayError):
    """Router did not answer within the configured timeout."""


class NoRouteFoundError(RoutingError):
    """No candidate route was produced by any attempt."""


class ZoneSourceUnavailableError(RoutingError):
    """The high-risk zone file is missing or cannot be parsed."""


class RoutingCancelledError(RoutingError):
    """The caller cancelled the request before routing finished."""
