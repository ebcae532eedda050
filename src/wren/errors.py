"""Wren exception hierarchy.

Shared across the compiler, validator, matcher, resolver and router so
every module raises and catches the same types.

Structural errors (``RouteDefinitionError``) are configuration bugs and
are raised while the route tree is built or mutated. Resolution, routing
and transition errors happen while a URL is being handled.
"""


class WrenError(Exception):
    """Base for all wren-specific errors."""


# ---------------------------------------------------------------------------
# Structural
# ---------------------------------------------------------------------------

class RouteDefinitionError(WrenError):
    """Raised when the declared route tree is invalid."""


class DuplicateRouteDefinition(RouteDefinitionError):
    """Two declarations both supply a payload for the same node."""


class AmbiguousRoute(RouteDefinitionError):
    """Siblings that could match the same URL segment."""


class IncompleteRoute(RouteDefinitionError):
    """A node that can never produce a renderable match."""


class InvalidRouteDefinition(RouteDefinitionError):
    """Malformed declaration or an illegal combination of attributes."""


class RouteInUse(RouteDefinitionError):
    """A node that is part of the current chain cannot be removed."""


# ---------------------------------------------------------------------------
# Deferred resolution
# ---------------------------------------------------------------------------

class ResolutionError(WrenError):
    """Raised while merging a deferred route definition."""


class ResolveContractViolation(ResolutionError):
    """A resolve provider returned a plain value instead of an awaitable."""


class AlreadyResolved(ResolutionError):
    """A resolution tried to replace an existing component or controller."""


class UnknownResolvedChild(ResolutionError):
    """A resolution referenced a child path that was never declared."""


class EmptyResolution(ResolutionError):
    """A resolution supplied no component, controller or children."""


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

class RoutingError(WrenError):
    """Raised when a URL cannot be mapped onto the route tree."""


class RouteNotMatched(RoutingError):
    """No configured route covers the URL.

    Indicates a configuration gap rather than a normal 404: a fallback
    route should normally be present.
    """


class BasePathMismatch(RoutingError):
    """The URL does not start with the router's base path."""


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

class TransitionError(WrenError):
    """Raised when the enter/leave lifecycle cannot complete."""


class ControllerContractViolation(TransitionError):
    """A declared controller settled to ``None``."""


class TopLevelRouteRefused(TransitionError):
    """The first fragment refused to enter and there is nothing to fall back to."""
