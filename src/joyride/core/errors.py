"""Exceptions raised by route selection and the routing providers."""


class JoyrideError(Exception):
    """Base class for every error raised by joyride."""
    pass


class NoCandidatesAvailable(JoyrideError):
    """No scoreable candidate route could be collected for a selection."""
    pass


class UnscoreableRoute(JoyrideError):
    """A candidate has no legs or no steps and can not be scored."""
    pass


class AlternativeIndexUnresolvable(JoyrideError):
    """The chosen route has no position in the canonical route set."""
    pass


class RoutingProviderError(JoyrideError):
    """A routing provider failed to produce routes for one profile."""
    pass
