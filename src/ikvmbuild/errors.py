"""Base exception shared by all ikvmbuild components."""


class IkvmBuildError(Exception):
    """Base class for every fatal build-step error."""

    pass
