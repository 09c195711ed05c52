"""
RadioManager Dialog Service - Custom Exceptions

Anti-Patterns Avoided:
- Exception Shadowing: custom namespaced exceptions instead of builtins
  like ConnectionError or LookupError
"""


class RadioManagerServiceError(Exception):
    """Base exception for RadioManager Dialog Service.

    All custom exceptions inherit from this base class.
    """
    pass


class ConfigurationError(RadioManagerServiceError):
    """Raised when configuration is invalid or missing."""
    pass


class DialogStateError(RadioManagerServiceError):
    """Raised when a dialog route cannot produce a successful state.

    Covers a missing required query parameter and a search or lookup
    that legitimately returned nothing.
    """

    def __init__(self, message: str, route: str | None = None) -> None:
        super().__init__(message)
        self.route = route
