"""Error types raised by the OIDC stub.

Endpoints map these to generic HTTP responses; the detail only goes to logs.
"""


class OIDCStubError(Exception):
    """Base class for OIDC stub errors."""


class InvalidRequest(OIDCStubError):
    """A required authorization parameter is missing or empty."""

    def __init__(self, missing: list[str] = None, message: str = None):
        self.missing = missing or []
        if message is None:
            if self.missing:
                message = f"Missing required parameter(s): {', '.join(self.missing)}"
            else:
                message = "Missing request parameters"
        super().__init__(message)


class StoreUnavailable(OIDCStubError):
    """The nonce binding could not be written."""


class SigningUnavailable(OIDCStubError):
    """The signing service returned no signature."""


class ConfigurationMissing(OIDCStubError):
    """Required deployment configuration is not set."""

    def __init__(self, keys: list[str]):
        self.keys = list(keys)
        super().__init__(f"Missing configuration: {', '.join(self.keys)}")
