class SlurpError(Exception):
    pass


class ConfigError(SlurpError):
    pass


class ProviderFailure(SlurpError):
    """Fatal for one provider: bad credentials, broken API contract."""

    def __init__(self, provider: str, message: str, status_code: int = None):
        super().__init__(f"{provider}: {message}")
        self.provider = provider
        self.status_code = status_code


class RecordSkipped(SlurpError):
    """A single malformed or undateable item; logged and dropped."""


class StoreFailure(SlurpError):
    """Fatal for a store: sheet not found, permission denied, bad header."""


class AuthFailure(SlurpError):
    pass


class RateLimited(SlurpError):
    pass


class NetworkError(SlurpError):
    pass
