"""Custom exceptions for kakuyomu-dl."""


class KakuyomuDLError(Exception):
    """Base exception for all kakuyomu-dl errors."""

    pass


class ConfigError(KakuyomuDLError):
    """Configuration-related errors."""

    pass


class InvalidConfigError(ConfigError):
    """Invalid configuration data."""

    pass


class DiscoveryError(KakuyomuDLError):
    """No episodes could be resolved from a table-of-contents page."""

    pass


class NetworkError(KakuyomuDLError):
    """Network-related errors."""

    pass


class FetchError(NetworkError):
    """A page request failed or returned a non-success status."""

    def __init__(self, status_code: int | None, url: str, message: str | None = None) -> None:
        self.status_code = status_code
        self.url = url
        if message is None:
            message = f"HTTP {status_code}: {url}"
        super().__init__(message)


class ListFileError(KakuyomuDLError):
    """List file could not be read."""

    pass
