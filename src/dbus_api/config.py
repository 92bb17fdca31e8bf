"""Client configuration: fixed service endpoint, defaults and validation."""

from dataclasses import dataclass
from typing import Optional

from dbus_api.exceptions import ConfigurationError

BASE_URL = "http://62.99.53.182/SSIIMovilWSv2/ws/cons/"

VALID_LANGUAGES = ("es", "eu", "en", "fr")

DEFAULT_LANGUAGE = "es"
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_READ_TIMEOUT = 10.0
DEFAULT_MAX_WORKERS = 10

# The service only knows one operator
COMPANY_CODE = "1"


def validate_language(language: Optional[str]) -> str:
    """
    Check a language code against the codes the service accepts.

    Args:
        language: Two-letter language code

    Returns:
        The same code, once validated

    Raises:
        ConfigurationError: If the code is not one of es, eu, en, fr
    """
    if language not in VALID_LANGUAGES:
        raise ConfigurationError(
            f"Invalid language: {language!r}. "
            f"Must be one of: {', '.join(VALID_LANGUAGES)}"
        )
    return language


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable settings for a DbusClient, validated once on construction.

    Timeouts are in seconds and are handed to requests as a
    (connect, read) tuple.
    """

    default_language: str = DEFAULT_LANGUAGE
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    read_timeout: float = DEFAULT_READ_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self) -> None:
        validate_language(self.default_language)
        if self.connect_timeout <= 0:
            raise ConfigurationError(
                f"connect_timeout must be positive, got {self.connect_timeout}"
            )
        if self.read_timeout <= 0:
            raise ConfigurationError(
                f"read_timeout must be positive, got {self.read_timeout}"
            )
        if self.max_workers < 1:
            raise ConfigurationError(
                f"max_workers must be at least 1, got {self.max_workers}"
            )

    @property
    def timeout(self) -> tuple:
        return (self.connect_timeout, self.read_timeout)
