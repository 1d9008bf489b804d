"""CORS configuration for cookie-authenticated browser clients."""

import logging
import re
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

DEFAULT_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

DEFAULT_HEADERS = [
    "origin",
    "content-type",
    "accept",
    "authorization",
    "x-request-id",
    "x-requested-with",
]

EXPOSE_HEADERS = ["x-request-id", "content-length"]

DEVELOPMENT_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
    "http://127.0.0.1:3000",
]


class CORSConfigurationError(Exception):
    """Raised when CORS configuration is invalid or insecure."""

    pass


def normalize_origin(origin: str) -> str:
    """Normalize an origin URL by stripping whitespace and trailing slashes.

    Raises:
        CORSConfigurationError: If origin is empty or not a scheme://host URL.

    """
    origin = origin.strip()

    if not origin:
        raise CORSConfigurationError("Origin cannot be empty")

    if origin == "*":
        return origin

    parsed = urlparse(origin)
    if not parsed.scheme or not parsed.netloc:
        raise CORSConfigurationError(f"Invalid origin URL: {origin}")

    return origin.rstrip("/")


def parse_comma_separated_list(value: str | list[str] | None) -> list[str]:
    """Parse comma-separated string or return as-is if already a list."""
    if value is None:
        return []

    if isinstance(value, list):
        return [v.strip() for v in value if v.strip()]

    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]

    raise CORSConfigurationError(f"Invalid value type: {type(value)}")


def compile_regex_pattern(pattern: str) -> re.Pattern[str]:
    """Compile and validate an origin regex, anchoring it at the start."""
    if not pattern.startswith("^"):
        pattern = "^" + pattern

    try:
        return re.compile(pattern)
    except re.error as exc:
        raise CORSConfigurationError(f"Invalid regex pattern: {pattern}") from exc


class CORSConfiguration:
    """Environment-aware CORS configuration.

    Authentication travels in HttpOnly cookies, so credentials are always
    allowed and every origin has to be listed explicitly. A wildcard origin
    is refused in every environment.
    """

    def __init__(
        self,
        allow_origins: str | list[str] | None = None,
        allow_origin_regex: str | None = None,
        max_age: int = 43200,
        environment: str = "development",
    ):
        self.environment = environment.lower()
        self.allow_credentials = True
        self.max_age = max_age
        self.allow_methods = list(DEFAULT_METHODS)
        self.allow_headers = list(DEFAULT_HEADERS)
        self.expose_headers = list(EXPOSE_HEADERS)

        self.allow_origins = [normalize_origin(o) for o in parse_comma_separated_list(allow_origins)]
        self.origin_regex = compile_regex_pattern(allow_origin_regex) if allow_origin_regex else None

        self._validate_security_rules()
        logger.info(f"CORS configuration initialized for {self.environment} environment")

    def _validate_security_rules(self) -> None:
        """Refuse wildcard origins and require explicit origins outside development."""
        if "*" in self.allow_origins:
            raise CORSConfigurationError(
                "Cannot use wildcard origins (*) with cookie authentication. Provide explicit allowed origins instead."
            )

        if self.environment != "development" and not self.allow_origins and self.origin_regex is None:
            raise CORSConfigurationError(f"{self.environment.capitalize()} environment requires explicit allowed origins")

    def get_middleware_config(self) -> dict:
        """Get keyword arguments for Starlette's CORSMiddleware."""
        return {
            "allow_origins": self.allow_origins,
            "allow_origin_regex": self.origin_regex.pattern if self.origin_regex else None,
            "allow_credentials": self.allow_credentials,
            "allow_methods": self.allow_methods,
            "allow_headers": self.allow_headers,
            "expose_headers": self.expose_headers,
            "max_age": self.max_age,
        }

    def log_configuration(self) -> None:
        """Log effective CORS configuration at startup."""
        logger.info(
            f"CORS configuration: environment={self.environment} origins={self.allow_origins} "
            f"regex={'enabled' if self.origin_regex else 'disabled'} max_age={self.max_age}s"
        )

    @staticmethod
    def for_development(allow_origins: str | list[str] | None = None, max_age: int = 43200) -> "CORSConfiguration":
        """Local development defaults to the frontend dev servers."""
        return CORSConfiguration(
            allow_origins=allow_origins if allow_origins is not None else DEVELOPMENT_ORIGINS,
            max_age=max_age,
            environment="development",
        )

    @staticmethod
    def for_staging(allow_origins: str | list[str], max_age: int = 43200) -> "CORSConfiguration":
        """Staging requires explicit origins."""
        if not allow_origins:
            raise CORSConfigurationError("Staging environment requires explicit allowed origins")

        return CORSConfiguration(allow_origins=allow_origins, max_age=max_age, environment="staging")

    @staticmethod
    def for_production(
        allow_origins: str | list[str],
        allow_origin_regex: str | None = None,
        max_age: int = 43200,
    ) -> "CORSConfiguration":
        """Production requires explicit origins, optionally widened by a subdomain regex."""
        if not allow_origins and not allow_origin_regex:
            raise CORSConfigurationError("Production environment requires explicit allowed origins")

        return CORSConfiguration(
            allow_origins=allow_origins,
            allow_origin_regex=allow_origin_regex,
            max_age=max_age,
            environment="production",
        )
