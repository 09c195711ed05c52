"""
RadioManager Dialog Service - Application Configuration

Patterns Applied:
- Pydantic Settings with SettingsConfigDict
- Environment variable prefix RM_ for RadioManager Dialog Service

Anti-Patterns Avoided:
- Reading os.environ ad hoc inside route handlers
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.clients.request_handler import BasicAuth, HMACOptions, SSLOptions
from src.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables with RM_ prefix.
    Example: RM_API_URL=https://radiomanager.example/api/v2, RM_API_KEY=secret
    """

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8080

    # Application metadata
    service_name: str = "radiomanager-dialog-service"
    version: str = "0.1.0"
    environment: str = "development"

    # Logging configuration
    log_level: str = "INFO"
    log_json: bool = True

    # Tracing configuration
    tracing_enabled: bool = True
    tracing_console_export: bool = False

    # RadioManager backend
    api_url: str = "http://localhost:8000/api/v2"
    api_key: str = ""
    request_timeout: float | None = 10.0
    request_retries: int = 0

    # Optional basic auth
    auth_user: str | None = None
    auth_password: str | None = None

    # Optional HMAC request signing
    hmac_key: str | None = None
    hmac_header: str | None = None
    hmac_secret: str | None = None
    hmac_algorithm: str = "sha256"

    # Optional TLS client certificate (paths to PEM files)
    ssl_cert: str | None = None
    ssl_key: str | None = None

    model_config = SettingsConfigDict(
        env_prefix="RM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def default_headers(self) -> dict[str, str]:
        """Headers sent with every backend request."""
        return {"api-key": self.api_key}

    def basic_auth(self) -> BasicAuth | None:
        """Basic auth credentials, when user and password are configured."""
        if not _both_or_neither("auth_user", self.auth_user, "auth_password", self.auth_password):
            return None
        return BasicAuth(user=self.auth_user, password=self.auth_password)

    def hmac_options(self) -> HMACOptions | None:
        """HMAC signing config, when key and secret are configured."""
        if not _both_or_neither("hmac_key", self.hmac_key, "hmac_secret", self.hmac_secret):
            return None
        return HMACOptions(
            key=self.hmac_key,
            header=self.hmac_header or "",
            secret=self.hmac_secret,
            algorithm=self.hmac_algorithm,
        )

    def ssl_options(self) -> SSLOptions | None:
        """TLS client certificate, when cert and key are configured."""
        if not _both_or_neither("ssl_cert", self.ssl_cert, "ssl_key", self.ssl_key):
            return None
        return SSLOptions(cert=self.ssl_cert, key=self.ssl_key)


def _both_or_neither(
    first_name: str,
    first: str | None,
    second_name: str,
    second: str | None,
) -> bool:
    """True when both values are set, False when neither is.

    Raises:
        ConfigurationError: When only one of the pair is set
    """
    if first and second:
        return True
    if first or second:
        missing = second_name if first else first_name
        raise ConfigurationError(f"RM_{missing.upper()} is required")
    return False


def get_settings() -> Settings:
    """Get application settings instance.

    Returns:
        Settings instance with values from environment
    """
    return Settings()
