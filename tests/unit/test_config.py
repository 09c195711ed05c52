"""
Configuration Tests

Settings load from RM_ environment variables and build optional
auth / HMAC / TLS request options only when fully configured.
"""

import pytest

from src.clients.request_handler import BasicAuth, HMACOptions, SSLOptions
from src.core.config import Settings, get_settings
from src.core.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "RM_API_URL",
        "RM_API_KEY",
        "RM_HMAC_KEY",
        "RM_HMAC_SECRET",
        "RM_AUTH_USER",
        "RM_AUTH_PASSWORD",
        "RM_SSL_CERT",
        "RM_SSL_KEY",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RM_API_URL", "https://rm.example/api/v2")
        monkeypatch.setenv("RM_API_KEY", "secret-key")

        settings = get_settings()

        assert settings.api_url == "https://rm.example/api/v2"
        assert settings.default_headers == {"api-key": "secret-key"}

    def test_optional_request_options_absent_by_default(self) -> None:
        settings = Settings()

        assert settings.basic_auth() is None
        assert settings.hmac_options() is None
        assert settings.ssl_options() is None

    def test_hmac_options_built_when_key_and_secret_set(self) -> None:
        settings = Settings(hmac_key="k", hmac_secret="s", hmac_header="x-sig")

        assert settings.hmac_options() == HMACOptions(
            key="k", header="x-sig", secret="s", algorithm="sha256"
        )

    def test_hmac_key_without_secret_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="RM_HMAC_SECRET"):
            Settings(hmac_key="k").hmac_options()

    def test_ssl_key_without_cert_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="RM_SSL_CERT"):
            Settings(ssl_key="/certs/client.key").ssl_options()

    def test_basic_auth_and_ssl(self) -> None:
        settings = Settings(
            auth_user="u",
            auth_password="p",
            ssl_cert="/certs/client.pem",
            ssl_key="/certs/client.key",
        )

        assert settings.basic_auth() == BasicAuth(user="u", password="p")
        assert settings.ssl_options() == SSLOptions(
            cert="/certs/client.pem", key="/certs/client.key"
        )
