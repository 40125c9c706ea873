from __future__ import annotations

import pytest

from claimsync.config import MissingConfigurationError, get_klaviyo_config, get_reamaze_config


def test_reamaze_config_builds_brand_url(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REAMAZE_BRAND", "acme")
    monkeypatch.setenv("REAMAZE_LOGIN", "agent@example.com")
    monkeypatch.setenv("REAMAZE_API_TOKEN", "token")

    config = get_reamaze_config()

    assert config.login == "agent@example.com"
    assert config.resilience.base_url == "https://acme.reamaze.io/api/v1"
    assert config.resilience.ratelimit is not None


def test_reamaze_config_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REAMAZE_BRAND", "acme")
    monkeypatch.delenv("REAMAZE_LOGIN", raising=False)
    monkeypatch.delenv("REAMAZE_API_TOKEN", raising=False)

    with pytest.raises(MissingConfigurationError, match="REAMAZE_API_TOKEN, REAMAZE_LOGIN"):
        get_reamaze_config()


def test_klaviyo_config_sends_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("KLAVIYO_API_KEY", "pk_live")

    config = get_klaviyo_config()

    assert config.resilience.default_headers is not None
    assert config.resilience.default_headers["Authorization"] == "Klaviyo-API-Key pk_live"


def test_klaviyo_config_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("KLAVIYO_API_KEY", raising=False)

    with pytest.raises(MissingConfigurationError):
        get_klaviyo_config()
