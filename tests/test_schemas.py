"""Unit tests for request/result schemas and configuration."""

import pytest
from pydantic import ValidationError

from cl_resizer.common.config import MIB, ResizerConfig
from cl_resizer.common.schemas import ResizeRequest, ResizeResult, ResultStatus, Strategy

# ============================================================================
# STRATEGY TESTS
# ============================================================================


def test_strategy_from_selector_recognized_values():
    """Test the two recognized literals map to their strategies."""
    assert Strategy.from_selector("true") is Strategy.FIRE_AND_WAIT
    assert Strategy.from_selector("false") is Strategy.BOUNDED_WAIT


@pytest.mark.parametrize("selector", ["", "default", "True", "FALSE", "yes", " true", None])
def test_strategy_from_selector_falls_back(selector: str | None):
    """Test anything other than an exact match is synchronous."""
    assert Strategy.from_selector(selector) is Strategy.SYNCHRONOUS


def test_strategy_from_selector_passes_enum_through():
    """Test an enum member is returned unchanged."""
    assert Strategy.from_selector(Strategy.BOUNDED_WAIT) is Strategy.BOUNDED_WAIT


# ============================================================================
# REQUEST / RESULT TESTS
# ============================================================================


def test_resize_request_defaults():
    """Test ResizeRequest defaults."""
    request = ResizeRequest()

    assert request.urls == []
    assert request.width == 0
    assert request.height == 0
    assert request.strategy == ""


def test_resize_request_keeps_duplicates_in_order():
    """Test URL order and duplicates are preserved."""
    urls = ["http://x/b.jpg", "http://x/a.jpg", "http://x/b.jpg"]

    assert ResizeRequest(urls=urls).urls == urls


def test_resize_request_rejects_negative_dimensions():
    """Test dimensions must be non-negative."""
    with pytest.raises(ValidationError):
        _ = ResizeRequest(urls=["http://x/a.jpg"], width=-1)
    with pytest.raises(ValidationError):
        _ = ResizeRequest(urls=["http://x/a.jpg"], height=-5)


def test_resize_result_serialization():
    """Test results serialize with plain status strings."""
    ok = ResizeResult.succeeded("http://h:1/v1/image/x.jpeg", cached=True)
    bad = ResizeResult.failed()

    assert ok.model_dump(mode="json") == {
        "url": "http://h:1/v1/image/x.jpeg",
        "result": "success",
        "cached": True,
    }
    assert bad.result is ResultStatus.failure
    assert bad.url == ""
    assert bad.cached is False


# ============================================================================
# CONFIG TESTS
# ============================================================================


def test_config_defaults():
    """Test ResizerConfig defaults."""
    config = ResizerConfig()

    assert config.base_url == "http://localhost:8080"
    assert config.cache_size == 1024
    assert config.max_fetch_bytes == 15 * MIB
    assert config.resize_timeout == 3.0
    assert config.key_includes_dimensions is True
    assert config.jpeg_quality == 75


def test_config_strips_trailing_slash():
    """Test base_url never ends in a slash."""
    assert ResizerConfig(base_url="https://img.example.com/").base_url == "https://img.example.com"


def test_config_from_env(monkeypatch: pytest.MonkeyPatch):
    """Test RESIZER_* variables override defaults."""
    monkeypatch.setenv("RESIZER_BASE_URL", "https://cdn.example.com:8443")
    monkeypatch.setenv("RESIZER_CACHE_SIZE", "10")
    monkeypatch.setenv("RESIZER_MAX_FETCH_MB", "2")
    monkeypatch.setenv("RESIZER_RESIZE_TIMEOUT", "0.5")
    monkeypatch.setenv("RESIZER_KEY_INCLUDES_DIMENSIONS", "false")

    config = ResizerConfig.from_env()

    assert config.base_url == "https://cdn.example.com:8443"
    assert config.cache_size == 10
    assert config.max_fetch_bytes == 2 * MIB
    assert config.resize_timeout == 0.5
    assert config.key_includes_dimensions is False
    assert config.fetch_timeout == 30.0


def test_config_from_env_invalid(monkeypatch: pytest.MonkeyPatch):
    """Test invalid environment values are rejected."""
    monkeypatch.setenv("RESIZER_CACHE_SIZE", "0")

    with pytest.raises(ValidationError):
        _ = ResizerConfig.from_env()


@pytest.mark.parametrize("raw", ["abc", "1.5", "0", "-2"])
def test_config_from_env_invalid_fetch_limit(monkeypatch: pytest.MonkeyPatch, raw: str):
    """Test a bad RESIZER_MAX_FETCH_MB is a validation error, not a bare ValueError."""
    monkeypatch.setenv("RESIZER_MAX_FETCH_MB", raw)

    with pytest.raises(ValidationError):
        _ = ResizerConfig.from_env()
