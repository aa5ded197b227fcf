"""
Tests for client configuration.
"""

import threading

import pytest

from governsai.config import ConfigHolder, GovernsAIConfig
from governsai.exceptions import ConfigurationError


def make_config(**overrides):
    values = {"api_key": "key", "base_url": "https://api.governs.test", "org_id": "org-1"}
    values.update(overrides)
    return GovernsAIConfig(**values)


class TestGovernsAIConfig:
    def test_defaults(self):
        config = make_config()
        assert config.timeout_ms == 30000
        assert config.max_retries == 3
        assert config.retry_base_delay_ms == 1000
        assert config.timeout_seconds == 30.0

    def test_frozen(self):
        config = make_config()
        with pytest.raises(AttributeError):
            config.api_key = "other"

    @pytest.mark.parametrize("field", ["api_key", "org_id", "base_url"])
    def test_required_fields(self, field):
        with pytest.raises(ConfigurationError) as exc:
            make_config(**{field: ""})
        assert exc.value.field == field
        assert exc.value.retryable is False

    @pytest.mark.parametrize("url", ["ftp://api.governs.test", "api.governs.test", "https://"])
    def test_invalid_base_url(self, url):
        with pytest.raises(ConfigurationError):
            make_config(base_url=url)

    @pytest.mark.parametrize("url", ["http://localhost:3000", "http://127.0.0.1:8080/api"])
    def test_local_urls_accepted(self, url):
        assert make_config(base_url=url).base_url == url

    @pytest.mark.parametrize("timeout", [999, 300001])
    def test_timeout_bounds(self, timeout):
        with pytest.raises(ConfigurationError) as exc:
            make_config(timeout_ms=timeout)
        assert exc.value.field == "timeout_ms"

    @pytest.mark.parametrize("timeout", [1000, 300000])
    def test_timeout_bounds_inclusive(self, timeout):
        assert make_config(timeout_ms=timeout).timeout_ms == timeout

    def test_max_retries_above_limit(self):
        with pytest.raises(ConfigurationError) as exc:
            make_config(max_retries=11)
        assert exc.value.field == "max_retries"
        assert exc.value.value == 11

    def test_negative_retry_delay(self):
        with pytest.raises(ConfigurationError):
            make_config(retry_base_delay_ms=-1)

    def test_precheck_url_falls_back_to_base_url(self):
        assert make_config(base_url="https://api.governs.test/").precheck_url == (
            "https://api.governs.test"
        )
        config = make_config(precheck_base_url="https://precheck.governs.test")
        assert config.precheck_url == "https://precheck.governs.test"

    def test_replace_returns_validated_copy(self):
        config = make_config()
        updated = config.replace(max_retries=5)
        assert updated.max_retries == 5
        assert config.max_retries == 3
        with pytest.raises(ConfigurationError):
            config.replace(max_retries=11)

    def test_replace_rejects_unknown_fields(self):
        with pytest.raises(ConfigurationError) as exc:
            make_config().replace(retries=2)
        assert "retries" in str(exc.value)

    def test_to_dict_redacts_key(self):
        assert make_config().to_dict()["api_key"] == "***"
        assert make_config().to_dict(redact=False)["api_key"] == "key"


class TestFromEnv:
    def set_required(self, monkeypatch):
        monkeypatch.setenv("GOVERNS_API_KEY", "env-key")
        monkeypatch.setenv("GOVERNS_BASE_URL", "https://env.governs.test")
        monkeypatch.setenv("GOVERNS_ORG_ID", "env-org")
        for name in (
            "GOVERNS_TIMEOUT",
            "GOVERNS_RETRIES",
            "GOVERNS_RETRY_DELAY",
            "GOVERNS_PRECHECK_URL",
        ):
            monkeypatch.delenv(name, raising=False)

    def test_reads_required(self, monkeypatch):
        self.set_required(monkeypatch)
        config = GovernsAIConfig.from_env()
        assert config.api_key == "env-key"
        assert config.base_url == "https://env.governs.test"
        assert config.org_id == "env-org"
        assert config.precheck_base_url is None

    def test_reads_optional(self, monkeypatch):
        self.set_required(monkeypatch)
        monkeypatch.setenv("GOVERNS_TIMEOUT", "5000")
        monkeypatch.setenv("GOVERNS_RETRIES", "2")
        monkeypatch.setenv("GOVERNS_RETRY_DELAY", "250")
        monkeypatch.setenv("GOVERNS_PRECHECK_URL", "https://precheck.governs.test")
        config = GovernsAIConfig.from_env()
        assert config.timeout_ms == 5000
        assert config.max_retries == 2
        assert config.retry_base_delay_ms == 250
        assert config.precheck_base_url == "https://precheck.governs.test"

    @pytest.mark.parametrize("missing", ["GOVERNS_API_KEY", "GOVERNS_BASE_URL", "GOVERNS_ORG_ID"])
    def test_missing_required(self, monkeypatch, missing):
        self.set_required(monkeypatch)
        monkeypatch.delenv(missing)
        with pytest.raises(ConfigurationError) as exc:
            GovernsAIConfig.from_env()
        assert missing in str(exc.value)

    def test_non_integer(self, monkeypatch):
        self.set_required(monkeypatch)
        monkeypatch.setenv("GOVERNS_RETRIES", "three")
        with pytest.raises(ConfigurationError) as exc:
            GovernsAIConfig.from_env()
        assert exc.value.field == "GOVERNS_RETRIES"

    def test_out_of_range(self, monkeypatch):
        self.set_required(monkeypatch)
        monkeypatch.setenv("GOVERNS_RETRIES", "11")
        with pytest.raises(ConfigurationError):
            GovernsAIConfig.from_env()


class TestConfigHolder:
    def test_swap_returns_previous(self):
        first = make_config()
        second = make_config(max_retries=1)
        holder = ConfigHolder(first)
        assert holder.swap(second) is first
        assert holder.get() is second

    def test_update_validates(self):
        holder = ConfigHolder(make_config())
        with pytest.raises(ConfigurationError):
            holder.update(timeout_ms=10)
        assert holder.get().timeout_ms == 30000
        assert holder.update(timeout_ms=2000).timeout_ms == 2000

    def test_snapshot_is_stable_across_swap(self):
        holder = ConfigHolder(make_config())
        snapshot = holder.get()
        holder.update(max_retries=7)
        assert snapshot.max_retries == 3
        assert holder.get().max_retries == 7

    def test_concurrent_updates(self):
        holder = ConfigHolder(make_config())

        def bump(value):
            holder.update(max_retries=value)

        threads = [threading.Thread(target=bump, args=(i % 10,)) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert 0 <= holder.get().max_retries <= 9
