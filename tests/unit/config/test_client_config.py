"""Tests for ClientConfig and ConfigManager."""

import json

import pytest
from pydantic import ValidationError

from scheduler_client.config import (
    API_JOB_PATH,
    API_URL_PREFIX,
    ClientConfig,
    ConfigManager,
    normalize_endpoint,
)


class TestEndpointNormalization:
    """Tests for endpoint normalization and API base derivation."""

    def test_single_trailing_slash_is_removed(self):
        assert normalize_endpoint("http://host:8000/") == "http://host:8000"
        assert normalize_endpoint("http://host:8000") == "http://host:8000"

    def test_only_one_normalization_pass(self):
        assert normalize_endpoint("http://host:8000//") == "http://host:8000/"

    def test_api_base_url_appends_prefix_once(self):
        with_slash = ClientConfig(endpoint="http://host:8000/")
        without_slash = ClientConfig(endpoint="http://host:8000")

        assert with_slash.api_base_url == without_slash.api_base_url
        assert with_slash.api_base_url == "http://host:8000/api/v1/"
        assert with_slash.api_base_url.count(API_URL_PREFIX) == 1

    def test_job_path_constant(self):
        assert API_JOB_PATH == "/api/v1/job/"


class TestClientConfigValidation:
    def test_defaults(self):
        config = ClientConfig()

        assert config.endpoint == "http://127.0.0.1:8000"
        assert config.max_redirects == 10
        assert config.user_agent is None
        assert config.total_timeout is None
        assert config.timeouts.connect == 10.0
        assert config.timeouts.read == 30.0

    @pytest.mark.parametrize("limit", [0, -3])
    def test_non_positive_redirect_limit_rejected(self, limit):
        with pytest.raises(ValidationError):
            ClientConfig(max_redirects=limit)

    @pytest.mark.parametrize("endpoint", ["ftp://host", "host:8000", ""])
    def test_non_http_endpoint_rejected(self, endpoint):
        with pytest.raises(ValidationError):
            ClientConfig(endpoint=endpoint)

    def test_non_positive_total_timeout_rejected(self):
        with pytest.raises(ValidationError):
            ClientConfig(total_timeout=0)


class TestConfigManager:
    def test_missing_file_yields_defaults(self, tmp_path):
        manager = ConfigManager(tmp_path / "absent.json")

        assert manager.load() == ClientConfig()

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "config.json"
        manager = ConfigManager(path)
        manager.save(ClientConfig(endpoint="https://sched.example.com", max_redirects=4))

        loaded = ConfigManager(path).load()

        assert loaded.endpoint == "https://sched.example.com"
        assert loaded.max_redirects == 4

    def test_invalid_file_raises_value_error(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"max_redirects": 0}))

        with pytest.raises(ValueError, match="Failed to load config"):
            ConfigManager(path).load()

    def test_save_without_config_raises(self, tmp_path):
        with pytest.raises(ValueError):
            ConfigManager(tmp_path / "config.json").save()

    def test_update_config(self, tmp_path):
        manager = ConfigManager(tmp_path / "config.json")

        updated = manager.update_config(max_redirects=3)

        assert updated.max_redirects == 3
        assert manager.get_config() is updated
