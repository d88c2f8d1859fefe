"""
Shared pytest fixtures for retina-backend tests.
"""
import os
from unittest.mock import MagicMock, patch

import httpx
import pytest

from retina_backend.infrastructure.external.endpoint_registry import EndpointRegistry
from retina_backend.infrastructure.external.retry_client import RetryingRequestClient

from tests.fakes import (
    BACKUP_URL,
    LOCAL_URL,
    PRIMARY_URL,
    FakeClock,
    FakeInferenceService,
    RecordingSleep,
)


@pytest.fixture
def mock_env():
    """Fixture to set common test environment variables."""
    env_vars = {
        "INFERENCE_API_URL": PRIMARY_URL,
        "LOCAL_INFERENCE_URL": LOCAL_URL,
        "UPLOAD_DIR": "test-uploads",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        yield env_vars


@pytest.fixture
def mock_settings(tmp_path):
    """Fixture to mock get_settings for tests. Patches all modules that use it."""
    mock = MagicMock()
    mock.inference_api_url = PRIMARY_URL
    mock.inference_api_url_env = PRIMARY_URL
    mock.local_inference_url = LOCAL_URL
    mock.inference_endpoint_urls = (PRIMARY_URL, BACKUP_URL, LOCAL_URL)
    mock.probe_timeout = 20.0
    mock.predict_timeout = 60.0
    mock.local_probe_timeout = 5.0
    mock.retry_max_attempts = 3
    mock.retry_base_delay_ms = 1000
    mock.status_cache_ttl_ms = 60000
    mock.upload_dir = str(tmp_path / "uploads")
    mock.upload_max_mb = 1
    mock.cors_origins = ("http://localhost:3000",)

    # Patch at source and at use sites (modules import get_settings at load time)
    with patch("retina_backend.core.config.get_settings", return_value=mock), patch(
        "retina_backend.api.v1.analysis_controller.get_settings", return_value=mock
    ), patch("retina_backend.di.providers.inference_provider.get_settings", return_value=mock):
        yield mock


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_service():
    return FakeInferenceService()


@pytest.fixture
def http_client(fake_service):
    return httpx.AsyncClient(transport=httpx.MockTransport(fake_service))


@pytest.fixture
def request_client(http_client, recording_sleep):
    return RetryingRequestClient(http_client, max_attempts=3, base_delay_ms=1000, sleep=recording_sleep)


@pytest.fixture
def registry():
    return EndpointRegistry([PRIMARY_URL, BACKUP_URL, LOCAL_URL])
