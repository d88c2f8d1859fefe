"""
Unit tests for DI container wiring.
"""
import pytest

from retina_backend.application.use_cases.analysis.analyze_retina_image import AnalyzeRetinaImageUseCase
from retina_backend.application.use_cases.inference.get_inference_info import GetInferenceInfoUseCase
from retina_backend.application.use_cases.inference.get_inference_status import GetInferenceStatusUseCase
from retina_backend.application.use_cases.inference.sweep_inference_endpoints import SweepInferenceEndpointsUseCase
from retina_backend.di.base_container import BaseContainer
from retina_backend.di.container import DIContainer
from retina_backend.domain.models.endpoint import EndpointStatus
from retina_backend.infrastructure.external.connection_diagnostics import ConnectionDiagnostics
from retina_backend.infrastructure.external.endpoint_registry import EndpointRegistry
from retina_backend.infrastructure.external.health_prober import HealthProber
from retina_backend.infrastructure.external.inference_client import InferenceClient

from tests.fakes import BACKUP_URL, LOCAL_URL, PRIMARY_URL


class TestBaseContainer:
    """Tests for BaseContainer"""

    def test_unregistered_type_raises(self):
        with pytest.raises(ValueError, match="No registration found"):
            BaseContainer().get(EndpointRegistry)

    def test_factory_builds_new_instances(self):
        container = BaseContainer()
        container.register_factory(list, lambda: [])
        assert container.get(list) is not container.get(list)


class TestDIContainer:
    """Tests for DIContainer"""

    def test_shared_inference_state(self, mock_settings):
        container = DIContainer()

        registry = container.get(EndpointRegistry)
        prober = container.get(HealthProber)
        client = container.get(InferenceClient)

        assert [c.base_url for c in registry.candidates] == [PRIMARY_URL, BACKUP_URL, LOCAL_URL]
        assert prober.registry is registry
        assert client.registry is registry
        assert client.prober is prober
        assert prober.status is container.get(EndpointStatus)
        assert prober.cache_ttl_ms == 60000

    def test_use_cases_are_factories(self, mock_settings):
        container = DIContainer()
        first = container.get(AnalyzeRetinaImageUseCase)
        second = container.get(AnalyzeRetinaImageUseCase)
        assert first is not second
        assert first.inference_client is second.inference_client
        assert container.get(GetInferenceStatusUseCase).prober is container.get(HealthProber)

    def test_diagnostic_use_cases_share_diagnostics(self, mock_settings):
        container = DIContainer()
        diagnostics = container.get(ConnectionDiagnostics)
        assert container.get(GetInferenceInfoUseCase).diagnostics is diagnostics
        assert container.get(SweepInferenceEndpointsUseCase).diagnostics is diagnostics
        assert diagnostics.configured_env_url == PRIMARY_URL
