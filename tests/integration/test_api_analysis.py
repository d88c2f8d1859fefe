"""
Integration tests for analysis API endpoints.
Uses TestClient with mocked use cases, plus a live stack (real use case,
prober and inference client) over a mocked HTTP transport.
Note: Runs full app lifespan (slower). Use: pytest tests/unit/ for fast unit-only runs.
"""
import random
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

pytestmark = pytest.mark.integration
from fastapi.testclient import TestClient

from retina_backend.application.dto.analysis_dto import (
    AnalysisResultsResponse,
    ImageDetailsResponse,
    RetinaAnalysisResponse,
)
from retina_backend.application.dto.inference_dto import (
    ConnectionTestResponse,
    EndpointSweepResponse,
    EndpointSweepResult,
    InferenceInfoResponse,
    InferenceStatusResponse,
)
from retina_backend.application.services.simulation_fallback import SimulationFallback
from retina_backend.application.use_cases.analysis.analyze_retina_image import AnalyzeRetinaImageUseCase
from retina_backend.application.use_cases.inference.check_inference_connection import (
    CheckInferenceConnectionUseCase,
)
from retina_backend.application.use_cases.inference.get_inference_info import GetInferenceInfoUseCase
from retina_backend.application.use_cases.inference.get_inference_status import GetInferenceStatusUseCase
from retina_backend.application.use_cases.inference.sweep_inference_endpoints import SweepInferenceEndpointsUseCase
from retina_backend.infrastructure.external.connection_diagnostics import ConnectionDiagnostics
from retina_backend.infrastructure.external.health_prober import HealthProber
from retina_backend.infrastructure.external.inference_client import InferenceClient

from tests.fakes import ONLINE_INFO, PRIMARY_URL


def _analysis_response(**overrides) -> RetinaAnalysisResponse:
    fields = dict(
        analysis_id="analysis-1",
        patient_id="patient-1",
        timestamp=datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc),
        image_url="/uploads/abc.jpg",
        image_details=ImageDetailsResponse(
            original_name="eye.jpg",
            content_type="image/jpeg",
            filename="abc.jpg",
            path="uploads/abc.jpg",
            size=4,
        ),
        results=AnalysisResultsResponse(
            severity="Mild",
            severity_level=1,
            classification="Mild",
            confidence=0.81,
            is_simulation=True,
        ),
        severity="Mild",
        severity_level=1,
        confidence=0.81,
        recommendation="Control blood sugar and blood pressure.",
        notes="Control blood sugar and blood pressure.",
        is_simulation=True,
    )
    fields.update(overrides)
    return RetinaAnalysisResponse(**fields)


@pytest.fixture
def mock_analyze_use_case():
    return AsyncMock(spec=AnalyzeRetinaImageUseCase)


@pytest.fixture
def mock_status_use_case():
    return AsyncMock(spec=GetInferenceStatusUseCase)


@pytest.fixture
def mock_connection_use_case():
    return AsyncMock(spec=CheckInferenceConnectionUseCase)


@pytest.fixture
def mock_info_use_case():
    return AsyncMock(spec=GetInferenceInfoUseCase)


@pytest.fixture
def mock_sweep_use_case():
    return AsyncMock(spec=SweepInferenceEndpointsUseCase)


@pytest.fixture
def mock_container(
    mock_analyze_use_case,
    mock_status_use_case,
    mock_connection_use_case,
    mock_info_use_case,
    mock_sweep_use_case,
):
    diagnostics = AsyncMock(spec=ConnectionDiagnostics)
    diagnostics.run_full_test.return_value = {"success": True}
    container = MagicMock()
    container.get.side_effect = lambda cls: {
        AnalyzeRetinaImageUseCase: mock_analyze_use_case,
        GetInferenceStatusUseCase: mock_status_use_case,
        CheckInferenceConnectionUseCase: mock_connection_use_case,
        GetInferenceInfoUseCase: mock_info_use_case,
        SweepInferenceEndpointsUseCase: mock_sweep_use_case,
        ConnectionDiagnostics: diagnostics,
        HealthProber: MagicMock(spec=HealthProber),
    }.get(cls, None)
    return container


@pytest.fixture
def client(mock_container, mock_settings):
    """Create test client with mocked container."""
    from retina_backend.main import app

    with patch("retina_backend.api.v1.analysis_controller.get_container", return_value=mock_container), patch(
        "retina_backend.main.get_container", return_value=mock_container
    ):
        with TestClient(app) as c:
            yield c


class TestAnalysisAPI:
    """Tests for /api/v1/analysis endpoints"""

    def test_upload_file(self, client, mock_analyze_use_case, mock_settings):
        mock_analyze_use_case.execute.return_value = _analysis_response()
        response = client.post(
            "/api/v1/analysis/upload",
            files={"image": ("eye.jpg", b"\xff\xd8\xff\xe0", "image/jpeg")},
            data={"patient_id": "patient-1"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["severity"] == "Mild"
        assert data["is_simulation"] is True

        request = mock_analyze_use_case.execute.call_args.args[0]
        assert request.patient_id == "patient-1"
        assert request.image_original_name == "eye.jpg"
        assert request.image_size == 4
        assert request.image_filename.endswith(".jpg")
        assert request.image_data is None

    def test_upload_inline_image(self, client, mock_analyze_use_case):
        mock_analyze_use_case.execute.return_value = _analysis_response(image_url="data:image/png;base64,AAAA")
        response = client.post(
            "/api/v1/analysis/upload",
            data={"patient_id": "patient-1", "image_data": "data:image/png;base64,AAAA", "notes": "left eye"},
        )
        assert response.status_code == 201
        request = mock_analyze_use_case.execute.call_args.args[0]
        assert request.image_data == "data:image/png;base64,AAAA"
        assert request.image_path is None
        assert request.notes == "left eye"

    def test_upload_without_image_returns_400(self, client, mock_analyze_use_case):
        response = client.post("/api/v1/analysis/upload", data={"patient_id": "patient-1"})
        assert response.status_code == 400
        mock_analyze_use_case.execute.assert_not_called()

    def test_upload_without_patient_returns_400(self, client, mock_analyze_use_case):
        response = client.post(
            "/api/v1/analysis/upload",
            data={"image_data": "data:image/png;base64,AAAA"},
        )
        assert response.status_code == 400
        assert "Patient ID" in response.json()["detail"]

    def test_upload_wrong_extension_returns_400(self, client, mock_analyze_use_case):
        response = client.post(
            "/api/v1/analysis/upload",
            files={"image": ("scan.gif", b"GIF89a", "image/gif")},
            data={"patient_id": "patient-1"},
        )
        assert response.status_code == 400
        mock_analyze_use_case.execute.assert_not_called()

    def test_upload_too_large_returns_413(self, client, mock_analyze_use_case, mock_settings):
        too_big = b"\x00" * (mock_settings.upload_max_mb * 1024 * 1024 + 1)
        response = client.post(
            "/api/v1/analysis/upload",
            files={"image": ("eye.png", too_big, "image/png")},
            data={"patient_id": "patient-1"},
        )
        assert response.status_code == 413
        mock_analyze_use_case.execute.assert_not_called()

    def test_manual_save_flag_is_ignored(self, client, mock_analyze_use_case):
        mock_analyze_use_case.execute.return_value = _analysis_response()
        response = client.post(
            "/api/v1/analysis/upload",
            data={"patient_id": "patient-1", "image_data": "data:image/png;base64,AAAA", "is_manual_save": "true"},
        )
        assert response.status_code == 201
        request = mock_analyze_use_case.execute.call_args.args[0]
        assert "is_manual_save" not in request.model_dump()

    def test_file_is_stored_alongside_image_data(self, client, mock_analyze_use_case, mock_settings):
        mock_analyze_use_case.execute.return_value = _analysis_response()
        response = client.post(
            "/api/v1/analysis/upload",
            files={"image": ("eye.jpg", b"\xff\xd8\xff\xe0", "image/jpeg")},
            data={"patient_id": "patient-1", "image_data": "blob:http://localhost/abc"},
        )
        assert response.status_code == 201
        request = mock_analyze_use_case.execute.call_args.args[0]
        assert request.image_data == "blob:http://localhost/abc"
        assert request.image_original_name == "eye.jpg"
        assert request.image_size == 4

    def test_use_case_value_error_returns_400(self, client, mock_analyze_use_case):
        mock_analyze_use_case.execute.side_effect = ValueError("Patient ID is required")
        response = client.post(
            "/api/v1/analysis/upload",
            data={"patient_id": "patient-1", "image_data": "data:image/png;base64,AAAA"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Patient ID is required"

    def test_inference_status(self, client, mock_status_use_case):
        mock_status_use_case.execute.return_value = InferenceStatusResponse(
            available=False,
            simulation=True,
            last_check=1_700_000_000_000,
            last_check_iso="2023-11-14T22:13:20.000Z",
            api_url="http://primary.test/predict",
            info_url="http://primary.test/",
        )
        response = client.get("/api/v1/analysis/api-status/inference?full_test=true")
        assert response.status_code == 200
        data = response.json()
        assert data["available"] is False
        assert data["simulation"] is True
        mock_status_use_case.execute.assert_awaited_once_with(full_test=True)

    def test_connection_check(self, client, mock_connection_use_case):
        mock_connection_use_case.execute.return_value = ConnectionTestResponse(
            success=True,
            message="Connection to inference API succeeded (120ms)",
            url="http://primary.test",
            model_loaded=True,
        )
        response = client.get("/api/v1/analysis/test-connection")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["model_loaded"] is True

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_inference_info(self, client, mock_info_use_case):
        mock_info_use_case.execute.return_value = InferenceInfoResponse(
            success=True, api_url=PRIMARY_URL, info=ONLINE_INFO
        )
        response = client.get("/api/v1/analysis/inference-info")
        assert response.status_code == 200
        assert response.json() == {"success": True, "api_url": PRIMARY_URL, "info": ONLINE_INFO}

    def test_inference_info_unreachable_returns_503(self, client, mock_info_use_case):
        mock_info_use_case.execute.return_value = InferenceInfoResponse(
            success=False, api_url=PRIMARY_URL, error="GET http://primary.test/ failed", code="timeout"
        )
        response = client.get("/api/v1/analysis/inference-info")
        assert response.status_code == 503
        assert response.json()["detail"] == {
            "success": False,
            "error": "GET http://primary.test/ failed",
            "api_url": PRIMARY_URL,
        }

    def test_debug_inference_urls(self, client, mock_sweep_use_case):
        mock_sweep_use_case.execute.return_value = EndpointSweepResponse(
            results=[
                EndpointSweepResult(url=PRIMARY_URL, status="success", response_time_ms=12, status_code=200),
                EndpointSweepResult(url="http://localhost:5000", status="error", code="connection_refused"),
            ],
            env={"INFERENCE_API_URL": "(not set)"},
        )
        response = client.get("/api/v1/analysis/debug-inference-urls")
        assert response.status_code == 200
        data = response.json()
        assert [r["status"] for r in data["results"]] == ["success", "error"]
        assert data["env"] == {"INFERENCE_API_URL": "(not set)"}


def _inference_service(label="Mild", confidence=0.9):
    """Primary endpoint that is online and answers predictions with a fixed class"""
    def handler(request):
        if request.url.path.startswith("/predict"):
            return httpx.Response(200, json={"class": label, "confidence": confidence})
        return httpx.Response(200, json=ONLINE_INFO)
    return handler


@pytest.fixture
def live_container(registry, request_client):
    """Container serving the real analysis stack over the fake inference service"""
    prober = HealthProber(registry, request_client, timeout=20.0)
    use_case = AnalyzeRetinaImageUseCase(
        InferenceClient(registry, request_client, prober=prober),
        SimulationFallback(random.Random(7)),
    )
    diagnostics = AsyncMock(spec=ConnectionDiagnostics)
    diagnostics.run_full_test.return_value = {"success": True}
    container = MagicMock()
    container.get.side_effect = lambda cls: {
        AnalyzeRetinaImageUseCase: use_case,
        ConnectionDiagnostics: diagnostics,
        HealthProber: prober,
    }.get(cls, None)
    return container


@pytest.fixture
def live_client(live_container, mock_settings):
    from retina_backend.main import app

    with patch("retina_backend.api.v1.analysis_controller.get_container", return_value=live_container), patch(
        "retina_backend.main.get_container", return_value=live_container
    ):
        with TestClient(app) as c:
            yield c


class TestAnalysisLiveStack:
    """Upload flow through the real use case and inference client"""

    def test_uploaded_file_used_when_image_data_is_not_a_data_url(self, live_client, fake_service):
        fake_service.on(PRIMARY_URL, _inference_service())
        response = live_client.post(
            "/api/v1/analysis/upload",
            files={"image": ("eye.jpg", b"\xff\xd8\xff\xe0", "image/jpeg")},
            data={"patient_id": "patient-1", "image_data": "blob:http://localhost/abc"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["is_simulation"] is False
        assert data["severity"] == "Mild"
        assert data["confidence"] == 0.9
        assert data["results"]["error_message"] is None
        assert data["image_details"]["original_name"] == "eye.jpg"
        assert data["image_details"]["size"] == 4
        assert data["image_url"].startswith("/uploads/")

        predict_calls = [c for c in fake_service.calls if c.url.path.startswith("/predict")]
        assert [c.url.path for c in predict_calls] == ["/predict"]
        assert b"\xff\xd8\xff\xe0" in predict_calls[0].content

    def test_all_endpoints_down_still_returns_simulated_analysis(self, live_client, fake_service, recording_sleep):
        response = live_client.post(
            "/api/v1/analysis/upload",
            files={"image": ("eye.png", b"\x89PNG", "image/png")},
            data={"patient_id": "patient-1"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["is_simulation"] is True
        assert data["results"]["is_simulation"] is True
        assert data["results"]["error_message"]
        assert data["severity_level"] in range(5)
        assert 0.7 <= data["confidence"] <= 1.0
        assert fake_service.hosts_called() == ["primary.test", "backup.test", "local.test"]
        assert not any(c.url.path.startswith("/predict") for c in fake_service.calls)
        # Three attempts per endpoint, waits recorded instead of slept
        assert recording_sleep.delays == [1.0, 2.0] * 3

    def test_unknown_remote_class_falls_back_to_simulation(self, live_client, fake_service):
        fake_service.on(PRIMARY_URL, _inference_service(label="Glaucoma"))
        response = live_client.post(
            "/api/v1/analysis/upload",
            data={"patient_id": "patient-1", "image_data": "data:image/png;base64,iVBORw0KGgo="},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["is_simulation"] is True
        assert "Glaucoma" in data["results"]["error_message"]
        predict_calls = [c for c in fake_service.calls if c.url.path.startswith("/predict")]
        assert [c.url.path for c in predict_calls] == ["/predict-base64"]
