"""
Retina analysis and inference status API.

Endpoints:
  POST /upload                  Analyse a retina image (file upload or data URL)
  GET  /api-status/inference    Cached inference service status
  GET  /test-connection         Full connection test with recommendations
  GET  /inference-info          Info document of the primary inference endpoint
  GET  /debug-inference-urls    One-shot probe of every configured endpoint
"""

# Standard library imports
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

# External package imports
from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status

# Local application imports
from ...application.dto.analysis_dto import AnalysisRequest, RetinaAnalysisResponse
from ...application.dto.inference_dto import (
    ConnectionTestResponse,
    EndpointSweepResponse,
    InferenceInfoResponse,
    InferenceStatusResponse,
)
from ...application.use_cases.analysis.analyze_retina_image import AnalyzeRetinaImageUseCase
from ...application.use_cases.inference.check_inference_connection import CheckInferenceConnectionUseCase
from ...application.use_cases.inference.get_inference_info import GetInferenceInfoUseCase
from ...application.use_cases.inference.get_inference_status import GetInferenceStatusUseCase
from ...application.use_cases.inference.sweep_inference_endpoints import SweepInferenceEndpointsUseCase
from ...core.config import get_settings
from ...di.container import get_container

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}


def _upload_dir() -> Path:
    upload_dir = Path(get_settings().upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    return upload_dir


async def _store_upload(file: UploadFile) -> Dict[str, Any]:
    """Write an uploaded image to the upload dir and describe it for the use case"""
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing file name.",
        )

    ext = Path(file.filename).suffix.lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid image file. Use: jpg, jpeg, png",
        )

    max_bytes = get_settings().upload_max_mb * 1024 * 1024
    safe_name = f"{uuid.uuid4().hex}{ext}"
    final_path = (_upload_dir() / safe_name).resolve()

    size = 0
    with open(final_path, "wb") as f:
        while True:
            chunk = await file.read(1024 * 1024)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                f.close()
                final_path.unlink(missing_ok=True)
                raise HTTPException(
                    status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                    detail=f"Image too large. Max allowed is {get_settings().upload_max_mb} MB.",
                )
            f.write(chunk)

    logger.info(f"Stored uploaded image {file.filename} as {final_path} ({size} bytes)")
    return {
        "image_path": str(final_path),
        "image_filename": safe_name,
        "image_original_name": file.filename,
        "image_content_type": file.content_type or "image/jpeg",
        "image_size": size,
    }


@router.post("/upload", response_model=RetinaAnalysisResponse, status_code=status.HTTP_201_CREATED)
async def upload_retina_image(
    image: Optional[UploadFile] = File(None),
    image_data: Optional[str] = Form(None),
    patient_id: Optional[str] = Form(None),
    notes: Optional[str] = Form(None),
) -> RetinaAnalysisResponse:
    """
    Analyse a retina image

    The image comes either as a multipart file field `image` or as a data URL
    in `image_data`. When the inference service is unreachable the analysis
    is simulated and flagged with is_simulation.
    """
    if image is None and not image_data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No image file was uploaded and no image data was provided",
        )
    if not patient_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Patient ID is required",
        )

    fields = {
        "patient_id": patient_id,
        "image_data": image_data,
        "notes": notes,
    }
    if image is not None:
        fields.update(await _store_upload(image))

    container = get_container()
    analyze_use_case = container.get(AnalyzeRetinaImageUseCase)

    try:
        return await analyze_use_case.execute(AnalysisRequest(**fields))
    except ValueError as exception:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exception)
        )


@router.get("/api-status/inference", response_model=InferenceStatusResponse)
async def get_inference_status(
    full_test: bool = Query(False),
) -> InferenceStatusResponse:
    """
    Get inference service status (cached for 60 seconds)

    Args:
        full_test: Also sweep every configured endpoint
    """
    container = get_container()
    status_use_case = container.get(GetInferenceStatusUseCase)
    return await status_use_case.execute(full_test=full_test)


@router.get("/test-connection", response_model=ConnectionTestResponse)
async def check_inference_connection() -> ConnectionTestResponse:
    """Run a full connection test against every inference endpoint"""
    container = get_container()
    connection_use_case = container.get(CheckInferenceConnectionUseCase)
    return await connection_use_case.execute()


@router.get("/inference-info", response_model=InferenceInfoResponse, response_model_exclude_none=True)
async def get_inference_info() -> InferenceInfoResponse:
    """
    Get the info document of the configured primary inference endpoint

    Raises:
        HTTPException: 503 if the primary endpoint cannot be reached
    """
    container = get_container()
    info_use_case = container.get(GetInferenceInfoUseCase)
    result = await info_use_case.execute()

    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"success": False, "error": result.error, "api_url": result.api_url},
        )
    return result


@router.get("/debug-inference-urls", response_model=EndpointSweepResponse)
async def sweep_inference_endpoints() -> EndpointSweepResponse:
    """Probe every configured inference endpoint once and report each result"""
    container = get_container()
    sweep_use_case = container.get(SweepInferenceEndpointsUseCase)
    return await sweep_use_case.execute()
