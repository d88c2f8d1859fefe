# Standard library imports
import logging
import uuid
from typing import Callable, Optional, Tuple

# Local application imports
from ....domain.exceptions import ErrorKind, InferenceError
from ....domain.models.analysis import ImageDetails, RetinaAnalysis, recommendation_for
from ....domain.models.prediction import FileRef, ImageInput, InlineImagePayload, PredictionResult
from ....infrastructure.external.inference_client import InferenceClient
from ....utils.datetime_utils import utc_now
from ...dto.analysis_dto import (
    AnalysisRequest,
    AnalysisResultsResponse,
    ImageDetailsResponse,
    RetinaAnalysisResponse,
)
from ...services.simulation_fallback import SimulationFallback

logger = logging.getLogger(__name__)

# Inline payloads above this size are logged as large
LARGE_PAYLOAD_BYTES = 1024 * 1024

DATA_URL_PREFIX = "data:"


def describe_inference_error(error: InferenceError) -> str:
    """User-facing explanation of why real inference did not happen"""
    if error.status_code == 422:
        return "Invalid image format. Make sure the image is a supported format (JPEG/PNG)."
    if error.kind is ErrorKind.TIMEOUT:
        return "Inference API connection timed out. The server may be busy or unavailable."
    if error.kind is ErrorKind.CONNECTION_REFUSED:
        return "Cannot connect to the inference API. The server may be down or unavailable."
    return str(error) or "Unknown error"


class AnalyzeRetinaImageUseCase:
    """
    Use case for analysing a retina image.

    Always yields an analysis: when the inference service cannot produce a
    prediction the simulation fallback is used and the result is flagged.
    """

    def __init__(
        self,
        inference_client: InferenceClient,
        simulation_fallback: SimulationFallback,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self.inference_client = inference_client
        self.simulation_fallback = simulation_fallback
        self.id_factory = id_factory

    async def execute(self, request: AnalysisRequest) -> RetinaAnalysisResponse:
        """
        Analyse a retina image

        Args:
            request: Analysis request with a stored file or inline image

        Returns:
            RetinaAnalysisResponse with classification, severity and recommendation

        Raises:
            ValueError: If no image or patient ID is supplied
        """
        if not request.image_path and not request.image_data:
            raise ValueError("No image file was uploaded and no image data was provided")
        if not request.patient_id:
            raise ValueError("Patient ID is required")

        analysis_id = self.id_factory()
        image = self._image_input(request)

        prediction, used_fallback, error_message = await self._predict(image)

        severity = prediction.class_label
        recommendation = recommendation_for(severity)

        analysis = RetinaAnalysis(
            analysis_id=analysis_id,
            patient_id=request.patient_id,
            timestamp=utc_now(),
            image_details=self._image_details(request, analysis_id),
            prediction=prediction,
            recommendation=recommendation,
            notes=request.notes or recommendation,
            is_simulation=used_fallback or prediction.is_simulation,
            error_message=error_message,
            image_url=self._image_url(request),
        )

        logger.info(
            f"Analysis {analysis.analysis_id} for patient {analysis.patient_id}: "
            f"{analysis.severity} (level {analysis.severity_level}, simulation={analysis.is_simulation})"
        )
        return self._to_response(analysis)

    async def _predict(self, image: ImageInput) -> Tuple[PredictionResult, bool, Optional[str]]:
        try:
            logger.info("Requesting prediction from inference API...")
            return await self.inference_client.predict(image), False, None
        except InferenceError as exception:
            logger.error(
                f"Inference API unavailable ({exception.kind.value}), switching to simulation mode: {exception}"
            )
            return self.simulation_fallback.simulate(), True, describe_inference_error(exception)

    @staticmethod
    def _image_input(request: AnalysisRequest) -> ImageInput:
        # Inline mode only for a real data URL; otherwise the stored file wins
        inline = request.image_data or ""
        if inline.startswith(DATA_URL_PREFIX) or (inline and not request.image_path):
            if len(inline) > LARGE_PAYLOAD_BYTES:
                logger.info(f"Large inline image ({len(inline)} bytes), sending as is")
            return InlineImagePayload(data_url=inline)
        if inline:
            logger.warning("Ignoring image_data that is not a data URL, using the uploaded file")
        return FileRef(
            path=request.image_path,
            filename=request.image_filename or request.image_path,
            original_name=request.image_original_name,
            content_type=request.image_content_type,
            size=request.image_size,
        )

    @staticmethod
    def _image_details(request: AnalysisRequest, analysis_id: str) -> ImageDetails:
        if request.image_path:
            return ImageDetails(
                original_name=request.image_original_name or request.image_filename or "uploaded-image.jpg",
                content_type=request.image_content_type,
                filename=request.image_filename or request.image_path,
                path=request.image_path,
                size=request.image_size,
            )
        return ImageDetails(
            original_name="uploaded-image.jpg",
            content_type="image/jpeg",
            filename=f"{analysis_id}.jpg",
            path=f"uploads/{analysis_id}.jpg",
            size=0,
        )

    @staticmethod
    def _image_url(request: AnalysisRequest) -> Optional[str]:
        if request.image_filename:
            return f"/uploads/{request.image_filename}"
        return request.image_data

    @staticmethod
    def _to_response(analysis: RetinaAnalysis) -> RetinaAnalysisResponse:
        details = analysis.image_details
        prediction = analysis.prediction
        return RetinaAnalysisResponse(
            analysis_id=analysis.analysis_id,
            patient_id=analysis.patient_id,
            timestamp=analysis.timestamp,
            image_url=analysis.image_url,
            image_details=ImageDetailsResponse(
                original_name=details.original_name,
                content_type=details.content_type,
                filename=details.filename,
                path=details.path,
                size=details.size,
            ),
            results=AnalysisResultsResponse(
                severity=analysis.severity,
                severity_level=analysis.severity_level,
                classification=prediction.class_label.value,
                confidence=prediction.confidence,
                is_simulation=analysis.is_simulation,
                error_message=analysis.error_message,
            ),
            severity=analysis.severity,
            severity_level=analysis.severity_level,
            confidence=prediction.confidence,
            recommendation=analysis.recommendation,
            notes=analysis.notes,
            is_simulation=analysis.is_simulation,
        )
