# Standard library imports
import asyncio
import base64
import binascii
import logging
from pathlib import Path
from typing import Any, Dict, Optional

# Local application imports
from ...domain.constants.inference_fields import InferenceRoutes, PredictionFields
from ...domain.exceptions import AllEndpointsExhaustedError, ErrorKind, InferenceError, RequestError
from ...domain.models.prediction import (
    FileRef,
    ImageInput,
    InlineImagePayload,
    PredictionResult,
    SeverityClass,
)
from .base_inference_client import BaseInferenceClient
from .endpoint_registry import EndpointRegistry
from .health_prober import HealthProber
from .retry_client import RetryingRequestClient

logger = logging.getLogger(__name__)

# Leading characters decoded to sanity-check an inline payload
VALIDATION_SEGMENT_LENGTH = 100


def extract_base64_payload(data_url: str) -> str:
    """
    Strip the data-URL prefix and check that the payload decodes.

    Only a short leading segment is decoded; the full image is validated by
    the inference service.

    Args:
        data_url: Value of the form "data:image/png;base64,<payload>"

    Returns:
        The raw base64 payload

    Raises:
        InferenceError: MALFORMED_PAYLOAD if the value is not a usable data URL
    """
    if not data_url.startswith("data:"):
        raise InferenceError(ErrorKind.MALFORMED_PAYLOAD, "Image data is not a data URL")

    parts = data_url.split(",")
    if len(parts) != 2:
        raise InferenceError(ErrorKind.MALFORMED_PAYLOAD, "Invalid base64 format")

    payload = parts[1]
    if not payload:
        raise InferenceError(ErrorKind.MALFORMED_PAYLOAD, "Empty base64 payload")

    segment = payload[:VALIDATION_SEGMENT_LENGTH]
    segment += "=" * (-len(segment) % 4)
    try:
        base64.b64decode(segment, validate=True)
    except (binascii.Error, ValueError) as exception:
        logger.error(f"Invalid base64 image data: {exception}")
        raise InferenceError(ErrorKind.MALFORMED_PAYLOAD, "Invalid base64 data") from exception

    return payload


def parse_prediction(body: Any) -> PredictionResult:
    """Map a predict-route response body onto a PredictionResult"""
    if not isinstance(body, dict):
        raise InferenceError(ErrorKind.MALFORMED_PAYLOAD, "Prediction response is not an object")

    label = body.get(PredictionFields.CLASS)
    severity = SeverityClass.from_label(label) if isinstance(label, str) else None
    if severity is None:
        # Labels outside the five severity classes have no level or recommendation;
        # the caller treats this like any failed prediction and simulates
        raise InferenceError(ErrorKind.MALFORMED_PAYLOAD, f"Unknown prediction class: {label!r}")

    try:
        confidence = float(body.get(PredictionFields.CONFIDENCE))
        return PredictionResult(
            class_label=severity,
            confidence=confidence,
            is_simulation=body.get(PredictionFields.IS_SIMULATION) is True,
        )
    except (TypeError, ValueError) as exception:
        raise InferenceError(
            ErrorKind.MALFORMED_PAYLOAD,
            f"Invalid prediction confidence: {body.get(PredictionFields.CONFIDENCE)!r}",
        ) from exception


class InferenceClient(BaseInferenceClient):
    """
    HTTP client for requesting predictions from the retina inference service.

    Sends either an inline base64 image or a stored image file to the
    currently preferred endpoint. Endpoint switching is left to the health
    prober; failures here are raised to the caller.
    """

    def __init__(
        self,
        registry: EndpointRegistry,
        request_client: RetryingRequestClient,
        prober: Optional[HealthProber] = None,
        timeout: float = 60.0,
    ):
        """
        Initialize inference client.

        Args:
            registry: Candidate inference-service URLs (shared with the prober)
            request_client: Retry-wrapped HTTP client
            prober: Health prober consulted before each prediction; when it
                reports every endpoint down the call is not attempted
            timeout: Prediction timeout in seconds
        """
        super().__init__(registry, request_client, timeout=timeout)
        self.prober = prober

    async def predict(self, image: ImageInput) -> PredictionResult:
        """
        Classify a retina image.

        Args:
            image: Inline data-URL payload or reference to a stored file

        Returns:
            PredictionResult from the remote model

        Raises:
            InferenceError: If the payload is malformed or the service call fails
            AllEndpointsExhaustedError: If the prober found no reachable endpoint
        """
        if isinstance(image, InlineImagePayload):
            payload = extract_base64_payload(image.data_url)
            await self._ensure_available()
            logger.info("Using provided image data for prediction")
            body = await self._post(
                InferenceRoutes.PREDICT_BASE64,
                json={PredictionFields.IMAGE_DATA: payload},
            )
        elif isinstance(image, FileRef):
            content = await self._read_file(image)
            await self._ensure_available()
            logger.info(f"Using uploaded file {image.filename} for prediction")
            body = await self._post(
                InferenceRoutes.PREDICT,
                files={PredictionFields.FILE: (image.filename, content, image.content_type)},
            )
        else:
            raise InferenceError(ErrorKind.MALFORMED_PAYLOAD, "No valid image data for prediction")

        result = parse_prediction(body)
        logger.info(
            f"Prediction succeeded: {result.class_label.value} "
            f"(confidence {result.confidence:.4f}, simulation={result.is_simulation})"
        )
        return result

    async def _ensure_available(self) -> None:
        if self.prober is None:
            return
        status = await self.prober.check_status()
        if not status.available:
            raise AllEndpointsExhaustedError()

    async def _read_file(self, image: FileRef) -> bytes:
        path = Path(image.path)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exception:
            raise InferenceError(
                ErrorKind.MALFORMED_PAYLOAD,
                f"Cannot read image file {image.path}: {exception}",
            ) from exception

    async def _post(self, route: str, **kwargs: Any) -> Dict[str, Any]:
        url = self.endpoint.url_for(route)
        logger.info(f"Requesting prediction from inference API: {url}")
        try:
            response = await self.request_client.send("POST", url, timeout=self.timeout, **kwargs)
        except RequestError as exception:
            logger.error(f"Error while predicting image: {exception}")
            raise InferenceError.from_request_error(exception) from exception

        try:
            return response.json()
        except ValueError as exception:
            raise InferenceError(
                ErrorKind.MALFORMED_PAYLOAD,
                "Prediction response is not valid JSON",
                status_code=response.status_code,
            ) from exception
