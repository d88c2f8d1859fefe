from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class InferenceStatusResponse(BaseModel):
    """DTO for the inference service status query"""
    available: bool
    simulation: bool
    last_check: Optional[int] = None  # epoch milliseconds
    last_check_iso: Optional[str] = None
    info: Optional[Dict[str, Any]] = None
    last_error: Optional[Dict[str, Any]] = None
    api_url: str
    info_url: str
    detailed_test: Optional[Dict[str, Any]] = None


class ConnectionTestResponse(BaseModel):
    """DTO for the operator-facing connection test"""
    model_config = ConfigDict(protected_namespaces=())

    success: bool
    message: str
    url: Optional[str] = None
    model_loaded: Optional[bool] = None
    data: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    recommendations: List[str] = Field(default_factory=list)
    urls_tried: List[str] = Field(default_factory=list)
    simulation_mode: Optional[bool] = None


class InferenceInfoResponse(BaseModel):
    """DTO for the primary inference endpoint's info document"""
    success: bool
    api_url: str
    info: Optional[Any] = None
    error: Optional[str] = None
    code: Optional[str] = None


class EndpointSweepResult(BaseModel):
    """Outcome of probing one configured endpoint"""
    url: str
    status: str  # "success" or "error"
    response_time_ms: Optional[int] = None
    data: Optional[Any] = None
    error: Optional[str] = None
    code: Optional[str] = None
    status_code: Optional[int] = None


class EndpointSweepResponse(BaseModel):
    """DTO for the every-endpoint connection sweep"""
    results: List[EndpointSweepResult]
    env: Dict[str, str]
