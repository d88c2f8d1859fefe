from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class AnalysisRequest(BaseModel):
    """DTO for a retina analysis request (image given as stored file or data URL)"""
    patient_id: str = Field(min_length=1)
    image_path: Optional[str] = None
    image_filename: Optional[str] = None
    image_original_name: Optional[str] = None
    image_content_type: str = "image/jpeg"
    image_size: int = 0
    image_data: Optional[str] = None
    notes: Optional[str] = None


class ImageDetailsResponse(BaseModel):
    original_name: str
    content_type: str
    filename: str
    path: str
    size: int


class AnalysisResultsResponse(BaseModel):
    severity: str
    severity_level: int
    classification: str
    confidence: float
    is_simulation: bool
    error_message: Optional[str] = None


class RetinaAnalysisResponse(BaseModel):
    """DTO for a finished retina analysis"""
    analysis_id: str
    patient_id: str
    timestamp: datetime
    image_url: Optional[str] = None
    image_details: ImageDetailsResponse
    results: AnalysisResultsResponse
    severity: str
    severity_level: int
    confidence: float
    recommendation: str
    notes: str
    is_simulation: bool
