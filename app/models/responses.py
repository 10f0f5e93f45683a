"""
Pydantic models for engine results and API responses
"""

from typing import Optional, Dict, Any, List, Union
from datetime import datetime
from pydantic import BaseModel, Field
from app.config import WorkflowType, FieldKind


FieldValue = Union[int, float, str]


class FieldExtraction(BaseModel):
    """A typed value recognized by a domain extractor"""
    value: FieldValue = Field(description="Extracted value (number or normalized string)")
    confidence: float = Field(description="Confidence score (0.0-1.0)")
    raw_text: Optional[str] = Field(default=None, description="Transcript text the value was read from")
    position: int = Field(default=-1, description="Character offset of the match in the transcript")


class FieldLabelMatch(BaseModel):
    """Result of matching a spoken phrase to a field key"""
    field_key: str = Field(description="Canonical field key")
    confidence: float = Field(description="Match confidence (0.0-1.0)")
    matched_phrase: str = Field(description="The spoken phrase that was matched")


class FieldSegment(BaseModel):
    """Transcript span attributed to one field"""
    field_key: str
    content: str
    confidence: float
    start_position: int = Field(description="Offset of the field label")
    end_position: int = Field(description="Offset where the field content ends (exclusive)")


class SegmentationResult(BaseModel):
    segments: List[FieldSegment] = Field(default_factory=list)
    unmatched_content: str = Field(default="")
    warnings: List[str] = Field(default_factory=list)

    def segment_for(self, field_key: str) -> Optional[FieldSegment]:
        for segment in self.segments:
            if segment.field_key == field_key:
                return segment
        return None

    def was_mentioned(self, field_key: str) -> bool:
        return self.segment_for(field_key) is not None


class ParseResult(BaseModel):
    """Aggregate output of one extraction pass over the full transcript"""
    structured_data: Dict[str, FieldValue] = Field(default_factory=dict)
    confidence: Dict[str, float] = Field(default_factory=dict)
    needs_review: List[str] = Field(default_factory=list)


class AutoFillResult(BaseModel):
    """Field updates produced by one auto-fill pass"""
    updates: Dict[str, FieldValue] = Field(default_factory=dict)
    auto_filled_fields: List[str] = Field(default_factory=list)
    confidence: Dict[str, float] = Field(default_factory=dict)
    needs_review: List[str] = Field(default_factory=list)
    segmentation_warnings: List[str] = Field(default_factory=list)
    has_field_labels: bool = Field(default=False)
    unmatched_content: str = Field(default="")


class LabelMatchResponse(BaseModel):
    match: Optional[FieldLabelMatch] = Field(default=None, description="Best match, or null when nothing reaches the threshold")


class FieldDescription(BaseModel):
    field_key: str
    kind: FieldKind
    default: FieldValue
    primary_labels: List[str]
    aliases: List[str]
    medical_terms: List[str]


class WorkflowDescription(BaseModel):
    workflow_type: WorkflowType
    fields: List[FieldDescription]


class SessionResponse(BaseModel):
    session_id: str = Field(description="Identifier of the documentation session")
    workflow_type: WorkflowType
    processed_length: int = Field(description="Length of the transcript prefix already merged")


class SessionUpdateResponse(BaseModel):
    session_id: str
    processed: bool = Field(description="False when the transcript held no new content")
    result: Optional[AutoFillResult] = None


class NormalizeResponse(BaseModel):
    text: str
    cleaned: str = Field(description="Transcript after post-recognition cleanup")
    normalized_term: str = Field(description="Text after abbreviation normalization")
    number: Optional[float] = Field(default=None, description="Numeric reading of the text, if any")


class HealthCheckResponse(BaseModel):
    """Health Check Response"""
    status: str = Field(description="Service status (healthy/unhealthy)")
    timestamp: datetime = Field(description="Check time")
    version: str = Field(description="Service version")
    uptime_seconds: int = Field(description="Uptime in seconds")
    details: Optional[Dict[str, Any]] = Field(default=None)


class ErrorResponse(BaseModel):
    """Standardized error response"""
    error: str = Field(description="Error type")
    message: str = Field(description="Error description")
    details: Optional[Dict[str, Any]] = Field(default=None)
    request_id: Optional[str] = Field(default=None, description="Request ID for debugging")
    timestamp: datetime = Field(description="Error time")


class RateLimitResponse(BaseModel):
    """Rate Limit Exceeded Response"""
    error: str = Field(default="rate_limit_exceeded")
    message: str = Field(description="Rate limit message")
    retry_after: int = Field(description="Seconds until the next attempt")
    limit: int = Field(description="Request limit")
    window: int = Field(description="Window in seconds")
    timestamp: datetime = Field(description="Error time")
