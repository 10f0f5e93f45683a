"""
Pydantic Models for API Requests
"""

from datetime import datetime
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field
from app.config import WorkflowType, settings


class TranscriptRequest(BaseModel):
    """Request model for one-shot parsing and segmentation"""
    transcript: str = Field(max_length=settings.max_transcript_chars, description="Full transcript so far")
    workflow_type: WorkflowType = Field(description="Active documentation workflow")
    reference_time: Optional[datetime] = Field(default=None, description="Clock used to resolve spoken \"now\"")


class MatchLabelRequest(BaseModel):
    spoken_text: str = Field(max_length=200, description="Spoken field label")
    workflow_type: WorkflowType
    threshold: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class NormalizeRequest(BaseModel):
    text: str = Field(max_length=settings.max_transcript_chars)


class SessionCreateRequest(BaseModel):
    workflow_type: WorkflowType


class SessionTranscriptRequest(BaseModel):
    """A transcript change notification for an open session"""
    transcript: str = Field(max_length=settings.max_transcript_chars)
    current_form_data: Dict[str, Any] = Field(default_factory=dict)
    workflow_type: Optional[WorkflowType] = Field(
        default=None,
        description="Switching the workflow starts a new documentation session"
    )
    reference_time: Optional[datetime] = Field(default=None)
