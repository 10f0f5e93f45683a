"""
Central configuration for the Dictation Engine Service
"""

from typing import List
from pydantic_settings import BaseSettings
from pydantic import BaseModel, Field
from enum import Enum


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class WorkflowType(str, Enum):
    VITAL_SIGNS = "vital-signs"
    MEDICATION_ADMINISTRATION = "medication-administration"
    PATIENT_ASSESSMENT = "patient-assessment"
    WOUND_CARE = "wound-care"
    SHIFT_HANDOFF = "shift-handoff"
    ADMISSION = "admission"
    DISCHARGE = "discharge"
    GENERAL_NOTE = "general-note"


class FieldKind(str, Enum):
    NUMBER = "number"
    TEXT = "text"
    CHOICE = "choice"
    TEXTAREA = "textarea"
    TIME = "time"


class ConfidenceSettings(BaseModel):
    """Empirically chosen confidence constants"""
    review_threshold: float = Field(default=0.7)
    fuzzy_match_threshold: float = Field(default=0.7)

    # Label matcher tiers
    exact_label: float = Field(default=1.0)
    alias_label: float = Field(default=0.9)
    medical_term_label: float = Field(default=0.85)

    # Segmenter markers
    long_marker: float = Field(default=1.0)
    short_marker: float = Field(default=0.9)
    long_marker_min_length: int = Field(default=10)

    # Extractors
    direct_numeric: float = Field(default=0.9)
    spoken_numeric: float = Field(default=0.85)
    keyword_match: float = Field(default=0.85)
    bare_keyword: float = Field(default=0.75)
    counted_orientation: float = Field(default=0.8)
    medication_name: float = Field(default=0.85)
    inferred_medication_name: float = Field(default=0.6)
    medication_time: float = Field(default=0.8)
    missing_value: float = Field(default=0.5)


class Settings(BaseSettings):
    # Environment
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # API Configuration
    api_title: str = Field(default="Dictation Engine API")
    api_description: str = Field(default="Transcript-to-structured-data extraction for nursing documentation")
    api_version: str = Field(default="1.0.0")
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=3001)

    # Rate Limiting
    rate_limit_requests: int = Field(default=120)
    rate_limit_window: int = Field(default=60)  # seconds

    # Transcript limits
    max_transcript_chars: int = Field(default=20000)
    max_sessions: int = Field(default=500)

    # Extraction
    confidence: ConfidenceSettings = Field(default_factory=ConfidenceSettings)

    # CORS Configuration
    cors_origins: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
        ]
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(default=["GET", "POST", "DELETE"])
    cors_allow_headers: List[str] = Field(default=["*"])

    # Monitoring
    enable_metrics: bool = Field(default=True)
    metrics_path: str = Field(default="/metrics")

    # Audit Logging
    audit_log_enabled: bool = Field(default=True)

    class Config:
        env_file = ".env"
        env_nested_delimiter = "__"
        case_sensitive = False


# Global settings instance
settings = Settings()
