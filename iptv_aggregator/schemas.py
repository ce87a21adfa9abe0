from pydantic import BaseModel, Field


class FileValidationResult(BaseModel):
    """Validation outcome for one source file"""
    path: str = Field(..., description="Checked file path")
    errors: list[str] = Field(default_factory=list, description="Problems that block a run")
    warnings: list[str] = Field(default_factory=list, description="Problems that are tolerated")
    stats: dict[str, int] = Field(default_factory=dict, description="Counters collected while checking")


class ValidationSummary(BaseModel):
    """Validation outcome for all source files"""
    checked_at: str = Field(..., description="ISO8601 UTC timestamp of the check")
    has_errors: bool
    errors: list[str] = Field(default_factory=list, description="Errors prefixed with their file path")
    warnings: list[str] = Field(default_factory=list, description="Warnings prefixed with their file path")
    files: dict[str, FileValidationResult]


class UpdateStatus(BaseModel):
    """Outcome of the most recent aggregation run"""
    success: bool
    timestamp: str
    channel_count: int | None = None
    stream_count: int | None = None
    outputs_written: bool | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    status: str = "ok"
    timestamp: str
    last_update: str | None
    is_updating: bool
    scheduler_running: bool
    next_update: str | None


class OutputFiles(BaseModel):
    m3u: bool
    txt: bool


class StatusResponse(BaseModel):
    is_updating: bool
    last_update: str | None
    last_update_status: UpdateStatus | None
    files: OutputFiles


class UpdateAcceptedResponse(BaseModel):
    message: str
    timestamp: str
