"""
Solar API - Pydantic response schemas
"""
from pydantic import BaseModel, ConfigDict, Field


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ControlResponse(CamelModel):
    """Result of a start/stop request."""
    message: str
    is_running: bool = Field(..., alias="isRunning")


class StatusResponse(CamelModel):
    is_running: bool = Field(..., alias="isRunning")
    current_index: int = Field(..., alias="currentIndex", description="Records sent in the current pass through the playback data")
    total_data_points: int = Field(..., alias="totalDataPoints")
    has_data: bool = Field(..., alias="hasData")


class SampleResponse(CamelModel):
    sample_data: list[dict] = Field(..., alias="sampleData")
    total_points: int = Field(..., alias="totalPoints")


class HealthResponse(CamelModel):
    status: str
    timestamp: str
    panel_count: int = Field(..., alias="panelCount")
    data_loaded: bool = Field(..., alias="dataLoaded")
    data_points: int = Field(..., alias="dataPoints")
