"""
Pydantic schemas for API request/response models
"""

from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone


class HealthCheckResponse(BaseModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    configured: bool
    database_connected: bool
    fetch_strategy: Optional[str] = None
    missing_settings: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def determine_status(self):
        """Determine overall health status"""
        if not self.configured:
            self.status = "unhealthy"
        elif not self.database_connected:
            self.status = "degraded"
        else:
            self.status = "healthy"
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "configured": True,
                "database_connected": True,
                "fetch_strategy": "bulk_export",
                "missing_settings": []
            }
        }


class ErrorResponse(BaseModel):
    """Body of a failed ingestion run (HTTP 500)"""
    status: str = Field("failed", description="Always 'failed'")
    error: str
    inserted: int = 0
    skipped: int = 0
    processed: int = 0
    candidates: int = 0
    failed_batches: int = 0
    date: Optional[str] = None
    strategy: Optional[str] = None
    error_details: List[Dict[str, Any]] = Field(default_factory=list)
