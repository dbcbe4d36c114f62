"""
Run outcome returned to the caller of an ingestion run
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from models.base import RunStatus


class RunOutcome(BaseModel):
    """
    Structured report of a single ingestion run. Never persisted.

    processed is inserted + skipped: every candidate that reached
    normalization. Candidates dropped with a failed lookup batch are
    counted in candidates but not in processed.
    """

    status: RunStatus
    inserted: int = Field(0, ge=0)
    skipped: int = Field(0, ge=0)
    processed: int = Field(0, ge=0)
    candidates: int = Field(0, ge=0)
    failed_batches: int = Field(0, ge=0)
    date: Optional[str] = Field(None, description="Trending window: YYYY-MM-DD or 'current'")
    strategy: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
    error_details: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def http_status(self) -> int:
        """Failed runs map to a server error, everything else to success"""
        return 500 if self.status == RunStatus.FAILED else 200

    def to_response(self) -> Dict[str, Any]:
        """JSON body for the HTTP endpoint"""
        body = self.model_dump(mode="json", exclude_none=True)
        if not self.error_details:
            body.pop("error_details", None)
        return body
