"""
Survey domain models.

These models define the stored survey record and the request/response
shapes exchanged between the HTTP API and its clients.
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool

__all__ = [
    "MIN_RATING",
    "MAX_RATING",
    "MAX_COMMENT_LENGTH",
    "MAX_EMAIL_LENGTH",
    "nps_category",
    "SurveyRequest",
    "SurveyRecord",
    "SurveyCreated",
    "NpsResponse",
    "AverageResponse",
    "NpsBreakdown",
    "ValidationResult",
]

MIN_RATING = 0
MAX_RATING = 10
MAX_COMMENT_LENGTH = 1000
MAX_EMAIL_LENGTH = 255


def nps_category(rating: int) -> str:
    """Get the NPS category for a rating."""
    if rating >= 9:
        return "promoter"
    elif rating >= 7:
        return "passive"
    else:
        return "detractor"


class SurveyRequest(BaseModel):
    """Survey submission payload.

    The rating range is not enforced here; out-of-range values are reported
    by the validator as field errors. Booleans are kept as booleans instead
    of being coerced to 0 or 1, so the validator rejects them too.
    """
    model_config = ConfigDict(populate_by_name=True)

    likelihood_to_recommend: Union[StrictBool, int] = Field(
        ..., alias="likelihoodToRecommend", description="Likelihood to recommend (0-10)")
    comments: Optional[str] = Field(None, description="Free-text comment")
    email: Optional[str] = Field(None, description="Contact email")

    def to_wire(self) -> Dict:
        """Serialize using the JSON field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


class SurveyRecord(BaseModel):
    """A stored survey response."""
    id: str = Field("", description="Unique identifier")
    rating: int = Field(..., description="Likelihood to recommend",
                        ge=MIN_RATING, le=MAX_RATING)
    comment: Optional[str] = Field(
        None, description="Sanitized comment", max_length=MAX_COMMENT_LENGTH)
    email: Optional[str] = Field(
        None, description="Normalized email", max_length=MAX_EMAIL_LENGTH)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the response was stored")

    @property
    def category(self) -> str:
        return nps_category(self.rating)


class SurveyCreated(BaseModel):
    id: str


class NpsResponse(BaseModel):
    nps: float


class AverageResponse(BaseModel):
    average: float


class NpsBreakdown(BaseModel):
    """Promoter/passive/detractor counts with the resulting score."""
    promoters: int = 0
    passives: int = 0
    detractors: int = 0
    total: int = 0
    nps: float = 0.0


class ValidationResult(BaseModel):
    """Outcome of validating a submission.

    Errors are keyed by the wire field name and hold every message that
    applies to that field.
    """
    valid: bool = True
    field_errors: Dict[str, List[str]] = Field(default_factory=dict)

    def add_error(self, field: str, message: str) -> None:
        self.field_errors.setdefault(field, []).append(message)
        self.valid = False
