from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ndawonga.state import ContactMessage, Project, QuoteRequest, Tender


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str) and not v.strip():
        return None
    return v


class QuotePayload(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    project_type: Optional[str] = None
    area_sq_m: float = Field(0, ge=0, allow_inf_nan=False)
    complexity: Optional[str] = None
    estimated_cost: float = Field(0, ge=0, allow_inf_nan=False)
    message: Optional[str] = None

    @field_validator("phone", "project_type", "complexity", "message", mode="before")
    @classmethod
    def _optional_text(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("area_sq_m", "estimated_cost", mode="before")
    @classmethod
    def _missing_is_zero(cls, v: Any) -> Any:
        return 0 if v is None or v == "" else v

    def to_record(self) -> QuoteRequest:
        return QuoteRequest(
            name=self.name or "",
            email=self.email or "",
            phone=self.phone,
            project_type=self.project_type,
            area_sq_m=self.area_sq_m,
            complexity=self.complexity or "medium",
            estimated_cost=self.estimated_cost,
            message=self.message,
        )


class EstimatePayload(BaseModel):
    project_type: Optional[str] = None
    area_sq_m: Any = Field(0, description="Clamped to a non-negative number before use")
    complexity: Optional[str] = None


class EstimateResponse(BaseModel):
    estimated_cost: float
    category: str
    complexity: str
    base_rate: float
    multiplier: float
    contingency_rate: float


class ChatPayload(BaseModel):
    message: Optional[str] = Field(None, description="User message")


class ChatReply(BaseModel):
    reply: str


class ProjectPayload(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    type: Optional[str] = None
    year: Optional[int] = None
    location: Optional[str] = None
    featured_image: Optional[str] = Field(None, description="Stored upload filename")

    def to_record(self) -> Project:
        return Project(**self.model_dump())


class TenderPayload(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    closing_date: Optional[date] = Field(None, description="ISO date, YYYY-MM-DD")
    file: Optional[str] = Field(None, description="Stored upload filename")
    featured: bool = False

    @field_validator("closing_date", mode="before")
    @classmethod
    def _blank_date(cls, v: Any) -> Any:
        return _blank_to_none(v)

    def to_record(self) -> Tender:
        data = self.model_dump()
        if self.closing_date is not None:
            data["closing_date"] = self.closing_date.isoformat()
        return Tender(**data)


class ContactPayload(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    category: Optional[str] = None

    def to_record(self) -> ContactMessage:
        return ContactMessage(**{**self.model_dump(), "category": self.category or "General"})


class Created(BaseModel):
    id: int
    message: str


class PricingCategory(BaseModel):
    category: str
    base_rate: float


class PricingInfo(BaseModel):
    categories: List[PricingCategory]
    complexity_multipliers: Dict[str, float]
    contingency_rate: float
    default_category: str
    default_complexity: str


class ErrorEnvelope(BaseModel):
    error: str
    code: str
    details: Optional[dict] = None
