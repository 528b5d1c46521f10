"""Records persisted by the stores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class QuoteRequest:
    """A client-submitted quote request. Never mutated once stored."""

    name: str
    email: str
    phone: Optional[str] = None
    project_type: Optional[str] = None
    area_sq_m: float = 0.0
    complexity: str = "medium"
    estimated_cost: float = 0.0  # computed by the client, stored as given
    message: Optional[str] = None
    id: Optional[int] = None
    created_at: Optional[str] = None


@dataclass
class ChatExchange:
    """One logged chat turn."""

    session_id: str
    user_message: Optional[str]
    bot_response: str
    id: Optional[int] = None
    created_at: Optional[str] = None


@dataclass
class Tender:
    title: str
    closing_date: Optional[str] = None  # ISO YYYY-MM-DD so text order is date order
    description: Optional[str] = None
    file: Optional[str] = None  # opaque blob-store filename
    featured: bool = False
    id: Optional[int] = None
    created_at: Optional[str] = None


@dataclass
class Project:
    title: str
    description: Optional[str] = None
    type: Optional[str] = None
    year: Optional[int] = None
    location: Optional[str] = None
    featured_image: Optional[str] = None  # opaque blob-store filename
    status: str = "active"
    id: Optional[int] = None
    created_at: Optional[str] = None


@dataclass
class ContactMessage:
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    category: str = "General"
    id: Optional[int] = None
    created_at: Optional[str] = None
