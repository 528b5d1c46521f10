"""Quote request persistence.

The estimate a client sends along is stored exactly as given; the server does
not recompute it against the pricing table.
"""

from __future__ import annotations

import logging
from typing import Optional

from ndawonga import db
from ndawonga.errors import NotFound, StorageFailure, ValidationGap
from ndawonga.state import QuoteRequest

logger = logging.getLogger(__name__)

_INSERT_SQL = (
    "INSERT INTO quotes (name, email, phone, project_type, area_sq_m, complexity, "
    "estimated_cost, message) VALUES (?, ?, ?, ?, ?, ?, ?, ?)"
)


class QuoteRequestStore:
    """Append-only store of submitted quote requests."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def submit(self, request: QuoteRequest) -> int:
        """Insert one quote request and return its generated id.

        Raises ValidationGap when name or email is blank and StorageFailure
        when the database rejects the write.
        """
        if not (request.name or "").strip():
            raise ValidationGap("name is required")
        if not (request.email or "").strip():
            raise ValidationGap("email is required")

        params = (
            request.name,
            request.email,
            request.phone or None,
            request.project_type or None,
            request.area_sq_m or 0,
            request.complexity or "medium",
            request.estimated_cost or 0,
            request.message or None,
        )
        try:
            quote_id = db.insert(self.db_path, _INSERT_SQL, params)
        except StorageFailure:
            logger.exception("Quote insert failed for %s", request.email)
            raise
        logger.info("Stored quote request %s (%s)", quote_id, request.project_type or "-")
        return quote_id

    def get(self, quote_id: int) -> QuoteRequest:
        row = db.fetch_one(self.db_path, "SELECT * FROM quotes WHERE id = ?", (quote_id,))
        if row is None:
            raise NotFound(f"quote {quote_id}")
        return QuoteRequest(**row)

    def count(self) -> int:
        """Number of stored requests (for staff inspection)."""
        row: Optional[dict] = db.fetch_one(self.db_path, "SELECT COUNT(*) AS n FROM quotes")
        return int(row["n"]) if row else 0
