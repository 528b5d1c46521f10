"""Thin stores behind the site's listing and contact routes."""

from __future__ import annotations

from typing import Any, Dict, List

from ndawonga import db
from ndawonga.errors import NotFound
from ndawonga.state import ContactMessage, Project, Tender


class ProjectStore:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def active(self) -> List[Dict[str, Any]]:
        return db.fetch_all(
            self.db_path,
            "SELECT * FROM projects WHERE status = 'active' ORDER BY created_at DESC, id DESC",
        )

    def get(self, project_id: int) -> Dict[str, Any]:
        row = db.fetch_one(self.db_path, "SELECT * FROM projects WHERE id = ?", (project_id,))
        if row is None:
            raise NotFound(f"project {project_id}")
        return row

    def create(self, project: Project) -> int:
        return db.insert(
            self.db_path,
            "INSERT INTO projects (title, description, type, year, location, featured_image) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                project.title,
                project.description,
                project.type or None,
                project.year or None,
                project.location or None,
                project.featured_image,
            ),
        )

    def is_empty(self) -> bool:
        return db.fetch_one(self.db_path, "SELECT id FROM projects LIMIT 1") is None


class TenderStore:
    """Tender listing; also serves as the chat responder's tender lookup."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def all(self) -> List[Dict[str, Any]]:
        return db.fetch_all(
            self.db_path, "SELECT * FROM tenders ORDER BY featured DESC, closing_date DESC"
        )

    def latest(self, limit: int) -> List[Tender]:
        rows = db.fetch_all(
            self.db_path,
            "SELECT title, closing_date FROM tenders ORDER BY closing_date DESC LIMIT ?",
            (limit,),
        )
        return [Tender(title=r["title"], closing_date=r["closing_date"]) for r in rows]

    def create(self, tender: Tender) -> int:
        return db.insert(
            self.db_path,
            "INSERT INTO tenders (title, description, closing_date, file, featured) "
            "VALUES (?, ?, ?, ?, ?)",
            (
                tender.title,
                tender.description or None,
                tender.closing_date or None,
                tender.file,
                1 if tender.featured else 0,
            ),
        )


class TeamStore:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def all(self) -> List[Dict[str, Any]]:
        return db.fetch_all(self.db_path, "SELECT * FROM team ORDER BY id ASC")


class DocumentStore:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def visible(self) -> List[Dict[str, Any]]:
        return db.fetch_all(
            self.db_path,
            "SELECT * FROM documents WHERE visible = 1 ORDER BY uploaded_at DESC, id DESC",
        )


class ContactStore:
    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    def save(self, msg: ContactMessage) -> int:
        return db.insert(
            self.db_path,
            "INSERT INTO messages (name, email, phone, subject, message, category) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            (
                msg.name or None,
                msg.email or None,
                msg.phone or None,
                msg.subject or None,
                msg.message or None,
                msg.category or "General",
            ),
        )
