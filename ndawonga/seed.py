"""Demo content for a fresh database (the projects the site shows when empty)."""

from __future__ import annotations

import logging

from ndawonga.catalog import ProjectStore
from ndawonga.state import Project

logger = logging.getLogger(__name__)

DEMO_PROJECTS = [
    Project(
        title="Provincial Road Upgrade",
        type="Road Construction",
        location="Limpopo",
        year=2024,
        description="Upgrading 12km of provincial road including drainage and signage.",
    ),
    Project(
        title="Bulk Earthworks for Housing",
        type="Bulk Earthworks",
        location="Gauteng",
        year=2023,
        description="Mass excavation, compaction and platform preparation for 250 units.",
    ),
    Project(
        title="Water Reticulation Upgrade",
        type="Water & Sanitation",
        location="KZN",
        year=2022,
        description="Pipe replacement, chambers and consumer connections across 4 wards.",
    ),
]


def seed_demo(db_path: str) -> int:
    """Insert the demo projects if the projects table is empty. Returns rows added."""
    store = ProjectStore(db_path)
    if not store.is_empty():
        logger.info("Projects already present; skipping demo seed")
        return 0
    for p in DEMO_PROJECTS:
        store.create(p)
    logger.info("Seeded %d demo projects", len(DEMO_PROJECTS))
    return len(DEMO_PROJECTS)
