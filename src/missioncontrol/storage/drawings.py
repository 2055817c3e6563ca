"""Drawing snapshot persistence; one snapshot is kept per project."""

from __future__ import annotations

import logging

from missioncontrol.core.models import DrawingSnapshot, SaveDrawing

from .base import EntityStore, query_errors

log = logging.getLogger(__name__)

__all__ = ["DrawingStore"]

_DRAWING_COLUMNS = "id, elements, app_state, updated_at, project_id"


class DrawingStore(EntityStore):
    def save_drawing(self, drawing: SaveDrawing) -> DrawingSnapshot:
        """Replace the project's snapshot with ``drawing``."""

        handle = self.handle
        with query_errors("save drawing"), handle.transaction():
            handle.execute("DELETE FROM drawings WHERE project_id = ?", (drawing.project_id,))
            # Inserted even when empty so a cleared canvas replaces the old one.
            row = handle.fetch_one(
                "INSERT INTO drawings (elements, app_state, project_id) VALUES (?, ?, ?) "
                f"RETURNING {_DRAWING_COLUMNS}",
                (drawing.elements, drawing.app_state, drawing.project_id),
            )
        log.info("Drawing saved for project %s", drawing.project_id)
        return DrawingSnapshot.from_row(row)

    def get_drawing(self, project_id: int) -> DrawingSnapshot | None:
        handle = self.handle
        with query_errors("fetch drawing"):
            row = handle.fetch_one(
                f"SELECT {_DRAWING_COLUMNS} FROM drawings WHERE project_id = ? "
                "ORDER BY updated_at DESC, id DESC LIMIT 1",
                (project_id,),
            )
        if row is None:
            log.debug("No drawing found for project %s", project_id)
            return None
        return DrawingSnapshot.from_row(row)
