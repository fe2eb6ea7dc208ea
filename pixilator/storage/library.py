"""Read path for the public generation library.

Behavior:
    - Lists rows of the shared public partition (`user_id = "public"`), newest
      first, with optional `style` / `model_version` equality filters.
    - `total` is the number of rows returned and `has_more` is true when a full
      page came back.

Failure handling:
    The browsing surface never hard-fails: an unconfigured or unreachable backend
    yields an empty page with an `error` note.
"""

import logging

from pixilator.core.schemas import PUBLIC_USER_ID, GenerationRecord


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


def _empty_page(error: str) -> dict:
    return {"images": [], "total": 0, "hasMore": False, "error": error}


class GenerationLibrary:
    """Query facade over the record table (`None` when not configured)."""

    def __init__(self, table=None):
        self.table = table

    def fetch_page(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
        style: str | None = None,
        model_version: str | None = None,
    ) -> dict:
        if self.table is None:
            logger.error("Library requested but database is not configured")
            return _empty_page("Database not configured")

        filters = {"user_id": PUBLIC_USER_ID, "style": style, "model_version": model_version}

        try:
            rows = self.table.query(filters, order="created_at.desc", offset=offset, limit=limit)
        except Exception:
            logger.exception("Library query failed")
            return _empty_page("Database not ready - no images available yet")

        images = []
        for row in rows:
            try:
                images.append(GenerationRecord.from_row(row).model_dump(by_alias=True))
            except Exception:
                logger.warning("Skipping malformed library row id=%r", row.get("id"))

        return {
            "images": images,
            "total": len(images),
            "hasMore": len(rows) == limit,
        }
