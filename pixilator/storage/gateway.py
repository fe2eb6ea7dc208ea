"""Best-effort persistence of a generated image and its generation record.

Processing flow:
    1. Decode the data URI back to PNG bytes.
    2. Upload under `generation-<epoch-ms>-<random>.png`; on success the object's
       public URL replaces the inline data URI.
    3. Insert a `generations` row referencing whichever URL won in step 2.

Failure handling:
    Steps 2 and 3 are independent. An upload failure keeps the inline data URI
    and still attempts the insert; an insert failure leaves `id = None`. Neither
    raises: `persist` always returns a `PersistenceResult`.
"""

import logging
import time
import uuid

from pixilator.core.schemas import GenerationMetadata, PersistenceResult
from pixilator.image.service import IMAGE_MIME_TYPE, from_data_uri


logger = logging.getLogger(__name__)


def make_object_key(now_ms: int | None = None) -> str:
    """Return a fresh unique object key (timestamp plus random suffix)."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"generation-{now_ms}-{uuid.uuid4().hex[:13]}.png"


class PersistenceGateway:
    """Persist generations to an object store and a record table.

    Either collaborator may be `None` (backend not configured); the matching step
    is then skipped and degrades exactly like a failed call.
    """

    def __init__(self, object_store=None, table=None):
        self.object_store = object_store
        self.table = table

    def _upload(self, image_data_uri: str) -> str:
        if self.object_store is None:
            logger.warning("Object storage not configured; serving image inline")
            return image_data_uri

        try:
            image_bytes = from_data_uri(image_data_uri)
            key = make_object_key()
            self.object_store.upload(key, image_bytes, IMAGE_MIME_TYPE)
            return self.object_store.public_url(key)
        except Exception:
            logger.exception("Storage upload failed; serving image inline")
            return image_data_uri

    def _insert(self, public_url: str, metadata: GenerationMetadata) -> str | None:
        if self.table is None:
            logger.warning("Generation table not configured; record not saved")
            return None

        try:
            row = self.table.insert(metadata.to_row(public_url))
        except Exception:
            logger.exception("Database save failed")
            return None

        row_id = row.get("id") if isinstance(row, dict) else None
        if row_id is None:
            logger.warning("Database insert returned no row id: %r", row)
            return None
        return str(row_id)

    def persist(self, image_data_uri: str, metadata: GenerationMetadata) -> PersistenceResult:
        public_url = self._upload(image_data_uri)
        generation_id = self._insert(public_url, metadata)
        return PersistenceResult(id=generation_id, public_url=public_url)
