"""
Mutation Gateway

Forwards lead edits to Airtable. The snapshot cache is invalidated only
after upstream confirms the write; a failed write leaves it untouched.
"""

import logging
from typing import Any, Dict, Optional

from leadpulse.cache.snapshot import SnapshotCache
from leadpulse.collector.client import UpstreamClient

logger = logging.getLogger(__name__)

RECORDING_FIELD = "Recording URLs"


class ValidationError(ValueError):
    """Request rejected before any upstream call."""


class MutationGateway:
    """Create / update / delete leads upstream, then invalidate the cache."""

    def __init__(self, client: UpstreamClient, cache: SnapshotCache):
        self._client = client
        self._cache = cache

    @staticmethod
    def _require_fields(fields: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        if not fields or not isinstance(fields, dict):
            raise ValidationError("Missing fields")
        return fields

    async def create(self, fields: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        fields = self._require_fields(fields)
        logger.info(f"[CREATE] fields: {list(fields)}")
        record = await self._client.create_record(fields)
        self._cache.invalidate()
        return record

    async def update(self, record_id: str, fields: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Patch one lead.

        Raises:
            ValidationError: `fields` missing or empty
            UpstreamError: Airtable rejected the patch
        """
        fields = self._require_fields(fields)
        logger.info(f"[PATCH] {record_id} fields: {list(fields)}")
        record = await self._client.update_record(record_id, fields)
        self._cache.invalidate()
        return record

    async def delete(self, record_id: str) -> Dict[str, Any]:
        logger.info(f"[DELETE] {record_id}")
        result = await self._client.delete_record(record_id)
        self._cache.invalidate()
        return result

    async def clear_recording(self, record_id: str) -> Dict[str, Any]:
        """Blank out the recording reference of one lead."""
        logger.info(f"[PATCH] {record_id} clearing recording")
        record = await self._client.update_record(record_id, {RECORDING_FIELD: ""})
        self._cache.invalidate()
        return record
