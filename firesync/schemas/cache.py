from datetime import datetime
from typing import List, Optional
from pydantic import Field
from firesync.schemas.base import BaseSchema
from firesync.schemas.fire_risk import CompactRecord

# Bump whenever CompactRecord or CacheEntry change shape.
CACHE_SCHEMA_VERSION = 2

class CacheEntry(BaseSchema):
	"""
	Last-known-good dataset as persisted between runs.

	Overwritten on every successful fetch+validate cycle and deleted only when
	the store reports a quota failure. Staleness never deletes it.
	"""
	schema_version: int = CACHE_SCHEMA_VERSION
	records: List[CompactRecord] = Field(default_factory=list)
	cached_at: datetime
	batch_timestamp: Optional[str] = None
