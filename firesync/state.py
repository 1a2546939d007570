"""
Observable synchronization state.

SyncState is the single object the presentation layer reads. It is replaced,
never mutated, on every publish.
"""
from enum import Enum
from typing import Dict, FrozenSet, List, Optional
from pydantic import Field
from firesync.schemas.base import BaseSchema
from firesync.schemas.fire_risk import FireRiskRecord, ModelInfo
from firesync.schemas.location import ObserverLocation
from firesync.schemas.station import NearestRecord


class SyncStatus(str, Enum):
	IDLE = "idle"
	LOADING = "loading"
	READY = "ready"
	DEGRADED = "degraded"


class DataSource(str, Enum):
	"""Where the currently published dataset came from."""
	LIVE = "live"
	CACHE = "cache"
	FALLBACK = "fallback"


# Allowed targets per status; anything may return to IDLE on stop
ALLOWED_TRANSITIONS: Dict[SyncStatus, FrozenSet[SyncStatus]] = {
	SyncStatus.IDLE: frozenset({SyncStatus.LOADING, SyncStatus.IDLE}),
	SyncStatus.LOADING: frozenset({SyncStatus.READY, SyncStatus.DEGRADED, SyncStatus.IDLE}),
	SyncStatus.READY: frozenset({SyncStatus.LOADING, SyncStatus.IDLE}),
	SyncStatus.DEGRADED: frozenset({SyncStatus.LOADING, SyncStatus.IDLE}),
}


def is_allowed_transition(current: SyncStatus, requested: SyncStatus) -> bool:
	return requested in ALLOWED_TRANSITIONS[current]


class SyncState(BaseSchema):
	"""Everything the presentation layer needs to render one frame."""
	status: SyncStatus = SyncStatus.IDLE
	data: List[FireRiskRecord] = Field(default_factory=list)
	loading: bool = False
	error: Optional[str] = None
	last_updated: Optional[str] = None
	model_info: Optional[ModelInfo] = None
	data_source: Optional[DataSource] = None
	is_fallback: bool = False
	show_cached_warning: bool = False
	show_update_notification: bool = False
	rejection_rate: Optional[float] = None
	observer_location: Optional[ObserverLocation] = None
	nearest_measurements: List[NearestRecord] = Field(default_factory=list)
	location_error: Optional[str] = None


class UpdateNotification(BaseSchema):
	"""Emitted when a batch with a new timestamp replaces the previous one."""
	previous_timestamp: str
	batch_timestamp: str
	record_count: int
