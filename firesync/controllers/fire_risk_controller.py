from fastapi import APIRouter, BackgroundTasks, Query, Request, status
from typing import Dict, List, Optional
from pydantic import Field
from firesync.exceptions import handle_service_exceptions, NotFoundError
from firesync.processors.sync_controller import SyncController
from firesync.schemas.base import BaseSchema
from firesync.schemas.location import ObserverLocation
from firesync.schemas.station import DangerArea, DatasetStatistics, NearestRecord, Station, StationAggregate
from firesync.services.statistics_service import StatisticsService
from firesync.state import SyncState
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/fire-risk", tags=["fire-risk"])
stations_router = APIRouter(prefix="/stations", tags=["stations"])
observer_router = APIRouter(prefix="/observer", tags=["observer"])


class RefetchResponse(BaseSchema):
	started: bool


class StatisticsResponse(BaseSchema):
	statistics: DatasetStatistics
	top_danger_areas: List[DangerArea] = Field(default_factory=list)


class ObserverLocationRequest(BaseSchema):
	"""Position reported by the presentation layer (browser geolocation)."""
	lat: float = Field(ge=-90, le=90)
	lon: float = Field(ge=-180, le=180)
	city: Optional[str] = None


def get_sync_controller(request: Request) -> SyncController:
	return request.app.state.sync_controller


@router.get("", response_model=SyncState)
@handle_service_exceptions
async def get_fire_risk(request: Request):
	"""
	Current synchronization state: dataset, status, error and freshness.
	"""
	return get_sync_controller(request).state


@router.post("/refetch", response_model=RefetchResponse, status_code=status.HTTP_202_ACCEPTED)
@handle_service_exceptions
async def refetch_fire_risk(request: Request, background_tasks: BackgroundTasks):
	"""
	Trigger a sync cycle outside the schedule.

	Returns immediately; `started` is false when a cycle is already running.
	"""
	controller = get_sync_controller(request)
	if controller.is_refreshing:
		logger.info("Refetch requested while a cycle is running")
		return RefetchResponse(started=False)
	background_tasks.add_task(controller.refresh)
	return RefetchResponse(started=True)


@router.get("/stations", response_model=Dict[str, StationAggregate])
@handle_service_exceptions
async def get_station_aggregates(request: Request):
	"""
	Current dataset binned to the nearest reference station, in catalog order.
	"""
	controller = get_sync_controller(request)
	return controller.geo_index.aggregate_by_station(controller.state.data)


@router.get("/stations/{station_name}", response_model=StationAggregate)
@handle_service_exceptions
async def get_station_aggregate(request: Request, station_name: str):
	"""
	Aggregate for a single reference station.
	"""
	controller = get_sync_controller(request)
	aggregates = controller.geo_index.aggregate_by_station(controller.state.data)
	aggregate = aggregates.get(station_name)
	if aggregate is None:
		raise NotFoundError("Station", station_name)
	return aggregate


@router.get("/statistics", response_model=StatisticsResponse)
@handle_service_exceptions
async def get_statistics(
	request: Request,
	limit: int = Query(default=3, ge=1, le=38, description="Maximum number of danger areas"),
	minimum_class: Optional[str] = Query(default=None, description="Lowest danger class to list")
):
	"""
	Dataset-wide danger statistics plus the stations with the highest average danger.
	"""
	controller = get_sync_controller(request)
	statistics_service = StatisticsService(controller.geo_index.risk_scale)
	data = controller.state.data
	aggregates = controller.geo_index.aggregate_by_station(data)
	return StatisticsResponse(
		statistics=statistics_service.summarize(data),
		top_danger_areas=statistics_service.top_danger_areas(aggregates, limit=limit, minimum_class=minimum_class)
	)


@router.get("/nearest", response_model=List[NearestRecord])
@handle_service_exceptions
async def get_nearest_measurements(
	request: Request,
	lat: float = Query(..., ge=-90, le=90),
	lon: float = Query(..., ge=-180, le=180),
	k: int = Query(default=2, ge=1, le=100)
):
	"""
	The k measurements of the current dataset closest to a point.
	"""
	controller = get_sync_controller(request)
	return controller.geo_index.k_nearest(lat, lon, controller.state.data, k)


@stations_router.get("/nearest", response_model=Station)
@handle_service_exceptions
async def get_nearest_station(
	request: Request,
	lat: float = Query(..., ge=-90, le=90),
	lon: float = Query(..., ge=-180, le=180)
):
	"""
	Closest reference station to a point.
	"""
	return get_sync_controller(request).geo_index.nearest_station(lat, lon)


@observer_router.put("/location", response_model=SyncState)
@handle_service_exceptions
async def put_observer_location(request: Request, body: ObserverLocationRequest):
	"""
	Set the observer position reported by the presentation layer.

	Without a city the position is reverse-geocoded before it is stored.
	"""
	controller = get_sync_controller(request)
	location = ObserverLocation(lat=body.lat, lon=body.lon, city=body.city)
	controller.set_observer_location(location)

	location_service = getattr(request.app.state, "location_service", None)
	if location_service is not None:
		if not location.city:
			location = location.with_city(await location_service.reverse_geocode(location.lat, location.lon))
			controller.set_observer_location(location)
		location_service.remember(location)
	return controller.state
