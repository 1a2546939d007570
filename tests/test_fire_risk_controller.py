"""
API tests for the fire risk routers.
"""
import asyncio
import pytest
from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, Mock
from firesync.controllers import fire_risk_controller
from firesync.exceptions import HttpError, InvalidRequestError, InvalidStateTransition, NetworkError, NotFoundError, handle_service_exceptions
from firesync.processors.sync_controller import SyncController
from firesync.services.observer_location_service import ObserverLocationService


@pytest.fixture
def controller(mock_fetcher, validator, cache_store, geo_index, mock_scheduler, fixed_now):
	controller = SyncController(
		fetcher=mock_fetcher,
		validator=validator,
		cache_store=cache_store,
		geo_index=geo_index,
		scheduler=mock_scheduler,
		clock=lambda: fixed_now,
		nearest_k=2
	)
	asyncio.run(controller.refresh())
	return controller


@pytest.fixture
def location_service():
	service = Mock(spec=ObserverLocationService)
	service.reverse_geocode = AsyncMock(return_value="Calgary, Alberta")
	return service


@pytest.fixture
def client(controller, location_service):
	app = FastAPI()
	app.include_router(fire_risk_controller.router)
	app.include_router(fire_risk_controller.stations_router)
	app.include_router(fire_risk_controller.observer_router)
	app.state.sync_controller = controller
	app.state.location_service = location_service
	return TestClient(app)


class TestFireRiskRoutes:
	"""Test cases for /fire-risk routes."""

	def test_get_state_uses_camel_case(self, client, sample_payload):
		response = client.get("/fire-risk")

		assert response.status_code == 200
		body = response.json()
		assert body["status"] == "ready"
		assert body["lastUpdated"] == sample_payload["last_updated"]
		assert body["dataSource"] == "live"
		assert body["isFallback"] is False
		assert len(body["data"]) == 8
		assert "riskLevel" in body["data"][0]

	def test_refetch_starts_cycle(self, client, mock_fetcher):
		response = client.post("/fire-risk/refetch")

		assert response.status_code == 202
		assert response.json() == {"started": True}
		assert mock_fetcher.fetch.await_count == 2

	def test_refetch_while_running(self, client, controller):
		controller._in_flight = True
		response = client.post("/fire-risk/refetch")
		assert response.json() == {"started": False}

	def test_station_aggregates(self, client):
		response = client.get("/fire-risk/stations")

		assert response.status_code == 200
		body = response.json()
		assert len(body) == 38
		assert body["Calgary"]["station"]["province"] == "AB"
		assert body["Calgary"]["avgRisk"] == pytest.approx(0.45)
		assert body["Calgary"]["records"][0]["nearestStation"] == "Calgary"

	def test_single_station(self, client):
		response = client.get("/fire-risk/stations/Halifax")
		assert response.status_code == 200
		assert response.json()["maxRisk"] == pytest.approx(0.15)

	def test_unknown_station_is_404(self, client):
		response = client.get("/fire-risk/stations/Atlantis")
		assert response.status_code == 404
		assert response.json()["detail"] == "Station 'Atlantis' not found"

	def test_statistics(self, client):
		response = client.get("/fire-risk/statistics", params={"limit": 2})

		assert response.status_code == 200
		body = response.json()
		assert body["statistics"]["total"] == 8
		areas = body["topDangerAreas"]
		assert len(areas) <= 2
		assert [area["avgRisk"] for area in areas] == sorted((area["avgRisk"] for area in areas), reverse=True)
		assert all(area["color"].startswith("#") for area in areas)

	def test_statistics_unknown_class_is_400(self, client):
		response = client.get("/fire-risk/statistics", params={"minimum_class": "Catastrophic"})
		assert response.status_code == 400

	def test_nearest_measurements(self, client):
		response = client.get("/fire-risk/nearest", params={"lat": 51.0447, "lon": -114.0719, "k": 2})

		assert response.status_code == 200
		body = response.json()
		assert len(body) == 2
		assert body[0]["record"]["location"] == "Calgary"
		assert body[0]["distanceKm"] <= body[1]["distanceKm"]

	def test_nearest_rejects_out_of_range(self, client):
		response = client.get("/fire-risk/nearest", params={"lat": 95, "lon": 0})
		assert response.status_code == 422


class TestStationRoutes:
	"""Test cases for /stations routes."""

	def test_nearest_station(self, client):
		response = client.get("/stations/nearest", params={"lat": 53.55, "lon": -113.49})
		assert response.status_code == 200
		assert response.json()["name"] == "Edmonton"


class TestObserverRoutes:
	"""Test cases for /observer routes."""

	def test_put_location_with_city(self, client, location_service):
		response = client.put("/observer/location", json={"lat": 45.42, "lon": -75.70, "city": "Ottawa, Ontario"})

		assert response.status_code == 200
		body = response.json()
		assert body["observerLocation"]["city"] == "Ottawa, Ontario"
		assert len(body["nearestMeasurements"]) == 2
		location_service.reverse_geocode.assert_not_called()
		location_service.remember.assert_called_once()

	def test_put_location_without_city_is_geocoded(self, client, location_service):
		response = client.put("/observer/location", json={"lat": 51.0447, "lon": -114.0719})

		assert response.status_code == 200
		assert response.json()["observerLocation"]["city"] == "Calgary, Alberta"
		location_service.reverse_geocode.assert_awaited_once_with(51.0447, -114.0719)


class TestHandleServiceExceptions:
	"""Test cases for the handle_service_exceptions decorator."""

	@pytest.mark.asyncio
	async def test_domain_errors_keep_status(self):
		@handle_service_exceptions
		async def endpoint():
			raise NotFoundError("Station", "Atlantis")

		with pytest.raises(HTTPException) as exc_info:
			await endpoint()
		assert exc_info.value.status_code == 404

	@pytest.mark.asyncio
	async def test_invalid_request_is_400(self):
		@handle_service_exceptions
		async def endpoint():
			raise InvalidRequestError("Unknown danger class: Catastrophic")

		with pytest.raises(HTTPException) as exc_info:
			await endpoint()
		assert exc_info.value.status_code == 400
		assert exc_info.value.detail == "Unknown danger class: Catastrophic"

	@pytest.mark.asyncio
	async def test_unexpected_errors_are_500(self):
		@handle_service_exceptions
		async def endpoint():
			raise RuntimeError("boom")

		with pytest.raises(HTTPException) as exc_info:
			await endpoint()
		assert exc_info.value.status_code == 500

	@pytest.mark.asyncio
	async def test_upstream_errors_carry_code_and_details(self):
		@handle_service_exceptions
		async def endpoint():
			raise HttpError(404, message="Model not loaded", details={"message": "Model not loaded"})

		with pytest.raises(HTTPException) as exc_info:
			await endpoint()
		assert exc_info.value.status_code == 502
		assert exc_info.value.detail == {
			"code": "404",
			"message": "Model not loaded",
			"details": {"message": "Model not loaded"}
		}

	@pytest.mark.asyncio
	async def test_network_error_code(self):
		@handle_service_exceptions
		async def endpoint():
			raise NetworkError(details="connection refused")

		with pytest.raises(HTTPException) as exc_info:
			await endpoint()
		assert exc_info.value.detail["code"] == "NETWORK_ERROR"

	@pytest.mark.asyncio
	async def test_invalid_transition_is_409_with_states(self):
		@handle_service_exceptions
		async def endpoint():
			raise InvalidStateTransition("idle", "ready")

		with pytest.raises(HTTPException) as exc_info:
			await endpoint()
		assert exc_info.value.status_code == 409
		assert exc_info.value.detail["current"] == "idle"
		assert exc_info.value.detail["requested"] == "ready"
