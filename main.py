from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from firesync.config import settings
from firesync.controllers import fire_risk_controller
from firesync.key_value_store import InMemoryKeyValueStore, KeyValueStore
from firesync.logging_config import setup_logging, get_logger
from firesync.processors.sync_controller import build_sync_controller
from firesync.services.observer_location_service import ObserverLocationService
import asyncio

# Setup structured JSON logging to stdout
setup_logging(level=settings.log_level)
logger = get_logger(__name__)


def build_key_value_store() -> KeyValueStore:
	"""Persistent store selected by STORE_BACKEND."""
	backend = settings.store_backend.strip().lower()
	if backend == "redis":
		from firesync.redis_client import FireSyncRedis
		logger.info(f"Using Redis store at {settings.redis_host}:{settings.redis_port}/{settings.redis_db}")
		return FireSyncRedis()
	if backend != "memory":
		logger.warning(f"Unknown STORE_BACKEND '{settings.store_backend}', using in-memory store")
	return InMemoryKeyValueStore()



async def drain_startup_tasks(tasks) -> None:
	"""Cancel startup tasks and wait for them, logging any that failed."""
	for task in tasks:
		task.cancel()
	results = await asyncio.gather(*tasks, return_exceptions=True)
	for task, result in zip(tasks, results):
		if isinstance(result, Exception):
			logger.error(f"Startup task {task.get_name()} failed: {str(result)}", exc_info=result)


def log_new_batch(notification) -> None:
	logger.info(f"New fire risk batch {notification.batch_timestamp} ({notification.record_count} records)")

@asynccontextmanager
async def lifespan(app: FastAPI):
	store = build_key_value_store()
	controller = build_sync_controller(store)
	location_service = ObserverLocationService(store)
	app.state.store = store
	app.state.sync_controller = controller
	app.state.location_service = location_service
	controller.subscribe_updates(log_new_batch)

	startup_tasks = [
		asyncio.create_task(controller.start(), name="sync-start"),
		asyncio.create_task(controller.locate_observer(location_service), name="locate-observer"),
	]
	logger.info("Fire risk sync started")
	try:
		yield
	finally:
		await drain_startup_tasks(startup_tasks)
		await controller.stop()
		await controller.fetcher.close()
		await location_service.close()
		logger.info("Fire risk sync stopped")


app = FastAPI(
	title="Fire Risk Sync API",
	description="Fire-danger data synchronization core for the fire risk map",
	version="1.0.0",
	lifespan=lifespan
)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=False,
	allow_methods=["*"],
	allow_headers=["*"],
)

# Include routers
app.include_router(fire_risk_controller.router)
app.include_router(fire_risk_controller.stations_router)
app.include_router(fire_risk_controller.observer_router)


@app.get("/")
async def root():
	return {
		"message": "Fire Risk Sync API",
		"endpoints": {
			"fire_risk": "/fire-risk",
			"stations": "/fire-risk/stations",
			"statistics": "/fire-risk/statistics",
			"nearest": "/fire-risk/nearest",
			"observer": "/observer/location"
		}
	}


@app.get("/health")
async def health():
	"""Health check endpoint."""
	store = getattr(app.state, "store", None)
	controller = getattr(app.state, "sync_controller", None)
	sync_status = controller.state.status.value if controller is not None else "not_started"
	try:
		store_healthy = store.ping() if store is not None else False
		return {
			"status": "healthy",
			"store": "connected" if store_healthy else "disconnected",
			"sync": sync_status
		}
	except Exception as e:
		return {
			"status": "unhealthy",
			"store": "error",
			"sync": sync_status,
			"error": str(e)
		}
