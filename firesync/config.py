import os
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _optional_float(name: str) -> Optional[float]:
	value = os.getenv(name)
	if value is None or value.strip() == "":
		return None
	return float(value)


class Settings:
	# Upstream fire-risk prediction service
	fire_risk_api_base_url: str = os.getenv("FIRE_RISK_API_BASE_URL", "http://localhost:8000")
	fire_risk_predictions_path: str = os.getenv("FIRE_RISK_PREDICTIONS_PATH", "/api/predict/fire-risk")
	fire_risk_model_info_path: str = os.getenv("FIRE_RISK_MODEL_INFO_PATH", "/api/model/info")

	# HTTP client configuration
	http_timeout_seconds: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))
	http_max_retries: int = int(os.getenv("HTTP_MAX_RETRIES", "3"))
	http_retry_delay_seconds: float = float(os.getenv("HTTP_RETRY_DELAY_SECONDS", "1.0"))

	# Refresh schedule, anchored to the wall-clock hour
	refresh_cadence_hours: int = int(os.getenv("REFRESH_CADENCE_HOURS", "1"))
	refresh_grace_minutes: int = int(os.getenv("REFRESH_GRACE_MINUTES", "5"))

	# Dataset cache
	cache_max_bytes: int = int(os.getenv("CACHE_MAX_BYTES", str(4 * 1024 * 1024)))
	cache_stale_threshold_hours: float = float(os.getenv("CACHE_STALE_THRESHOLD_HOURS", "2"))

	# Observer location
	location_cache_ttl_days: int = int(os.getenv("LOCATION_CACHE_TTL_DAYS", "7"))
	geolocation_timeout_seconds: float = float(os.getenv("GEOLOCATION_TIMEOUT_SECONDS", "10"))
	observer_lat: Optional[float] = _optional_float("OBSERVER_LAT")
	observer_lon: Optional[float] = _optional_float("OBSERVER_LON")
	nominatim_base_url: str = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
	geocoder_user_agent: str = os.getenv("GEOCODER_USER_AGENT", "FireRiskDashboard/1.0")

	# Presentation hints
	update_notification_seconds: float = float(os.getenv("UPDATE_NOTIFICATION_SECONDS", "3"))
	nearest_measurements_k: int = int(os.getenv("NEAREST_MEASUREMENTS_K", "2"))

	# Validation
	invalid_sample_size: int = int(os.getenv("INVALID_SAMPLE_SIZE", "10"))
	rejection_warning_rate: float = float(os.getenv("REJECTION_WARNING_RATE", "0.10"))
	# "probability" (0-1) or "fwi" (raw Fire Weather Index)
	risk_scale: str = os.getenv("RISK_SCALE", "probability")

	# Persistent key/value store: "memory" or "redis"
	store_backend: str = os.getenv("STORE_BACKEND", "memory")
	redis_host: str = os.getenv("REDIS_HOST", "localhost")
	redis_port: int = int(os.getenv("REDIS_PORT", "6379"))
	redis_db: int = int(os.getenv("REDIS_DB", "0"))
	redis_password: Optional[str] = os.getenv("REDIS_PASSWORD", None)

	log_level: str = os.getenv("LOG_LEVEL", "INFO")

	@property
	def redis_url(self) -> str:
		if self.redis_password:
			return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
		return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

settings = Settings()
