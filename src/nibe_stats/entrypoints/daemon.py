import asyncio
import logging
import sys

from nibe_stats.config import settings
from nibe_stats.domain.metrics import ParameterMapping
from nibe_stats.domain.tokens import TokenStore
from nibe_stats.services.collector import CollectorService
from nibe_stats.services.scheduler import Scheduler
from nibe_stats.adapters.nibe import NibeUplinkAdapter
from nibe_stats.adapters.influxdb import InfluxDBAdapter
from nibe_stats.adapters.sqlite import SqliteAdapter

# Setup logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_repository():
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "influxdb":
        return InfluxDBAdapter(
            url=settings.INFLUXDB_URL,
            token=settings.INFLUXDB_TOKEN.get_secret_value(),
            org=settings.INFLUXDB_ORG,
            bucket=settings.INFLUXDB_BUCKET,
            scale_factor=settings.VALUE_SCALE_FACTOR,
        )
    if backend == "sqlite":
        return SqliteAdapter(db_path=settings.SQLITE_DB_PATH, scale_factor=settings.VALUE_SCALE_FACTOR)
    raise ValueError(f"Unknown STORAGE_BACKEND {settings.STORAGE_BACKEND!r} (expected 'sqlite' or 'influxdb')")


def build_api(token_store: TokenStore) -> NibeUplinkAdapter:
    return NibeUplinkAdapter(
        token_store=token_store,
        client_id=settings.NIBE_CLIENT_ID,
        client_secret=settings.NIBE_CLIENT_SECRET.get_secret_value(),
        system_id=settings.NIBE_SYSTEM_ID,
        base_url=settings.NIBE_API_BASE_URL,
        timeout=settings.NIBE_HTTP_TIMEOUT,
    )


async def main() -> None:
    logger.info(f"Starting NIBE Stats Daemon (Mode: {settings.COLLECTOR_MODE})")

    # 1. Instantiate Adapters
    mode = settings.COLLECTOR_MODE.lower()
    mapping = ParameterMapping.from_settings(settings)
    token_store = TokenStore(
        seed_access_token=settings.NIBE_ACCESS_TOKEN.get_secret_value(),
        seed_refresh_token=settings.NIBE_REFRESH_TOKEN.get_secret_value(),
    )

    if mode == "production":
        api = build_api(token_store)
        repository_factory = build_repository

    elif mode == "simulation":
        logger.info("Running in SIMULATION mode. Using mock API but REAL database.")
        from nibe_stats.adapters.mocks import MockNibeAdapter

        api = MockNibeAdapter(mapping)
        repository_factory = build_repository

    else:
        logger.info("Running in MOCK mode. Using mock adapters.")
        from nibe_stats.adapters.mocks import MockNibeAdapter, MockMeasurementRepository

        api = MockNibeAdapter(mapping)
        repository_factory = MockMeasurementRepository

    # 2. Connect storage before the first cycle
    try:
        repository = repository_factory()
        await repository.connect()
    except Exception as e:
        logger.error(f"Failed to connect to storage: {e}")
        await api.close()
        sys.exit(1)

    # 3. Instantiate Service and Scheduler
    service = CollectorService(api=api, repository=repository, mapping=mapping)
    scheduler = Scheduler(service.collect, interval_seconds=settings.poll_interval_seconds)

    # 4. Run Loop
    try:
        await scheduler.run()
    except asyncio.CancelledError:
        logger.info("Daemon stopping...")
    finally:
        await api.close()
        await repository.close()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
