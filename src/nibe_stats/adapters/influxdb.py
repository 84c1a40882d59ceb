import logging
from influxdb_client.client.influxdb_client_async import InfluxDBClientAsync
from influxdb_client.client.write.point import Point

from nibe_stats.domain.errors import PersistenceFailure
from nibe_stats.domain.metrics import Measurement, OperationResult

logger = logging.getLogger(__name__)


class InfluxDBAdapter:
    def __init__(self, url: str, token: str, org: str, bucket: str, scale_factor: float = 10.0):
        self.url = url
        self.token = token
        self.org = org
        self.bucket = bucket
        self.scale_factor = scale_factor
        self._client = None

    @property
    def client(self):
        if self._client is None:
            self._client = InfluxDBClientAsync(url=self.url, token=self.token, org=self.org)
        return self._client

    async def connect(self) -> None:
        if not await self.client.ping():
            raise PersistenceFailure(f"InfluxDB at {self.url} is not reachable")
        logger.info(f"Connected to InfluxDB at {self.url}")

    async def close(self):
        if self._client:
            await self._client.close()

    def _to_point(self, measurement: Measurement) -> Point:
        values = measurement.scaled_values(self.scale_factor)
        present = {name: value for name, value in values.items() if value is not None}

        # A point needs at least one field, so the count is always written
        p = Point("measurement").time(measurement.created).field("parameters_found", len(present))
        for name, value in present.items():
            p.field(name, value)
        return p

    async def save_measurement(self, measurement: Measurement) -> OperationResult:
        try:
            await self._write([self._to_point(measurement)])
        except PersistenceFailure as e:
            logger.error(f"Failed to write to InfluxDB: {e}")
            return OperationResult.failure(e)

        logger.info(f"Wrote measurement at {measurement.created.isoformat()} to bucket {self.bucket}")
        return OperationResult.success()

    async def _write(self, points):
        try:
            write_api = self.client.write_api()
            await write_api.write(bucket=self.bucket, record=points)
        except Exception as e:
            raise PersistenceFailure(str(e)) from e
