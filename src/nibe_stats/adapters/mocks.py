import logging
import random
from typing import Dict, List

from nibe_stats.domain.metrics import (
    Category,
    FetchResult,
    Measurement,
    OperationResult,
    ParameterMapping,
    ParameterRecord,
)

logger = logging.getLogger(__name__)


class MockNibeAdapter:
    """Serves random but plausible raw values for the configured parameter IDs."""

    def __init__(self, mapping: ParameterMapping):
        self.mapping = mapping

    def _random_raw_values(self) -> Dict[str, float]:
        outdoor = random.uniform(-100.0, 150.0)
        ret = random.uniform(250.0, 400.0)
        calculated = ret + random.uniform(20.0, 80.0)
        return {
            "outdoor_temp": round(outdoor),
            "room_temp": round(random.uniform(190.0, 230.0)),
            "return_temp": round(ret),
            "calculated_flow_temp": round(calculated),
            "heat_medium_flow_temp": round(calculated + random.uniform(-15.0, 15.0)),
        }

    async def refresh(self) -> OperationResult:
        logger.debug("Mock: Refreshing token")
        return OperationResult.success()

    async def fetch(self, url: str) -> FetchResult:
        return FetchResult(url=url, data=[])

    async def fetch_category(self, category: Category) -> FetchResult:
        logger.debug(f"Mock: Fetching {category.value}")
        records: List[ParameterRecord] = []
        # Spread the parameters over the categories the way the real API roughly does
        if category == Category.STATUS:
            raw = self._random_raw_values()
            for field, parameter_id in self.mapping.items():
                if field == "electrical_addition_power":
                    continue
                records.append(ParameterRecord(parameterId=int(parameter_id), rawValue=raw[field], title=field))
        elif category == Category.ADDITION:
            records.append(
                ParameterRecord(
                    parameterId=int(self.mapping.electrical_addition_power),
                    rawValue=random.choice([0, 0, 0, 30, 60]),
                    title="electrical_addition_power",
                )
            )
        return FetchResult(url=f"mock://{category.value}", category=category, data=records)

    async def close(self) -> None:
        pass


class MockMeasurementRepository:
    def __init__(self):
        self.measurements: List[Measurement] = []

    async def connect(self) -> None:
        logger.debug("Mock: Connecting storage")

    async def save_measurement(self, measurement: Measurement) -> OperationResult:
        logger.debug(f"Mock: Saving measurement. Outdoor Temp: {measurement.outdoor_temp}")
        self.measurements.append(measurement)
        return OperationResult.success()

    async def close(self) -> None:
        pass
