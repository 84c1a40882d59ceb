from typing import Protocol

from nibe_stats.domain.metrics import Measurement, OperationResult


class MeasurementRepositoryPort(Protocol):
    async def connect(self) -> None:
        """
        Prepare the storage (open connection, create schema).
        Raises if the storage is unreachable.
        """
        ...

    async def save_measurement(self, measurement: Measurement) -> OperationResult:
        """
        Append one measurement row. Failures are returned, never raised.
        """
        ...

    async def close(self) -> None:
        ...
