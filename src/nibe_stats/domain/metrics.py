from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    STATUS = "STATUS"
    SYSTEM_1 = "SYSTEM_1"
    ADDITION = "ADDITION"


class ParameterRecord(BaseModel):
    """One entry of a serviceinfo category as returned by NIBE Uplink."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    parameter_id: int = Field(alias="parameterId")
    raw_value: float = Field(alias="rawValue")

    # Informational only, never validated
    title: Any = None
    designation: Any = None
    unit: Any = None
    display_value: Any = Field(default=None, alias="displayValue")


# Measurement fields holding sensor values, in storage column order
MEASUREMENT_FIELDS: Tuple[str, ...] = (
    "outdoor_temp",
    "room_temp",
    "return_temp",
    "calculated_flow_temp",
    "heat_medium_flow_temp",
    "electrical_addition_power",
)


class Measurement(BaseModel):
    model_config = ConfigDict(frozen=True)

    outdoor_temp: Optional[float] = None
    room_temp: Optional[float] = None
    return_temp: Optional[float] = None
    calculated_flow_temp: Optional[float] = None
    heat_medium_flow_temp: Optional[float] = None
    electrical_addition_power: Optional[float] = None

    created: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def scaled_values(self, scale_factor: float) -> Dict[str, Optional[float]]:
        """
        Sensor values divided by scale_factor, keyed by field name.
        Missing values stay None.
        """
        values = {}
        for name in MEASUREMENT_FIELDS:
            raw = getattr(self, name)
            values[name] = raw / scale_factor if raw is not None else None
        return values

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in MEASUREMENT_FIELDS)


class ParameterMapping(BaseModel):
    """Configured upstream parameter ID (as a string) for each measurement field."""

    outdoor_temp: str
    room_temp: str
    return_temp: str
    calculated_flow_temp: str
    heat_medium_flow_temp: str
    electrical_addition_power: str

    @classmethod
    def from_settings(cls, settings) -> "ParameterMapping":
        return cls(
            outdoor_temp=settings.OUTDOOR_TEMP_ID,
            room_temp=settings.ROOM_TEMP_ID,
            return_temp=settings.RETURN_TEMP_ID,
            calculated_flow_temp=settings.CALCULATED_FLOW_TEMP_ID,
            heat_medium_flow_temp=settings.HEAT_MEDIUM_FLOW_ID,
            electrical_addition_power=settings.ELECTRICAL_ADDITION_POWER_ID,
        )

    def items(self) -> Iterator[Tuple[str, str]]:
        for name in MEASUREMENT_FIELDS:
            yield name, getattr(self, name)


class FetchResult(BaseModel):
    """Outcome of one category fetch. Exactly one of data / error is set."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    url: str
    category: Optional[Category] = None
    data: Optional[List[ParameterRecord]] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None


class OperationResult(BaseModel):
    """Outcome of an I/O step that yields no data (token refresh, persistence)."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    ok: bool
    error: Optional[Exception] = None

    @classmethod
    def success(cls) -> "OperationResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: Exception) -> "OperationResult":
        return cls(ok=False, error=error)
