import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from nibe_stats.domain.metrics import FetchResult, Measurement, ParameterMapping, ParameterRecord

logger = logging.getLogger(__name__)


def aggregate(results: Iterable[FetchResult]) -> List[ParameterRecord]:
    """
    Concatenates the parameter lists of all successful fetches, in the given order.
    Failed fetches contribute nothing, so all-failed yields an empty list.
    """
    all_parameters: List[ParameterRecord] = []
    for result in results:
        if not result.ok:
            continue
        all_parameters.extend(result.data)
    return all_parameters


def extract(all_parameters: List[ParameterRecord], parameter_id: str) -> Optional[float]:
    """Raw value of the first record carrying parameter_id, or None if no record does."""
    try:
        wanted = int(parameter_id, 10)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric parameter id {parameter_id!r}")
        return None

    for parameter in all_parameters:
        if parameter.parameter_id == wanted:
            return parameter.raw_value
    return None


def build_measurement(
    all_parameters: List[ParameterRecord],
    mapping: ParameterMapping,
    created: Optional[datetime] = None,
) -> Measurement:
    values = {field: extract(all_parameters, parameter_id) for field, parameter_id in mapping.items()}

    missing = [field for field, value in values.items() if value is None]
    if missing:
        logger.debug(f"No parameter found for: {', '.join(missing)}")

    return Measurement(created=created or datetime.now(timezone.utc), **values)
