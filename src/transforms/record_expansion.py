"""Quote record expansion transform.

This module turns multi-valued quote records into atomic observations,
one per component type and manufacturer combination. It is the first
transform stage of every analysis run.
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime
import json
import math
from types import MappingProxyType
from typing import Iterable

from core.constants import (
    DATE_INPUT_FORMATS,
    DROP_REASON_BAD_DATE,
    DROP_REASON_BAD_LEAD_TIME,
    DROP_REASON_BAD_LIST,
    DROP_REASON_EMPTY_TAGS,
)
from core.errors import RecordParseError
from core.logging_config import get_logger
from core.types import ExpansionResult, Observation, RawQuoteRecord

_LOGGER = get_logger(__name__)


def expand_record(record: RawQuoteRecord) -> tuple[Observation, ...]:
    """Expand one quote record into observations.

    Args:
        record: Raw quote record.

    Returns:
        One observation per component type x manufacturer pair, or an
        empty tuple when either tag list is empty.

    Raises:
        RecordParseError: If the date, lead time, or a tag list is invalid.
    """
    month = parse_month_key(record.answer_date)
    lead_time = parse_lead_time(record.lead_time_weeks)
    component_types = parse_tag_list(record.component_types, "component_types")
    manufacturers = parse_tag_list(record.manufacturers, "manufacturer")
    cost = _parse_cost(record.cost)
    component_count = _parse_component_count(record.component_count)
    return tuple(
        Observation(
            month=month,
            category=component_type,
            manufacturer=manufacturer,
            lead_time_weeks=lead_time,
            cost=cost,
            component_count=component_count,
            project_name=record.project_name.strip(),
            source_record_id=record.record_id,
        )
        for component_type in component_types
        for manufacturer in manufacturers
    )


def expand_records(records: Iterable[RawQuoteRecord]) -> ExpansionResult:
    """Expand a record batch with row-level error isolation.

    Args:
        records: Raw quote records in source order.

    Returns:
        Observations, the month set they cover, and drop counters.
    """
    observations: list[Observation] = []
    months: set[str] = set()
    drop_reasons: Counter[str] = Counter()
    records_seen = 0
    for record in records:
        records_seen += 1
        try:
            expanded = expand_record(record)
        except RecordParseError as error:
            drop_reasons[error.reason] += 1
            _LOGGER.debug(
                "quote_record_dropped",
                record_id=record.record_id,
                reason=error.reason,
                detail=str(error),
            )
            continue
        if not expanded:
            drop_reasons[DROP_REASON_EMPTY_TAGS] += 1
            continue
        observations.extend(expanded)
        months.update(observation.month for observation in expanded)
    result = ExpansionResult(
        observations=tuple(observations),
        months=tuple(sorted(months)),
        records_seen=records_seen,
        records_dropped=sum(drop_reasons.values()),
        drop_reasons=MappingProxyType(dict(sorted(drop_reasons.items()))),
    )
    _LOGGER.info(
        "quotes_expanded",
        records_seen=result.records_seen,
        records_dropped=result.records_dropped,
        observation_count=len(result.observations),
        month_count=len(result.months),
    )
    return result


def parse_month_key(raw_date: str) -> str:
    """Parse a date string into a ``YYYY-MM`` month key.

    Args:
        raw_date: Date or datetime text.

    Returns:
        Zero-padded month key.

    Raises:
        RecordParseError: If the text is not a recognized calendar date.
    """
    text = raw_date.strip()
    parsed = _parse_datetime(text)
    if parsed is None:
        raise RecordParseError(DROP_REASON_BAD_DATE, f"Unparseable answer date '{raw_date}'.")
    return f"{parsed.year:04d}-{parsed.month:02d}"


def parse_lead_time(raw_value: str) -> float:
    """Parse a lead time as a finite non-negative number of weeks.

    Raises:
        RecordParseError: If the value is non-numeric, non-finite, or negative.
    """
    try:
        value = float(raw_value.strip())
    except ValueError as error:
        raise RecordParseError(
            DROP_REASON_BAD_LEAD_TIME, f"Non-numeric lead time '{raw_value}'."
        ) from error
    if not math.isfinite(value) or value < 0:
        raise RecordParseError(
            DROP_REASON_BAD_LEAD_TIME, f"Lead time must be finite and >= 0, got '{raw_value}'."
        )
    return value


def parse_tag_list(raw_value: str, field_name: str) -> tuple[str, ...]:
    """Parse a JSON-encoded list of names.

    Names are trimmed, blanks removed, and repeats collapsed in first-seen
    order. A blank field is an empty list.

    Args:
        raw_value: JSON list text.
        field_name: Source field name for error context.

    Returns:
        Cleaned names.

    Raises:
        RecordParseError: If the text is not a JSON list of strings.
    """
    if not raw_value.strip():
        return ()
    try:
        payload = json.loads(raw_value)
    except json.JSONDecodeError as error:
        raise RecordParseError(
            DROP_REASON_BAD_LIST, f"Field '{field_name}' is not valid JSON: {error.msg}."
        ) from error
    if not isinstance(payload, list):
        raise RecordParseError(
            DROP_REASON_BAD_LIST, f"Field '{field_name}' must be a JSON list."
        )
    names: list[str] = []
    for item in payload:
        if not isinstance(item, str):
            raise RecordParseError(
                DROP_REASON_BAD_LIST, f"Field '{field_name}' must only contain strings."
            )
        name = item.strip()
        if name and name not in names:
            names.append(name)
    return tuple(names)


def _parse_datetime(text: str) -> datetime | None:
    """Try ISO parsing first, then the known alternate layouts."""
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass
    for date_format in DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, date_format)
        except ValueError:
            continue
    return None


def _parse_cost(raw_value: str) -> float:
    """Parse cost, treating invalid or negative values as zero."""
    try:
        value = float(raw_value.strip())
    except ValueError:
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def _parse_component_count(raw_value: str) -> int:
    """Parse component count, defaulting to one."""
    try:
        value = float(raw_value.strip())
    except ValueError:
        return 1
    if not math.isfinite(value):
        return 1
    return max(int(value), 1)
