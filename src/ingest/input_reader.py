"""Quote and category source readers.

This module loads quote rows and category definitions from local CSV
files or S3 prefixes. It normalizes inputs into typed records for the
expansion and hierarchy transforms.
"""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Any, Iterable, Mapping

from core.config import LeadScopeConfig
from core.constants import (
    CATEGORY_REQUIRED_COLUMNS,
    QUOTE_REQUIRED_COLUMNS,
    SUPPORTED_TABLE_EXTENSIONS,
)
from core.errors import LeadScopeDependencyError, LeadScopeIngestError
from core.s3_uri import S3Location, is_s3_uri, parse_s3_uri
from core.types import CategoryDefinition, RawQuoteRecord

Row = Mapping[str, str]


def read_quote_records(source_uri: str, config: LeadScopeConfig) -> list[RawQuoteRecord]:
    """Load quote records from local CSV files or S3.

    Args:
        source_uri: Local CSV file, directory of CSV files, or ``s3://`` URI.
        config: Runtime configuration for S3 session defaults.

    Returns:
        Quote records in source order.

    Raises:
        LeadScopeIngestError: If the source cannot be read or lacks columns.
    """
    records: list[RawQuoteRecord] = []
    for table_uri, text in _read_tables(source_uri, config):
        rows = _parse_csv_rows(table_uri, text, QUOTE_REQUIRED_COLUMNS)
        records.extend(_build_quote_record(table_uri, row_number, row) for row_number, row in rows)
    return records


def read_category_definitions(
    source_uri: str,
    config: LeadScopeConfig,
) -> list[CategoryDefinition]:
    """Load category definitions from local CSV files or S3.

    Args:
        source_uri: Local CSV file, directory, or ``s3://`` URI.
        config: Runtime configuration for S3 session defaults.

    Returns:
        Category definitions in source order.

    Raises:
        LeadScopeIngestError: If a row has a blank name or non-integer level.
    """
    definitions: list[CategoryDefinition] = []
    for table_uri, text in _read_tables(source_uri, config):
        for row_number, row in _parse_csv_rows(table_uri, text, CATEGORY_REQUIRED_COLUMNS):
            definitions.append(_build_category_definition(table_uri, row_number, row))
    return definitions


def _read_tables(source_uri: str, config: LeadScopeConfig) -> list[tuple[str, str]]:
    """Return ``(uri, text)`` pairs for every CSV table of a source."""
    if is_s3_uri(source_uri):
        return _read_s3_tables(source_uri, config)
    return _read_local_tables(Path(source_uri).expanduser())


def _read_local_tables(source_path: Path) -> list[tuple[str, str]]:
    """Read CSV tables from the local file system.

    Raises:
        LeadScopeIngestError: If path is missing or holds no CSV files.
    """
    if not source_path.exists():
        raise LeadScopeIngestError(
            f"Failed to read source at {source_path}: path does not exist. "
            "Provide an existing CSV file or directory."
        )
    if source_path.is_file():
        return [(str(source_path), source_path.read_text(encoding="utf-8-sig"))]
    tables = [
        (str(file_path), file_path.read_text(encoding="utf-8-sig"))
        for file_path in sorted(source_path.rglob("*"))
        if file_path.is_file() and _is_supported_name(file_path.name)
    ]
    if not tables:
        raise LeadScopeIngestError(
            f"No readable CSV files found under {source_path}. "
            f"Supported extensions: {SUPPORTED_TABLE_EXTENSIONS}."
        )
    return tables


def _parse_csv_rows(
    table_uri: str,
    text: str,
    required_columns: tuple[str, ...],
) -> list[tuple[int, Row]]:
    """Parse CSV text and validate its header.

    Args:
        table_uri: Source identifier for error context.
        text: CSV payload.
        required_columns: Columns that must be present.

    Returns:
        ``(line_number, row)`` pairs; line numbers count the header as 1.

    Raises:
        LeadScopeIngestError: If required columns are missing.
    """
    reader = csv.DictReader(io.StringIO(text))
    header = [name.strip() for name in reader.fieldnames or []]
    missing = [column for column in required_columns if column not in header]
    if missing:
        raise LeadScopeIngestError(
            f"Invalid table at {table_uri}: missing required columns {missing}. "
            f"Expected at least {list(required_columns)}."
        )
    rows: list[tuple[int, Row]] = []
    for line_number, row in enumerate(reader, 2):
        cleaned = {
            (key or "").strip(): value if isinstance(value, str) else ""
            for key, value in row.items()
        }
        rows.append((line_number, cleaned))
    return rows


def _build_quote_record(table_uri: str, line_number: int, row: Row) -> RawQuoteRecord:
    """Map one CSV row onto a raw quote record."""
    return RawQuoteRecord(
        record_id=f"{table_uri}:{line_number}",
        answer_date=row.get("answer_date", ""),
        lead_time_weeks=row.get("lead_time_weeks", ""),
        component_types=row.get("component_types", ""),
        manufacturers=row.get("manufacturer", ""),
        cost=row.get("cost", ""),
        component_count=row.get("component_count", ""),
        project_name=row.get("project_name", ""),
        buyer_name=row.get("buyer_name", ""),
        seller_name=row.get("seller_name", ""),
    )


def _build_category_definition(table_uri: str, line_number: int, row: Row) -> CategoryDefinition:
    """Map one CSV row onto a category definition.

    Raises:
        LeadScopeIngestError: If the name is blank or the level is not an integer.
    """
    name = row.get("component_type", "").strip()
    if not name:
        raise LeadScopeIngestError(
            f"Invalid category definition at {table_uri}:{line_number}: "
            "component_type is blank. Provide a name for every category row."
        )
    raw_level = row.get("level", "").strip()
    try:
        level = int(raw_level)
    except ValueError as error:
        raise LeadScopeIngestError(
            f"Invalid category definition at {table_uri}:{line_number}: "
            f"level must be an integer, got '{raw_level}'."
        ) from error
    return CategoryDefinition(name=name, level=level, tree_path=row.get("tree_path", ""))


def _read_s3_tables(source_uri: str, config: LeadScopeConfig) -> list[tuple[str, str]]:
    """Read CSV tables from S3 objects under a prefix.

    Raises:
        LeadScopeIngestError: If no CSV objects are found.
    """
    location = parse_s3_uri(source_uri)
    s3_client = _create_s3_client(config)
    object_keys = _list_s3_keys(s3_client, location)
    tables = _download_s3_tables(s3_client, location.bucket, object_keys)
    if not tables:
        raise LeadScopeIngestError(
            f"No readable CSV objects found for {source_uri}. "
            "Upload .csv files and retry."
        )
    return tables


def _create_s3_client(config: LeadScopeConfig) -> Any:
    """Create a boto3 S3 client.

    Raises:
        LeadScopeDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise LeadScopeDependencyError(
            "S3 support requires boto3, but it is not installed. "
            "Install boto3 to read s3:// sources."
        ) from error
    session_kwargs = _build_boto3_session_kwargs(config)
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def _build_boto3_session_kwargs(config: LeadScopeConfig) -> dict[str, str]:
    """Build boto3 Session kwargs from config."""
    kwargs: dict[str, str] = {}
    if config.s3_profile:
        kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        kwargs["region_name"] = config.s3_region
    return kwargs


def _list_s3_keys(s3_client: Any, location: S3Location) -> list[str]:
    """List CSV object keys under an S3 prefix, sorted."""
    paginator = s3_client.get_paginator("list_objects_v2")
    pages = paginator.paginate(Bucket=location.bucket, Prefix=location.prefix)
    keys: list[str] = []
    for page in pages:
        for obj in page.get("Contents", []):
            key = obj["Key"]
            if _is_supported_name(key):
                keys.append(key)
    return sorted(keys)


def _download_s3_tables(
    s3_client: Any,
    bucket: str,
    object_keys: Iterable[str],
) -> list[tuple[str, str]]:
    """Download CSV object bodies."""
    tables: list[tuple[str, str]] = []
    for key in object_keys:
        body = s3_client.get_object(Bucket=bucket, Key=key)["Body"].read().decode("utf-8-sig")
        tables.append((f"s3://{bucket}/{key}", body))
    return tables


def _is_supported_name(name: str) -> bool:
    """Return whether a file name or object key is a supported table."""
    return Path(name).suffix.lower() in SUPPORTED_TABLE_EXTENSIONS
