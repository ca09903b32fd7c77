"""Core constants used across LeadScope modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

DEFAULT_MIN_DATA_POINTS = 10
DEFAULT_PATH_DELIMITER = " > "
PRESENTATION_DECIMALS = 1
MONTH_KEY_FORMAT = "%Y-%m"
SUPPORTED_TABLE_EXTENSIONS = (".csv",)
SUPPORTED_ALIAS_EXTENSIONS = (".yaml", ".yml")

QUOTE_REQUIRED_COLUMNS = (
    "answer_date",
    "lead_time_weeks",
    "component_types",
    "manufacturer",
)
CATEGORY_REQUIRED_COLUMNS = ("component_type", "level", "tree_path")

DATE_INPUT_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %I:%M %p",
    "%m/%d/%Y %I:%M:%S %p",
    "%d-%b-%Y",
    "%Y/%m/%d",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
    "%d %B %Y",
)

DEFAULT_PLACEHOLDER_MANUFACTURERS = ("", "none", "null", "undefined", "n/a", "na", "-")

DROP_REASON_BAD_DATE = "bad_date"
DROP_REASON_BAD_LEAD_TIME = "bad_lead_time"
DROP_REASON_BAD_LIST = "bad_list"
DROP_REASON_EMPTY_TAGS = "empty_tags"

DIMENSION_CATEGORY = "category"
DIMENSION_MANUFACTURER = "manufacturer"
DIMENSION_CATEGORY_ROLLUP = "category_rollup"
SUPPORTED_GROUPING_DIMENSIONS = (DIMENSION_CATEGORY, DIMENSION_MANUFACTURER)

TREND_INCREASING = "increasing"
TREND_DECREASING = "decreasing"
TREND_FLAT = "flat"

REPORT_MANIFEST_FILE_NAME = "manifest.json"
CATEGORY_SUMMARY_FILE_NAME = "category_summary.json"
ROLLUP_SUMMARY_FILE_NAME = "rollup_summary.json"
MANUFACTURER_SUMMARY_FILE_NAME = "manufacturer_summary.json"
CATEGORY_MANUFACTURER_SUMMARY_FILE_NAME = "category_manufacturer_summary.json"
CATEGORY_SERIES_FILE_NAME = "category_time_series.json"
MANUFACTURER_SERIES_FILE_NAME = "manufacturer_time_series.json"
MONTHLY_SUMMARY_FILE_NAME = "monthly_summary.json"
