# backend/helpdesk/core/constants.py
"""Shared constants for the presence module."""

import re

BRAND_NAME = "Helpdesk"
API_TITLE = f"{BRAND_NAME} Presence API"
API_VERSION = "1.0.0"

DEFAULT_APP_TZ = "America/Los_Angeles"
DEFAULT_MAX_DAY_MINUTES = 480  # 8 hours
DEFAULT_MAX_RANGE_DAYS = 30
DEFAULT_REGISTRY_TTL_SECONDS = 60.0

# Strict 24h "HH:mm"
TIME_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"
TIME_REGEX = re.compile(TIME_PATTERN)
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
DATE_REGEX = re.compile(DATE_PATTERN)

NOTES_MAX_LENGTH = 500
CODE_MAX_LENGTH = 50
LABEL_MAX_LENGTH = 100
COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"

DEFAULT_STATUS_CATEGORY = "presence"
WEEK_SCHEDULE_TYPE = "specific-schedule"
