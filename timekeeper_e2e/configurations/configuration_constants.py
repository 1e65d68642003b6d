from __future__ import annotations

import dataclasses


@dataclasses.dataclass(frozen=True)
class ServerDefaults:
    Host = "localhost"
    StartPort = 3000
    PortProbeAttempts = 10
    DevCommand = "npm run dev"


@dataclasses.dataclass(frozen=True)
class Timing:
    ReadyTimeoutSeconds = 30.0
    RetryIntervalSeconds = 1.0
    TerminateWaitSeconds = 10.0


@dataclasses.dataclass(frozen=True)
class EnvVars:
    TestServerPort = "TEST_SERVER_PORT"
    AppDir = "TIMEKEEPER_APP_DIR"
    DevCommand = "TIMEKEEPER_DEV_COMMAND"
    StartPort = "TIMEKEEPER_START_PORT"
    ReadyTimeout = "TIMEKEEPER_READY_TIMEOUT"
    ReclaimPort = "TIMEKEEPER_RECLAIM_PORT"
    BaseUrl = "TIMEKEEPER_BASE_URL"
    LogFile = "TIMEKEEPER_LOG_FILE"


@dataclasses.dataclass(frozen=True)
class Selectors:
    """CSS selectors for the Time Keeper page under test."""

    YouLabel = 'td span[class*="text-indigo"]'
    TimezoneCells = "tbody tr td:nth-child(2)"
    LocalTimeCells = "tbody tr td:nth-child(3)"
    TableCells = "tbody tr td"
    RowDeleteButton = "~td button"
    AddTrigger = "div button.block"
    AddForm = "div form"
    LabelInput = "input#label"
    TimezoneSelect = "select#timezone"
    Submit = 'button[type="submit"]'


# Context timezone for scenarios that add or delete rows.
DEFAULT_PINNED_TIMEZONE = "Africa/Tunis"

# Zones whose rendered local time is checked against a computed clock.
CLOCK_TIMEZONES = (
    ("America/New_York", "New York"),
    ("Europe/London", "London"),
    ("Asia/Tokyo", "Tokyo"),
    ("Pacific/Honolulu", "Honolulu"),
    ("America/Los_Angeles", "Los Angeles"),
)

# Zones added in bulk by the sort order scenario.
SORTABLE_TIMEZONES = (
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "America/Juneau",
    "Pacific/Honolulu",
)

KNOWN_ISSUES_URL = "https://github.com/LiutskoOlga/timezone-app-hiive-test/issues"
