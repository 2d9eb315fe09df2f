"""Centralized constants for icalfeed."""

# ICS calendar constants
ICS_PRODID = "-//icalfeed//Views iCal Feed//EN"
ICS_VERSION = "2.0"
ICS_CALSCALE = "GREGORIAN"
ICS_METHOD = "PUBLISH"
ICS_CONTENT_TYPE = "text/calendar; charset=utf-8"

# Domain appended to generated event UIDs
DEFAULT_UID_DOMAIN = "icalfeed"

# Ceiling handed to recurrence helpers when a rule has no COUNT/UNTIL
DEFAULT_MAX_OCCURRENCES = 500

# Timezone used when nothing else is configured
DEFAULT_TIMEZONE = "local"

# Environment variable names
ENV_PREFIX = "ICALFEED_"
ENV_PRODID = "ICALFEED_PRODID"
ENV_UID_DOMAIN = "ICALFEED_UID_DOMAIN"
ENV_DEFAULT_TIMEZONE = "ICALFEED_DEFAULT_TIMEZONE"
ENV_INCLUDE_TIMEZONES = "ICALFEED_INCLUDE_TIMEZONES"
ENV_MAX_OCCURRENCES = "ICALFEED_MAX_OCCURRENCES"

TRUTHY_VALUES = {"1", "true", "yes", "on"}

# Host storage field types and the date shape they carry
FIELD_TYPE_INSTANT = ("datetime", "timestamp", "created", "changed")
FIELD_TYPE_INSTANT_RANGE = ("daterange",)
FIELD_TYPE_RECURRING = ("date_recur",)

# Keys of a raw date entry as stored by the host
ENTRY_START_KEY = "value"
ENTRY_END_KEY = "end_value"

# Timezone abbreviation to IANA zone mapping
# Maps common (and DST) abbreviations to canonical IANA zones that understand DST
ABBR_TO_TZ = {
    # North America
    "EST": "America/New_York",
    "EDT": "America/New_York",
    "CST": "America/Chicago",
    "CDT": "America/Chicago",
    "MST": "America/Denver",
    "MDT": "America/Denver",
    "PST": "America/Los_Angeles",
    "PDT": "America/Los_Angeles",
    # United Kingdom / Europe
    "BST": "Europe/London",
    "CET": "Europe/Paris",
    "CEST": "Europe/Paris",
    "EET": "Europe/Athens",
    "EEST": "Europe/Athens",
    # Australia
    "AEST": "Australia/Sydney",
    "AEDT": "Australia/Sydney",
    # Asia
    "IST": "Asia/Kolkata",  # India (UTC+5:30 – no DST)
}
