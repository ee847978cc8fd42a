# File: const.py
"""Constants for the Civic Badges integration.

This file centralizes configuration keys, defaults, storage keys, event names,
service names and platform identifiers for consistency across the integration.
"""

import logging

from homeassistant.const import Platform

# ------------------------------------------------------------------------------------------------
# General / Integration Information
# ------------------------------------------------------------------------------------------------
# Integration Name
CIVIC_BADGES_TITLE = "Civic Badges"

# Integration Domain
DOMAIN = "civic_badges"

# Logger
LOGGER = logging.getLogger(__package__)

# Supported Platforms
PLATFORMS = [
    Platform.SENSOR,
]

# Runtime objects stored in hass.data[DOMAIN][entry_id]
RUNTIME_STORE = "store"
RUNTIME_LEDGER = "ledger"
RUNTIME_NOTIFIER = "notifier"
RUNTIME_SCHEDULER = "scheduler"
RUNTIME_RENDERER = "renderer"
RUNTIME_TABLE = "threshold_table"

# Storage and Versioning
STORAGE_KEY_PREFIX = "civic_badges"
STORAGE_VERSION = 1

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_RECIPIENT_NAME = "recipient_name"
CONF_API_URL = "api_url"
CONF_ACCESS_TOKEN = "access_token"
CONF_USER_ID = "user_id"

# Options
CONF_POLL_INTERVAL = "poll_interval"
CONF_THRESHOLDS = "thresholds"
CONF_PERSISTENT_NOTIFICATIONS = "persistent_notifications"

# ConfigFlow Steps
CONFIG_FLOW_STEP_USER = "user"
OPTIONS_FLOW_STEP_INIT = "init"

# ------------------------------------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------------------------------------
DEFAULT_RECIPIENT_NAME = "Citizen"
DEFAULT_POLL_INTERVAL = 5  # seconds
MIN_POLL_INTERVAL = 5
MAX_POLL_INTERVAL = 3600
DEFAULT_PERSISTENT_NOTIFICATIONS = True
DEFAULT_ORACLE_TIMEOUT = 10  # seconds
DEFAULT_TIER_ICON = "mdi:medal"
DEFAULT_NO_BADGE_ICON = "mdi:sprout"
DEFAULT_REPORTS_ICON = "mdi:file-document-multiple-outline"

# Default tier table: (min_count, tier_name, icon)
DEFAULT_BADGE_THRESHOLDS: list[tuple[int, str, str]] = [
    (10, "Bronze", "🥉"),
    (20, "Silver", "🥈"),
    (50, "Diamond", "💎"),
    (100, "Titanium", "🛡️"),
    (300, "Vibranium", "🔷"),
    (700, "Ultra Civic", "🌟"),
]

# Threshold text format: one tier per line "min_count|tier_name|icon"
THRESHOLD_FIELD_SEPARATOR = "|"

# ------------------------------------------------------------------------------------------------
# Persisted Values (the three independently addressable values of the badge store)
# ------------------------------------------------------------------------------------------------
DATA_EARNED_BADGES = "earned_badges"
DATA_LAST_UNLOCKED_TIER = "last_unlocked_tier"
DATA_DISPLAY_COUNT = "display_count"

DATA_BADGE_TIER_NAME = "tier_name"
DATA_BADGE_EARNED_AT = "earned_at"

# ------------------------------------------------------------------------------------------------
# Oracle (report count API)
# ------------------------------------------------------------------------------------------------
ORACLE_REPORTS_PATH = "/api/reports"
ORACLE_FIELD_SUBMITTED_BY = "submittedBy"
ORACLE_AUTH_HEADER = "Authorization"
ORACLE_AUTH_SCHEME = "Bearer"

# ------------------------------------------------------------------------------------------------
# Certificates
# ------------------------------------------------------------------------------------------------
CERTIFICATE_ID_PREFIX = "CCAI"
CERTIFICATE_FALLBACK_NAME = "Citizen"
CERTIFICATE_FILENAME_SUFFIX = "_Certificate"
CERTIFICATE_FILE_EXTENSION = ".pdf"
CERTIFICATE_EXPORT_SUBDIR = "www/civic_badges"
CERTIFICATE_EXPORT_URL_PREFIX = "/local/civic_badges"
CERTIFICATE_TITLE = "Certificate of Civic Achievement"
CERTIFICATE_SUBTITLE = "Presented by UP Swachhta Mitra and Government of Uttar Pradesh"
CERTIFICATE_PRESENTED_TO = "This certificate is proudly awarded to"
CERTIFICATE_HEADER_LEFT = "Government of Uttar Pradesh"
CERTIFICATE_HEADER_RIGHT = "UP Swachhta Mitra"
CERTIFICATE_WATERMARK = "UP SWACHHTA MITRA"

# Logical canvas and export page (A4 landscape, points)
CERTIFICATE_CANVAS_WIDTH = 960
CERTIFICATE_CANVAS_HEIGHT = 640
CERTIFICATE_RASTER_SCALE = 2
CERTIFICATE_PAGE_WIDTH_PT = 842
CERTIFICATE_PAGE_HEIGHT_PT = 595
CERTIFICATE_PAGE_DPI = 144

# ------------------------------------------------------------------------------------------------
# Events
# ------------------------------------------------------------------------------------------------
EVENT_BADGE_UNLOCKED = "civic_badges_badge_unlocked"

# Dispatcher signal suffixes, scoped per entry as "civic_badges_{entry_id}_{suffix}"
SIGNAL_SUFFIX_BADGE_UNLOCKED = "badge_unlocked"
SIGNAL_SUFFIX_SYNC_UPDATED = "sync_updated"

ATTR_TIER_NAME = "tier_name"
ATTR_MIN_COUNT = "min_count"
ATTR_ICON = "icon"
ATTR_EARNED_AT = "earned_at"
ATTR_ENTRY_ID = "entry_id"
ATTR_EARNED_BADGES = "earned_badges"
ATTR_NEXT_TIER = "next_tier"
ATTR_REMAINING_TO_NEXT = "remaining_to_next"
ATTR_DISPLAY_COUNT = "display_count"
ATTR_LAST_SYNCED_AT = "last_synced_at"
ATTR_LAST_SYNC_SUCCESS = "last_sync_success"

NOTIFICATION_ID_PREFIX = "civic_badges_unlock"
NOTIFICATION_TITLE = "New civic badge unlocked"
NOTIFICATION_MESSAGE_FMT = "{icon} You reached the {tier_name} badge ({min_count}+ reports)."

# ------------------------------------------------------------------------------------------------
# Services
# ------------------------------------------------------------------------------------------------
SERVICE_REFRESH = "refresh"
SERVICE_RECORD_SUBMISSION = "record_submission"
SERVICE_EXPORT_CERTIFICATE = "export_certificate"
SERVICE_RESET = "reset"

FIELD_CONFIG_ENTRY_ID = "config_entry_id"
FIELD_COUNT = "count"
FIELD_TIER_NAME = "tier_name"
FIELD_RECIPIENT_NAME = "recipient_name"

RESPONSE_CERTIFICATE_ID = "certificate_id"
RESPONSE_FILENAME = "filename"
RESPONSE_PATH = "path"
RESPONSE_URL = "url"

# ------------------------------------------------------------------------------------------------
# Sensors
# ------------------------------------------------------------------------------------------------
SENSOR_UID_SUFFIX_CURRENT_BADGE = "_current_badge"
SENSOR_UID_SUFFIX_REPORT_COUNT = "_report_count"
TRANS_KEY_SENSOR_CURRENT_BADGE = "current_badge"
TRANS_KEY_SENSOR_REPORT_COUNT = "report_count"
SENTINEL_NONE_TEXT = "none"

# ------------------------------------------------------------------------------------------------
# Translation keys / errors
# ------------------------------------------------------------------------------------------------
TRANS_KEY_ERROR_INVALID_URL = "invalid_url"
TRANS_KEY_ERROR_INVALID_THRESHOLDS = "invalid_thresholds"

ERROR_NO_ENTRY_FOUND = "No loaded Civic Badges entry found"
ERROR_ENTRY_NOT_FOUND_FMT = "Civic Badges entry '{}' not found or not loaded"
ERROR_TIER_NOT_FOUND_FMT = "Tier '{}' is not defined"
ERROR_TIER_NOT_EARNED_FMT = "Tier '{}' has not been earned"
ERROR_NO_BADGE_EARNED = "No badge has been earned yet"
ERROR_EXPORT_UNAVAILABLE = "Certificate export directory is not available"
