from enum import Enum


class EnumEnvironment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class EnumLogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# Fleet API constants shared between the domain rules and the gateway
ENVELOPE_MARKER = "7E"
INTERVAL_DIRECTIVE = "AT+TIMEGAP"
DEFAULT_PENDING_COMMAND_LIMIT = 4
MIN_DEVICE_ID_DIGITS = 12
