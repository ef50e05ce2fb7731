"""
Constantes centralizadas para el sistema.
Elimina "magic strings" y provee tipado fuerte para valores comunes.
"""

from enum import Enum, unique


@unique
class RouterOSVersion(str, Enum):
    """API dialects a router can be registered with."""

    V6 = "v6"
    V7 = "v7"


@unique
class PollStatus(str, Enum):
    """Outcome of a single router poll."""

    OK = "ok"
    AUTH_FAILURE = "auth_failure"
    UNREACHABLE = "unreachable"
    UNSUPPORTED = "unsupported"


@unique
class DetectionRuleType(str, Enum):
    """Kinds of reseller detection rules stored in resellers.detection_rules."""

    PREFIX = "prefix"
    PROFILE = "profile"
    COMMENT = "comment"


@unique
class AttributionSource(str, Enum):
    """How a session's reseller_id was obtained."""

    MAPPING = "mapping"
    MANUAL = "manual"
    RULE = "rule"


# Endpoint de sesiones PPP activas en la API REST de RouterOS v7
PPP_ACTIVE_PATH = "/rest/ppp/active"
