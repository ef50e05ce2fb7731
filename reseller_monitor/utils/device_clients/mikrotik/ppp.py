# reseller_monitor/utils/device_clients/mikrotik/ppp.py

from dataclasses import dataclass
from typing import Any, Optional

from .parsers import parse_counter, parse_rate_bps, parse_uptime


@dataclass(frozen=True)
class ActiveSession:
    """A /ppp/active record normalized to Python types."""

    username: str
    profile: Optional[str] = None
    assigned_ip: Optional[str] = None
    interface: Optional[str] = None
    comment: Optional[str] = None
    uptime_seconds: int = 0
    tx_bytes: int = 0
    rx_bytes: int = 0
    tx_rate_bps: int = 0
    rx_rate_bps: int = 0


def _text(raw: dict[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if value is None:
        return None
    value = str(value)
    return value or None


def normalize_active_session(raw: dict[str, Any]) -> Optional[ActiveSession]:
    """
    Convierte un registro crudo de /ppp/active.
    Devuelve None si el registro no tiene 'name' (no se puede identificar).
    """
    username = _text(raw, "name")
    if not username:
        return None

    return ActiveSession(
        username=username,
        # RouterOS no siempre expone 'profile' en /ppp/active
        profile=_text(raw, "profile") or _text(raw, "service"),
        assigned_ip=_text(raw, "address"),
        interface=_text(raw, "caller-id"),
        comment=_text(raw, "comment"),
        uptime_seconds=parse_uptime(raw.get("uptime")),
        tx_bytes=parse_counter(raw.get("tx-byte")),
        rx_bytes=parse_counter(raw.get("rx-byte")),
        tx_rate_bps=parse_rate_bps(raw.get("tx-rate")),
        rx_rate_bps=parse_rate_bps(raw.get("rx-rate")),
    )
