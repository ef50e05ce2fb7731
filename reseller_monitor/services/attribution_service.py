# reseller_monitor/services/attribution_service.py
"""
Reseller attribution for PPPoE sessions.

Priority, first match wins:
    1. manual mapping (ResellerUserMapping, exact username)
    2. reseller_id already assigned by hand on the stored session
    3. detection rules, resellers in stored order, rules in stored order
    4. unattributed

Everything here is pure: same session + same snapshot -> same answer.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence

from ..core.constants import AttributionSource, DetectionRuleType
from ..models.reseller import Reseller, ResellerUserMapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionFacts:
    """The parts of a session that attribution looks at."""

    username: str
    profile: Optional[str] = None
    comment: Optional[str] = None
    reseller_id: Optional[uuid.UUID] = None


class DetectionRule(ABC):
    value: str

    @abstractmethod
    def matches(self, session: SessionFacts) -> bool:
        ...


@dataclass(frozen=True)
class PrefixRule(DetectionRule):
    value: str

    def matches(self, session: SessionFacts) -> bool:
        return session.username.startswith(self.value)


@dataclass(frozen=True)
class ProfileRule(DetectionRule):
    value: str

    def matches(self, session: SessionFacts) -> bool:
        return session.profile is not None and session.profile.lower() == self.value.lower()


@dataclass(frozen=True)
class CommentRule(DetectionRule):
    value: str

    def matches(self, session: SessionFacts) -> bool:
        return session.comment is not None and self.value.lower() in session.comment.lower()


_RULE_TYPES: dict[DetectionRuleType, type[DetectionRule]] = {
    DetectionRuleType.PREFIX: PrefixRule,
    DetectionRuleType.PROFILE: ProfileRule,
    DetectionRuleType.COMMENT: CommentRule,
}


def parse_detection_rules(raw_rules: Optional[Iterable[Any]], reseller_name: str = "") -> list[DetectionRule]:
    """
    Converts the JSON stored in resellers.detection_rules into rule objects.
    Malformed entries and blank values are skipped with a warning.
    """
    rules: list[DetectionRule] = []
    for raw in raw_rules or []:
        if not isinstance(raw, dict):
            logger.warning(f"Ignoring malformed detection rule for reseller '{reseller_name}': {raw!r}")
            continue
        try:
            rule_type = DetectionRuleType(str(raw.get("type", "")).lower())
        except ValueError:
            logger.warning(f"Ignoring unknown detection rule type for reseller '{reseller_name}': {raw.get('type')!r}")
            continue
        value = raw.get("value")
        if not isinstance(value, str) or not value:
            logger.warning(f"Ignoring empty {rule_type.value} rule for reseller '{reseller_name}'")
            continue
        rules.append(_RULE_TYPES[rule_type](value))
    return rules


@dataclass(frozen=True)
class ResellerRules:
    reseller_id: uuid.UUID
    name: str
    rules: tuple[DetectionRule, ...] = ()


@dataclass(frozen=True)
class Attribution:
    reseller_id: uuid.UUID
    source: AttributionSource


@dataclass(frozen=True)
class AttributionSnapshot:
    """
    Mappings and resellers loaded once per poll run.
    `resellers` keeps the order it was built with.
    """

    mappings: dict[str, uuid.UUID] = field(default_factory=dict)
    resellers: tuple[ResellerRules, ...] = ()

    @classmethod
    def from_models(
        cls, resellers: Sequence[Reseller], mappings: Sequence[ResellerUserMapping]
    ) -> "AttributionSnapshot":
        return cls(
            mappings={m.pppoe_username: m.reseller_id for m in mappings},
            resellers=tuple(
                ResellerRules(
                    reseller_id=r.id,
                    name=r.name,
                    rules=tuple(parse_detection_rules(r.detection_rules, r.name)),
                )
                for r in resellers
            ),
        )


def resolve_attribution(session: SessionFacts, snapshot: AttributionSnapshot) -> Optional[Attribution]:
    """Returns the owning reseller and how it was found, or None."""
    mapped = snapshot.mappings.get(session.username)
    if mapped is not None:
        return Attribution(mapped, AttributionSource.MAPPING)

    if session.reseller_id is not None:
        return Attribution(session.reseller_id, AttributionSource.MANUAL)

    for reseller in snapshot.resellers:
        for rule in reseller.rules:
            if rule.matches(session):
                return Attribution(reseller.reseller_id, AttributionSource.RULE)

    return None
