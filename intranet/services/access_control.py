"""Document access evaluation.

The decision is an ordered chain of rules. Each rule either settles the
outcome (``ALLOW``/``DENY``) or passes (``None``) to the next one; the first
rule that settles wins, and a chain that runs out allows. ``ACCESS_RULES``
is the precedence order.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable

from intranet.models.document import Document, DocumentPermission, PermissionType
from intranet.models.user import User, UserRole

logger = logging.getLogger(__name__)

FULL_ACCESS_ROLE = UserRole.staff


class Decision(enum.Enum):
    allow = "allow"
    deny = "deny"


@dataclass(frozen=True)
class Subject:
    id: str
    role: str
    clearance: int
    department: str

    @classmethod
    def from_user(cls, user: User) -> "Subject":
        return cls(
            id=str(user.id),
            role=user.role.value,
            clearance=user.clearance,
            department=user.department,
        )

    def matches(self, target_id: str) -> bool:
        return target_id in (self.id, self.role, self.department)


@dataclass(frozen=True)
class PermissionRule:
    permission_type: PermissionType
    target_id: str

    @classmethod
    def from_row(cls, row: DocumentPermission) -> "PermissionRule":
        return cls(permission_type=row.permission_type, target_id=row.target_id)


@dataclass(frozen=True)
class Resource:
    clearance: int
    is_deleted: bool
    permissions: tuple[PermissionRule, ...] = field(default_factory=tuple)

    @classmethod
    def from_document(cls, document: Document) -> "Resource":
        rules = tuple(
            PermissionRule.from_row(row)
            for row in document.permissions
            if row.is_allowed is not False
        )
        return cls(
            clearance=document.clearance,
            is_deleted=bool(document.is_deleted),
            permissions=rules,
        )

    def rules_of(self, *types: PermissionType) -> list[PermissionRule]:
        return [rule for rule in self.permissions if rule.permission_type in types]


@dataclass(frozen=True)
class AccessResult:
    allowed: bool
    rule: str


Rule = Callable[[Subject, Resource], "Decision | None"]


def _deleted(subject: Subject, resource: Resource) -> Decision | None:
    return Decision.deny if resource.is_deleted else None


def _full_access_role(subject: Subject, resource: Resource) -> Decision | None:
    return Decision.allow if subject.role == FULL_ACCESS_ROLE.value else None


def _clearance_floor(subject: Subject, resource: Resource) -> Decision | None:
    return Decision.deny if subject.clearance < resource.clearance else None


def _blacklist(subject: Subject, resource: Resource) -> Decision | None:
    rules = resource.rules_of(PermissionType.blacklist)
    if any(subject.matches(rule.target_id) for rule in rules):
        return Decision.deny
    return None


def _whitelist(subject: Subject, resource: Resource) -> Decision | None:
    rules = resource.rules_of(PermissionType.whitelist)
    if not rules:
        return None
    if any(subject.matches(rule.target_id) for rule in rules):
        return Decision.allow
    return Decision.deny


def _role_or_department(subject: Subject, resource: Resource) -> Decision | None:
    rules = resource.rules_of(PermissionType.role, PermissionType.department)
    if not rules:
        return None
    targets = {rule.target_id for rule in rules}
    if subject.role in targets or subject.department in targets:
        return Decision.allow
    return Decision.deny


ACCESS_RULES: tuple[tuple[str, Rule], ...] = (
    ("deleted", _deleted),
    ("full_access_role", _full_access_role),
    ("clearance", _clearance_floor),
    ("blacklist", _blacklist),
    ("whitelist", _whitelist),
    ("role_department", _role_or_department),
)


def evaluate(subject: Subject, resource: Resource) -> AccessResult:
    for name, rule in ACCESS_RULES:
        decision = rule(subject, resource)
        if decision is not None:
            return AccessResult(allowed=decision is Decision.allow, rule=name)
    return AccessResult(allowed=True, rule="default")


def can_access(user: User, document: Document) -> bool:
    result = evaluate(Subject.from_user(user), Resource.from_document(document))
    if not result.allowed:
        logger.debug(
            "Access to document %s denied for user %s by rule %s",
            document.id,
            user.id,
            result.rule,
        )
    return result.allowed
