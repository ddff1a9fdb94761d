"""
Action/subject view of permission keys.

A key ``"ticket:view"`` maps to the rule ``("view", "Ticket")``. Owners get the
wildcard rule ``("manage", "all")`` which matches every action on every
subject.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Tuple

from .models import is_valid_permission

MANAGE = "manage"
ALL = "all"

Rule = Tuple[str, str]


def parse_permission(permission: str) -> Optional[Rule]:
    """
    Split a permission key into an (action, Subject) rule.

    Returns:
        Tuple like ("view", "Ticket"), or None if the key is not in the catalog
    """
    if not is_valid_permission(permission):
        return None
    subject, action = permission.split(":", 1)
    return action, subject.capitalize()


def build_permission(subject: str, action: str) -> str:
    return f"{subject.lower()}:{action}"


@dataclass(frozen=True)
class Ability:
    rules: FrozenSet[Rule] = field(default_factory=frozenset)

    def can(self, action: str, subject: str) -> bool:
        if (MANAGE, ALL) in self.rules:
            return True
        return (action, subject) in self.rules or (MANAGE, subject) in self.rules

    def cannot(self, action: str, subject: str) -> bool:
        return not self.can(action, subject)


def define_ability_for(
    permissions: Optional[Iterable[str]], is_owner: bool = False
) -> Ability:
    """Build an Ability from permission keys; unknown keys are ignored."""
    if is_owner:
        return Ability(rules=frozenset({(MANAGE, ALL)}))

    rules = set()
    for permission in permissions or ():
        rule = parse_permission(permission)
        if rule is not None:
            rules.add(rule)
    return Ability(rules=frozenset(rules))
