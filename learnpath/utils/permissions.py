"""
Named capabilities and the policy that maps actions to them.

A user's stored capability names are parsed once into a PermissionSet;
handlers ask `is_allowed` / `require` instead of inspecting flags.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from learnpath.utils.errors import AccessDeniedError, InvalidInputError


class Capability(str, Enum):
    PREMIUM = "premium"
    ADMIN = "admin"
    CREATE_COURSES = "create_courses"
    CREATE_BLOG_POSTS = "create_blog_posts"
    MODERATE_FORUM = "moderate_forum"
    MANAGE_ACCOUNTS = "manage_accounts"
    SUPER_ADMIN = "super_admin"


class Action(str, Enum):
    PREVIEW_CONTENT = "preview_content"
    AUTHOR_CONTENT = "author_content"
    MANAGE_ACCOUNTS = "manage_accounts"
    GRANT_COURSE = "grant_course"
    ENROLL_PREMIUM = "enroll_premium"


# Any one of the listed capabilities allows the action.
POLICY: dict[Action, frozenset[Capability]] = {
    Action.PREVIEW_CONTENT: frozenset({Capability.ADMIN, Capability.CREATE_COURSES}),
    Action.AUTHOR_CONTENT: frozenset({Capability.ADMIN, Capability.CREATE_COURSES}),
    Action.MANAGE_ACCOUNTS: frozenset({Capability.MANAGE_ACCOUNTS}),
    Action.GRANT_COURSE: frozenset({Capability.ADMIN, Capability.MANAGE_ACCOUNTS}),
    Action.ENROLL_PREMIUM: frozenset({Capability.PREMIUM, Capability.ADMIN}),
}


@dataclass(frozen=True)
class PermissionSet:
    capabilities: frozenset[Capability] = field(default_factory=frozenset)

    @classmethod
    def from_names(cls, names: Iterable[str] | None) -> PermissionSet:
        caps: set[Capability] = set()
        for name in names or []:
            try:
                caps.add(Capability(str(name).strip().lower()))
            except ValueError:
                raise InvalidInputError(f"Unknown capability: {name}")
        return cls(frozenset(caps))

    def has(self, capability: Capability) -> bool:
        return Capability.SUPER_ADMIN in self.capabilities or capability in self.capabilities

    def to_names(self) -> list[str]:
        return sorted(c.value for c in self.capabilities)


def is_allowed(permissions: PermissionSet, action: Action) -> bool:
    return any(permissions.has(c) for c in POLICY[action])


def require(permissions: PermissionSet, action: Action) -> None:
    if not is_allowed(permissions, action):
        raise AccessDeniedError(f"Missing permission: {action.value}")
