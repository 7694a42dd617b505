"""Shared enums for models."""

from enum import Enum


class ProjectRole(str, Enum):
    """Role of a member within a project, ordered by privilege.

    Persisted by name. ``rank`` gives the total order used for permission
    comparisons: OWNER(3) > ADMIN(2) > MEMBER(1) > VIEWER(0).
    """

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"
    VIEWER = "VIEWER"

    @property
    def rank(self) -> int:
        return _ROLE_RANKS[self]

    def outranks(self, other: "ProjectRole") -> bool:
        return self.rank > other.rank

    def at_least(self, other: "ProjectRole") -> bool:
        return self.rank >= other.rank


_ROLE_RANKS = {
    ProjectRole.OWNER: 3,
    ProjectRole.ADMIN: 2,
    ProjectRole.MEMBER: 1,
    ProjectRole.VIEWER: 0,
}


class InviteStatus(str, Enum):
    """Project invite status.

    EXPIRED is normally derived at read time from a PENDING row whose
    deadline has passed; it is only persisted when such a row is superseded.
    """

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"
    EXPIRED = "EXPIRED"
