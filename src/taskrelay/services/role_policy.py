"""Role hierarchy permission checks.

Pure functions over ProjectRole. Nothing here touches the database or
raises; callers translate a False answer into ForbiddenError. Every check
compares ranks, so adding a role only means giving it a rank.
"""

from src.taskrelay.models import ProjectRole


def can_manage_members(actor_role: ProjectRole) -> bool:
    return actor_role.at_least(ProjectRole.ADMIN)


def can_change_role(
    actor_role: ProjectRole,
    target_role: ProjectRole,
    actor_is_target: bool,
) -> bool:
    """Whether the actor may change the target member's role at all.

    Managers act on members they strictly outrank. The target's new role is
    checked separately against available_target_roles().
    """
    if not can_manage_members(actor_role):
        return False
    if actor_is_target:
        return True
    return actor_role.outranks(target_role)


def available_target_roles(
    actor_role: ProjectRole,
    current_target_role: ProjectRole,
) -> frozenset[ProjectRole]:
    """Roles the actor may assign to a member currently holding current_target_role."""
    if not can_manage_members(actor_role):
        return frozenset()
    return frozenset(
        role for role in ProjectRole
        if actor_role.at_least(role) and role is not current_target_role
    )


def can_remove(
    actor_role: ProjectRole,
    target_role: ProjectRole,
    actor_is_target: bool,
) -> bool:
    """Whether the actor may remove the target (or leave, when actor_is_target).

    The owner can never be removed; ownership has to be transferred first.
    """
    if target_role is ProjectRole.OWNER:
        return False
    if actor_is_target:
        return True
    return can_manage_members(actor_role) and actor_role.outranks(target_role)


def can_invite_with_role(actor_role: ProjectRole, invite_role: ProjectRole) -> bool:
    """Only managers invite, and never with a role above their own."""
    return can_manage_members(actor_role) and actor_role.at_least(invite_role)
