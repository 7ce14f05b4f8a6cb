"""Task status transition rules by role."""

from practicedesk.db.enums import Role, TaskStatus

S = TaskStatus

# Owner and Individual are not listed: they may set any status.
ROLE_TASK_TRANSITIONS: dict[str, dict[str, frozenset[str]]] = {
    Role.STAFF.value: {
        S.PENDING.value: frozenset({S.IN_PROGRESS.value}),
        S.IN_PROGRESS.value: frozenset(
            {S.AWAITING_APPROVAL.value, S.PENDING.value, S.ERROR.value}
        ),
        S.AWAITING_APPROVAL.value: frozenset({S.IN_PROGRESS.value}),
        S.COMPLETED.value: frozenset(),
        S.ERROR.value: frozenset({S.IN_PROGRESS.value, S.PENDING.value}),
        S.OVERDUE.value: frozenset({S.IN_PROGRESS.value, S.AWAITING_APPROVAL.value}),
    },
    Role.MANAGER.value: {
        S.PENDING.value: frozenset({S.IN_PROGRESS.value, S.COMPLETED.value}),
        S.IN_PROGRESS.value: frozenset(
            {
                S.AWAITING_APPROVAL.value,
                S.PENDING.value,
                S.COMPLETED.value,
                S.ERROR.value,
            }
        ),
        S.AWAITING_APPROVAL.value: frozenset({S.COMPLETED.value, S.IN_PROGRESS.value}),
        S.COMPLETED.value: frozenset({S.IN_PROGRESS.value}),
        S.ERROR.value: frozenset(
            {S.IN_PROGRESS.value, S.PENDING.value, S.COMPLETED.value}
        ),
        S.OVERDUE.value: frozenset(
            {S.IN_PROGRESS.value, S.AWAITING_APPROVAL.value, S.COMPLETED.value}
        ),
    },
}

UNRESTRICTED_ROLES = frozenset({Role.OWNER.value, Role.INDIVIDUAL.value})

# Statuses the lazy overdue check never overrides
OVERDUE_EXEMPT_STATUSES = frozenset({S.COMPLETED.value, S.ERROR.value})

# Statuses in which a pending approval request stays open
REVIEW_STATUSES = frozenset({S.AWAITING_APPROVAL.value, S.OVERDUE.value})


def _value(member) -> str:
    return member.value if hasattr(member, "value") else member


def allowed_transitions(role: Role | str, from_status: TaskStatus | str) -> frozenset[str] | None:
    """
    Statuses ``role`` may move a task to from ``from_status``.

    Returns None for roles that bypass the table.
    """
    role_str = _value(role)
    if role_str in UNRESTRICTED_ROLES:
        return None
    return ROLE_TASK_TRANSITIONS.get(role_str, {}).get(_value(from_status), frozenset())


def is_transition_allowed(
    role: Role | str,
    from_status: TaskStatus | str,
    to_status: TaskStatus | str,
) -> bool:
    """Check a status change against the role's transition table."""
    if _value(from_status) == _value(to_status):
        return True
    allowed = allowed_transitions(role, from_status)
    if allowed is None:
        return True
    return _value(to_status) in allowed
