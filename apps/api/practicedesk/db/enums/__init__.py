"""Enum definitions for application constants."""

from practicedesk.db.enums.auth import Role, UserStatus
from practicedesk.db.enums.defaults import (
    DEFAULT_APPROVAL_STATUS,
    DEFAULT_TASK_PRIORITY,
    DEFAULT_TASK_STATUS,
)
from practicedesk.db.enums.permissions import (
    ROLES_CAN_APPROVE,
    ROLES_CAN_ASSIGN,
    ROLES_CAN_DELETE_TASKS,
    ROLES_CAN_MANAGE_CLIENTS,
    ROLES_CAN_MANAGE_TEAM,
    ROLES_ORGANIZATION_ROOT,
    ROLES_TEAM_MEMBER,
)
from practicedesk.db.enums.tasks import ApprovalStatus, TaskPriority, TaskStatus

__all__ = [
    "ApprovalStatus",
    "DEFAULT_APPROVAL_STATUS",
    "DEFAULT_TASK_PRIORITY",
    "DEFAULT_TASK_STATUS",
    "Role",
    "ROLES_CAN_APPROVE",
    "ROLES_CAN_ASSIGN",
    "ROLES_CAN_DELETE_TASKS",
    "ROLES_CAN_MANAGE_CLIENTS",
    "ROLES_CAN_MANAGE_TEAM",
    "ROLES_ORGANIZATION_ROOT",
    "ROLES_TEAM_MEMBER",
    "TaskPriority",
    "TaskStatus",
    "UserStatus",
]
