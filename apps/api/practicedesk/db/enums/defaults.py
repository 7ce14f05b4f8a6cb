"""Centralized defaults for enums."""

from practicedesk.db.enums.tasks import ApprovalStatus, TaskPriority, TaskStatus


DEFAULT_TASK_STATUS: TaskStatus = TaskStatus.PENDING
DEFAULT_TASK_PRIORITY: TaskPriority = TaskPriority.MEDIUM
DEFAULT_APPROVAL_STATUS: ApprovalStatus = ApprovalStatus.PENDING
