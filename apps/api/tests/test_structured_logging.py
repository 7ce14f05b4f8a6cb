"""Tests for structured logging helpers."""

import uuid

from practicedesk.core.structured_logging import build_log_context


def test_build_log_context_includes_only_provided_fields():
    context = build_log_context(
        user_id="user-1",
        org_id="owner-1",
        request_id="req-1",
        route="/tasks",
        method="GET",
    )

    assert context == {
        "user_id": "user-1",
        "org_id": "owner-1",
        "request_id": "req-1",
        "route": "/tasks",
        "method": "GET",
    }


def test_build_log_context_ignores_empty_fields():
    context = build_log_context(
        user_id="",
        org_id=None,
        request_id="req-1",
    )

    assert context == {"request_id": "req-1"}


def test_build_log_context_stringifies_ids():
    task_id = uuid.uuid4()

    assert build_log_context(task_id=task_id) == {"task_id": str(task_id)}
