"""API tests for the approval workflow endpoints."""

import pytest

from conftest import make_task
from practicedesk.db.enums import TaskStatus


@pytest.mark.asyncio
async def test_request_approve_flow(db, client_for, org):
    task = make_task(db, org.firm_a, org.staff, org.manager, status=TaskStatus.IN_PROGRESS)

    requested = await client_for(org.staff).post(f"/tasks/{task.id}/approval")
    assert requested.status_code == 201, requested.text
    assert requested.json()["status"] == "pending"

    approved = await client_for(org.manager).post(
        f"/tasks/{task.id}/approval/approve", json={"remarks": "Filed correctly"}
    )
    assert approved.status_code == 200, approved.text
    assert approved.json()["status"] == "approved"
    assert approved.json()["approved_by_user_id"] == str(org.manager.id)

    task_resp = await client_for(org.staff).get(f"/tasks/{task.id}")
    assert task_resp.json()["status"] == "completed"
    assert task_resp.json()["completed_at"] is not None


@pytest.mark.asyncio
async def test_approve_without_body(db, client_for, org):
    task = make_task(db, org.firm_a, org.staff, org.manager, status=TaskStatus.IN_PROGRESS)
    await client_for(org.staff).post(f"/tasks/{task.id}/approval")

    resp = await client_for(org.owner).post(f"/tasks/{task.id}/approval/approve")

    assert resp.status_code == 200, resp.text
    assert resp.json()["remarks"] is None


@pytest.mark.asyncio
async def test_reject_requires_remarks(db, client_for, org):
    task = make_task(db, org.firm_a, org.staff, org.manager, status=TaskStatus.IN_PROGRESS)
    await client_for(org.staff).post(f"/tasks/{task.id}/approval")
    c = client_for(org.manager)

    missing = await c.post(f"/tasks/{task.id}/approval/reject", json={})
    blank = await c.post(f"/tasks/{task.id}/approval/reject", json={"remarks": "  "})
    rejected = await c.post(f"/tasks/{task.id}/approval/reject", json={"remarks": "Wrong period"})

    assert missing.status_code == 422
    assert blank.status_code == 422
    assert blank.json()["code"] == "validation_failed"
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "rejected"
    assert rejected.json()["rejected_at"] is not None

    task_resp = await client_for(org.staff).get(f"/tasks/{task.id}")
    assert task_resp.json()["status"] == "in_progress"


@pytest.mark.asyncio
async def test_staff_cannot_decide(db, client_for, org):
    task = make_task(db, org.firm_a, org.staff, org.manager, status=TaskStatus.IN_PROGRESS)
    c = client_for(org.staff)
    await c.post(f"/tasks/{task.id}/approval")

    approve = await c.post(f"/tasks/{task.id}/approval/approve")
    reject = await c.post(f"/tasks/{task.id}/approval/reject", json={"remarks": "x"})

    assert approve.status_code == 403
    assert reject.status_code == 403


@pytest.mark.asyncio
async def test_approve_without_request_is_not_found(db, client_for, org):
    task = make_task(db, org.firm_a, org.staff, org.manager, status=TaskStatus.IN_PROGRESS)

    resp = await client_for(org.manager).post(f"/tasks/{task.id}/approval/approve")

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_list_and_get_approvals_are_scoped(db, client_for, org, other_org):
    mine = make_task(db, org.firm_a, org.staff, org.manager, status=TaskStatus.IN_PROGRESS)
    theirs = make_task(db, org.firm_c, org.staff2, org.owner, status=TaskStatus.IN_PROGRESS)
    mine_approval = (await client_for(org.staff).post(f"/tasks/{mine.id}/approval")).json()
    theirs_approval = (await client_for(org.staff2).post(f"/tasks/{theirs.id}/approval")).json()

    manager = client_for(org.manager)
    listed = await manager.get("/approvals", params={"status": "pending"})
    owner_listed = await client_for(org.owner).get("/approvals")
    visible = await manager.get(f"/approvals/{mine_approval['id']}")
    hidden = await manager.get(f"/approvals/{theirs_approval['id']}")
    foreign = await client_for(other_org.owner).get(f"/approvals/{mine_approval['id']}")

    assert [a["id"] for a in listed.json()] == [mine_approval["id"]]
    assert {a["id"] for a in owner_listed.json()} == {mine_approval["id"], theirs_approval["id"]}
    assert visible.status_code == 200
    assert hidden.status_code == 403
    assert foreign.status_code == 403


@pytest.mark.asyncio
async def test_list_approvals_status_filter(db, client_for, org):
    task = make_task(db, org.firm_a, org.staff, org.manager, status=TaskStatus.IN_PROGRESS)
    await client_for(org.staff).post(f"/tasks/{task.id}/approval")
    await client_for(org.manager).post(f"/tasks/{task.id}/approval/approve")

    c = client_for(org.owner)
    pending = await c.get("/approvals", params={"status": "pending"})
    approved = await c.get("/approvals", params={"status": "approved"})

    assert pending.json() == []
    assert len(approved.json()) == 1
