"""Tests for reporting-hierarchy resolution."""

import uuid

from conftest import make_user
from practicedesk.db.enums import Role
from practicedesk.services import hierarchy_service
from practicedesk.services.hierarchy_service import RootOwnerOutcome


def test_chain_resolves_to_owner(db, org):
    # staff -> manager -> owner
    result = hierarchy_service.find_root_owner(db, org.staff.id)

    assert result.found
    assert result.owner_id == org.owner.id


def test_owner_and_individual_are_their_own_root(db, org, individual):
    assert hierarchy_service.find_root_owner(db, org.owner.id).owner_id == org.owner.id
    assert (
        hierarchy_service.find_root_owner(db, individual.user.id).owner_id
        == individual.user.id
    )


def test_organization_members_include_whole_tree(db, org, other_org):
    members = hierarchy_service.organization_members(db, org.owner.id)

    assert members == {org.owner.id, org.manager.id, org.staff.id, org.staff2.id}
    assert other_org.staff.id not in members


def test_organization_members_is_stable(db, org):
    first = hierarchy_service.organization_members(db, org.owner.id)
    second = hierarchy_service.organization_members(db, org.owner.id)
    assert first == second


def test_orphan_is_reported_as_orphaned(db):
    lone = make_user(db, Role.STAFF)

    result = hierarchy_service.find_root_owner(db, lone.id)

    assert not result.found
    assert result.outcome == RootOwnerOutcome.ORPHANED
    assert result.owner_id is None


def test_chain_ending_in_non_owner_is_orphaned(db):
    top = make_user(db, Role.MANAGER)
    staff = make_user(db, Role.STAFF, reports_to=top)

    result = hierarchy_service.find_root_owner(db, staff.id)

    assert result.outcome == RootOwnerOutcome.ORPHANED


def test_cycle_is_detected(db):
    a = make_user(db, Role.MANAGER, name="a")
    b = make_user(db, Role.MANAGER, reports_to=a, name="b")
    a.reports_to_user_id = b.id
    db.flush()
    staff = make_user(db, Role.STAFF, reports_to=a)

    result = hierarchy_service.find_root_owner(db, staff.id)

    assert result.outcome == RootOwnerOutcome.CYCLE_DETECTED


def test_self_reference_is_detected_as_cycle(db):
    user = make_user(db, Role.STAFF)
    user.reports_to_user_id = user.id
    db.flush()

    result = hierarchy_service.find_root_owner(db, user.id)

    assert result.outcome == RootOwnerOutcome.CYCLE_DETECTED


def test_depth_guard(db):
    owner = make_user(db, Role.OWNER)
    m3 = make_user(db, Role.MANAGER, reports_to=owner, name="m3")
    m2 = make_user(db, Role.MANAGER, reports_to=m3, name="m2")
    m1 = make_user(db, Role.MANAGER, reports_to=m2, name="m1")
    staff = make_user(db, Role.STAFF, reports_to=m1)

    too_shallow = hierarchy_service.find_root_owner(db, staff.id, max_depth=2)
    deep_enough = hierarchy_service.find_root_owner(db, staff.id, max_depth=4)

    assert too_shallow.outcome == RootOwnerOutcome.DEPTH_EXCEEDED
    assert deep_enough.owner_id == owner.id


def test_unknown_user(db):
    result = hierarchy_service.find_root_owner(db, uuid.uuid4())
    assert result.outcome == RootOwnerOutcome.USER_NOT_FOUND


def test_members_terminate_when_owner_reports_to_itself(db):
    owner = make_user(db, Role.OWNER)
    owner.reports_to_user_id = owner.id
    db.flush()
    staff = make_user(db, Role.STAFF, reports_to=owner)

    assert hierarchy_service.organization_members(db, owner.id) == {owner.id, staff.id}


def test_direct_reports_is_one_level(db, org):
    assert hierarchy_service.direct_reports(db, org.manager.id) == {org.staff.id}
    assert hierarchy_service.direct_reports(db, org.owner.id) == {
        org.manager.id,
        org.staff2.id,
    }


def test_reports_up_to_follows_chain(db, org):
    assert hierarchy_service.reports_up_to(db, org.staff.id, org.owner.id)
    assert hierarchy_service.reports_up_to(db, org.staff.id, org.manager.id)
    assert hierarchy_service.reports_up_to(db, org.staff.id, org.staff.id)
    assert not hierarchy_service.reports_up_to(db, org.manager.id, org.staff.id)
    assert not hierarchy_service.reports_up_to(db, org.staff2.id, org.manager.id)


def test_reports_up_to_treats_existing_cycle_as_reached(db):
    a = make_user(db, Role.STAFF, name="a")
    b = make_user(db, Role.STAFF, reports_to=a, name="b")
    a.reports_to_user_id = b.id
    db.commit()

    assert hierarchy_service.reports_up_to(db, a.id, uuid.uuid4())
