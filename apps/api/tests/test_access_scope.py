"""Tests for access scope resolution and its organization boundary."""

import uuid

import pytest

from conftest import assign, make_client, make_firm, make_task, make_user
from practicedesk.core.errors import ForbiddenError, NotFoundError, OrganizationUnresolvableError
from practicedesk.db.enums import Role
from practicedesk.services import access_scope_service


def test_owner_sees_every_org_firm(org, scope_for):
    scope = scope_for(org.owner)

    assert scope.firm_ids == {org.firm_a.id, org.firm_b.id, org.firm_c.id, org.firm_d.id}
    assert scope.root_owner_id == org.owner.id


def test_manager_sees_own_and_direct_report_firms(org, scope_for):
    scope = scope_for(org.manager)

    # staff2 reports to the owner, not the manager
    assert scope.firm_ids == {org.firm_a.id, org.firm_b.id}


def test_manager_scope_stops_at_one_level(db, org, scope_for):
    junior = make_user(db, Role.STAFF, reports_to=org.staff, name="junior")
    junior_firm = make_firm(db, org.owner, org.client, "Junior Firm")
    assign(db, junior, junior_firm)

    assert junior_firm.id not in scope_for(org.manager).firm_ids


def test_staff_sees_only_mapped_firms(org, scope_for):
    assert scope_for(org.staff).firm_ids == {org.firm_a.id}
    assert scope_for(org.staff2).firm_ids == {org.firm_c.id}


def test_individual_sees_own_firm(individual, scope_for):
    scope = scope_for(individual.user)

    assert scope.firm_ids == {individual.firm.id}
    assert scope.member_ids == {individual.user.id}


def test_cross_tenant_mapping_is_ignored(db, org, other_org, scope_for):
    assign(db, org.staff, other_org.firm)

    scope = scope_for(org.staff)

    assert other_org.firm.id not in scope.firm_ids
    assert scope.firm_ids == {org.firm_a.id}


def test_firm_ids_always_within_org_firms(db, org, other_org, individual, scope_for):
    assign(db, org.manager, other_org.firm)
    assign(db, other_org.staff, org.firm_d)

    for user in (org.owner, org.manager, org.staff, org.staff2, other_org.owner,
                 other_org.staff, individual.user):
        scope = scope_for(user)
        assert scope.firm_ids <= scope.org_firm_ids


def test_firm_created_by_member_belongs_to_org(db, org, scope_for):
    client = make_client(db, org.manager, name="Manager Client")
    firm = make_firm(db, org.manager, client, "Manager Firm")

    assert firm.id in scope_for(org.owner).firm_ids


def test_orphan_has_no_organization(db, scope_for):
    lone = make_user(db, Role.STAFF)

    with pytest.raises(OrganizationUnresolvableError):
        scope_for(lone)


def test_assignment_override_visibility(db, org, scope_for):
    # Staff is mapped to firm_a only but owns a task on firm_b
    mine = make_task(db, org.firm_b, org.staff, org.manager)
    not_mine = make_task(db, org.firm_b, org.manager, org.manager)

    scope = scope_for(org.staff)

    assert scope.can_view_task(mine)
    assert not scope.can_view_task(not_mine)


def test_require_org_firm(db, org, other_org, scope_for):
    scope = scope_for(org.staff)

    # Org firm outside the staff member's assignments is still in the organization
    assert access_scope_service.require_org_firm(db, scope, org.firm_d.id) is not None
    with pytest.raises(ForbiddenError):
        access_scope_service.require_org_firm(db, scope, other_org.firm.id)


def test_require_org_member(db, org, other_org, scope_for):
    scope = scope_for(org.manager)

    assert access_scope_service.require_org_member(db, scope, org.staff2.id).id == org.staff2.id
    with pytest.raises(ForbiddenError):
        access_scope_service.require_org_member(db, scope, other_org.staff.id)
    with pytest.raises(NotFoundError):
        access_scope_service.require_org_member(db, scope, uuid.uuid4())
