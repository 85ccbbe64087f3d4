from sqlalchemy import select

from taskboard.models.enums import ProjectRole, Role
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.rbac import oracle
from taskboard.rbac.perms import can_view_project
from taskboard.rbac.visibility import (
    projects_visible_to,
    task_visibility,
    users_visible_to,
    visible_project_ids,
)
from tests.conftest import principal_of

def _visible_projects(db, principal):
    q = select(Project.id).where(Project.organization_id == principal.organization_id, projects_visible_to(principal))
    return set(db.scalars(q).all())

def _visible_tasks(db, principal):
    q = select(Task.id).where(Task.organization_id == principal.organization_id, task_visibility(db, principal))
    return set(db.scalars(q).all())

def _world(make, org):
    owner = make.user(org, Role.department_head)
    lead = make.user(org, Role.project_lead)
    dev = make.user(org, Role.team_member)
    outsider = make.user(org, Role.team_member)

    shared = make.project(owner, members=[(lead, ProjectRole.manager), (dev, ProjectRole.developer)])
    lead_owned = make.project(lead)  # lead owns it without a member entry
    private = make.project(owner)

    tasks = {
        "shared": make.task(shared, owner),
        "lead_owned": make.task(lead_owned, lead),
        "private": make.task(private, owner),
        # outsider is involved in a project they are not a member of
        "assigned_out": make.task(private, owner, assignee=outsider),
        "reported_out": make.task(private, outsider),
    }
    return dict(owner=owner, lead=lead, dev=dev, outsider=outsider,
                shared=shared, lead_owned=lead_owned, private=private, tasks=tasks)

def test_project_filter_matches_per_record_predicate(db_session, make, org):
    w = _world(make, org)
    every = db_session.scalars(select(Project)).all()

    for user in (w["owner"], w["lead"], w["dev"], w["outsider"]):
        p = principal_of(user)
        expected = {proj.id for proj in every if can_view_project(p, proj)}
        assert _visible_projects(db_session, p) == expected

def test_admin_and_department_head_are_unscoped(db_session, make, org):
    w = _world(make, org)
    admin = principal_of(make.user(org, Role.admin))
    dh = principal_of(w["owner"])

    assert visible_project_ids(db_session, admin) is None
    assert visible_project_ids(db_session, dh) is None
    all_tasks = {t.id for t in w["tasks"].values()}
    assert _visible_tasks(db_session, admin) == all_tasks
    assert _visible_tasks(db_session, dh) == all_tasks

def test_project_lead_sees_owned_and_member_projects(db_session, make, org):
    w = _world(make, org)
    lead = principal_of(w["lead"])

    assert _visible_projects(db_session, lead) == {w["shared"].id, w["lead_owned"].id}
    assert _visible_tasks(db_session, lead) == {w["tasks"]["shared"].id, w["tasks"]["lead_owned"].id}

def test_owner_with_empty_members_still_sees_project_tasks(db_session, make, org):
    lead = make.user(org, Role.project_lead)
    project = make.project(lead)
    assert project.members == []
    task = make.task(project, lead)

    p = principal_of(lead)
    assert oracle.is_member(p, project)
    assert task.id in _visible_tasks(db_session, p)

def test_team_member_sees_member_projects_and_involved_tasks(db_session, make, org):
    w = _world(make, org)

    dev = principal_of(w["dev"])
    assert _visible_projects(db_session, dev) == {w["shared"].id}
    assert _visible_tasks(db_session, dev) == {w["tasks"]["shared"].id}

    outsider = principal_of(w["outsider"])
    assert _visible_projects(db_session, outsider) == set()
    assert _visible_tasks(db_session, outsider) == {
        w["tasks"]["assigned_out"].id,
        w["tasks"]["reported_out"].id,
    }

def test_unknown_role_sees_nothing(db_session, make, org):
    w = _world(make, org)
    p = principal_of(w["dev"])
    ghost = p.__class__(id=p.id, organization_id=p.organization_id, role="owner", email=p.email)

    assert visible_project_ids(db_session, ghost) == []
    assert _visible_projects(db_session, ghost) == set()
    assert _visible_tasks(db_session, ghost) == set()
    assert db_session.scalars(select(User.id).where(users_visible_to(ghost))).all() == []

def test_user_directory(db_session, make, org):
    admin = make.user(org, Role.admin)
    tm = make.user(org, Role.team_member)
    pending = make.user(org, Role.team_member, approved=False)
    disabled = make.user(org, Role.team_member, active=False)
    other_org_user = make.user(make.org("globex"), Role.team_member)

    def seen(user):
        return set(db_session.scalars(select(User.id).where(users_visible_to(principal_of(user)))).all())

    assert seen(admin) == {admin.id, tm.id, pending.id, disabled.id}
    assert seen(tm) == {admin.id, tm.id}
    assert other_org_user.id not in seen(admin)

def test_team_member_owner_sees_owned_project_and_its_tasks(db_session, make, org):
    dh = make.user(org, Role.department_head)
    tm = make.user(org, Role.team_member)
    owned = make.project(tm)
    make.project(dh)
    task = make.task(owned, dh)

    p = principal_of(tm)
    assert can_view_project(p, owned)
    assert _visible_projects(db_session, p) == {owned.id}
    assert visible_project_ids(db_session, p) == [owned.id]
    assert _visible_tasks(db_session, p) == {task.id}
