import uuid

import pytest
from sqlalchemy import select

from taskboard import cascade
from taskboard.models.enums import ProjectRole, Role
from taskboard.models.project import Project, ProjectMember
from taskboard.models.task import Task, TaskComment, TaskDependency
from taskboard.models.user import User
from tests.conftest import headers_for, principal_of

def test_deleting_a_user_rewrites_references(db_session, make, org):
    admin = make.user(org, Role.admin)
    dh = make.user(org, Role.department_head)
    dev = make.user(org, Role.team_member)
    project = make.project(dh, members=[(dev, ProjectRole.developer)])
    reported = make.task(project, dev)
    assigned = make.task(project, dh, assignee=dev)
    dev_id = dev.id

    res = cascade.delete_user(db_session, dev, principal_of(admin))
    db_session.commit()
    db_session.expire_all()

    assert res.memberships_removed == 1
    assert res.tasks_unassigned == 1
    assert res.tasks_reassigned == 1
    assert db_session.get(User, dev_id) is None
    assert db_session.get(Task, reported.id).reporter_id == admin.id
    assert db_session.get(Task, assigned.id).assignee_id is None
    assert db_session.scalars(select(ProjectMember).where(ProjectMember.user_id == dev_id)).all() == []

def test_deleting_a_project_owner_hands_ownership_to_actor(db_session, make, org):
    admin = make.user(org, Role.admin)
    dh = make.user(org, Role.department_head)
    project = make.project(dh)

    cascade.delete_user(db_session, dh, principal_of(admin))
    db_session.commit()
    db_session.expire_all()

    p = db_session.get(Project, project.id)
    assert p.owner_id == admin.id
    assert p.created_by_id == admin.id

def test_cannot_cascade_delete_self(db_session, make, org):
    admin = make.user(org, Role.admin)
    with pytest.raises(ValueError):
        cascade.delete_user(db_session, admin, principal_of(admin))

def test_deleting_a_project_removes_its_tasks(db_session, make, org):
    dh = make.user(org, Role.department_head)
    doomed = make.project(dh)
    kept = make.project(dh)
    t1 = make.task(doomed, dh)
    t2 = make.task(doomed, dh)
    survivor = make.task(kept, dh)

    t1.comments.append(TaskComment(author_id=dh.id, content="hi"))
    survivor.dependencies.append(TaskDependency(depends_on_id=t2.id))
    db_session.commit()

    doomed_id = doomed.id
    n = cascade.delete_project(db_session, doomed)
    db_session.commit()
    db_session.expire_all()

    assert n == 2
    assert db_session.get(Project, doomed_id) is None
    assert db_session.scalars(select(Task.id).where(Task.project_id == doomed_id)).all() == []
    assert db_session.scalars(select(TaskComment)).all() == []
    assert db_session.get(Task, survivor.id).dependencies == []

def test_deleting_a_task_drops_dependency_edges(db_session, make, org):
    dh = make.user(org, Role.department_head)
    project = make.project(dh)
    a = make.task(project, dh)
    b = make.task(project, dh)
    a.dependencies.append(TaskDependency(depends_on_id=b.id))
    db_session.commit()

    b_id = b.id
    cascade.delete_task(db_session, b)
    db_session.commit()
    db_session.expire_all()

    assert db_session.get(Task, b_id) is None
    assert db_session.get(Task, a.id).dependencies == []

def test_admin_delete_user_over_http(client, db_session, make, org):
    admin = make.user(org, Role.admin)
    dh = make.user(org, Role.department_head)
    dev = make.user(org, Role.team_member)
    project = make.project(dh, members=[(dev, ProjectRole.developer)])
    task = make.task(project, dev, assignee=dev)

    r = client.delete(f"/admin/users/{dev.id}", headers=headers_for(admin))
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["deleted"] is True
    assert data["tasks_unassigned"] == 1

    db_session.expire_all()
    t = db_session.get(Task, task.id)
    assert t.reporter_id == admin.id
    assert t.assignee_id is None

def test_project_delete_over_http_reports_task_count(client, make, org):
    dh = make.user(org, Role.department_head)
    project = make.project(dh)
    make.task(project, dh)
    make.task(project, dh)

    r = client.delete(f"/projects/{project.id}", headers=headers_for(dh))
    assert r.status_code == 200
    assert r.json()["data"] == {"deleted": True, "tasks_deleted": 2}

    r = client.get(f"/projects/{project.id}", headers=headers_for(dh))
    assert r.status_code == 404

def test_unknown_user_delete_is_404(client, make, org):
    admin = make.user(org, Role.admin)
    r = client.delete(f"/admin/users/{uuid.uuid4()}", headers=headers_for(admin))
    assert r.status_code == 404
