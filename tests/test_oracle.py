import uuid
from types import SimpleNamespace

from taskboard.models.enums import ProjectRole
from taskboard.models.project import Project, ProjectMember
from taskboard.rbac import oracle

def _project(owner, members=()):
    return Project(
        owner_id=owner,
        members=[ProjectMember(user_id=u, role=r) for u, r in members],
    )

def test_owner_is_member_without_entry():
    owner = uuid.uuid4()
    p = _project(owner)
    assert oracle.is_owner(owner, p)
    assert oracle.is_member(owner, p)
    assert not oracle.is_explicit_member(owner, p)
    assert oracle.member_sub_role(owner, p) is None

def test_explicit_member_and_sub_role():
    owner, dev = uuid.uuid4(), uuid.uuid4()
    p = _project(owner, [(dev, ProjectRole.developer)])
    assert oracle.is_member(dev, p)
    assert not oracle.is_owner(dev, p)
    assert oracle.member_sub_role(dev, p) is ProjectRole.developer
    assert oracle.effective_sub_role(dev, p) is ProjectRole.developer

def test_stranger_has_nothing():
    p = _project(uuid.uuid4(), [(uuid.uuid4(), ProjectRole.manager)])
    stranger = uuid.uuid4()
    assert not oracle.is_member(stranger, p)
    assert oracle.member_sub_role(stranger, p) is None
    assert oracle.effective_sub_role(stranger, p) is None

def test_owner_with_lesser_entry_still_manages():
    owner = uuid.uuid4()
    p = _project(owner, [(owner, ProjectRole.viewer)])
    assert oracle.member_sub_role(owner, p) is ProjectRole.viewer
    assert oracle.effective_sub_role(owner, p) is ProjectRole.manager

def test_works_on_plain_objects_and_principals():
    uid = uuid.uuid4()
    who = SimpleNamespace(id=uid)
    p = SimpleNamespace(owner_id=uuid.uuid4(), members=[SimpleNamespace(user_id=uid, role="manager")])
    assert oracle.is_member(who, p)
    assert oracle.member_sub_role(who, p) is ProjectRole.manager
