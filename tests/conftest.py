import os
import uuid

# point settings at sqlite before anything under taskboard is imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("APP_ENV", "test")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from taskboard.auth.principal import Principal
from taskboard.auth.tokens import issue_access_token
from taskboard.db import get_db
from taskboard.main import create_app
from taskboard.models import Organization, Project, ProjectMember, Task, User
from taskboard.models.base import Base
from taskboard.models.enums import ProjectRole, Role, TaskStatus
from taskboard.tenancy import generate_org_code

@pytest.fixture()
def db_session() -> Session:
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    session: Session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        engine.dispose()

@pytest.fixture()
def client(db_session: Session) -> TestClient:
    app = create_app()

    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)

def auth(jwt: str) -> dict[str, str]:
    return {"authorization": f"bearer {jwt}"}

def uniq_email(prefix: str) -> str:
    return f"{prefix}+{uuid.uuid4().hex[:10]}@example.com"

class Factory:
    """Direct-to-db builders; faster and clearer than driving every setup step over http."""

    def __init__(self, db: Session):
        self.db = db

    def org(self, name: str = "acme") -> Organization:
        org = Organization(name=name, code=generate_org_code(name))
        self.db.add(org)
        self.db.commit()
        return org

    def user(
        self,
        org: Organization,
        role: Role = Role.team_member,
        *,
        approved: bool = True,
        active: bool = True,
        email: str | None = None,
    ) -> User:
        u = User(
            email=email or uniq_email(role.value),
            name=role.value,
            organization_id=org.id,
            role=role,
            is_approved=approved,
            is_active=active,
        )
        self.db.add(u)
        self.db.commit()
        return u

    def project(
        self,
        owner: User,
        *,
        members: list[tuple[User, ProjectRole]] = (),
        created_by: User | None = None,
        key: str | None = None,
    ) -> Project:
        p = Project(
            organization_id=owner.organization_id,
            name=f"project {key or ''}".strip(),
            key=key or uuid.uuid4().hex[:8].upper(),
            description="d",
            owner_id=owner.id,
            created_by_id=(created_by or owner).id,
            members=[ProjectMember(user_id=u.id, role=r) for u, r in members],
        )
        self.db.add(p)
        self.db.commit()
        return p

    def task(
        self,
        project: Project,
        reporter: User,
        *,
        assignee: User | None = None,
        status: TaskStatus = TaskStatus.todo,
        title: str = "t",
    ) -> Task:
        t = Task(
            organization_id=project.organization_id,
            project_id=project.id,
            title=title,
            description="d",
            reporter_id=reporter.id,
            assignee_id=assignee.id if assignee else None,
            status=status,
        )
        self.db.add(t)
        self.db.commit()
        return t

@pytest.fixture()
def make(db_session: Session) -> Factory:
    return Factory(db_session)

@pytest.fixture()
def org(make: Factory) -> Organization:
    return make.org("acme")

def token_for(user: User) -> str:
    return issue_access_token(user.id)

def headers_for(user: User) -> dict[str, str]:
    return auth(token_for(user))

def principal_of(user: User) -> Principal:
    return Principal.from_user(user)
