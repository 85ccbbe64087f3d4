from enum import Enum

class Role(str, Enum):
    team_member = "team-member"
    project_lead = "project-lead"
    department_head = "department-head"
    admin = "admin"

class ProjectRole(str, Enum):
    member = "member"
    developer = "developer"
    manager = "manager"
    viewer = "viewer"

class ProjectStatus(str, Enum):
    active = "active"
    paused = "paused"
    completed = "completed"
    archived = "archived"

class ProjectVisibility(str, Enum):
    public = "public"
    private = "private"
    team = "team"

class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in-progress"
    review = "review"
    done = "done"

class TaskPriority(str, Enum):
    lowest = "lowest"
    low = "low"
    medium = "medium"
    high = "high"
    highest = "highest"

class TaskType(str, Enum):
    story = "story"
    task = "task"
    bug = "bug"
    epic = "epic"
    feature = "feature"
    improvement = "improvement"

class DependencyType(str, Enum):
    blocks = "blocks"
    blocked_by = "blocked_by"
    relates_to = "relates_to"

def enum_values(enum_cls: type[Enum]) -> list[str]:
    # persist the wire values ("in-progress"), not the member names
    return [m.value for m in enum_cls]
