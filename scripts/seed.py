import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from taskboard.auth.passwords import hash_password
from taskboard.db import SessionLocal
from taskboard.models.enums import Role
from taskboard.models.project import Project
from taskboard.models.task import Task
from taskboard.models.user import User
from taskboard.routes.auth import avatar_url

SEED_PASSWORD = "password123"

@dataclass
class SeedResult:
    emails: dict[Role, str]
    project_id: uuid.UUID
    task_id: uuid.UUID

def get_or_create_user(db: Session, email: str, name: str, role: Role) -> User:
    email = email.lower().strip()
    u = db.scalar(select(User).where(User.email == email))
    if u is None:
        u = User(
            email=email,
            name=name,
            password_hash=hash_password(SEED_PASSWORD),
            role=role.value,
            avatar=avatar_url(name),
        )
        db.add(u)
        db.flush()
    elif u.role != role.value:
        u.role = role.value
        db.add(u)
        db.flush()
    return u

def get_or_create_project(db: Session, owner_id: uuid.UUID, name: str) -> Project:
    p = db.scalar(select(Project).where(Project.owner_id == owner_id, Project.name == name))
    if p is None:
        p = Project(owner_id=owner_id, name=name, description="seeded")
        db.add(p)
        db.flush()
    return p

def get_or_create_task(db: Session, project_id: uuid.UUID, title: str) -> Task:
    t = db.scalar(select(Task).where(Task.project_id == project_id, Task.title == title))
    if t is None:
        t = Task(project_id=project_id, title=title)
        db.add(t)
        db.flush()
    return t

def seed() -> SeedResult:
    db = SessionLocal()
    try:
        users = {
            role: get_or_create_user(
                db,
                f"{role.value.replace(' ', '').lower()}@example.com",
                role.value,
                role,
            )
            for role in Role
        }

        project = get_or_create_project(db, users[Role.team_lead].id, "seeded project")
        task = get_or_create_task(db, project.id, "seeded task")

        db.commit()

        return SeedResult(
            emails={role: u.email for role, u in users.items()},
            project_id=project.id,
            task_id=task.id,
        )
    finally:
        db.close()

if __name__ == "__main__":
    r = seed()
    print("seed complete")
    print(f"project_id={r.project_id}")
    print(f"task_id={r.task_id}")
    print(f"users (password: {SEED_PASSWORD}):")
    for role, email in r.emails.items():
        print(f"  {role.value + ':':11} {email}")
