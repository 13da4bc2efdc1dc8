from contextlib import contextmanager
from typing import List, Optional, Tuple

from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.orm import Session

from errors import Conflict, DuplicateUsername, NotFound, StorageError, StorageUnavailable
from models import Task, User


@contextmanager
def storage_errors(db: Session, action: str):
    """Roll back and re-raise SQLAlchemy failures as taskflow errors."""
    try:
        yield
    except IntegrityError as e:
        db.rollback()
        raise Conflict(f"{action}: {e.orig}") from e
    except (OperationalError, InterfaceError, DisconnectionError) as e:
        db.rollback()
        raise StorageUnavailable(f"{action}: database unavailable") from e
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"{action}: {e}") from e


class CredentialStore:
    def __init__(self, db: Session):
        self.db = db

    def create(self, username: str, password_hash: str) -> int:
        user = User(username=username, password_hash=password_hash)
        try:
            with storage_errors(self.db, "create user"):
                self.db.add(user)
                self.db.commit()
                self.db.refresh(user)
                return user.id
        except Conflict as e:
            # The only unique column on users is the username
            raise DuplicateUsername(username) from e

    def find_by_username(self, username: str) -> Tuple[int, str]:
        with storage_errors(self.db, "find user"):
            user = self.db.query(User).filter(User.username == username).first()
        if user is None:
            raise NotFound(f"No user named {username!r}")
        return user.id, user.password_hash

    def count(self) -> int:
        with storage_errors(self.db, "count users"):
            return self.db.query(User).count()


class TaskStore:
    def __init__(self, db: Session):
        self.db = db

    def create(self, name: str, owner_id: int) -> int:
        task = Task(name=name, user_id=owner_id, done=False)
        with storage_errors(self.db, "create task"):
            self.db.add(task)
            self.db.commit()
            self.db.refresh(task)
            return task.id

    def list_by_owner(self, owner_id: int) -> List[Task]:
        with storage_errors(self.db, "list tasks"):
            return self.db.query(Task).filter(Task.user_id == owner_id).order_by(Task.id).all()

    def get(self, task_id: int) -> Task:
        with storage_errors(self.db, "get task"):
            task = self.db.query(Task).filter(Task.id == task_id).first()
        if task is None:
            raise NotFound(f"No task with id {task_id}")
        return task

    def mark_done(self, task_id: int, owner_id: Optional[int] = None) -> bool:
        with storage_errors(self.db, "complete task"):
            matched = self._scoped(task_id, owner_id).update(
                {Task.done: True}, synchronize_session=False
            )
            self.db.commit()
        return matched > 0

    def delete(self, task_id: int, owner_id: Optional[int] = None) -> bool:
        with storage_errors(self.db, "delete task"):
            matched = self._scoped(task_id, owner_id).delete(synchronize_session=False)
            self.db.commit()
        return matched > 0

    def _scoped(self, task_id: int, owner_id: Optional[int]):
        query = self.db.query(Task).filter(Task.id == task_id)
        if owner_id is not None:
            query = query.filter(Task.user_id == owner_id)
        return query
