import logging
from typing import List, Optional

from errors import Unauthenticated
from models import Task
from stores import TaskStore

logger = logging.getLogger(__name__)


def require_identity(user_id: Optional[int]) -> int:
    if user_id is None:
        raise Unauthenticated()
    return user_id


class TaskService:
    """
    Task operations on behalf of the user resolved from the session.

    With ``enforce_ownership`` disabled, completing and deleting go straight
    to the store by id, so any caller (even anonymous) can touch any task.
    """

    def __init__(self, tasks: TaskStore, *, enforce_ownership: bool = True):
        self.tasks = tasks
        self.enforce_ownership = enforce_ownership

    def list_tasks(self, user_id: Optional[int]) -> List[Task]:
        return self.tasks.list_by_owner(require_identity(user_id))

    def add_task(self, user_id: Optional[int], name: str) -> int:
        owner_id = require_identity(user_id)
        task_id = self.tasks.create(name, owner_id)
        logger.info("User id=%s added task id=%s", owner_id, task_id)
        return task_id

    def complete_task(self, user_id: Optional[int], task_id: int) -> None:
        if self.enforce_ownership:
            matched = self.tasks.mark_done(task_id, owner_id=require_identity(user_id))
        else:
            matched = self.tasks.mark_done(task_id)
        logger.info("Complete task id=%s by user id=%s matched=%s", task_id, user_id, matched)

    def remove_task(self, user_id: Optional[int], task_id: int) -> None:
        if self.enforce_ownership:
            matched = self.tasks.delete(task_id, owner_id=require_identity(user_id))
        else:
            matched = self.tasks.delete(task_id)
        logger.info("Delete task id=%s by user id=%s matched=%s", task_id, user_id, matched)
