"""Error taxonomy shared by the stores, the services and the HTTP layer."""


class TaskflowError(Exception):
    pass


class StorageError(TaskflowError):
    """A datastore call failed."""


class NotFound(StorageError):
    pass


class Conflict(StorageError):
    """A write was rejected by a database constraint."""


class DuplicateUsername(Conflict):
    def __init__(self, username: str):
        super().__init__(f"Username already registered: {username!r}")
        self.username = username


class StorageUnavailable(StorageError):
    """The database could not be reached."""


class AuthenticationFailed(TaskflowError):
    # Same message for unknown users and wrong passwords
    def __init__(self):
        super().__init__("Incorrect username or password")


class Unauthenticated(TaskflowError):
    def __init__(self):
        super().__init__("Not logged in")


class SignupRejected(TaskflowError):
    """The submitted username or password cannot be stored."""
