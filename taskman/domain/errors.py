

### COMMENTS
# ============================================
# Domain error conventions
# ============================================
# - Adapters (persistence):
#     * map technical failures (OSError, yaml.YAMLError, bad records) to StorageError
#     * a missing/unreadable tasks file is NoFileError, the caller starts empty
#
# - TaskStore / parser:
#     * malformed user input -> InvalidInputError (or one of its subclasses)
#     * operation needs an existing task and there is none -> TaskNotFoundError
#
# - UI (CLI):
#     * catches DomainError (or a concrete subclass) and prints a friendly message
#     * anything else is a technical failure and propagates


class DomainError(Exception):
    """Base class for domain errors.
    Common parent of every business exception in the system, so the UI can
    tell them apart from technical failures (I/O, interpreter errors).
    Not raised directly, use a subclass.
    """


class TaskNotFoundError(DomainError):
    """Raised when an operation needs a task that is not in the store
    (`update()`, `show()`, `complete()`, `get()`).
    """
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(self.__str__())
    def __str__(self):
        return f"Task with ID {self.task_id} not found."


class InvalidInputError(DomainError):
    """Raised when user input breaks the rules for a task field.
    Examples:
    - the update text is not made of key:value pairs,
    - an unknown update key,
    - an empty name.
    Carries a readable `message` and the `field` it concerns, so the UI can
    point the user at the offending part.
    """
    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(self.__str__())
    def __str__(self):
        return f"Invalid value for '{self.field}': {self.message}"


class InvalidDueDateFormatError(InvalidInputError):
    """Due date is not an ISO-8601 timestamp with a UTC offset."""
    def __init__(self, value: str):
        self.value = value
        super().__init__("due_date", f"expected ISO-8601 with offset, got {value!r}")


class ParseBoolError(InvalidInputError):
    """`completed` value is not exactly "true" or "false"."""
    def __init__(self, value: str):
        self.value = value
        super().__init__("completed", f"expected 'true' or 'false', got {value!r}")


class NoFileError(DomainError):
    """Raised by a repository when there is no readable tasks file.
    Callers treat it as "start with an empty store", not as a failure.
    """
    def __init__(self, path):
        self.path = path
        super().__init__(self.__str__())
    def __str__(self):
        return f"No tasks file at {self.path}."


class StorageError(DomainError):
    """I/O or serialization failure inside a persistence adapter."""
