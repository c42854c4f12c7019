import logging
import re
from dataclasses import dataclass, fields
from typing import Optional
from taskman.domain.errors import InvalidInputError


### COMMENTS
# ==========================================================
# Update patch mini-language (domain/update_fields.py).
# ==========================================================
# Input: "key:value, key:value, ..."
# - pairs are separated by exactly ", "
# - each pair is split on its FIRST ':' only, so values may contain ':'
#   (e.g. the time part of a due date)
# - known keys: name, description, due_date, completed
# - fail fast: the first bad pair aborts parsing, no partial patch
#
# The due_date check here is a shape check only (regex); the real calendar
# parse happens when the store applies the patch.

logger = logging.getLogger(__name__)

PAIR_SEPARATOR = ", "
KEY_VALUE_SEPARATOR = ":"

DUE_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}[+-]\d{2}:\d{2}")
BOOL_VALUES = {"true", "false"}


@dataclass(frozen=True)
class UpdateFields:
    """Sparse patch for a task. `None` means "leave the current value"."""
    name: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[str] = None
    completed: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


KNOWN_KEYS = frozenset(f.name for f in fields(UpdateFields))


def parse_update_fields(text: str) -> UpdateFields:
    """
        Parses the key:value patch text into `UpdateFields`.

        - Splits on ", ", then each piece on the first ':'.
        - `due_date` must look like YYYY-MM-DDTHH:MM:SS+HH:MM (or -HH:MM).
        - `completed` must be exactly "true" or "false".
        - `name` / `description` are taken verbatim.

        :param text: Raw patch text, e.g. "name:New Name, completed:true".
        :raises InvalidInputError: On the first malformed pair, unknown key or bad value.
        :return: Patch with only the keys present in `text` set.
    """
    values: dict[str, str] = {}

    for pair in text.split(PAIR_SEPARATOR):
        key, sep, value = pair.partition(KEY_VALUE_SEPARATOR)
        if not sep:
            raise InvalidInputError("fields", f"not a key/value pair: {pair!r}")

        if key not in KNOWN_KEYS:
            raise InvalidInputError(key, f"unknown field key {key!r}")

        if key == "due_date" and not DUE_DATE_PATTERN.fullmatch(value):
            raise InvalidInputError(key, "invalid datetime format for due date")

        if key == "completed" and value not in BOOL_VALUES:
            raise InvalidInputError(key, "invalid boolean string for completed")

        values[key] = value

    logger.debug("parsed update fields: %s", sorted(values))
    return UpdateFields(**values)
