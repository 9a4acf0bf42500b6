"""Assign tool names that stay unique and within the protocol length limit.

Pattern: the operationId is used unchanged when it fits and is unused.
Otherwise it is cut short and a zero-padded counter is appended:

  listAllTheThingsInTheAccount...(80 chars) -> listAllTheThingsInTheAccount...(59 chars)-0001
  getPet (second time)                       -> getPet-0001
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 64
_SUFFIX_WIDTH = 4


def truncate_name(name: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """Cut a name down to max_length characters."""
    if len(name) <= max_length:
        return name
    truncated = name[:max_length]
    logger.warning("Tool name %r was truncated to %r due to length limits", name, truncated)
    return truncated


class NameRegistry:
    """Counter plus set of names already handed out during one catalog build."""

    def __init__(self, max_length: int = MAX_NAME_LENGTH) -> None:
        self.max_length = max_length
        self.counter = 0
        self.assigned: set[str] = set()

    def _next_suffix(self) -> str:
        self.counter += 1
        return str(self.counter).zfill(_SUFFIX_WIDTH)

    def ensure_unique(self, name: str) -> str:
        """Return name, or a suffixed short form if it is too long or taken."""
        candidate = name
        while len(candidate) > self.max_length or candidate in self.assigned:
            suffix = self._next_suffix()
            candidate = f"{name[:self.max_length - len(suffix) - 1]}-{suffix}"
        self.assigned.add(candidate)
        return candidate
