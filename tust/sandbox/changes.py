# Copyright Red Hat
#
# tust/sandbox/changes.py - Test-in-sandbox change records
#
# This file is part of the tust project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File-level change records and the ``ChangeSet`` container.
"""
from typing import Dict, Iterator, List, Optional
from dataclasses import dataclass
import json

from .difftypes import ChangeType

#: Marker characters used when rendering changes for the operator.
CHANGE_MARKERS = {
    ChangeType.CREATE: "+",
    ChangeType.MODIFY: "~",
    ChangeType.DELETE: "-",
}

#: Verbs used in change descriptions.
_CHANGE_VERBS = {
    ChangeType.CREATE: "create",
    ChangeType.MODIFY: "modify",
    ChangeType.DELETE: "delete",
}


@dataclass(frozen=True)
class Change:
    """
    A single file-level difference between an original and a modified tree.
    """

    #: The kind of change.
    change_type: ChangeType
    #: The path relative to both tree roots, using "/" separators.
    path: str

    def __str__(self) -> str:
        """
        Return a string representation of this ``Change`` object.

        :returns: A human readable string representation of this instance.
        :rtype: ``str``
        """
        return f"{self.change_type.value} {self.path}"

    @property
    def marker(self) -> str:
        """
        The single character marker for this change type.

        :rtype: ``str``
        """
        return CHANGE_MARKERS[self.change_type]

    def describe(self) -> str:
        """
        Return a one line description of this change for the operator.

        :returns: A string of the form "Would create: path".
        :rtype: ``str``
        """
        return f"Would {_CHANGE_VERBS[self.change_type]}: {self.path}"

    def to_dict(self) -> Dict[str, str]:
        """
        Convert this ``Change`` object into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, str]``
        """
        return {
            "path": self.path,
            "change_type": self.change_type.value,
        }


def Create(path: str) -> Change:  # pylint: disable=invalid-name
    """Return a new ``ChangeType.CREATE`` change for ``path``."""
    return Change(ChangeType.CREATE, path)


def Modify(path: str) -> Change:  # pylint: disable=invalid-name
    """Return a new ``ChangeType.MODIFY`` change for ``path``."""
    return Change(ChangeType.MODIFY, path)


def Delete(path: str) -> Change:  # pylint: disable=invalid-name
    """Return a new ``ChangeType.DELETE`` change for ``path``."""
    return Change(ChangeType.DELETE, path)


class ChangeSet:
    """Container for the changes found by one tree comparison."""

    def __init__(self, changes: Optional[List[Change]] = None):
        self._changes = list(changes or [])

    def __repr__(self) -> str:
        """
        Return a machine-readable representation of this instance.

        :returns: ``ChangeSet`` constructor style string.
        :rtype: ``str``
        """
        return f"ChangeSet({self._changes!r})"

    # List-like interface
    def __iter__(self) -> Iterator[Change]:
        """
        Implement iter(self).
        """
        return iter(self._changes)

    def __len__(self):
        """
        Implement len(self).
        """
        return len(self._changes)

    def __getitem__(self, index: int) -> Change:
        """
        Return self[index]

        :param index: The index to return.
        :type index: ``int``
        """
        return self._changes[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, ChangeSet):
            return NotImplemented
        return set(self._changes) == set(other._changes)

    __hash__ = None

    def _of_type(self, change_type: ChangeType) -> List[Change]:
        return [c for c in self._changes if c.change_type == change_type]

    @property
    def created(self) -> List[Change]:
        """
        Return create changes in this ``ChangeSet`` instance.

        :returns: Changes with ``ChangeType.CREATE`` type.
        :rtype: ``List[Change]``
        """
        return self._of_type(ChangeType.CREATE)

    @property
    def modified(self) -> List[Change]:
        """
        Return modify changes in this ``ChangeSet`` instance.

        :returns: Changes with ``ChangeType.MODIFY`` type.
        :rtype: ``List[Change]``
        """
        return self._of_type(ChangeType.MODIFY)

    @property
    def deleted(self) -> List[Change]:
        """
        Return delete changes in this ``ChangeSet`` instance.

        :returns: Changes with ``ChangeType.DELETE`` type.
        :rtype: ``List[Change]``
        """
        return self._of_type(ChangeType.DELETE)

    def paths(self) -> List[str]:
        """
        Return a list of paths that changed in this ``ChangeSet``.

        :returns: Path list.
        :rtype: ``List[str]``
        """
        return [change.path for change in self._changes]

    def sorted(self) -> List[Change]:
        """
        Return the changes in presentation order: lexicographic by path.

        :returns: A new sorted list of changes.
        :rtype: ``List[Change]``
        """
        return sorted(self._changes, key=lambda c: (c.path, c.change_type.value))

    def apply_order(self) -> List[Change]:
        """
        Return the changes in the order used to apply them: deletions
        first, then modifications, then creations, each sorted by path.
        Removing files before creating new ones lets a deleted directory
        tree make way for new content at the same path.

        :returns: A new ordered list of changes.
        :rtype: ``List[Change]``
        """
        rank = {ChangeType.DELETE: 0, ChangeType.MODIFY: 1, ChangeType.CREATE: 2}
        return sorted(self._changes, key=lambda c: (rank[c.change_type], c.path))

    def summary(self) -> str:
        """
        Return a one line count of changes by type.

        :returns: A string such as "1 created, 2 modified, 0 deleted".
        :rtype: ``str``
        """
        return (
            f"{len(self.created)} created, "
            f"{len(self.modified)} modified, "
            f"{len(self.deleted)} deleted"
        )

    def json(self, pretty: bool = False) -> str:
        """
        Return JSON representation of the changes in this instance in
        presentation order.

        :returns: JSON string description of file system changes.
        :rtype: ``str``
        """
        dicts = [change.to_dict() for change in self.sorted()]
        return json.dumps(dicts, indent=4 if pretty else None)


__all__ = [
    "CHANGE_MARKERS",
    "Change",
    "ChangeSet",
    "Create",
    "Delete",
    "Modify",
]
