# notes.py -- Review notes attached to commits
# Copyright (C) 2026 The revgraph authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# revgraph is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Notes handling.

Notes live under a notes ref (e.g. ``refs/notes/devtools/reviews``) and are
keyed by revision. Each (notes ref, revision) pair holds a payload made of
newline-separated notes; appending adds one more line.
"""

__all__ = [
    "DEFAULT_MERGE_STRATEGY",
    "DEFAULT_NOTES_REF",
    "MERGE_STRATEGIES",
    "NOTES_REF_PREFIX",
    "Note",
    "NotesStore",
    "combine_notes_cat_sort_uniq",
    "combine_notes_ours",
    "combine_notes_theirs",
    "combine_notes_union",
    "get_notes_ref",
    "join_notes",
    "split_notes",
]

import copy
import fnmatch
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Callable, Optional

from .log_utils import getLogger

if TYPE_CHECKING:
    from .config import Config

Note = str

NOTES_REF_PREFIX = "refs/notes/"
DEFAULT_NOTES_REF = NOTES_REF_PREFIX + "commits"
NOTE_SEPARATOR = "\n"

logger = getLogger(__name__)


def split_notes(payload: Optional[str]) -> list[Note]:
    """Split a stored payload into notes.

    Returns: An empty list for a missing payload, one entry per line otherwise
    """
    if payload is None:
        return []
    return [Note(line) for line in payload.split(NOTE_SEPARATOR)]


def join_notes(notes: Iterable[Note]) -> str:
    return NOTE_SEPARATOR.join(notes)


def combine_notes_cat_sort_uniq(
    local: Optional[str], remote: Optional[str]
) -> Optional[str]:
    """Combine two payloads into their sorted, de-duplicated lines.

    Empty lines are dropped. Applying the result again with the same remote
    payload leaves it unchanged.
    """
    if local is None and remote is None:
        return None
    lines = set()
    for payload in (local, remote):
        if payload:
            lines.update(line for line in payload.split(NOTE_SEPARATOR) if line)
    return join_notes(sorted(lines))


def combine_notes_union(local: Optional[str], remote: Optional[str]) -> Optional[str]:
    """Keep the local notes and append remote lines not already present."""
    if remote is None:
        return local
    if local is None:
        return remote
    present = set(split_notes(local))
    combined = split_notes(local)
    for line in split_notes(remote):
        if line and line not in present:
            present.add(line)
            combined.append(line)
    return join_notes(combined)


def combine_notes_ours(local: Optional[str], remote: Optional[str]) -> Optional[str]:
    return local if local is not None else remote


def combine_notes_theirs(local: Optional[str], remote: Optional[str]) -> Optional[str]:
    return remote if remote is not None else local


CombineNotes = Callable[[Optional[str], Optional[str]], Optional[str]]

MERGE_STRATEGIES: dict[str, CombineNotes] = {
    "cat_sort_uniq": combine_notes_cat_sort_uniq,
    "union": combine_notes_union,
    "ours": combine_notes_ours,
    "theirs": combine_notes_theirs,
}
DEFAULT_MERGE_STRATEGY = "cat_sort_uniq"


def get_notes_ref(notes_ref: Optional[str] = None, config: Optional["Config"] = None) -> str:
    """Get the notes reference to use.

    Args:
        notes_ref: The notes ref to use, or None to use the default
        config: Config to read notes.displayRef from

    Returns:
        The notes reference name
    """
    if notes_ref is None:
        if config is not None:
            try:
                notes_ref = config.get(("notes",), "displayRef")
            except KeyError:
                pass
        if notes_ref is None:
            notes_ref = DEFAULT_NOTES_REF
    return notes_ref


class NotesStore:
    """Notes for every notes ref, kept in memory.

    This store is not threadsafe.
    """

    def __init__(self, notes: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self._notes: dict[str, dict[str, str]] = {}
        for notes_ref, revisions in (notes or {}).items():
            for revision, payload in revisions.items():
                self.set_payload(notes_ref, revision, payload)

    def __contains__(self, notes_ref: str) -> bool:
        return notes_ref in self._notes

    def __eq__(self, other: object) -> bool:
        return isinstance(other, NotesStore) and self._notes == other._notes

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._notes!r})"

    def get_payload(self, notes_ref: str, revision: str) -> Optional[str]:
        """Return the raw payload stored for a revision, or None."""
        return self._notes.get(notes_ref, {}).get(revision)

    def set_payload(self, notes_ref: str, revision: str, payload: str) -> None:
        """Replace the raw payload stored for a revision."""
        self._notes.setdefault(notes_ref, {})[revision] = payload

    def append(self, notes_ref: str, revision: str, note: Note) -> None:
        """Append a note to a revision under the given ref.

        Repeated appends of the same note produce repeated entries.
        """
        existing = self.get_payload(notes_ref, revision)
        if existing is None:
            payload = note
        else:
            payload = existing + NOTE_SEPARATOR + note
        self.set_payload(notes_ref, revision, payload)
        logger.debug("Appended note to %s under %s", revision, notes_ref)

    def get_notes(self, notes_ref: str, revision: str) -> list[Note]:
        """Read the notes annotating a revision, oldest first.

        Returns: An empty list when the revision has no notes
        """
        return split_notes(self.get_payload(notes_ref, revision))

    def revisions(self, notes_ref: str) -> list[str]:
        """All revisions with notes under the given ref, sorted."""
        return sorted(self._notes.get(notes_ref, {}))

    def noted_revisions(
        self, notes_ref: str, is_commit: Optional[Callable[[str], bool]] = None
    ) -> list[str]:
        """Revisions annotated under the given ref.

        Args:
          notes_ref: Notes ref to list
          is_commit: Predicate for known commits; revisions failing it are
            left out rather than reported as errors
        Returns: Sorted list of revisions
        """
        revisions = self.revisions(notes_ref)
        if is_commit is None:
            return revisions
        return [revision for revision in revisions if is_commit(revision)]

    def notes_refs(self) -> list[str]:
        return sorted(self._notes)

    def matching_refs(self, pattern: str) -> list[str]:
        """Notes refs matching a glob such as ``refs/notes/devtools/*``."""
        return [ref for ref in self.notes_refs() if fnmatch.fnmatchcase(ref, pattern)]

    def as_dict(self) -> dict[str, dict[str, str]]:
        return copy.deepcopy(self._notes)

    def merge(
        self,
        notes_ref: str,
        other: Mapping[str, str],
        strategy: str = DEFAULT_MERGE_STRATEGY,
    ) -> list[str]:
        """Reconcile another copy of a notes ref into this store.

        Args:
          notes_ref: Notes ref being merged
          other: Mapping of revision to payload from the other side
          strategy: Name of a strategy in MERGE_STRATEGIES
        Returns: Sorted list of revisions whose payload changed
        Raises:
          ValueError: for an unknown strategy
        """
        try:
            combine = MERGE_STRATEGIES[strategy]
        except KeyError:
            raise ValueError(f"Unknown notes merge strategy: {strategy!r}") from None
        changed = []
        for revision in sorted(other):
            local = self.get_payload(notes_ref, revision)
            merged = combine(local, other[revision])
            if merged is not None and merged != local:
                self.set_payload(notes_ref, revision, merged)
                changed.append(revision)
        logger.debug(
            "Merged %d notes into %s using %s (%d changed)",
            len(other),
            notes_ref,
            strategy,
            len(changed),
        )
        return changed
