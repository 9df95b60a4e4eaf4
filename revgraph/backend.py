# backend.py -- Storage and transport backends for revgraph
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

"""Backends behind the repository facade.

A backend provides everything the graph engine does not: environment and
configuration lookups, content rendering, checkout changes and notes
transport. :class:`MemoryBackend` implements all of it in memory, with
remotes modelled as named :class:`~revgraph.notes.NotesStore` instances.
"""

__all__ = [
    "Backend",
    "MemoryBackend",
    "NotFastForward",
]

import os
from typing import TYPE_CHECKING, Optional

from .errors import NotFound, RepositoryError
from .graph import can_fast_forward, is_ancestor, list_commits_between
from .log_utils import getLogger
from .notes import DEFAULT_MERGE_STRATEGY, NotesStore
from .objects import Commit, ObjectID, make_commit_id
from .refs import HEADREF

if TYPE_CHECKING:
    from .config import Config
    from .object_store import BaseCommitStore
    from .refs import DictRefsContainer

logger = getLogger(__name__)

DEFAULT_EDITOR = "vi"


class NotFastForward(RepositoryError):
    """A fast-forward-only merge was requested but is not possible."""

    def __init__(self, ref: str) -> None:
        self.ref = ref
        RepositoryError.__init__(self, f"Cannot fast-forward to {ref!r}")


class Backend:
    """Operations the repository facade delegates to its surroundings."""

    def get_path(self) -> str:
        """Return the path to the repository."""
        raise NotImplementedError(self.get_path)

    def get_user_email(self) -> str:
        """Return the email address the user has configured."""
        raise NotImplementedError(self.get_user_email)

    def get_core_editor(self) -> str:
        """Return the editor the user has configured."""
        raise NotImplementedError(self.get_core_editor)

    def has_uncommitted_changes(self) -> bool:
        """Return True if there are local, uncommitted changes."""
        raise NotImplementedError(self.has_uncommitted_changes)

    def diff(self, left: ObjectID, right: ObjectID, *diff_args: str) -> str:
        """Compute the diff between two commits."""
        raise NotImplementedError(self.diff)

    def show(self, commit: ObjectID, path: str) -> str:
        """Return the contents of a file at a commit."""
        raise NotImplementedError(self.show)

    def switch_to_ref(self, ref: str) -> None:
        """Change the currently checked-out ref."""
        raise NotImplementedError(self.switch_to_ref)

    def merge_ref(self, ref: str, fast_forward: bool, *messages: str) -> None:
        """Merge a ref into the current one.

        Args:
          ref: Ref to merge
          fast_forward: Only move the current ref forward, never create a
            merge commit
          messages: Paragraphs of the merge commit message
        """
        raise NotImplementedError(self.merge_ref)

    def rebase_ref(self, ref: str) -> None:
        """Rebase the current ref onto the given one."""
        raise NotImplementedError(self.rebase_ref)

    def list_commits_between(self, start: ObjectID, end: ObjectID) -> list[ObjectID]:
        """List commits after ``start`` up to and including ``end``, oldest first."""
        raise NotImplementedError(self.list_commits_between)

    def push_notes(
        self,
        remote: str,
        notes_ref_pattern: str,
        notes: NotesStore,
        strategy: str = DEFAULT_MERGE_STRATEGY,
    ) -> None:
        """Send local notes refs matching a pattern to a remote."""
        raise NotImplementedError(self.push_notes)

    def fetch_notes(self, remote: str, notes_ref_pattern: str) -> dict[str, dict[str, str]]:
        """Fetch a remote's notes refs matching a pattern.

        Returns: Mapping of notes ref to a mapping of revision to payload
        """
        raise NotImplementedError(self.fetch_notes)


class MemoryBackend(Backend):
    """Backend that keeps checkout state and remotes in memory."""

    def __init__(
        self,
        object_store: "BaseCommitStore",
        refs: "DictRefsContainer",
        config: "Config",
        path: str = "~/mockRepo/",
    ) -> None:
        self._object_store = object_store
        self._refs = refs
        self._config = config
        self._path = path
        self._remotes: dict[str, NotesStore] = {}
        self.uncommitted_changes = False

    def add_remote(self, name: str, notes: Optional[NotesStore] = None) -> NotesStore:
        """Register a remote and return its notes store."""
        if notes is None:
            notes = NotesStore()
        self._remotes[name] = notes
        return notes

    def get_remote(self, name: str) -> NotesStore:
        try:
            return self._remotes[name]
        except KeyError:
            raise NotFound(name, f"The remote {name!r} does not exist") from None

    def get_path(self) -> str:
        return self._path

    def get_user_email(self) -> str:
        """Return the user's email address.

        GIT_AUTHOR_EMAIL wins over the ``user.email`` setting, which wins
        over EMAIL.

        Raises:
          NotFound: if no email address is configured anywhere
        """
        email = os.environ.get("GIT_AUTHOR_EMAIL")
        if email is None:
            try:
                email = self._config.get(("user",), "email")
            except KeyError:
                email = os.environ.get("EMAIL")
        if email is None:
            raise NotFound("user.email", "No user email address is configured")
        if email.startswith("<") and email.endswith(">"):
            email = email[1:-1]
        return email

    def get_core_editor(self) -> str:
        editor = os.environ.get("GIT_EDITOR")
        if editor:
            return editor
        try:
            return self._config.get(("core",), "editor")
        except KeyError:
            pass
        return os.environ.get("VISUAL") or os.environ.get("EDITOR") or DEFAULT_EDITOR

    def has_uncommitted_changes(self) -> bool:
        return self.uncommitted_changes

    def diff(self, left: ObjectID, right: ObjectID, *diff_args: str) -> str:
        return f'Diff between "{left}" and "{right}"'

    def show(self, commit: ObjectID, path: str) -> str:
        return f"{commit}:{path}"

    def switch_to_ref(self, ref: str) -> None:
        """Check out a ref.

        Branch names make HEAD symbolic; anything else detaches HEAD at the
        resolved commit.
        """
        if ref in self._refs.as_dict():
            self._refs.set_symbolic_ref(HEADREF, ref, message=f"checkout: moving to {ref}")
            return
        sha = self._refs.resolve(ref)
        if self._refs.get_symref(HEADREF) is not None:
            self._refs.remove(HEADREF)
        self._refs.set_ref(HEADREF, sha, message=f"checkout: moving to {sha}")

    def _head(self) -> ObjectID:
        return self._refs.resolve(HEADREF)

    def _parents(self, sha: ObjectID) -> tuple[ObjectID, ...]:
        return self._object_store.get_parents(sha)

    def _add_commit(
        self, message: str, time: str, parents: tuple[ObjectID, ...]
    ) -> ObjectID:
        sha = make_commit_id(message, time, parents)
        self._object_store.add_commit(Commit(sha, message, time, parents))
        return sha

    def merge_ref(self, ref: str, fast_forward: bool, *messages: str) -> None:
        """Merge a ref into HEAD.

        Raises:
          NotFastForward: if ``fast_forward`` is set and HEAD has diverged
        """
        target = self._refs.resolve(ref)
        head = self._head()
        if is_ancestor(self._parents, target, head):
            logger.debug("%s is already merged into HEAD", ref)
            return
        if can_fast_forward(self._parents, head, target):
            self._refs.set_ref(HEADREF, target, message=f"merge {ref}: Fast-forward")
            return
        if fast_forward:
            raise NotFastForward(ref)
        message = "\n\n".join(messages) if messages else f"Merge {ref}"
        time = str(
            max(
                self._object_store[head].commit_time,
                self._object_store[target].commit_time,
            )
        )
        sha = self._add_commit(message, time, (head, target))
        self._refs.set_ref(HEADREF, sha, message=f"merge {ref}")

    def rebase_ref(self, ref: str) -> None:
        """Replay the commits of HEAD that are not in ``ref`` on top of it.

        Merge commits are dropped, as with a plain ``git rebase``.
        """
        target = self._refs.resolve(ref)
        head = self._head()
        if is_ancestor(self._parents, target, head):
            logger.debug("HEAD is already based on %s", ref)
            return
        new_parent = target
        for sha in self.list_commits_between(target, head):
            commit = self._object_store[sha]
            if len(commit.parents) > 1:
                continue
            new_parent = self._add_commit(commit.message, commit.time, (new_parent,))
        self._refs.set_ref(HEADREF, new_parent, message=f"rebase onto {ref}")

    def list_commits_between(self, start: ObjectID, end: ObjectID) -> list[ObjectID]:
        return list_commits_between(
            self._parents, self._object_store.get_commit_time, start, end
        )

    def push_notes(
        self,
        remote: str,
        notes_ref_pattern: str,
        notes: NotesStore,
        strategy: str = DEFAULT_MERGE_STRATEGY,
    ) -> None:
        remote_notes = self.get_remote(remote)
        local = notes.as_dict()
        for notes_ref in notes.matching_refs(notes_ref_pattern):
            remote_notes.merge(notes_ref, local[notes_ref], strategy)
        logger.debug("Pushed notes matching %s to %s", notes_ref_pattern, remote)

    def fetch_notes(self, remote: str, notes_ref_pattern: str) -> dict[str, dict[str, str]]:
        remote_notes = self.get_remote(remote)
        fetched = remote_notes.as_dict()
        return {
            notes_ref: fetched[notes_ref]
            for notes_ref in remote_notes.matching_refs(notes_ref_pattern)
        }
