# repo.py -- For dealing with review repositories
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

"""Repository access.

:class:`Repo` ties together a commit store, a ref table, a notes store and a
backend, and answers the queries a code-review tool makes against its
repository. Arguments named ``ref`` accept a ref name or a raw commit id.

:class:`MemoryRepo` builds a fresh, independent repository in memory.
"""

__all__ = [
    "MemoryRepo",
    "Repo",
]

import hashlib
import json
import os
from collections.abc import Sequence
from typing import Any, Optional, Union

from .backend import Backend, MemoryBackend
from .config import Config, ConfigDict, ConfigFile
from .errors import MissingCommitError, UnknownRef
from .graph import find_merge_base, is_ancestor
from .log_utils import getLogger
from .notes import DEFAULT_MERGE_STRATEGY, Note, NotesStore, get_notes_ref
from .object_store import BaseCommitStore, MemoryCommitStore
from .objects import Commit, CommitDetails, ObjectID, make_commit_id
from .refs import DEFAULT_REMOTE, HEADREF, LOCAL_BRANCH_PREFIX, DictRefsContainer

logger = getLogger(__name__)

DEFAULT_BRANCH = LOCAL_BRANCH_PREFIX + "master"


class Repo:
    """A review repository.

    Attributes:
      object_store: Commit storage
      refs: Ref table
      notes: Notes storage
      backend: Environment, checkout and transport operations
    """

    def __init__(
        self,
        object_store: BaseCommitStore,
        refs: DictRefsContainer,
        notes: NotesStore,
        backend: Backend,
        config: Optional[Config] = None,
    ) -> None:
        self.object_store = object_store
        self.refs = refs
        self.notes = notes
        self.backend = backend
        self._config = config if config is not None else ConfigDict()

    def get_config(self) -> Config:
        return self._config

    def save_config(self) -> None:
        """Write the configuration back to the file it was read from.

        Raises:
          ValueError: if the configuration did not come from a file
        """
        if not isinstance(self._config, ConfigFile):
            raise ValueError("Configuration is not backed by a file")
        self._config.write_to_path()

    def _lookup_parents(self, sha: ObjectID) -> Sequence[ObjectID]:
        return self.object_store.get_parents(sha)

    @property
    def remote_name(self) -> str:
        """Remote used for ref fallback, from ``revgraph.remote``."""
        try:
            return self._config.get(("revgraph",), "remote")
        except KeyError:
            return DEFAULT_REMOTE

    @property
    def notes_merge_strategy(self) -> str:
        """Strategy used to reconcile pulled notes, from ``notes.mergeStrategy``."""
        try:
            return self._config.get(("notes",), "mergeStrategy")
        except KeyError:
            return DEFAULT_MERGE_STRATEGY

    def get_path(self) -> str:
        return self.backend.get_path()

    def _state(self) -> dict[str, Any]:
        return {
            "symrefs": self.refs.get_symrefs(),
            "refs": self.refs.as_dict(),
            "commits": {
                sha: self.object_store[sha].as_dict() for sha in self.object_store
            },
            "notes": self.notes.as_dict(),
        }

    def get_repo_state_hash(self) -> str:
        """Return a hash which embodies the entire current state of the repository.

        The state is serialised with sorted keys, so two repositories with
        the same content always hash alike.
        """
        state = json.dumps(self._state(), sort_keys=True, separators=(",", ":"))
        return hashlib.sha1(state.encode("utf-8")).hexdigest()

    def get_user_email(self) -> str:
        return self.backend.get_user_email()

    def get_core_editor(self) -> str:
        return self.backend.get_core_editor()

    def has_uncommitted_changes(self) -> bool:
        return self.backend.has_uncommitted_changes()

    def verify_commit(self, sha: ObjectID) -> None:
        """Verify that the supplied id is a known commit.

        Raises:
          MissingCommitError: if it is not
        """
        if sha not in self.object_store:
            raise MissingCommitError(sha)

    def verify_git_ref(self, ref: str) -> None:
        """Verify that the supplied ref points to a known commit.

        Raises:
          UnknownRef: if it does not
        """
        self.refs.resolve(ref)

    def get_head_ref(self) -> str:
        """Return the ref that is the current HEAD.

        Returns: The checked-out branch, or the commit id when HEAD is
            detached
        """
        symref = self.refs.get_symref(HEADREF)
        if symref is not None:
            return symref
        return self.refs.resolve(HEADREF)

    def get_commit_hash(self, ref: str) -> ObjectID:
        """Return the commit a ref points to, without remote fallback."""
        return self.refs.resolve(ref)

    def resolve_ref_commit(self, ref: str) -> ObjectID:
        """Return the commit a ref points to, which may be a remote ref.

        Unlike :meth:`get_commit_hash`, a branch that only exists as a
        remote-tracking ref still resolves. Use this for commands that may be
        run by either the reviewer or the reviewee.
        """
        return self.refs.resolve_remote(ref, self.remote_name)

    def _get_commit(self, ref: str) -> Commit:
        return self.object_store[self.refs.resolve(ref)]

    def get_commit_message(self, ref: str) -> str:
        return self._get_commit(ref).message

    def get_commit_time(self, ref: str) -> str:
        return self._get_commit(ref).time

    def get_last_parent(self, ref: str) -> Optional[ObjectID]:
        """Return the last parent of the given commit, or None for a root."""
        parents = self._get_commit(ref).parents
        if parents:
            return parents[-1]
        return None

    def get_commit_details(self, ref: str) -> CommitDetails:
        commit = self._get_commit(ref)
        return CommitDetails(
            author=commit.author,
            author_email=commit.author_email,
            summary=commit.message,
            time=commit.time,
            parents=list(commit.parents),
        )

    def _resolve_or_name(self, ref: str) -> str:
        try:
            return self.refs.resolve(ref)
        except UnknownRef:
            return ref

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """Determine if ``ancestor`` is an ancestor of ``descendant``.

        A commit is its own ancestor. An unknown ``ancestor`` is simply not
        found in the history.

        Raises:
          UnknownRef: if ``descendant`` does not resolve
        """
        return is_ancestor(
            self._lookup_parents,
            self._resolve_or_name(ancestor),
            self.refs.resolve(descendant),
        )

    def merge_base(self, a: str, b: str) -> Optional[ObjectID]:
        """Find a common ancestor of two commits, or None if there is none.

        An unknown ``b`` has no common ancestor with ``a``.

        Raises:
          UnknownRef: if ``a`` does not resolve
        """
        return find_merge_base(
            self._lookup_parents, self.refs.resolve(a), self._resolve_or_name(b)
        )

    def diff(self, left: str, right: str, *diff_args: str) -> str:
        return self.backend.diff(left, right, *diff_args)

    def show(self, commit: str, path: str) -> str:
        return self.backend.show(commit, path)

    def switch_to_ref(self, ref: str) -> None:
        self.backend.switch_to_ref(ref)

    def merge_ref(self, ref: str, fast_forward: bool, *messages: str) -> None:
        self.backend.merge_ref(ref, fast_forward, *messages)

    def rebase_ref(self, ref: str) -> None:
        self.backend.rebase_ref(ref)

    def list_commits_between(self, start: str, end: str) -> list[ObjectID]:
        """List the commits between two revisions.

        Args:
          start: Exclusive starting point; if it is not an ancestor of
            ``end``, their merge base is used instead
          end: Inclusive end point
        Returns: Commit ids in chronological order, oldest first
        """
        return self.backend.list_commits_between(
            self.refs.resolve(start), self.refs.resolve(end)
        )

    def get_notes(self, notes_ref: Optional[str], revision: str) -> list[Note]:
        """Read the notes from the given ref that annotate the given revision."""
        return self.notes.get_notes(get_notes_ref(notes_ref, self._config), revision)

    def append_note(self, notes_ref: Optional[str], revision: str, note: Note) -> None:
        """Append a note to a revision under the given ref."""
        self.notes.append(get_notes_ref(notes_ref, self._config), revision, note)

    def list_noted_revisions(self, notes_ref: Optional[str]) -> list[ObjectID]:
        """Return the commits that are annotated by notes in the given ref."""
        return self.notes.noted_revisions(
            get_notes_ref(notes_ref, self._config), self.object_store.__contains__
        )

    def push_notes(self, remote: str, notes_ref_pattern: str) -> None:
        """Push notes refs matching a pattern to a remote."""
        self.backend.push_notes(
            remote, notes_ref_pattern, self.notes, self.notes_merge_strategy
        )

    def pull_notes(self, remote: str, notes_ref_pattern: str) -> None:
        """Fetch notes refs matching a pattern and merge them into local notes.

        Notes present on both sides are reconciled with the configured
        strategy, ``cat_sort_uniq`` unless ``notes.mergeStrategy`` says
        otherwise. Pulling the same remote state again changes nothing.
        """
        fetched = self.backend.fetch_notes(remote, notes_ref_pattern)
        strategy = self.notes_merge_strategy
        for notes_ref in sorted(fetched):
            self.notes.merge(notes_ref, fetched[notes_ref], strategy)
        logger.debug("Pulled %d notes refs from %s", len(fetched), remote)

    def set_ref(self, ref: str, sha: ObjectID, message: Optional[str] = None) -> None:
        self.refs.set_ref(ref, sha, message)

    def do_commit(
        self,
        message: str,
        time: str,
        ref: str = HEADREF,
        merge_heads: Sequence[ObjectID] = (),
        author: str = "",
        author_email: str = "",
        commit_id: Optional[ObjectID] = None,
    ) -> ObjectID:
        """Create a new commit on top of a ref and move the ref to it.

        Args:
          message: Commit message
          time: String-encoded commit timestamp
          ref: Ref to commit to; an unborn ref yields a root commit
          merge_heads: Additional parents
          author: Author name
          author_email: Author email
          commit_id: Explicit id; derived from the content when omitted
        Returns: Id of the new commit
        """
        _, current = self.refs.follow(ref)
        parents = ([current] if current is not None else []) + list(merge_heads)
        if commit_id is None:
            commit_id = make_commit_id(message, time, parents, author, author_email)
        self.object_store.put_commit(
            commit_id, message, time, parents, author, author_email
        )
        self.refs.set_ref(ref, commit_id, message=f"commit: {message}")
        return commit_id


class MemoryRepo(Repo):
    """Repo that stores commits, refs and notes in memory.

    Every instance is independent of every other one.
    """

    def __init__(self, path: str = "~/mockRepo/", config: Optional[Config] = None) -> None:
        self._reflog: list[tuple[str, Optional[str], Optional[str], Optional[str]]] = []
        if config is None:
            config = ConfigDict()
        object_store = MemoryCommitStore()
        refs = DictRefsContainer(object_store, logger=self._append_reflog)
        refs.set_symbolic_ref(HEADREF, DEFAULT_BRANCH)
        backend = MemoryBackend(object_store, refs, config, path=path)
        super().__init__(object_store, refs, NotesStore(), backend, config)

    @classmethod
    def from_config_path(
        cls, config_path: Union[str, os.PathLike], path: str = "~/mockRepo/"
    ) -> "MemoryRepo":
        """Create an empty repository configured from a git-config file."""
        return cls(path=path, config=ConfigFile.from_path(config_path))

    def _append_reflog(
        self,
        ref: str,
        old_sha: Optional[str],
        new_sha: Optional[str],
        message: Optional[str],
    ) -> None:
        self._reflog.append((ref, old_sha, new_sha, message))

    def get_reflog(self) -> list[tuple[str, Optional[str], Optional[str], Optional[str]]]:
        return list(self._reflog)
