# object_store.py -- Commit storage for revgraph
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

"""Commit store interfaces and implementation."""

__all__ = [
    "BaseCommitStore",
    "MemoryCommitStore",
]

from collections.abc import Iterable, Iterator, Sequence

from .errors import IntegrityViolation, MissingCommitError
from .log_utils import getLogger
from .objects import Commit, ObjectID

logger = getLogger(__name__)


class BaseCommitStore:
    """Commit store interface.

    Stores are append-only: commits can be added but never modified or
    removed.
    """

    def __contains__(self, sha: ObjectID) -> bool:
        """Check if a particular commit is present by id."""
        raise NotImplementedError(self.__contains__)

    def __getitem__(self, sha: ObjectID) -> Commit:
        """Obtain a commit by id.

        Raises:
          MissingCommitError: if the commit is not present
        """
        raise NotImplementedError(self.__getitem__)

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the ids that are present in this store."""
        raise NotImplementedError(self.__iter__)

    def add_commit(self, commit: Commit) -> None:
        """Add a single commit to this store."""
        raise NotImplementedError(self.add_commit)

    def add_commits(self, commits: Iterable[Commit]) -> None:
        """Add a set of commits, parents before children."""
        for commit in commits:
            self.add_commit(commit)

    def put_commit(
        self,
        sha: ObjectID,
        message: str,
        time: str,
        parents: Sequence[ObjectID] = (),
        author: str = "",
        author_email: str = "",
    ) -> Commit:
        """Create and add a commit.

        Args:
          sha: Id of the new commit
          message: Commit message
          time: String-encoded commit timestamp
          parents: Ids of existing parent commits
          author: Optional author name
          author_email: Optional author email
        Returns: The stored commit
        """
        commit = Commit(sha, message, time, tuple(parents), author, author_email)
        self.add_commit(commit)
        return commit

    def get_commit(self, sha: ObjectID) -> Commit:
        return self[sha]

    def get_parents(self, sha: ObjectID) -> tuple[ObjectID, ...]:
        """Retrieve the parents of a commit.

        Raises:
          MissingCommitError: if the commit is not present
        """
        return self[sha].parents

    def get_commit_time(self, sha: ObjectID) -> int:
        return self[sha].commit_time


class MemoryCommitStore(BaseCommitStore):
    """Commit store that keeps all commits in memory.

    This store is not threadsafe.
    """

    def __init__(self) -> None:
        self._data: dict[ObjectID, Commit] = {}

    def __contains__(self, sha: ObjectID) -> bool:
        return sha in self._data

    def __getitem__(self, sha: ObjectID) -> Commit:
        try:
            return self._data[sha]
        except KeyError:
            raise MissingCommitError(sha) from None

    def __iter__(self) -> Iterator[ObjectID]:
        return iter(self._data.keys())

    def __len__(self) -> int:
        return len(self._data)

    def add_commit(self, commit: Commit) -> None:
        """Add a commit.

        Re-adding an identical commit is a no-op.

        Raises:
          IntegrityViolation: if a different commit with the same id exists
          MissingCommitError: if a parent is not in the store
        """
        existing = self._data.get(commit.id)
        if existing is not None:
            if existing != commit:
                raise IntegrityViolation(commit.id)
            return
        for parent in commit.parents:
            if parent not in self._data:
                raise MissingCommitError(parent)
        self._data[commit.id] = commit
        logger.debug("Added commit %s with parents %r", commit.id, commit.parents)

    def as_dict(self) -> dict[ObjectID, Commit]:
        return dict(self._data)
