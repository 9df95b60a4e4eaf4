# errors.py -- errors for revgraph
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

"""revgraph-related exception classes."""

__all__ = [
    "IntegrityViolation",
    "MissingCommitError",
    "NotFound",
    "RefFormatError",
    "RepositoryError",
    "UnknownCommit",
    "UnknownRef",
]


class RepositoryError(Exception):
    """Base class for errors raised by revgraph."""


class NotFound(RepositoryError):
    """A referenced commit, ref, revision or remote is absent."""

    def __init__(self, name: str, *args: object) -> None:
        """Initialize a NotFound exception.

        Args:
            name: Name of the missing item.
            *args: Optional message overriding the default one.
        """
        self.name = name
        if args:
            RepositoryError.__init__(self, *args)
        else:
            RepositoryError.__init__(self, f"{name!r} was not found")


class MissingCommitError(NotFound):
    """Indicates that a commit was not found in the repository."""

    def __init__(self, sha: str) -> None:
        """Initialize a MissingCommitError.

        Args:
            sha: The id of the missing commit.
        """
        self.sha = sha
        NotFound.__init__(self, sha, f"The given hash {sha!r} is not a known commit")


class UnknownRef(RepositoryError):
    """A ref is neither a known ref name nor a known commit id."""

    def __init__(self, ref: str) -> None:
        """Initialize an UnknownRef exception.

        Args:
            ref: The ref that could not be resolved.
        """
        self.ref = ref
        RepositoryError.__init__(self, f"The ref {ref!r} does not exist")


class UnknownCommit(RepositoryError):
    """A ref update targets a commit that does not exist."""

    def __init__(self, ref: str, sha: str) -> None:
        """Initialize an UnknownCommit exception.

        Args:
            ref: The ref being updated.
            sha: The missing target commit.
        """
        self.ref = ref
        self.sha = sha
        RepositoryError.__init__(
            self, f"Cannot point {ref!r} at unknown commit {sha!r}"
        )


class IntegrityViolation(RepositoryError):
    """A commit id was re-inserted with different content."""

    def __init__(self, sha: str) -> None:
        """Initialize an IntegrityViolation.

        Args:
            sha: The commit id that was re-inserted.
        """
        self.sha = sha
        RepositoryError.__init__(
            self, f"Commit {sha!r} already exists with different content"
        )


class RefFormatError(RepositoryError):
    """Indicates an invalid ref name."""
