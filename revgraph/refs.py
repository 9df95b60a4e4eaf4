# refs.py -- For dealing with refs
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

"""Ref handling."""

__all__ = [
    "DEFAULT_REMOTE",
    "HEADREF",
    "LOCAL_BRANCH_PREFIX",
    "LOCAL_NOTES_PREFIX",
    "LOCAL_REMOTE_PREFIX",
    "DictRefsContainer",
    "SymrefLoop",
    "check_ref_format",
    "is_local_branch",
    "local_branch_name",
    "parse_remote_ref",
    "remote_tracking_ref",
]

from collections.abc import Iterator
from typing import TYPE_CHECKING, Callable, Optional

from .errors import RefFormatError, RepositoryError, UnknownCommit, UnknownRef
from .log_utils import getLogger
from .objects import ObjectID

if TYPE_CHECKING:
    from .object_store import BaseCommitStore

Ref = str

HEADREF = "HEAD"
LOCAL_BRANCH_PREFIX = "refs/heads/"
LOCAL_TAG_PREFIX = "refs/tags/"
LOCAL_REMOTE_PREFIX = "refs/remotes/"
LOCAL_NOTES_PREFIX = "refs/notes/"
DEFAULT_REMOTE = "origin"
BAD_REF_CHARS = set("\177 ~^:?*[")

# Maximum number of symbolic refs followed before giving up
MAX_SYMREF_DEPTH = 5

RefLogger = Callable[[Ref, Optional[ObjectID], Optional[ObjectID], Optional[str]], None]

logger = getLogger(__name__)


class SymrefLoop(RepositoryError):
    """There is a loop between one or more symrefs."""

    def __init__(self, ref: Ref, depth: int) -> None:
        self.ref = ref
        self.depth = depth
        RepositoryError.__init__(self, f"Symbolic ref loop at {ref!r} (depth {depth})")


def check_ref_format(refname: Ref) -> bool:
    """Check if a refname is correctly formatted.

    Implements the rules of git-check-ref-format.

    Args:
      refname: The refname to check
    Returns: True if refname is valid, False otherwise
    """
    if "/." in refname or refname.startswith("."):
        return False
    if "/" not in refname:
        return False
    if ".." in refname:
        return False
    for c in refname:
        if ord(c) < 0o40 or c in BAD_REF_CHARS:
            return False
    if refname[-1] in "/.":
        return False
    if refname.endswith(".lock"):
        return False
    if "@{" in refname:
        return False
    if "\\" in refname:
        return False
    return True


def parse_remote_ref(ref: Ref) -> tuple[str, str]:
    """Parse a remote-tracking ref into remote name and branch name.

    Args:
      ref: Remote ref like "refs/remotes/origin/main"
    Returns:
      Tuple of (remote_name, branch_name)
    Raises:
      ValueError: If ref is not a valid remote ref
    """
    if not ref.startswith(LOCAL_REMOTE_PREFIX):
        raise ValueError(f"Not a remote ref: {ref!r}")
    parts = ref[len(LOCAL_REMOTE_PREFIX) :].split("/", 1)
    if len(parts) != 2 or not all(parts):
        raise ValueError(f"Invalid remote ref format: {ref!r}")
    return parts[0], parts[1]


def is_local_branch(x: Ref) -> bool:
    """Check if a ref name is a local branch."""
    return x.startswith(LOCAL_BRANCH_PREFIX)


def local_branch_name(name: str) -> Ref:
    """Build a full branch ref from a short name.

    Examples:
      >>> local_branch_name("master")
      'refs/heads/master'
      >>> local_branch_name("refs/heads/master")
      'refs/heads/master'
    """
    if name.startswith(LOCAL_BRANCH_PREFIX):
        return name
    return LOCAL_BRANCH_PREFIX + name


def remote_tracking_ref(ref: Ref, remote: str = DEFAULT_REMOTE) -> Ref:
    """Map a local branch ref onto its remote-tracking counterpart.

    Refs that are not local branches are returned unchanged.

    Examples:
      >>> remote_tracking_ref("refs/heads/master")
      'refs/remotes/origin/master'
      >>> remote_tracking_ref("refs/tags/v1.0")
      'refs/tags/v1.0'
    """
    if not is_local_branch(ref):
        return ref
    return f"{LOCAL_REMOTE_PREFIX}{remote}/{ref[len(LOCAL_BRANCH_PREFIX):]}"


class DictRefsContainer:
    """Ref table backed by a simple dict.

    Refs may only point at commits present in ``object_store``. A name that
    is not a ref but is a known commit id resolves to itself, so callers can
    pass either.

    This container is not threadsafe.
    """

    def __init__(
        self,
        object_store: "BaseCommitStore",
        refs: Optional[dict[Ref, ObjectID]] = None,
        logger: Optional[RefLogger] = None,
    ) -> None:
        self._object_store = object_store
        self._refs: dict[Ref, ObjectID] = {}
        self._symrefs: dict[Ref, Ref] = {}
        self._logger = logger
        for name, sha in (refs or {}).items():
            self.set_ref(name, sha)

    def _log(
        self,
        ref: Ref,
        old_sha: Optional[ObjectID],
        new_sha: Optional[ObjectID],
        message: Optional[str] = None,
    ) -> None:
        logger.debug("Updating ref %s: %s -> %s", ref, old_sha, new_sha)
        if self._logger is not None:
            self._logger(ref, old_sha, new_sha, message)

    def __contains__(self, refname: Ref) -> bool:
        return refname in self._refs or refname in self._symrefs

    def __iter__(self) -> Iterator[Ref]:
        return iter(self.allkeys())

    def __getitem__(self, name: Ref) -> ObjectID:
        """Get the commit a ref points to, following symbolic refs.

        Raises:
          KeyError: if the ref does not exist
        """
        _, sha = self.follow(name)
        if sha is None:
            raise KeyError(name)
        return sha

    def allkeys(self) -> set[Ref]:
        """All refs present in this container, symbolic ones included."""
        return set(self._refs) | set(self._symrefs)

    def keys(self, base: Optional[Ref] = None) -> set[Ref]:
        """Refs present in this container.

        Args:
          base: An optional prefix; matching refs are returned with the
            prefix stripped
        """
        if base is None:
            return self.allkeys()
        return {name[len(base) :] for name in self._refs if name.startswith(base)}

    def as_dict(self, base: Optional[Ref] = None) -> dict[Ref, ObjectID]:
        """Return the non-symbolic refs as a dictionary."""
        if base is None:
            return dict(self._refs)
        return {
            name[len(base) :]: sha
            for name, sha in self._refs.items()
            if name.startswith(base)
        }

    def get_symrefs(self) -> dict[Ref, Ref]:
        return dict(self._symrefs)

    def follow(self, name: Ref) -> tuple[list[Ref], Optional[ObjectID]]:
        """Follow a ref name back to a commit id.

        Args:
          name: The name of the ref to follow
        Returns: a tuple of (refnames, sha), where refnames are the names of
            the refs followed and sha is None when the chain ends at a
            missing ref
        Raises:
          SymrefLoop: if the chain of symbolic refs is too deep
        """
        refnames = []
        contents: Optional[Ref] = name
        depth = 0
        while contents is not None and contents in self._symrefs:
            refnames.append(contents)
            contents = self._symrefs[contents]
            depth += 1
            if depth > MAX_SYMREF_DEPTH:
                raise SymrefLoop(name, depth)
        if contents is None:
            return refnames, None
        refnames.append(contents)
        return refnames, self._refs.get(contents)

    def get_symref(self, name: Ref) -> Optional[Ref]:
        """Return the target of a symbolic ref, or None."""
        return self._symrefs.get(name)

    def set_symbolic_ref(self, name: Ref, other: Ref, message: Optional[str] = None) -> None:
        """Make a ref point at another ref.

        The target does not need to exist yet, so that HEAD can name an
        unborn branch.
        """
        if name != HEADREF and not check_ref_format(name):
            raise RefFormatError(name)
        self._refs.pop(name, None)
        self._symrefs[name] = other
        logger.debug("Setting symbolic ref %s to %s", name, other)
        if self._logger is not None:
            self._logger(name, None, None, message)

    def resolve(self, ref: Ref) -> ObjectID:
        """Resolve a ref name or commit id to a commit id.

        Raises:
          UnknownRef: if ``ref`` is neither a known ref nor a known commit
        """
        _, sha = self.follow(ref)
        if sha is not None:
            return sha
        if ref in self._object_store:
            return ref
        raise UnknownRef(ref)

    def resolve_remote(self, ref: Ref, remote: str = DEFAULT_REMOTE) -> ObjectID:
        """Resolve a ref, falling back to its remote-tracking ref.

        A branch such as ``refs/heads/feature`` that only exists locally as
        ``refs/remotes/origin/feature`` still resolves.

        Raises:
          UnknownRef: from the remote-tracking lookup, if both lookups fail
        """
        try:
            return self.resolve(ref)
        except UnknownRef:
            pass
        return self.resolve(remote_tracking_ref(ref, remote))

    def _check_target(self, name: Ref, sha: ObjectID) -> None:
        if sha not in self._object_store:
            raise UnknownCommit(name, sha)

    def set_ref(self, name: Ref, sha: ObjectID, message: Optional[str] = None) -> None:
        """Point a ref at a commit.

        Symbolic refs are followed, so setting HEAD moves the checked-out
        branch.

        Raises:
          RefFormatError: if the ref name is invalid
          UnknownCommit: if the commit does not exist
        """
        realnames, _ = self.follow(name)
        realname = realnames[-1]
        if realname != HEADREF and not check_ref_format(realname):
            raise RefFormatError(realname)
        self._check_target(realname, sha)
        old = self._refs.get(realname)
        self._refs[realname] = sha
        self._log(realname, old, sha, message)

    __setitem__ = set_ref

    def set_if_equals(
        self,
        name: Ref,
        old_ref: Optional[ObjectID],
        new_ref: ObjectID,
        message: Optional[str] = None,
    ) -> bool:
        """Set a ref only if it currently has the expected value.

        Args:
          name: The refname to set
          old_ref: The expected current value, or None if the ref must not
            exist
          new_ref: The new commit id
          message: Optional message for the update log
        Returns: True if the ref was updated
        """
        realnames, current = self.follow(name)
        if current != old_ref:
            return False
        self.set_ref(realnames[-1], new_ref, message)
        return True

    def remove(self, name: Ref, message: Optional[str] = None) -> None:
        """Remove a ref.

        Raises:
          KeyError: if the ref does not exist
        """
        if name in self._symrefs:
            del self._symrefs[name]
            self._log(name, None, None, message)
            return
        old = self._refs.pop(name)
        self._log(name, old, None, message)

    __delitem__ = remove
