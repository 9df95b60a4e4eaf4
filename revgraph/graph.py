# graph.py -- Ancestry queries over the commit graph
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

"""Ancestry queries: ancestor walks, ancestor tests and merge bases.

Every function takes a ``lookup_parents`` callable mapping a commit id to
its parent ids and raising :class:`revgraph.errors.NotFound` for unknown
commits, so the functions hold no state of their own and can run against
any view of the graph.

A commit counts as its own ancestor throughout this module.
"""

__all__ = [
    "WorkList",
    "ancestors",
    "can_fast_forward",
    "find_lowest_common_ancestors",
    "find_merge_base",
    "is_ancestor",
    "list_commits_between",
]

from collections import deque
from collections.abc import Iterator, Mapping, Sequence
from heapq import heappop, heappush
from typing import Callable, Generic, Optional, TypeVar

from .errors import NotFound
from .log_utils import getLogger
from .objects import ObjectID

T = TypeVar("T")

LookupParents = Callable[[ObjectID], Sequence[ObjectID]]
LookupStamp = Callable[[ObjectID], int]

logger = getLogger(__name__)


def ancestors(lookup_parents: LookupParents, commit: ObjectID) -> list[ObjectID]:
    """List the ancestors of a commit in breadth-first order.

    The walk starts at the immediate parents; ``commit`` itself is not
    included. A commit reachable along several paths is listed once, at the
    position where the walk first reaches it.

    Args:
      lookup_parents: Function to get parent commits
      commit: Commit to start from
    Returns: List of ancestor commit ids, nearest first
    Raises:
      NotFound: if any commit met during the walk is missing
    """
    result: list[ObjectID] = []
    seen: set[ObjectID] = set()
    queue: deque[ObjectID] = deque([commit])
    while queue:
        cmt = queue.popleft()
        for parent in lookup_parents(cmt):
            if parent in seen:
                continue
            seen.add(parent)
            result.append(parent)
            queue.append(parent)
    return result


def _reachable(lookup_parents: LookupParents, commit: ObjectID) -> set[ObjectID]:
    """Return ``commit`` and every commit reachable from it.

    Missing commits below ``commit`` end their branch of the walk instead of
    failing it.

    Raises:
      NotFound: if ``commit`` itself is missing
    """
    reachable = {commit}
    stack = list(lookup_parents(commit))
    while stack:
        cmt = stack.pop()
        if cmt in reachable:
            continue
        reachable.add(cmt)
        try:
            stack.extend(lookup_parents(cmt))
        except NotFound:
            logger.debug("Skipping missing commit %s", cmt)
    return reachable


def is_ancestor(
    lookup_parents: LookupParents, ancestor: ObjectID, descendant: ObjectID
) -> bool:
    """Check whether ``ancestor`` is reachable from ``descendant``.

    The search is depth-first over the parent chain and stops at the first
    path that reaches ``ancestor``. A missing commit below ``descendant`` is
    treated as a dead end: the graph may be a partial view, and another path
    can still succeed.

    Args:
      lookup_parents: Function to get parent commits
      ancestor: Candidate ancestor
      descendant: Commit to search from
    Returns: True if ``ancestor`` is ``descendant`` or one of its ancestors
    Raises:
      NotFound: if ``descendant`` itself is missing
    """
    if ancestor == descendant:
        return True
    stack = list(reversed(lookup_parents(descendant)))
    seen: set[ObjectID] = set()
    while stack:
        cmt = stack.pop()
        if cmt == ancestor:
            return True
        if cmt in seen:
            continue
        seen.add(cmt)
        try:
            parents = lookup_parents(cmt)
        except NotFound:
            logger.debug("Skipping missing commit %s", cmt)
            continue
        stack.extend(reversed(parents))
    return False


def can_fast_forward(lookup_parents: LookupParents, c1: ObjectID, c2: ObjectID) -> bool:
    """Is it possible to fast-forward from c1 to c2?"""
    return is_ancestor(lookup_parents, c1, c2)


def find_merge_base(
    lookup_parents: LookupParents, a: ObjectID, b: ObjectID
) -> Optional[ObjectID]:
    """Find a common ancestor of two commits.

    ``a`` and then its ancestors are scanned nearest first, and the first
    one that is also an ancestor of ``b`` is returned. In histories with
    several merge bases this is one valid join point, not necessarily a
    lowest one; see :func:`find_lowest_common_ancestors` for that.

    Args:
      lookup_parents: Function to get parent commits
      a: First commit
      b: Second commit
    Returns: A common ancestor, or None if the commits share no history
    Raises:
      NotFound: if a commit reachable from ``a`` is missing
    """
    if a == b:
        return a
    candidates = [a] + ancestors(lookup_parents, a)
    try:
        reachable = _reachable(lookup_parents, b)
    except NotFound:
        logger.debug("No merge base: %s is missing", b)
        return None
    for candidate in candidates:
        if candidate in reachable:
            return candidate
    return None


# priority queue using builtin python minheap tools, with negated
# timestamps so that the newest commit comes out first
class WorkList(Generic[T]):
    """Priority queue for commit processing using a min-heap."""

    def __init__(self) -> None:
        self.pq: list[tuple[int, T]] = []

    def __len__(self) -> int:
        return len(self.pq)

    def add(self, item: tuple[int, T]) -> None:
        """Add an item to the work list.

        Args:
            item: Tuple of (timestamp, commit)
        """
        dt, cmt = item
        heappush(self.pq, (-dt, cmt))

    def get(self) -> Optional[tuple[int, T]]:
        """Get the newest item from the work list, or None if empty."""
        if not self.pq:
            return None
        pr, cmt = heappop(self.pq)
        return -pr, cmt

    def iter(self) -> Iterator[tuple[int, T]]:
        for pr, cmt in self.pq:
            yield (-pr, cmt)


def find_lowest_common_ancestors(
    lookup_parents: LookupParents,
    c1: ObjectID,
    c2s: Sequence[ObjectID],
    lookup_stamp: LookupStamp,
) -> list[ObjectID]:
    """Find all lowest common ancestors of ``c1`` and any of ``c2s``.

    Commits are processed newest first; once a commit is known to be a
    common ancestor its own ancestors are marked so that they are not
    reported.

    Args:
        lookup_parents: Function to get parent commits
        c1: First commit
        c2s: List of second commits
        lookup_stamp: Function to get commit timestamp

    Returns:
        List of lowest common ancestor commit ids, oldest first
    """
    if c1 in c2s:
        return [c1]

    cands: list[tuple[int, ObjectID]] = []
    cstates: dict[ObjectID, int] = {}

    _ANC_OF_1 = 1  # ancestor of commit 1
    _ANC_OF_2 = 2  # ancestor of commit 2
    _DNC = 4  # Do Not Consider
    _LCA = 8  # potential LCA

    def _has_candidates(wlst: WorkList[ObjectID], cstates: Mapping[ObjectID, int]) -> bool:
        for dt, cmt in wlst.iter():
            if cmt in cstates and not (cstates[cmt] & _DNC):
                return True
        return False

    wlst: WorkList[ObjectID] = WorkList()
    cstates[c1] = _ANC_OF_1
    wlst.add((lookup_stamp(c1), c1))
    for c2 in c2s:
        cstates[c2] = cstates.get(c2, 0) | _ANC_OF_2
        wlst.add((lookup_stamp(c2), c2))

    while _has_candidates(wlst, cstates):
        result = wlst.get()
        if result is None:
            break
        dt, cmt = result
        # Look only at ancestry and _DNC flags so that already found LCAs
        # can still be marked _DNC by lower ones
        cflags = cstates[cmt] & (_ANC_OF_1 | _ANC_OF_2 | _DNC)
        if cflags == (_ANC_OF_1 | _ANC_OF_2):
            if not (cstates[cmt] & _LCA):
                cstates[cmt] = cstates[cmt] | _LCA
                cands.append((dt, cmt))
            cflags = cflags | _DNC
        for pcmt in lookup_parents(cmt):
            pflags = cstates.get(pcmt, 0)
            # already visited with no new information
            if (pflags & cflags) == cflags:
                continue
            cstates[pcmt] = pflags | cflags
            wlst.add((lookup_stamp(pcmt), pcmt))

    results: list[tuple[int, ObjectID]] = []
    for dt, cmt in cands:
        if not (cstates[cmt] & _DNC) and (dt, cmt) not in results:
            results.append((dt, cmt))
    results.sort()
    return [cmt for dt, cmt in results]


def list_commits_between(
    lookup_parents: LookupParents,
    lookup_stamp: LookupStamp,
    start: ObjectID,
    end: ObjectID,
) -> list[ObjectID]:
    """List the commits between two revisions, oldest first.

    Args:
      lookup_parents: Function to get parent commits
      lookup_stamp: Function to get commit timestamp
      start: Exclusive starting point. If it is not an ancestor of ``end``,
        their merge base is used instead.
      end: Inclusive end point
    Returns: Commit ids with every parent listed before its children, ties
        broken by commit time and then id
    Raises:
      NotFound: if a commit reachable from ``end`` is missing
    """
    # The merge base of an ancestor of ``end`` is that ancestor itself.
    base = find_merge_base(lookup_parents, start, end)
    excluded = _reachable(lookup_parents, base) if base is not None else set()

    parents: dict[ObjectID, list[ObjectID]] = {}
    queue: deque[ObjectID] = deque([end] if end not in excluded else [])
    while queue:
        cmt = queue.popleft()
        if cmt in parents:
            continue
        parents[cmt] = [p for p in lookup_parents(cmt) if p not in excluded]
        queue.extend(parents[cmt])

    children: dict[ObjectID, list[ObjectID]] = {cmt: [] for cmt in parents}
    pending = {cmt: len(set(ps)) for cmt, ps in parents.items()}
    for cmt, ps in parents.items():
        for p in set(ps):
            children[p].append(cmt)

    ready: list[tuple[int, ObjectID]] = []
    for cmt, count in pending.items():
        if not count:
            heappush(ready, (lookup_stamp(cmt), cmt))
    result = []
    while ready:
        _, cmt = heappop(ready)
        result.append(cmt)
        for child in children[cmt]:
            pending[child] -= 1
            if not pending[child]:
                heappush(ready, (lookup_stamp(child), child))
    return result
