# utils.py -- Test utilities for revgraph
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

"""Utility functions common to revgraph tests.

The review repository built by :func:`make_review_repo` has this history::

  Master Branch:    A--B--D--E--F--J
                     \\   /    \\  \\
                       C       \\  \\
                                \\  \\
  Review Branch:                 G--H--I

Commits "B" and "D" represent reviews that have been submitted, and "G" is a
pending review.
"""

from collections.abc import Mapping, Sequence

from revgraph.errors import MissingCommitError
from revgraph.object_store import BaseCommitStore
from revgraph.repo import MemoryRepo

TEST_TARGET_REF = "refs/heads/master"
TEST_REVIEW_REF = "refs/heads/ojarjur/mychange"
TEST_REQUESTS_REF = "refs/notes/devtools/reviews"
TEST_COMMENTS_REF = "refs/notes/devtools/discuss"

TEST_REQUEST_B = (
    '{"timestamp": "0000000001", "reviewRef": "refs/heads/ojarjur/mychange", '
    '"targetRef": "refs/heads/master", "requester": "ojarjur", '
    '"reviewers": ["ojarjur"], "description": "B"}'
)
TEST_REQUEST_D = (
    '{"timestamp": "0000000002", "reviewRef": "refs/heads/ojarjur/mychange", '
    '"targetRef": "refs/heads/master", "requester": "ojarjur", '
    '"reviewers": ["ojarjur"], "description": "D"}'
)
TEST_REQUEST_G = "\n\n".join(
    [
        '{"timestamp": "0000000004", "reviewRef": "refs/heads/ojarjur/mychange", '
        '"targetRef": "refs/heads/master", "requester": "ojarjur", '
        '"reviewers": ["ojarjur"], "description": "G"}',
        '{"timestamp": "0000000005", "reviewRef": "refs/heads/ojarjur/mychange", '
        '"targetRef": "refs/heads/master", "requester": "ojarjur", '
        '"reviewers": ["ojarjur"], "description": "Updated description of G"}',
        '{"timestamp": "0000000005", "reviewRef": "refs/heads/ojarjur/mychange", '
        '"targetRef": "refs/heads/master", "requester": "ojarjur", '
        '"reviewers": ["ojarjur"], "description": "Final description of G"}',
    ]
)

TEST_DISCUSS_B = (
    '{"timestamp": "0000000001", "author": "ojarjur", '
    '"location": {"commit": "B"}, "resolved": true}'
)
TEST_DISCUSS_D = (
    '{"timestamp": "0000000003", "author": "ojarjur", '
    '"location": {"commit": "E"}, "resolved": true}'
)

# (id, message, time, parents), parents before children
REVIEW_HISTORY = [
    ("A", "First commit", "0", []),
    ("B", "Second commit", "1", ["A"]),
    ("C", "No, I'm the second commit", "1", ["A"]),
    ("D", "Fourth commit", "2", ["B", "C"]),
    ("E", "Fifth commit", "3", ["D"]),
    ("F", "Sixth commit", "4", ["E"]),
    ("G", "No, I'm the sixth commit", "4", ["E"]),
    ("H", "Seventh commit", "5", ["G", "F"]),
    ("I", "Eighth commit", "6", ["H"]),
    ("J", "No, I'm the eighth commit", "6", ["F"]),
]


def build_commit_graph(
    object_store: BaseCommitStore,
    commit_spec: Sequence[tuple[str, str, str, Sequence[str]]],
) -> list[str]:
    """Build a commit graph from a concise specification.

    Args:
      object_store: Store to add the commits to
      commit_spec: Entries of (id, message, time, parents) in topological
        order
    Returns: The ids of the commits created
    """
    ids = []
    for sha, message, time, parents in commit_spec:
        object_store.put_commit(sha, message, time, parents)
        ids.append(sha)
    return ids


def make_review_repo() -> MemoryRepo:
    """Create a repository holding the review history above.

    HEAD points at the master branch, which holds "J"; the review branch
    holds "I".
    """
    repo = MemoryRepo()
    build_commit_graph(repo.object_store, REVIEW_HISTORY)
    repo.refs[TEST_TARGET_REF] = "J"
    repo.refs[TEST_REVIEW_REF] = "I"
    for revision, payload in [("B", TEST_REQUEST_B), ("D", TEST_REQUEST_D), ("G", TEST_REQUEST_G)]:
        repo.notes.set_payload(TEST_REQUESTS_REF, revision, payload)
    for revision, payload in [("B", TEST_DISCUSS_B), ("D", TEST_DISCUSS_D)]:
        repo.notes.set_payload(TEST_COMMENTS_REF, revision, payload)
    return repo


def make_lookup_parents(dag: Mapping[str, Sequence[str]]):
    """Return a parent lookup over a plain dict, raising for unknown ids."""

    def lookup_parents(commit_id: str) -> Sequence[str]:
        try:
            return dag[commit_id]
        except KeyError:
            raise MissingCommitError(commit_id) from None

    return lookup_parents
