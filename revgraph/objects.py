# objects.py -- Commit records for revgraph
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

"""Commit records.

Commit ids are opaque strings. A commit never holds references to other
commit objects, only the ids of its parents, so the graph lives entirely in
the commit store.
"""

__all__ = [
    "Commit",
    "CommitDetails",
    "ObjectID",
    "make_commit_id",
    "parse_commit_time",
]

import hashlib
import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

ObjectID = str


def parse_commit_time(time: str) -> int:
    """Parse a string-encoded commit timestamp.

    Args:
      time: Decimal timestamp, e.g. ``"0000000004"``
    Returns: The timestamp as an integer; unparseable values sort as 0
    """
    try:
        return int(time)
    except ValueError:
        return 0


def make_commit_id(
    message: str,
    time: str,
    parents: Sequence[ObjectID] = (),
    author: str = "",
    author_email: str = "",
) -> ObjectID:
    """Derive a commit id from the commit's content.

    Returns: Hex SHA-1 digest
    """
    content = json.dumps(
        [message, time, list(parents), author, author_email],
        separators=(",", ":"),
    )
    return hashlib.sha1(content.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Commit:
    """An immutable commit record."""

    id: ObjectID
    message: str
    time: str
    parents: tuple[ObjectID, ...] = ()
    author: str = ""
    author_email: str = ""

    def __post_init__(self) -> None:
        # Accept any sequence of parents but store a tuple so the record
        # stays hashable and immutable.
        object.__setattr__(self, "parents", tuple(self.parents))

    @property
    def commit_time(self) -> int:
        return parse_commit_time(self.time)

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable representation of the commit."""
        return {
            "message": self.message,
            "time": self.time,
            "parents": list(self.parents),
            "author": self.author,
            "author_email": self.author_email,
        }


@dataclass
class CommitDetails:
    """Metadata about a commit, as reported to review tooling."""

    author: str
    author_email: str
    summary: str
    time: str
    parents: list[ObjectID] = field(default_factory=list)
