# test_refs.py -- tests for refs.py
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

"""Tests for revgraph.refs."""

from revgraph import errors
from revgraph.object_store import MemoryCommitStore
from revgraph.refs import (
    DictRefsContainer,
    SymrefLoop,
    check_ref_format,
    is_local_branch,
    local_branch_name,
    parse_remote_ref,
    remote_tracking_ref,
)

from . import TestCase
from .utils import REVIEW_HISTORY, build_commit_graph


class CheckRefFormatTests(TestCase):
    """Tests for the check_ref_format function.

    These are the same tests as in the git test suite.
    """

    def test_valid(self) -> None:
        self.assertTrue(check_ref_format("heads/foo"))
        self.assertTrue(check_ref_format("foo/bar/baz"))
        self.assertTrue(check_ref_format("refs///heads/foo"))
        self.assertTrue(check_ref_format("foo./bar"))
        self.assertTrue(check_ref_format("heads/foo@bar"))
        self.assertTrue(check_ref_format("heads/fix.lock.error"))
        self.assertTrue(check_ref_format("refs/heads/ojarjur/mychange"))

    def test_invalid(self) -> None:
        self.assertFalse(check_ref_format("foo"))
        self.assertFalse(check_ref_format("heads/foo/"))
        self.assertFalse(check_ref_format("./foo"))
        self.assertFalse(check_ref_format(".refs/foo"))
        self.assertFalse(check_ref_format("heads/foo..bar"))
        self.assertFalse(check_ref_format("heads/foo?bar"))
        self.assertFalse(check_ref_format("heads/foo.lock"))
        self.assertFalse(check_ref_format("heads/v@{ation"))
        self.assertFalse(check_ref_format("heads/foo\\bar"))


class RefNameTests(TestCase):
    def test_parse_remote_ref(self) -> None:
        self.assertEqual(
            ("origin", "feature/x"), parse_remote_ref("refs/remotes/origin/feature/x")
        )
        self.assertRaises(ValueError, parse_remote_ref, "refs/heads/master")
        self.assertRaises(ValueError, parse_remote_ref, "refs/remotes/origin")

    def test_is_local_branch(self) -> None:
        self.assertTrue(is_local_branch("refs/heads/master"))
        self.assertFalse(is_local_branch("refs/remotes/origin/master"))

    def test_local_branch_name(self) -> None:
        self.assertEqual("refs/heads/master", local_branch_name("master"))
        self.assertEqual("refs/heads/master", local_branch_name("refs/heads/master"))

    def test_remote_tracking_ref(self) -> None:
        self.assertEqual(
            "refs/remotes/origin/ojarjur/mychange",
            remote_tracking_ref("refs/heads/ojarjur/mychange"),
        )
        self.assertEqual(
            "refs/remotes/upstream/master",
            remote_tracking_ref("refs/heads/master", "upstream"),
        )
        self.assertEqual("refs/tags/v1.0", remote_tracking_ref("refs/tags/v1.0"))


class DictRefsContainerTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self._store = MemoryCommitStore()
        build_commit_graph(self._store, REVIEW_HISTORY)
        self._log = []
        self._refs = DictRefsContainer(
            self._store,
            {"refs/heads/master": "J", "refs/tags/v1.0": "B"},
            logger=lambda *args: self._log.append(args),
        )
        self._refs.set_symbolic_ref("HEAD", "refs/heads/master")

    def test_keys(self) -> None:
        self.assertEqual(
            {"HEAD", "refs/heads/master", "refs/tags/v1.0"}, self._refs.keys()
        )
        self.assertEqual(self._refs.allkeys(), self._refs.keys())
        self.assertEqual({"master"}, self._refs.keys("refs/heads/"))

    def test_iter(self) -> None:
        self.assertEqual(self._refs.keys(), set(self._refs))

    def test_as_dict(self) -> None:
        # symbolic refs are not included
        self.assertEqual(
            {"refs/heads/master": "J", "refs/tags/v1.0": "B"}, self._refs.as_dict()
        )
        self.assertEqual({"v1.0": "B"}, self._refs.as_dict("refs/tags/"))

    def test_get_symrefs(self) -> None:
        self.assertEqual({"HEAD": "refs/heads/master"}, self._refs.get_symrefs())

    def test_getitem(self) -> None:
        self.assertEqual("J", self._refs["HEAD"])
        self.assertEqual("J", self._refs["refs/heads/master"])
        self.assertRaises(KeyError, self._refs.__getitem__, "refs/heads/missing")

    def test_contains(self) -> None:
        self.assertIn("HEAD", self._refs)
        self.assertIn("refs/heads/master", self._refs)
        self.assertNotIn("refs/heads/bar", self._refs)

    def test_setitem(self) -> None:
        self._refs["refs/some/ref"] = "A"
        self.assertEqual("A", self._refs["refs/some/ref"])
        self.assertEqual(("refs/some/ref", None, "A", None), self._log[-1])

        # should not accept bad ref names
        self.assertRaises(
            errors.RefFormatError, self._refs.__setitem__, "notrefs", "A"
        )

        # should not accept unknown commits
        self.assertRaises(
            errors.UnknownCommit, self._refs.__setitem__, "refs/some/ref", "Z"
        )
        self.assertEqual("A", self._refs["refs/some/ref"])

    def test_set_follows_symref(self) -> None:
        self._refs.set_ref("HEAD", "F", message="reset")
        self.assertEqual("F", self._refs["refs/heads/master"])
        self.assertEqual("refs/heads/master", self._refs.get_symref("HEAD"))
        self.assertEqual(("refs/heads/master", "J", "F", "reset"), self._log[-1])

    def test_set_if_equals(self) -> None:
        self.assertFalse(self._refs.set_if_equals("HEAD", "A", "F"))
        self.assertEqual("J", self._refs["HEAD"])

        self.assertTrue(self._refs.set_if_equals("HEAD", "J", "F"))
        self.assertEqual("F", self._refs["refs/heads/master"])

        # Setting the ref again is a no-op, but will return True.
        self.assertTrue(self._refs.set_if_equals("HEAD", "F", "F"))
        self.assertEqual("F", self._refs["HEAD"])

        self.assertTrue(self._refs.set_if_equals("refs/heads/new", None, "A"))
        self.assertEqual("A", self._refs["refs/heads/new"])

    def test_set_symbolic_ref_unborn(self) -> None:
        self._refs.set_symbolic_ref("HEAD", "refs/heads/unborn")
        self.assertEqual((["HEAD", "refs/heads/unborn"], None), self._refs.follow("HEAD"))
        self.assertRaises(KeyError, self._refs.__getitem__, "HEAD")

    def test_set_symbolic_ref_overwrite(self) -> None:
        self._refs["refs/heads/symbolic"] = "A"
        self._refs.set_symbolic_ref("refs/heads/symbolic", "refs/heads/master")
        self.assertEqual("J", self._refs["refs/heads/symbolic"])
        self.assertNotIn("refs/heads/symbolic", self._refs.as_dict())

    def test_symref_loop(self) -> None:
        self._refs.set_symbolic_ref("refs/heads/loop", "refs/heads/loop")
        self.assertRaises(SymrefLoop, self._refs.follow, "refs/heads/loop")

    def test_remove(self) -> None:
        del self._refs["refs/tags/v1.0"]
        self.assertNotIn("refs/tags/v1.0", self._refs)
        self.assertEqual(("refs/tags/v1.0", "B", None, None), self._log[-1])
        self.assertRaises(KeyError, self._refs.remove, "refs/tags/v1.0")

    def test_remove_symref(self) -> None:
        self._refs.remove("HEAD")
        self.assertIsNone(self._refs.get_symref("HEAD"))
        self.assertIn("refs/heads/master", self._refs)


class ResolveTests(TestCase):
    def setUp(self) -> None:
        super().setUp()
        self._store = MemoryCommitStore()
        build_commit_graph(self._store, REVIEW_HISTORY)
        self._refs = DictRefsContainer(
            self._store,
            {
                "refs/remotes/origin/master": "J",
                "refs/heads/ojarjur/mychange": "I",
            },
        )

    def test_resolve_ref(self) -> None:
        self.assertEqual("I", self._refs.resolve("refs/heads/ojarjur/mychange"))

    def test_resolve_commit_id(self) -> None:
        self.assertEqual("C", self._refs.resolve("C"))

    def test_ref_shadows_commit_id(self) -> None:
        self._refs.set_ref("refs/tags/A", "B")
        self.assertEqual("B", self._refs.resolve("refs/tags/A"))
        self.assertEqual("A", self._refs.resolve("A"))

    def test_resolve_unknown(self) -> None:
        with self.assertRaises(errors.UnknownRef) as cm:
            self._refs.resolve("refs/heads/master")
        self.assertEqual("refs/heads/master", cm.exception.ref)
        self.assertEqual(
            "The ref 'refs/heads/master' does not exist", str(cm.exception)
        )

    def test_resolve_remote_local_wins(self) -> None:
        self._refs.set_ref("refs/heads/master", "F")
        self.assertEqual("F", self._refs.resolve_remote("refs/heads/master"))

    def test_resolve_remote_fallback(self) -> None:
        self.assertEqual("J", self._refs.resolve_remote("refs/heads/master"))

    def test_resolve_remote_other_remote(self) -> None:
        self._refs.set_ref("refs/remotes/upstream/feature", "G")
        self.assertEqual(
            "G", self._refs.resolve_remote("refs/heads/feature", "upstream")
        )

    def test_resolve_remote_reports_second_error(self) -> None:
        with self.assertRaises(errors.UnknownRef) as cm:
            self._refs.resolve_remote("refs/heads/missing")
        self.assertEqual("refs/remotes/origin/missing", cm.exception.ref)

    def test_resolve_remote_commit_id(self) -> None:
        self.assertEqual("A", self._refs.resolve_remote("A"))
