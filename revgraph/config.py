# config.py -- Configuration handling for revgraph
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

"""Reading and writing git-style configuration.

Settings are addressed by a section tuple and a variable name, e.g.
``config.get(("user",), "email")`` or
``config.get(("remote", "origin"), "url")``. Section and variable names are
case-insensitive; subsection names are not.
"""

__all__ = [
    "Config",
    "ConfigDict",
    "ConfigFile",
    "lower_key",
]

import logging
import os
from collections.abc import Iterator
from typing import IO, Optional, Union, overload

Section = tuple[str, ...]
SectionLike = Union[str, tuple[str, ...]]
Value = str

logger = logging.getLogger(__name__)


def lower_key(section: SectionLike) -> Section:
    """Normalise a section for lookup.

    Args:
      section: Section name or tuple of section and subsection
    Returns: Tuple with the section name lowercased and the subsection intact
    """
    if isinstance(section, str):
        section = (section,)
    if not section:
        raise ValueError("empty section")
    return (section[0].lower(),) + tuple(section[1:])


class Config:
    """A git-style configuration."""

    def get(self, section: SectionLike, name: str) -> Value:
        """Retrieve the contents of a configuration setting.

        Args:
          section: Tuple with section name and optional subsection name
          name: Variable name
        Returns:
          Contents of the setting
        Raises:
          KeyError: if the value is not set
        """
        raise NotImplementedError(self.get)

    @overload
    def get_boolean(self, section: SectionLike, name: str, default: bool) -> bool: ...

    @overload
    def get_boolean(self, section: SectionLike, name: str) -> Optional[bool]: ...

    def get_boolean(
        self, section: SectionLike, name: str, default: Optional[bool] = None
    ) -> Optional[bool]:
        """Retrieve a configuration setting as boolean.

        Args:
          section: Tuple with section name and optional subsection name
          name: Variable name
          default: Default value if setting is not found
        Returns:
          Contents of the setting
        """
        try:
            value = self.get(section, name)
        except KeyError:
            return default
        if value.lower() in ("true", "yes", "on", "1"):
            return True
        elif value.lower() in ("false", "no", "off", "0", ""):
            return False
        raise ValueError(f"not a valid boolean string: {value!r}")

    def set(self, section: SectionLike, name: str, value: Union[str, bool, int]) -> None:
        """Set a configuration value.

        Args:
          section: Tuple with section name and optional subsection name
          name: Variable name
          value: value of the setting
        """
        raise NotImplementedError(self.set)

    def items(self, section: SectionLike) -> Iterator[tuple[str, Value]]:
        """Iterate over the configuration pairs for a specific section."""
        raise NotImplementedError(self.items)

    def sections(self) -> Iterator[Section]:
        """Iterate over the sections."""
        raise NotImplementedError(self.sections)

    def has_section(self, name: SectionLike) -> bool:
        """Check if a specified section exists.

        Args:
          name: Name of section to check for
        Returns:
          boolean indicating whether the section exists
        """
        return lower_key(name) in self.sections()


class ConfigDict(Config):
    """Configuration stored in a dictionary."""

    def __init__(self, values: Optional[dict[Section, dict[str, Value]]] = None) -> None:
        """Create a new ConfigDict."""
        self._values: dict[Section, dict[str, Value]] = {}
        for section, settings in (values or {}).items():
            self._values.setdefault(lower_key(section), {})
            for name, value in settings.items():
                self.set(section, name, value)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._values!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, self.__class__) and other._values == self._values

    def __len__(self) -> int:
        return len(self._values)

    def get(self, section: SectionLike, name: str) -> Value:
        """Get a configuration value.

        A lookup in a subsection falls back to the plain section.

        Raises:
            KeyError: if the value is not set
        """
        key = lower_key(section)
        name = name.lower()
        if len(key) > 1:
            try:
                return self._values[key][name]
            except KeyError:
                pass
        return self._values[(key[0],)][name]

    def set(self, section: SectionLike, name: str, value: Union[str, bool, int]) -> None:
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif not isinstance(value, str):
            value = str(value)
        self._values.setdefault(lower_key(section), {})[name.lower()] = value

    def remove(self, section: SectionLike, name: str) -> None:
        """Remove a configuration setting.

        Raises:
            KeyError: If the section or name doesn't exist
        """
        del self._values[lower_key(section)][name.lower()]

    def items(self, section: SectionLike) -> Iterator[tuple[str, Value]]:
        return iter(self._values.get(lower_key(section), {}).items())

    def sections(self) -> Iterator[Section]:
        return iter(list(self._values.keys()))


_ESCAPE_TABLE = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "t": "\t",
    "b": "\b",
}
_COMMENT_CHARS = ("#", ";")
_WHITESPACE_CHARS = ("\t", " ")


def _parse_string(value: str) -> str:
    value = value.strip()
    ret: list[str] = []
    whitespace: list[str] = []
    in_quotes = False
    i = 0
    while i < len(value):
        c = value[i]
        if c == "\\":
            i += 1
            ret.extend(whitespace)
            whitespace = []
            if i >= len(value):
                ret.append("\\")
            elif value[i] in _ESCAPE_TABLE:
                ret.append(_ESCAPE_TABLE[value[i]])
            else:
                # Unknown escape sequences are kept literally
                ret.append("\\")
                ret.append(value[i])
        elif c == '"':
            in_quotes = not in_quotes
        elif c in _COMMENT_CHARS and not in_quotes:
            break
        elif c in _WHITESPACE_CHARS:
            whitespace.append(c)
        else:
            ret.extend(whitespace)
            whitespace = []
            ret.append(c)
        i += 1

    if in_quotes:
        raise ValueError("missing end quote")

    return "".join(ret)


def _escape_value(value: str) -> str:
    """Escape a value."""
    value = value.replace("\\", "\\\\")
    value = value.replace("\n", "\\n")
    value = value.replace("\t", "\\t")
    value = value.replace('"', '\\"')
    return value


def _format_string(value: str) -> str:
    if value.startswith((" ", "\t")) or value.endswith((" ", "\t")) or "#" in value:
        return '"' + _escape_value(value) + '"'
    return _escape_value(value)


def _check_variable_name(name: str) -> bool:
    return bool(name) and all(c.isalnum() or c == "-" for c in name)


def _check_section_name(name: str) -> bool:
    return bool(name) and all(c.isalnum() or c in "-." for c in name)


def _strip_comments(line: str) -> str:
    string_open = False
    for i, character in enumerate(line):
        # Comment characters outside balanced quotes denote comment start
        if character == '"':
            string_open = not string_open
        elif not string_open and character in _COMMENT_CHARS:
            return line[:i]
    return line


def _parse_section_header_line(line: str) -> tuple[Section, str]:
    line = _strip_comments(line).rstrip()
    in_quotes = False
    for i, c in enumerate(line):
        if c == '"':
            in_quotes = not in_quotes
        if c == "]" and not in_quotes:
            last = i
            break
    else:
        raise ValueError("expected trailing ]")
    pts = line[1:last].split(" ", 1)
    rest = line[last + 1 :]
    if len(pts) == 2:
        if not (pts[1][:1] == '"' and pts[1][-1:] == '"'):
            raise ValueError(f"Invalid subsection {pts[1]!r}")
        if not _check_section_name(pts[0]):
            raise ValueError(f"invalid section name {pts[0]!r}")
        return (pts[0], pts[1][1:-1]), rest
    if not _check_section_name(pts[0]):
        raise ValueError(f"invalid section name {pts[0]!r}")
    dotted = pts[0].split(".", 1)
    return tuple(dotted), rest


class ConfigFile(ConfigDict):
    """A configuration file in git-config syntax."""

    def __init__(self, values: Optional[dict[Section, dict[str, Value]]] = None) -> None:
        super().__init__(values=values)
        self.path: Optional[str] = None

    @classmethod
    def from_file(cls, f: IO[bytes], encoding: str = "utf-8") -> "ConfigFile":
        """Read configuration from a file-like object.

        Args:
            f: File-like object to read from
            encoding: Text encoding of the file
        """
        ret = cls()
        section: Optional[Section] = None
        for lineno, raw in enumerate(f.readlines()):
            line = raw.decode(encoding)
            if lineno == 0 and line.startswith("\ufeff"):
                line = line[1:]
            line = line.lstrip()
            if line[:1] == "[":
                section, line = _parse_section_header_line(line)
                ret._values.setdefault(lower_key(section), {})
            if _strip_comments(line).strip() == "":
                continue
            if section is None:
                raise ValueError(f"setting {line!r} without section")
            try:
                setting, value = line.split("=", 1)
            except ValueError:
                setting = line
                value = "true"
            setting = _strip_comments(setting).strip()
            if not _check_variable_name(setting):
                raise ValueError(f"invalid variable name {setting!r}")
            ret.set(section, setting, _parse_string(value))
        return ret

    @classmethod
    def from_path(cls, path: Union[str, os.PathLike]) -> "ConfigFile":
        """Read configuration from a file on disk."""
        path = os.fspath(path)
        with open(path, "rb") as f:
            ret = cls.from_file(f)
        ret.path = path
        logger.debug("Loaded configuration from %s", path)
        return ret

    def write_to_file(self, f: IO[bytes], encoding: str = "utf-8") -> None:
        """Write configuration to a file-like object."""
        for section, values in self._values.items():
            if len(section) == 1:
                header = f"[{section[0]}]\n"
            else:
                header = f'[{section[0]} "{section[1]}"]\n'
            f.write(header.encode(encoding))
            for key, value in values.items():
                f.write(f"\t{key} = {_format_string(value)}\n".encode(encoding))

    def write_to_path(self, path: Optional[Union[str, os.PathLike]] = None) -> None:
        """Write configuration to a file on disk."""
        if path is None:
            if self.path is None:
                raise ValueError("No path specified and no default path available")
            path = self.path
        with open(os.fspath(path), "wb") as f:
            self.write_to_file(f)
