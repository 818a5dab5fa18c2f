"""
Path matchers and their boolean combinators.

A matcher is configured as a table with a ``type`` tag:

- ``path``: ``{type = "path", path = "abc"}``
- ``regex``: ``{type = "regex", pattern = "^docs/"}``
- ``any`` / ``all``: ``{type = "any", matchers = [...]}``
- ``not``: ``{type = "not", matcher = {...}}``
- ``root``: ``{type = "root"}``

The path handed to a matcher is the request path as extracted by the dispatcher,
i.e. everything after the leading slash of the URL path.
"""

import re
from typing import Any, List, Mapping, Optional, Pattern

from shrtlnk.contracts import Matcher
from shrtlnk.errors import ConfigError


class PathMatcher(Matcher):
    """Matches when the path equals the configured one, ignoring outer slashes."""

    def __init__(self, path: str) -> None:
        self.path: str = path
        self._stripped: str = path.strip("/")

    def prepare(self) -> None:
        pass

    def matches(self, path: str) -> bool:
        return path.strip("/") == self._stripped

    def __repr__(self) -> str:
        return f"PathMatcher({self.path!r})"


class RegexMatcher(Matcher):
    """
    Matches when a regular expression is found in the raw, untrimmed path.

    The pattern is compiled by ``prepare``; evaluating the matcher before that is a
    programming error.
    """

    def __init__(self, pattern: str) -> None:
        self.pattern: str = pattern
        self._compiled: Optional[Pattern[str]] = None

    def prepare(self) -> None:
        try:
            self._compiled = re.compile(self.pattern)
        except re.error as err:
            raise ConfigError(f"invalid regular expression {self.pattern!r}: {err}").within(
                "inside a Regex matcher"
            ) from err

    def matches(self, path: str) -> bool:
        if self._compiled is None:
            raise RuntimeError(f"Regex matcher {self.pattern!r} evaluated before prepare()")
        return self._compiled.search(path) is not None

    def __repr__(self) -> str:
        return f"RegexMatcher({self.pattern!r})"


class _CombinatorMatcher(Matcher):
    """Shared preparation for the list-based combinators."""

    block_name: str = ""

    def __init__(self, matchers: List[Matcher]) -> None:
        self.matchers: List[Matcher] = matchers

    def prepare(self) -> None:
        location = f"inside a {self.block_name} block"
        if not self.matchers:
            raise ConfigError("the list of matchers must not be empty").within(location)
        for child in self.matchers:
            try:
                child.prepare()
            except ConfigError as err:
                raise err.within(location) from err

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.matchers!r})"


class AnyMatcher(_CombinatorMatcher):
    """True iff at least one child matches. Evaluated left to right, short-circuiting."""

    block_name = "MatchesAny"

    def matches(self, path: str) -> bool:
        return any(child.matches(path) for child in self.matchers)


class AllMatcher(_CombinatorMatcher):
    """True iff every child matches. Evaluated left to right, short-circuiting."""

    block_name = "MatchesAll"

    def matches(self, path: str) -> bool:
        return all(child.matches(path) for child in self.matchers)


class NotMatcher(Matcher):
    """Logical negation of a single child."""

    def __init__(self, matcher: Matcher) -> None:
        self.matcher: Matcher = matcher

    def prepare(self) -> None:
        try:
            self.matcher.prepare()
        except ConfigError as err:
            raise err.within("inside a Not block") from err

    def matches(self, path: str) -> bool:
        return not self.matcher.matches(path)

    def __repr__(self) -> str:
        return f"NotMatcher({self.matcher!r})"


class RootMatcher(Matcher):
    """
    Matches a path made only of slashes, the empty path included.

    ``"///"`` matches as well as ``"/"``; the literal "only slashes" rule is kept.
    """

    def prepare(self) -> None:
        pass

    def matches(self, path: str) -> bool:
        return all(c == "/" for c in path)

    def __repr__(self) -> str:
        return "RootMatcher()"


def parse_matcher(raw: Any) -> Matcher:
    """
    Build an unprepared matcher tree from its deserialized configuration.

    Args:
        raw: A mapping with a ``type`` tag and the fields of that matcher type.

    Returns:
        Matcher: The root of the matcher tree. ``prepare`` has not been called yet.

    Raises:
        ConfigError: If the tag is unknown or a required field is missing or has the
            wrong shape.
    """
    if not isinstance(raw, Mapping):
        raise ConfigError(f"a matcher must be a table, got {type(raw).__name__}")

    tag = raw.get("type")
    if tag == "path":
        return PathMatcher(_require_str(raw, "path", "path"))
    elif tag == "regex":
        return RegexMatcher(_require_str(raw, "pattern", "regex"))
    elif tag in ("any", "all"):
        cls = AnyMatcher if tag == "any" else AllMatcher
        children = raw.get("matchers")
        if not isinstance(children, list):
            raise ConfigError(f"the '{tag}' matcher needs a 'matchers' list")
        parsed: List[Matcher] = []
        for child in children:
            try:
                parsed.append(parse_matcher(child))
            except ConfigError as err:
                raise err.within(f"inside a {cls.block_name} block") from err
        return cls(parsed)
    elif tag == "not":
        if "matcher" not in raw:
            raise ConfigError("the 'not' matcher needs a 'matcher' field")
        try:
            return NotMatcher(parse_matcher(raw["matcher"]))
        except ConfigError as err:
            raise err.within("inside a Not block") from err
    elif tag == "root":
        return RootMatcher()

    raise ConfigError(
        f"unknown matcher type {tag!r}. Allowed values are: path, regex, any, all, not, root"
    )


def _require_str(raw: Mapping, key: str, tag: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise ConfigError(f"the '{tag}' matcher needs a string field '{key}'")
    return value
