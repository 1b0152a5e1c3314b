"""Read the impacted test list and turn it into test-selection properties.

Selection properties use a comma separated pattern syntax::

    FooTest,pkg.test_bar.TestBar#test_baz,!*Slow*

Entries are ``fnmatch`` globs matched against an item's node id, its dotted
qualified name and its bare class (or module) name. ``Cls#method`` restricts
an entry to matching test functions. Entries starting with ``!`` exclude.
An entry equal to a candidate name selects it even when it holds glob
characters, and commas inside ``[...]`` parameter ids do not split entries.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

import pytest

from pytest_selenic.messages import SelenicError

IMPACTED_TESTS_LIST = Path(".coverage") / "lsts" / "impacted_tests.lst"

TEST_PROPERTY = "test"
IT_TEST_PROPERTY = "it.test"
FAIL_IF_NO_TESTS_PROPERTIES = (
    "surefire.failIfNoSpecifiedTests",
    "it.failIfNoSpecifiedTests",
)
NO_TESTS = "!*"


def read_impacted_tests(work_dir: Path) -> list[str]:
    path = work_dir / IMPACTED_TESTS_LIST
    if not path.exists():
        return []
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as e:
        raise SelenicError("impacted.read.failed", path, e) from e
    tests = (line.strip() for line in lines)
    return list(dict.fromkeys(t for t in tests if t))


def to_test_pattern(tests: list[str]) -> str:
    return ",".join(tests)


def apply_impacted_tests(properties: MutableMapping[str, str], tests: list[str]) -> None:
    if not tests:
        pattern = NO_TESTS
        for key in FAIL_IF_NO_TESTS_PROPERTIES:
            properties[key] = "false"
    else:
        pattern = to_test_pattern(tests)
    properties[TEST_PROPERTY] = pattern
    properties[IT_TEST_PROPERTY] = pattern


def _module_name(item: pytest.Item, root_path: Path) -> str:
    path = Path(item.path)
    try:
        path = path.relative_to(root_path)
    except ValueError:
        return path.stem
    return ".".join(path.with_suffix("").parts)


def _split(text: str, sep: str) -> list[str]:
    """Split on ``sep``, leaving ``[...]`` parameter ids intact."""
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for char in text:
        if char == "[":
            depth += 1
        elif char == "]" and depth:
            depth -= 1
        elif char == sep and not depth:
            parts.append("".join(current))
            current = []
            continue
        current.append(char)
    parts.append("".join(current))
    return parts


@dataclass(frozen=True)
class PatternEntry:
    name: str
    method: str | None = None
    exclude: bool = False

    @classmethod
    def parse(cls, text: str) -> PatternEntry:
        exclude = text.startswith("!")
        if exclude:
            text = text[1:].strip()
        name, *method = _split(text, "#")
        return cls(
            name=name or "*",
            method="#".join(method) if method else None,
            exclude=exclude,
        )

    @property
    def is_simple(self) -> bool:
        return not any(c in self.name for c in "./:")

    def matches(self, item: pytest.Item, root_path: Path) -> bool:
        if self.method is not None:
            names = (item.name, getattr(item, "originalname", None) or item.name)
            if self.method not in names and not any(fnmatchcase(n, self.method) for n in names):
                return False

        module = _module_name(item, root_path)
        cls = getattr(item, "cls", None)
        qualified = f"{module}.{cls.__name__}" if cls is not None else module
        bare = cls.__name__ if cls is not None else module.rpartition(".")[2]

        candidates = (item.nodeid, qualified, bare)
        if self.name in candidates or any(fnmatchcase(c, self.name) for c in candidates):
            return True
        return self.is_simple and fnmatchcase(qualified, f"*.{self.name}")


@dataclass(frozen=True)
class TestPattern:
    __test__ = False

    includes: tuple[PatternEntry, ...] = ()
    excludes: tuple[PatternEntry, ...] = ()

    @classmethod
    def parse(cls, text: str) -> TestPattern:
        entries = [PatternEntry.parse(part.strip()) for part in _split(text, ",") if part.strip()]
        return cls(
            includes=tuple(e for e in entries if not e.exclude),
            excludes=tuple(e for e in entries if e.exclude),
        )

    def selects(self, item: pytest.Item, root_path: Path) -> bool:
        if self.includes and not any(e.matches(item, root_path) for e in self.includes):
            return False
        return not any(e.matches(item, root_path) for e in self.excludes)
