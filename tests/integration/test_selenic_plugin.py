"""Integration tests for the pytest-selenic plugin using pytester.

The coverage tool is replaced by a shell script posing as the Java launcher.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

pytestmark = pytest.mark.skipif(
    sys.platform.startswith("win"), reason="fake Java launcher is a POSIX shell script"
)


def write_launcher(java_home: Path, impacted: list[str] | None, exit_code: int = 0) -> None:
    """Write a fake Java launcher that records its arguments and the impacted tests."""
    lines = ["#!/bin/sh", 'printf "%s\\n" "$@" > args.txt']
    if impacted is not None:
        lines.append("mkdir -p .coverage/lsts")
        for test in impacted:
            lines.append(f"echo {test} >> .coverage/lsts/impacted_tests.lst")
    lines.append(f"exit {exit_code}")
    launcher = java_home / "bin" / "java"
    launcher.parent.mkdir(parents=True, exist_ok=True)
    launcher.write_text("\n".join(lines) + "\n")
    launcher.chmod(0o755)


@pytest.fixture
def selenic_project(pytester: pytest.Pytester, selenic_home: Path) -> pytest.Pytester:
    """Create a project with three test modules, an app folder and a baseline."""
    pytester.makepyfile(
        test_foo="def test_foo(): assert True",
        test_bar="def test_bar(): assert True",
        test_baz="def test_baz(): assert True",
    )
    (pytester.path / "app").mkdir()
    (pytester.path / "baseline.xml").write_text("<coverage/>")
    return pytester


def selenic_args(selenic_home: Path, java_home: Path, *extra: str) -> list[str]:
    """Command line options for an impacted run against the fixture project."""
    return [
        "--selenic-impacted",
        "--selenic-home", str(selenic_home),
        "--selenic-java-home", str(java_home),
        "--selenic-app", "app",
        "--selenic-baseline", "baseline.xml",
        *extra,
    ]


class TestImpactedTests:
    """Tests for runs with the coverage tool reporting results."""

    def test_runs_only_impacted(self, selenic_project: pytest.Pytester, selenic_home: Path) -> None:
        """Test that only the reported tests run."""
        java_home = selenic_project.path / "jdk"
        write_launcher(java_home, ["test_foo", "test_bar"])

        result = selenic_project.runpytest(*selenic_args(selenic_home, java_home), "-v")

        result.assert_outcomes(passed=2, deselected=1)
        result.stdout.fnmatch_lines(["*selenic: impacted tests: test_foo,test_bar*"])
        result.stdout.no_fnmatch_line("*test_baz*PASSED*")

    def test_no_impacted_tests_exits_0(
        self, selenic_project: pytest.Pytester, selenic_home: Path
    ) -> None:
        """Test that an empty result deselects everything and exits 0."""
        java_home = selenic_project.path / "jdk"
        write_launcher(java_home, None)

        result = selenic_project.runpytest(*selenic_args(selenic_home, java_home))

        result.assert_outcomes(deselected=3)
        assert result.ret == 0
        result.stdout.fnmatch_lines(["*selenic: no impacted tests*"])

    def test_unmatched_impacted_tests_keep_exit_5(
        self, selenic_project: pytest.Pytester, selenic_home: Path
    ) -> None:
        """Test that reported tests matching nothing still fail with no tests collected."""
        java_home = selenic_project.path / "jdk"
        write_launcher(java_home, ["NoSuchTest"])

        result = selenic_project.runpytest(*selenic_args(selenic_home, java_home))

        result.assert_outcomes(deselected=3)
        assert result.ret == pytest.ExitCode.NO_TESTS_COLLECTED

    def test_command_line(self, selenic_project: pytest.Pytester, selenic_home: Path) -> None:
        """Test the arguments the coverage tool receives."""
        java_home = selenic_project.path / "jdk"
        write_launcher(java_home, ["test_foo"])

        selenic_project.runpytest(
            *selenic_args(
                selenic_home, java_home, "--selenic-include", "com/**", "--selenic-showdetails"
            )
        )

        args = (selenic_project.path / "build" / "covtool" / "args.txt").read_text().splitlines()
        assert args == [
            "-jar", str(selenic_home / "coverage" / "Java" / "jtestcov" / "jtestcov.jar"),
            "impacted",
            "-selenic",
            "-property", "tia.test.format=junit",
            "-showdetails",
            "-app", str(selenic_project.path / "app"),
            "-include", "com/**",
            "-baseline", str(selenic_project.path / "baseline.xml"),
        ]

    def test_ini_configuration(self, selenic_project: pytest.Pytester, selenic_home: Path) -> None:
        """Test configuring the plugin from pyproject.toml."""
        java_home = selenic_project.path / "jdk"
        write_launcher(java_home, ["test_baz"])
        selenic_project.makepyprojecttoml(
            f"""
            [tool.pytest.ini_options]
            selenic_impacted = true
            selenic_home = "{selenic_home}"
            selenic_java_home = "jdk"
            selenic_app = "app"
            selenic_baseline = "baseline.xml"
            selenic_properties = ["tia.test.format=junit5"]
            """
        )

        result = selenic_project.runpytest()

        result.assert_outcomes(passed=1, deselected=2)
        args = (selenic_project.path / "build" / "covtool" / "args.txt").read_text().splitlines()
        assert "tia.test.format=junit5" in args
        assert "tia.test.format=junit" not in args


class TestFailures:
    """Tests for runs aborted by configuration or tool failures."""

    def test_missing_installation(self, selenic_project: pytest.Pytester, tmp_path: Path) -> None:
        """Test that a missing installation aborts before launching the tool."""
        java_home = selenic_project.path / "jdk"
        write_launcher(java_home, ["test_foo"])
        home = tmp_path / "not-installed"

        result = selenic_project.runpytest(*selenic_args(home, java_home))

        assert result.ret == pytest.ExitCode.USAGE_ERROR
        result.stderr.fnmatch_lines([f"*Selenic installation not found or incomplete: {home}*"])
        assert not (selenic_project.path / "build" / "covtool").exists()

    def test_coverage_tool_failure(
        self, selenic_project: pytest.Pytester, selenic_home: Path
    ) -> None:
        """Test that a failing coverage tool aborts the run."""
        java_home = selenic_project.path / "jdk"
        write_launcher(java_home, ["test_foo"], exit_code=3)

        result = selenic_project.runpytest(*selenic_args(selenic_home, java_home))

        assert result.ret == pytest.ExitCode.USAGE_ERROR
        result.stderr.fnmatch_lines(["*Coverage tool returned exit code 3*"])


class TestPluginDisabled:
    """Tests for runs without --selenic-impacted."""

    def test_runs_all_tests(self, selenic_project: pytest.Pytester) -> None:
        """Test that all tests run when the plugin is not enabled."""
        result = selenic_project.runpytest("-v")

        result.assert_outcomes(passed=3)
        assert not (selenic_project.path / "build").exists()
