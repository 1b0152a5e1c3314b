from __future__ import annotations

import pytest

from pytest_selenic.config import SelenicConfig
from pytest_selenic.impacted import ImpactedTestsOperation, run_coverage_operation
from pytest_selenic.messages import SelenicError
from pytest_selenic.selection import (
    FAIL_IF_NO_TESTS_PROPERTIES,
    NO_TESTS,
    TEST_PROPERTY,
    TestPattern,
)

WORKERINPUT_KEY = "selenic_properties"


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("selenic", "Selenic test impact analysis")
    group.addoption(
        "--selenic-impacted",
        action="store_true",
        default=False,
        help="Run only the tests impacted by code changes, as computed by Selenic.",
    )
    group.addoption(
        "--selenic-home",
        action="store",
        default=None,
        help="Location of the Selenic installation (default: $SELENIC_HOME).",
    )
    group.addoption(
        "--selenic-settings",
        action="store",
        default=None,
        help="Path to a .properties file with custom settings "
        "(default: selenic.properties in the Selenic home, if present).",
    )
    group.addoption(
        "--selenic-java-home",
        action="store",
        default=None,
        help="Java installation used to run the coverage tool (default: $JAVA_HOME).",
    )
    group.addoption(
        "--selenic-vmarg",
        action="append",
        default=None,
        help="Additional JVM option for the coverage tool. May be repeated.",
    )
    group.addoption(
        "--selenic-property",
        action="append",
        default=None,
        metavar="KEY=VALUE",
        help="Setting passed directly to the coverage tool; overrides the settings file. "
        "May be repeated.",
    )
    group.addoption(
        "--selenic-showdetails",
        action="store_true",
        default=False,
        help="Increase coverage tool output verbosity.",
    )
    group.addoption(
        "--selenic-app",
        action="store",
        default=None,
        help="Application under test: a folder or a .war, .jar, .zip or .ear file.",
    )
    group.addoption(
        "--selenic-include",
        action="append",
        default=None,
        help="ANT-style pattern of classes to include while scanning the application. "
        "May be repeated.",
    )
    group.addoption(
        "--selenic-exclude",
        action="append",
        default=None,
        help="ANT-style pattern of classes to exclude while scanning the application. "
        "May be repeated.",
    )
    group.addoption(
        "--selenic-baseline",
        action="store",
        default=None,
        help="Baseline coverage report to analyze for impacted tests.",
    )
    group.addoption(
        "--selenic-build-dir",
        action="store",
        default=None,
        help="Build output directory holding the coverage tool working directory "
        "(default: build).",
    )
    group.addoption(
        "--selenic-debug",
        action="store_true",
        default=False,
        help="Print debug information about impacted test selection.",
    )

    parser.addini(
        "selenic_impacted",
        "Enable Selenic impacted test selection.",
        type="bool",
        default=False,
    )
    parser.addini("selenic_home", "Location of the Selenic installation.", default="")
    parser.addini("selenic_settings", "Path to a Selenic settings file.", default="")
    parser.addini(
        "selenic_java_home",
        "Java installation used to run the coverage tool.",
        default="",
    )
    parser.addini(
        "selenic_vmargs",
        "Additional JVM options, one per line.",
        type="linelist",
        default=[],
    )
    parser.addini(
        "selenic_properties",
        "Coverage tool settings as key=value lines.",
        type="linelist",
        default=[],
    )
    parser.addini(
        "selenic_showdetails",
        "Increase coverage tool output verbosity.",
        type="bool",
        default=False,
    )
    parser.addini("selenic_app", "Application under test.", default="")
    parser.addini(
        "selenic_includes",
        "Include patterns, one per line.",
        type="linelist",
        default=[],
    )
    parser.addini(
        "selenic_excludes",
        "Exclude patterns, one per line.",
        type="linelist",
        default=[],
    )
    parser.addini("selenic_baseline", "Baseline coverage report.", default="")
    parser.addini("selenic_build_dir", "Build output directory.", default="")


def pytest_configure(config: pytest.Config) -> None:
    selenic_config = SelenicConfig.from_pytest_config(config)
    config._selenic_config = selenic_config  # type: ignore[attr-defined]
    config._selenic_properties = {}  # type: ignore[attr-defined]

    if not selenic_config.enabled:
        return

    # pytest-xdist workers take the selection computed by the controller.
    workerinput = getattr(config, "workerinput", None)
    if workerinput is not None:
        config._selenic_properties = dict(  # type: ignore[attr-defined]
            workerinput.get(WORKERINPUT_KEY, {})
        )
        return

    selenic_config.debug_print("Plugin enabled")
    properties: dict[str, str] = {}
    try:
        run_coverage_operation(selenic_config, ImpactedTestsOperation(), properties)
    except SelenicError as e:
        raise pytest.UsageError(str(e)) from e

    config._selenic_properties = properties  # type: ignore[attr-defined]
    for key, value in properties.items():
        selenic_config.debug_print(f"{key}={value}")


@pytest.hookimpl(optionalhook=True)
def pytest_configure_node(node) -> None:
    properties: dict[str, str] = getattr(node.config, "_selenic_properties", {})
    node.workerinput[WORKERINPUT_KEY] = dict(properties)


def pytest_report_header(config: pytest.Config) -> str | None:
    properties: dict[str, str] = getattr(config, "_selenic_properties", {})
    pattern = properties.get(TEST_PROPERTY)
    if pattern is None:
        return None
    if pattern == NO_TESTS:
        return "selenic: no impacted tests"
    return f"selenic: impacted tests: {pattern}"


def pytest_collection_modifyitems(
    session: pytest.Session,
    config: pytest.Config,
    items: list[pytest.Item],
) -> None:
    properties: dict[str, str] = getattr(config, "_selenic_properties", {})
    pattern_text = properties.get(TEST_PROPERTY)
    if pattern_text is None:
        return

    pattern = TestPattern.parse(pattern_text)
    selected: list[pytest.Item] = []
    deselected: list[pytest.Item] = []
    for item in items:
        if pattern.selects(item, config.rootpath):
            selected.append(item)
        else:
            deselected.append(item)

    selenic_config: SelenicConfig = config._selenic_config  # type: ignore[attr-defined]
    selenic_config.debug_print(f"Selected: {len(selected)}, Deselected: {len(deselected)}")

    items[:] = selected
    if deselected:
        config.hook.pytest_deselected(items=deselected)


@pytest.hookimpl(trylast=True)
def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    properties: dict[str, str] = getattr(session.config, "_selenic_properties", {})
    tolerant = properties.get(FAIL_IF_NO_TESTS_PROPERTIES[0]) == "false"
    if tolerant and exitstatus == pytest.ExitCode.NO_TESTS_COLLECTED:
        session.exitstatus = pytest.ExitCode.OK
