from __future__ import annotations

from collections.abc import MutableMapping
from pathlib import Path

from pytest_selenic.command import CoverageOperation, build_command
from pytest_selenic.config import SelenicConfig
from pytest_selenic.messages import SelenicError
from pytest_selenic.runner import prepare_work_dir, run_command
from pytest_selenic.selection import apply_impacted_tests, read_impacted_tests
from pytest_selenic.settings import java_executable, validate_installation


class ImpactedTestsOperation:
    """Scan the application and compare it against a baseline coverage report
    to find the tests impacted by code changes."""

    name = "impacted"

    def validate(self, config: SelenicConfig) -> None:
        if config.baseline is None:
            raise SelenicError("baseline.not.set")
        if not config.baseline.exists():
            raise SelenicError("baseline.missing", config.baseline)

    def additional_arguments(self, config: SelenicConfig) -> list[str]:
        if config.baseline is None:
            raise SelenicError("baseline.not.set")
        return ["-baseline", str(config.baseline.absolute())]

    def after_run(
        self,
        config: SelenicConfig,
        work_dir: Path,
        properties: MutableMapping[str, str],
    ) -> None:
        tests = read_impacted_tests(work_dir)
        config.debug_print(f"Impacted tests: {len(tests)}")
        for test in tests:
            config.debug_print(f"  {test}")
        apply_impacted_tests(properties, tests)


def run_coverage_operation(
    config: SelenicConfig,
    operation: CoverageOperation,
    properties: MutableMapping[str, str],
) -> None:
    installation = validate_installation(config)

    if config.app is None:
        raise SelenicError("app.not.set")
    if not config.app.exists():
        raise SelenicError("app.missing", config.app)
    operation.validate(config)

    work_dir = prepare_work_dir(config.build_dir)
    command = build_command(
        config,
        operation,
        installation.settings,
        java_executable(config.java_home),
        installation.covtool_jar,
    )
    run_command(command, work_dir, config.debug_print)
    operation.after_run(config, work_dir, properties)
