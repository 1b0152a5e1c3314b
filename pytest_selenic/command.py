from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pytest_selenic.messages import SelenicError

if TYPE_CHECKING:
    from collections.abc import MutableMapping

    from pytest_selenic.config import SelenicConfig

TEST_FORMAT_PROPERTY = "tia.test.format"
DEFAULT_TEST_FORMAT = "junit"


class CoverageOperation(Protocol):
    """A coverage tool sub-command and what to do with its output."""

    name: str

    def validate(self, config: SelenicConfig) -> None: ...

    def additional_arguments(self, config: SelenicConfig) -> list[str]: ...

    def after_run(
        self,
        config: SelenicConfig,
        work_dir: Path,
        properties: MutableMapping[str, str],
    ) -> None: ...


def _add(command: list[str], name: str, value: str | Path) -> None:
    if isinstance(value, Path):
        value = str(value.absolute())
    command.extend((name, value))


def _add_each(command: list[str], name: str, values: list[str]) -> None:
    for value in values:
        if value and value.strip():
            _add(command, name, value)


def build_command(
    config: SelenicConfig,
    operation: CoverageOperation,
    settings_file: Path | None,
    java_exe: str,
    jar: Path,
) -> list[str]:
    if config.app is None:
        raise SelenicError("app.not.set")
    command = [java_exe, *config.vm_args]
    _add(command, "-jar", jar)
    command.extend((operation.name, "-selenic"))
    if settings_file is not None:
        _add(command, "-settings", settings_file)
    _add_each(command, "-property", [f"{k}={v}" for k, v in config.properties.items()])
    if TEST_FORMAT_PROPERTY not in config.properties:
        _add(command, "-property", f"{TEST_FORMAT_PROPERTY}={DEFAULT_TEST_FORMAT}")
    if config.showdetails:
        command.append("-showdetails")
    _add(command, "-app", config.app)
    _add_each(command, "-include", config.includes)
    _add_each(command, "-exclude", config.excludes)
    command.extend(operation.additional_arguments(config))
    return command
