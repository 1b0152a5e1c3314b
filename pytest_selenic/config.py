from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import pytest

DEFAULT_BUILD_DIR = "build"


def _resolve(root_path: Path, value: str | os.PathLike[str] | None) -> Path | None:
    if value is None or not str(value).strip():
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = root_path / path
    return path


def parse_properties(entries: list[str]) -> dict[str, str]:
    properties: dict[str, str] = {}
    for entry in entries:
        entry = entry.strip()
        if not entry:
            continue
        key, sep, value = entry.partition("=")
        if not sep or not key.strip():
            raise pytest.UsageError(
                f"Invalid Selenic property {entry!r}, expected key=value"
            )
        properties[key.strip()] = value.strip()
    return properties


@dataclass
class SelenicConfig:
    enabled: bool = False
    selenic_home: Path | None = None
    settings: Path | None = None
    java_home: Path | None = None
    vm_args: list[str] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    showdetails: bool = False
    app: Path | None = None
    includes: list[str] = field(default_factory=list)
    excludes: list[str] = field(default_factory=list)
    baseline: Path | None = None
    build_dir: Path = field(default_factory=lambda: Path(DEFAULT_BUILD_DIR))
    debug: bool = False
    root_path: Path = field(default_factory=Path.cwd)

    @classmethod
    def from_pytest_config(cls, config: pytest.Config) -> SelenicConfig:
        # Command line and environment paths are relative to where pytest was
        # invoked, ini paths to the directory holding the ini file.
        invocation_dir = Path(config.invocation_params.dir)
        project_dir = config.inipath.parent if config.inipath else invocation_dir

        def option(name: str, ini: str):
            value = config.getoption(name, default=None)
            if value in (None, [], False):
                value = config.getini(ini)
            return value

        def path_option(name: str, ini: str, env: str | None = None) -> Path | None:
            value = config.getoption(name, default=None)
            if value:
                return _resolve(invocation_dir, value)
            value = config.getini(ini)
            if value:
                return _resolve(project_dir, value)
            if env is not None:
                return _resolve(invocation_dir, os.environ.get(env))
            return None

        # Command line properties override ini properties with the same key.
        properties = parse_properties(list(config.getini("selenic_properties")))
        cli_properties = config.getoption("selenic_property", default=None) or []
        properties.update(parse_properties(cli_properties))

        return cls(
            enabled=bool(option("selenic_impacted", "selenic_impacted")),
            selenic_home=path_option("selenic_home", "selenic_home", "SELENIC_HOME"),
            settings=path_option("selenic_settings", "selenic_settings"),
            java_home=path_option("selenic_java_home", "selenic_java_home", "JAVA_HOME"),
            vm_args=list(option("selenic_vmarg", "selenic_vmargs") or []),
            properties=properties,
            showdetails=bool(option("selenic_showdetails", "selenic_showdetails")),
            app=path_option("selenic_app", "selenic_app"),
            includes=list(option("selenic_include", "selenic_includes") or []),
            excludes=list(option("selenic_exclude", "selenic_excludes") or []),
            baseline=path_option("selenic_baseline", "selenic_baseline"),
            build_dir=(
                path_option("selenic_build_dir", "selenic_build_dir")
                or project_dir / DEFAULT_BUILD_DIR
            ),
            debug=bool(config.getoption("selenic_debug", default=False)),
            root_path=config.rootpath,
        )

    def debug_print(self, msg: str) -> None:
        if self.debug:
            print(f"[pytest-selenic] {msg}")
