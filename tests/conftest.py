from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

pytest_plugins = ["pytester"]

INI_DEFAULTS = {
    "selenic_impacted": False,
    "selenic_home": "",
    "selenic_settings": "",
    "selenic_java_home": "",
    "selenic_vmargs": [],
    "selenic_properties": [],
    "selenic_showdetails": False,
    "selenic_app": "",
    "selenic_includes": [],
    "selenic_excludes": [],
    "selenic_baseline": "",
    "selenic_build_dir": "",
}


@pytest.fixture
def selenic_home(tmp_path: Path) -> Path:
    """Create a minimal Selenic installation layout."""
    home = tmp_path / "selenic"
    jar_dir = home / "coverage" / "Java" / "jtestcov"
    jar_dir.mkdir(parents=True)
    (home / "selenic_agent.jar").touch()
    (home / "selenic_analyzer.jar").touch()
    (jar_dir / "jtestcov.jar").touch()
    return home


@pytest.fixture
def make_pytest_config(tmp_path: Path) -> Callable[..., MagicMock]:
    """Build a mock pytest config answering getoption/getini from dicts."""

    def factory(
        options: dict | None = None,
        ini: dict | None = None,
        invocation_dir: Path | None = None,
        inipath: Path | None = None,
        rootpath: Path | None = None,
    ) -> MagicMock:
        options = options or {}
        ini_values = {**INI_DEFAULTS, **(ini or {})}
        mock_config = MagicMock()
        mock_config.rootpath = rootpath or tmp_path
        mock_config.inipath = inipath
        mock_config.invocation_params.dir = invocation_dir or tmp_path
        mock_config.getoption = MagicMock(
            side_effect=lambda key, default=None: options.get(key, default)
        )
        mock_config.getini = MagicMock(side_effect=lambda key: ini_values[key])
        return mock_config

    return factory
