"""Locate and validate the Selenic installation."""

from __future__ import annotations

import shutil
import sys
from dataclasses import dataclass
from pathlib import Path

from pytest_selenic.config import SelenicConfig
from pytest_selenic.messages import SelenicError

REQUIRED_FILES = ("selenic_agent.jar", "selenic_analyzer.jar")
DEFAULT_SETTINGS = "selenic.properties"


@dataclass(frozen=True)
class Installation:
    home: Path
    settings: Path | None = None

    @property
    def covtool_jar(self) -> Path:
        return self.home / "coverage" / "Java" / "jtestcov" / "jtestcov.jar"


def validate_installation(config: SelenicConfig) -> Installation:
    """Check the Selenic home and pick the settings file to use.

    The settings file is ``None`` when none was given and the installation
    does not ship a default ``selenic.properties``.
    """
    home = config.selenic_home
    if home is None:
        raise SelenicError("selenic.home.not.set")
    if not home.exists() or not all((home / name).exists() for name in REQUIRED_FILES):
        raise SelenicError("selenic.missing", home)

    if config.settings is not None:
        if not config.settings.exists():
            raise SelenicError("settings.missing", config.settings)
        return Installation(home, config.settings)

    default = home / DEFAULT_SETTINGS
    if default.exists():
        config.debug_print(f"Using default settings {default}")
        return Installation(home, default)
    return Installation(home)


def java_executable(java_home: Path | None) -> str:
    name = "java.exe" if sys.platform.startswith("win") else "java"
    if java_home is not None:
        return str((java_home / "bin" / name).absolute())
    return shutil.which("java") or "java"
