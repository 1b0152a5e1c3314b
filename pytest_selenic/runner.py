from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

from pytest_selenic.messages import SelenicError

WORK_DIR_NAME = "covtool"


def prepare_work_dir(build_dir: Path) -> Path:
    work_dir = build_dir / WORK_DIR_NAME
    try:
        if work_dir.exists():
            shutil.rmtree(work_dir)
        work_dir.mkdir(parents=True)
    except OSError as e:
        raise SelenicError("workdir.failed", work_dir, e) from e
    return work_dir


def run_command(
    command: list[str],
    work_dir: Path,
    debug_print: Callable[[str], None] = lambda msg: None,
) -> None:
    """Run the coverage tool in ``work_dir`` and wait for it to finish.

    Standard streams are inherited so the tool's console output appears
    in the pytest output.
    """
    debug_print("command:" + os.linesep + os.linesep.join(command))
    try:
        process = subprocess.Popen(command, cwd=work_dir)
    except OSError as e:
        raise SelenicError("covtool.launch.failed", command[0], e) from e

    try:
        exit_code = process.wait()
    except KeyboardInterrupt as e:
        process.kill()
        process.wait()
        raise SelenicError("covtool.interrupted") from e

    debug_print(f"Coverage tool finished with exit code {exit_code}")
    if exit_code != 0:
        raise SelenicError("covtool.returned.exit.code", exit_code)
