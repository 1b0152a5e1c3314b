from __future__ import annotations

import tomllib
from functools import cache
from importlib import resources


class SelenicError(Exception):
    def __init__(self, key: str, *args: object) -> None:
        super().__init__(get(key, *args))
        self.key = key


@cache
def _catalog() -> dict[str, str]:
    with resources.files(__package__).joinpath("messages.toml").open("rb") as f:
        return tomllib.load(f)


def get(key: str, *args: object) -> str:
    message = _catalog()[key]
    if not args:
        return message
    try:
        return message.format(*args)
    except (IndexError, KeyError, ValueError):
        return message
