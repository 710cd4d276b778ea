"""Shared types for the csvseeder package."""

from typing import Any, Callable

Row = dict[str, Any]
Params = tuple | list | dict
ParamsList = list[tuple] | list[list]
Mapping = dict[int, str]
Chunk = list[Row]
InsertCallback = Callable[[Chunk], Any]
Hasher = Callable[[str], str]
ConsoleSink = Callable[[str, str], Any]
