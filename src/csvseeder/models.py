"""Model resolution and column guarding.

A model is any class declaring ``__tablename__`` (declarative ORM classes
already do). It may also restrict which columns a seed is allowed to write:

- ``fillable``: only these columns may be written
- ``guarded``: these columns may never be written; ``"*"`` guards every
  column that isn't fillable
"""

import importlib
from typing import Iterable

from csvseeder.errors import ConfigurationError


def _as_tuple(value) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def resolve_model(model: type | str) -> type:
    """Return the model class, importing it first if given as a dotted path.

    Accepts ``package.module:Class`` or ``package.module.Class``.
    """
    if not isinstance(model, str):
        return model

    module_name, sep, attr = model.partition(":")
    if not sep:
        module_name, _, attr = model.rpartition(".")
    try:
        module = importlib.import_module(module_name)
        return getattr(module, attr)
    except (ImportError, AttributeError, ValueError) as e:
        raise ConfigurationError(f"{model} could not be resolved.") from e


def table_for_model(model: type | str) -> str:
    cls = resolve_model(model)
    table = getattr(cls, "__tablename__", None)
    if not table:
        raise ConfigurationError(f"Table could not be resolved from {cls.__name__}.")
    return table


def allowed_columns(model: type | str, columns: Iterable[str]) -> list[str]:
    """Filter table columns through the model's fillable/guarded attributes."""
    cls = resolve_model(model)
    fillable = _as_tuple(getattr(cls, "fillable", ()))
    guarded = _as_tuple(getattr(cls, "guarded", ()))

    result = [c for c in columns if not fillable or c in fillable]
    if "*" in guarded:
        return [c for c in result if c in fillable]
    return [c for c in result if c not in guarded]
