"""Configuration readers: deferred reads of typed configuration values.

A reader is any callable taking a Context and returning a Value. Unlike a
builder, a reader may legitimately find nothing: Value.unset() means "not
configured", which lets readers be chained with or_() and default():

    endpoint = config.default(
        "http://localhost:4318",
        config.or_(
            config.env("OTEL_EXPORTER_OTLP_ENDPOINT"),
            config.yaml_file("otelbuild.yaml", "otlp", "endpoint"),
        ),
    )
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Generic, Protocol, TypeVar

from otelbuild._internal.yamlsource import (
    load_yaml_file,
    substitute_env_vars_recursive,
)
from otelbuild.context import Context
from otelbuild.exceptions import BuildAbort, ValueNotSetError

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")
T_co = TypeVar("T_co", covariant=True)


@dataclass(frozen=True)
class Value(Generic[T]):
    """A configuration value that may or may not be set.

    Distinguishes "not set" from "set to a falsy value".
    """

    value: T | None = None
    is_set: bool = False

    @classmethod
    def of(cls, value: T) -> Value[T]:
        return cls(value=value, is_set=True)

    @classmethod
    def unset(cls) -> Value[T]:
        return cls()


class Reader(Protocol[T_co]):
    """Anything that reads a configuration value given a context."""

    def __call__(self, ctx: Context) -> Value[T_co]: ...


def read(ctx: Context, reader: Reader[T]) -> T:
    """Read a required value.

    Raises:
        ValueNotSetError: If the reader produced no value.
        Exception: Whatever the reader raises, unchanged.
    """
    v = reader(ctx)
    if not v.is_set:
        raise ValueNotSetError(f"configuration value not set: {reader!r}")
    return v.value  # type: ignore[return-value]


def must(ctx: Context, reader: Reader[T]) -> T:
    """Read a required value or abort the enclosing build.

    This is the configuration counterpart of must_build(): any failure,
    including an unset value, is re-raised as BuildAbort with the original
    error as its cause.
    """
    try:
        return read(ctx, reader)
    except Exception as e:
        raise BuildAbort(e) from e


class _Const:
    def __init__(self, value: Any) -> None:
        self._value = value

    def __call__(self, ctx: Context) -> Value[Any]:
        return Value.of(self._value)

    def __repr__(self) -> str:
        return f"reader_of({self._value!r})"


def reader_of(value: T) -> Reader[T]:
    """Return a reader that always yields ``value``."""
    return _Const(value)


class _Env:
    def __init__(self, name: str) -> None:
        self._name = name

    def __call__(self, ctx: Context) -> Value[str]:
        value = os.environ.get(self._name)
        if value is None:
            return Value.unset()
        return Value.of(value)

    def __repr__(self) -> str:
        return f"env({self._name!r})"


def env(name: str) -> Reader[str]:
    """Read an environment variable. Missing variables are unset."""
    return _Env(name)


def default(value: T, reader: Reader[T]) -> Reader[T]:
    """Fall back to ``value`` when ``reader`` yields nothing."""

    def _read(ctx: Context) -> Value[T]:
        v = reader(ctx)
        if v.is_set:
            return v
        return Value.of(value)

    return _read


def or_(*readers: Reader[T]) -> Reader[T]:
    """Try readers in order and return the first value that is set."""

    def _read(ctx: Context) -> Value[T]:
        for reader in readers:
            v = reader(ctx)
            if v.is_set:
                return v
        return Value.unset()

    return _read


def map_reader(reader: Reader[T], mapper: Callable[[T], U]) -> Reader[U]:
    """Transform a value if it is set."""

    def _read(ctx: Context) -> Value[U]:
        v = reader(ctx)
        if not v.is_set:
            return Value.unset()
        return Value.of(mapper(v.value))  # type: ignore[arg-type]

    return _read


def bind_reader(reader: Reader[T], binder: Callable[[T], Reader[U]]) -> Reader[U]:
    """Chain readers: the first value selects the second reader."""

    def _read(ctx: Context) -> Value[U]:
        v = reader(ctx)
        if not v.is_set:
            return Value.unset()
        return binder(v.value)(ctx)  # type: ignore[arg-type]

    return _read


class _YamlFile:
    def __init__(self, path: Path, keys: tuple[str, ...]) -> None:
        self._path = path
        self._keys = keys

    def __call__(self, ctx: Context) -> Value[Any]:
        data: Any = substitute_env_vars_recursive(
            load_yaml_file(self._path), strict=True
        )
        for key in self._keys:
            if not isinstance(data, dict) or key not in data:
                logger.debug("Key path %s not found in %s", self._keys, self._path)
                return Value.unset()
            data = data[key]
        return Value.of(data)

    def __repr__(self) -> str:
        return f"yaml_file({str(self._path)!r}, {', '.join(map(repr, self._keys))})"


def yaml_file(path: str | Path, *keys: str) -> Reader[Any]:
    """Read a value from a YAML file by walking nested mapping keys.

    The file is read on every call. ${VAR_NAME} references are substituted
    from the environment and must be set.

    Raises (when read):
        ConfigurationError: If the file is missing, malformed, or references
                           an unset environment variable.
    """
    return _YamlFile(Path(path), keys)
