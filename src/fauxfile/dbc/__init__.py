# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Design-by-contract decorators for :mod:`fauxfile`.

Contracts are inert unless enabled, either through the ``FAUXFILE_DBC``
environment variable or programmatically::

    from fauxfile.dbc import dbc_enabled

    with dbc_enabled():
        fs.mkdir_all("a/b/c")  # Tree invariants checked around every call

Predicates return ``bool``, ``None`` (treated as failure) or a
``(bool, detail)`` tuple whose detail is appended to the failure message.
Violations raise ``AssertionError``.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from functools import wraps
from typing import ParamSpec, TypeVar, cast

type ContractResult = bool | tuple[bool, *tuple[object, ...]] | None

P = ParamSpec("P")
R = TypeVar("R")
T = TypeVar("T", bound=object)

ContractCallable = Callable[..., ContractResult | object]

_ENV_FLAG = "FAUXFILE_DBC"
_SKIP_ATTRIBUTE = "__dbc_skip_invariant__"
_forced_state: bool | None = None


def dbc_active() -> bool:
    """Return ``True`` when contract checks should run."""

    if _forced_state is not None:
        return _forced_state
    value = os.getenv(_ENV_FLAG)
    if value is None:
        return False
    return value.strip().lower() not in {"", "0", "false", "off", "no"}


def enable_dbc() -> None:
    """Force contract enforcement on."""

    global _forced_state
    _forced_state = True


def disable_dbc() -> None:
    """Force contract enforcement off."""

    global _forced_state
    _forced_state = False


@contextmanager
def dbc_enabled(*, active: bool = True) -> Iterator[None]:
    """Temporarily set the contract flag inside a ``with`` block."""

    global _forced_state
    previous = _forced_state
    _forced_state = active
    try:
        yield
    finally:
        _forced_state = previous


def _outcome(result: ContractResult | object) -> tuple[bool, str | None]:
    if isinstance(result, tuple):
        items = cast(Sequence[object], result)
        if not items:
            msg = "Contract callables must not return empty tuples"
            raise TypeError(msg)
        return bool(items[0]), (str(items[1]) if len(items) > 1 else None)
    if result is None:
        return False, None
    return bool(result), None


def _check(
    kind: str,
    func: Callable[..., object],
    predicate: ContractCallable,
    args: tuple[object, ...],
    kwargs: Mapping[str, object],
) -> None:
    qualname = getattr(func, "__qualname__", repr(func))
    try:
        result = predicate(*args, **kwargs)
    except AssertionError:
        raise
    except Exception as exc:
        msg = f"{kind} contract for {qualname} raised {type(exc).__name__}: {exc}"
        raise AssertionError(msg) from exc
    passed, detail = _outcome(result)
    if passed:
        return
    predicate_name = getattr(predicate, "__name__", repr(predicate))
    msg = f"{kind} contract for {qualname} failed via {predicate_name}."
    if detail:
        msg = f"{msg} Details: {detail}"
    raise AssertionError(msg)


def require(
    *predicates: ContractCallable,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Validate preconditions against the call arguments."""

    if not predicates:
        msg = "@require expects at least one predicate"
        raise ValueError(msg)

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapped(*args: P.args, **kwargs: P.kwargs) -> R:
            if dbc_active():
                for predicate in predicates:
                    _check("require", func, predicate, tuple(args), dict(kwargs))
            return func(*args, **kwargs)

        return wrapped

    return decorator


def skip_invariant(func: Callable[P, R]) -> Callable[P, R]:  # noqa: UP047
    """Exclude a public method from invariant checks."""

    setattr(func, _SKIP_ATTRIBUTE, True)
    return func


def invariant(*predicates: ContractCallable) -> Callable[[type[T]], type[T]]:
    """Check class invariants after ``__init__`` and around public methods.

    Predicates receive the instance. Methods whose name starts with an
    underscore, static and class methods, properties and methods marked with
    :func:`skip_invariant` are left alone.
    """

    if not predicates:
        msg = "@invariant expects at least one predicate"
        raise ValueError(msg)

    def run(instance: object, func: Callable[..., object]) -> None:
        for predicate in predicates:
            _check("invariant", func, predicate, (instance,), {})

    def wrap(method: Callable[..., object]) -> Callable[..., object]:
        @wraps(method)
        def wrapper(self: object, *args: object, **kwargs: object) -> object:
            if not dbc_active():
                return method(self, *args, **kwargs)
            run(self, method)
            try:
                return method(self, *args, **kwargs)
            finally:
                run(self, method)

        return wrapper

    def decorator(cls: type[T]) -> type[T]:
        original_init = cls.__init__

        @wraps(original_init)
        def init(self: object, *args: object, **kwargs: object) -> None:
            original_init(self, *args, **kwargs)
            if dbc_active():
                run(self, original_init)

        type.__setattr__(cls, "__init__", init)

        for name, attribute in list(cls.__dict__.items()):
            if name.startswith("_") or not callable(attribute):
                continue
            if isinstance(attribute, (staticmethod, classmethod)):
                continue
            if getattr(attribute, _SKIP_ATTRIBUTE, False):
                continue
            setattr(cls, name, wrap(attribute))
        return cls

    return decorator


__all__ = [
    "ContractResult",
    "dbc_active",
    "dbc_enabled",
    "disable_dbc",
    "enable_dbc",
    "invariant",
    "require",
    "skip_invariant",
]
