"""Explicit success/failure containers used across the theme manager."""

from __future__ import annotations

import asyncio
import inspect
from typing import (
    Any,
    Awaitable,
    Callable,
    Generic,
    Iterable,
    Optional,
    TypeVar,
    Union,
)

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")

_OK = "ok"
_ERR = "err"


class UnwrapError(RuntimeError):
    """Raised when a result is read through the wrong variant."""


class Result(Generic[T, E]):
    """Either a success value (``ok``) or a failure value (``err``).

    Instances are immutable. Use :meth:`match` or the ``is_ok``/``is_err``
    discriminants before reading :attr:`data` or :attr:`error`.
    """

    __slots__ = ("_tag", "_value")

    def __init__(self, tag: str, value: Any) -> None:
        if tag not in (_OK, _ERR):
            raise ValueError(f"Unknown result tag: {tag!r}")
        object.__setattr__(self, "_tag", tag)
        object.__setattr__(self, "_value", value)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("Result instances are immutable")

    @classmethod
    def ok(cls, value: T) -> "Result[T, Any]":
        """Return a successful result wrapping ``value``."""

        return cls(_OK, value)

    @classmethod
    def err(cls, error: E) -> "Result[Any, E]":
        """Return a failed result wrapping ``error``."""

        return cls(_ERR, error)

    @classmethod
    def attempt(
        cls,
        func: Callable[[], T],
        error_mapper: Optional[Callable[[Exception], E]] = None,
    ) -> "Result[T, E]":
        """Call ``func`` and capture a raised exception as a failure."""

        try:
            return cls.ok(func())
        except Exception as exc:
            return cls.err(error_mapper(exc) if error_mapper else exc)

    @property
    def tag(self) -> str:
        """Return ``"ok"`` or ``"err"``."""

        return self._tag

    @property
    def data(self) -> T:
        """Return the success value, raising on a failure."""

        if self._tag == _OK:
            return self._value
        raise UnwrapError("Cannot read data from an err result")

    @property
    def error(self) -> E:
        """Return the failure value, raising on a success."""

        if self._tag == _ERR:
            return self._value
        raise UnwrapError("Cannot read error from an ok result")

    def is_ok(self) -> bool:
        """Return ``True`` for a success."""

        return self._tag == _OK

    def is_err(self) -> bool:
        """Return ``True`` for a failure."""

        return self._tag == _ERR

    def map(self, func: Callable[[T], U]) -> "Result[U, E]":
        """Transform the success value; failures pass through unchanged."""

        if self._tag == _OK:
            return Result.ok(func(self._value))
        return self  # type: ignore[return-value]

    def flat_map(
        self,
        func: Callable[[T], "Result[U, F]"],
    ) -> "Result[U, Any]":
        """Chain a fallible step, stopping at the first failure."""

        if self._tag == _OK:
            return func(self._value)
        return self  # type: ignore[return-value]

    def map_err(self, func: Callable[[E], F]) -> "Result[T, F]":
        """Transform the failure value; successes pass through unchanged."""

        if self._tag == _ERR:
            return Result.err(func(self._value))
        return self  # type: ignore[return-value]

    def or_else(self, func: Callable[[E], "Result[U, F]"]) -> "Result[Any, F]":
        """Recover from a failure by mapping it to a new result."""

        if self._tag == _ERR:
            return func(self._value)
        return self  # type: ignore[return-value]

    def match(
        self,
        on_ok: Callable[[T], U],
        on_err: Callable[[E], U],
    ) -> U:
        """Eliminate the result into a single value."""

        if self._tag == _OK:
            return on_ok(self._value)
        return on_err(self._value)

    def unwrap(self) -> T:
        """Return the success value or raise :class:`UnwrapError`."""

        if self._tag == _OK:
            return self._value
        error = self._value
        message = f"Called unwrap on an err result: {error}"
        if isinstance(error, BaseException):
            raise UnwrapError(message) from error
        raise UnwrapError(message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._tag == other._tag and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._tag, self._value))

    def __repr__(self) -> str:
        return f"Result.{self._tag}({self._value!r})"


ResultLike = Union[
    Result[U, F],
    "ResultAsync[U, F]",
    Awaitable[Result[U, F]],
]


class ResultAsync(Generic[T, E]):
    """Awaitable counterpart of :class:`Result`.

    Wraps an awaitable that resolves to a :class:`Result`. The outcome is
    memoized, so an instance can be awaited any number of times and shared
    between several combinators.
    """

    __slots__ = ("_awaitable", "_future", "_settled")

    def __init__(self, awaitable: Awaitable[Result[T, E]]) -> None:
        self._awaitable: Optional[Awaitable[Result[T, E]]] = awaitable
        self._future: Optional[asyncio.Future] = None
        self._settled: Optional[Result[T, E]] = None

    @classmethod
    def from_result(cls, result: Result[T, E]) -> "ResultAsync[T, E]":
        """Wrap an already computed result."""

        instance = cls.__new__(cls)
        instance._awaitable = None
        instance._future = None
        instance._settled = result
        return instance

    @classmethod
    def ok(cls, value: T) -> "ResultAsync[T, Any]":
        """Return a settled successful async result."""

        return cls.from_result(Result.ok(value))

    @classmethod
    def err(cls, error: E) -> "ResultAsync[Any, E]":
        """Return a settled failed async result."""

        return cls.from_result(Result.err(error))

    @classmethod
    def from_awaitable(
        cls,
        awaitable: Awaitable[T],
        error_mapper: Optional[Callable[[Exception], E]] = None,
    ) -> "ResultAsync[T, E]":
        """Await ``awaitable`` and turn a raised exception into a failure."""

        async def _capture() -> Result[T, E]:
            try:
                value = await awaitable
            except Exception as exc:
                return Result.err(error_mapper(exc) if error_mapper else exc)
            return Result.ok(value)

        return cls(_capture())

    @staticmethod
    def all(
        items: Iterable["ResultAsync[Any, Any]"],
    ) -> "ResultAsync[list[Any], Any]":
        """Combine results, failing with the first error in input order.

        Every input is awaited concurrently and allowed to settle before the
        combined outcome is produced.
        """

        pending = list(items)

        async def _combine() -> Result[list[Any], Any]:
            settled = await asyncio.gather(
                *(item.to_result() for item in pending)
            )
            for result in settled:
                if result.is_err():
                    return result
            return Result.ok([result.data for result in settled])

        return ResultAsync(_combine())

    @staticmethod
    def all_settled(
        items: Iterable["ResultAsync[Any, Any]"],
    ) -> "ResultAsync[list[Any], list[Any]]":
        """Combine results, failing with every error in input order."""

        pending = list(items)

        async def _combine() -> Result[list[Any], list[Any]]:
            settled = await asyncio.gather(
                *(item.to_result() for item in pending)
            )
            errors = [result.error for result in settled if result.is_err()]
            if errors:
                return Result.err(errors)
            return Result.ok([result.data for result in settled])

        return ResultAsync(_combine())

    async def to_result(self) -> Result[T, E]:
        """Wait for the underlying operation and return its result."""

        if self._settled is not None:
            return self._settled
        if self._future is None:
            self._future = asyncio.ensure_future(self._awaitable)
            self._awaitable = None
        result = await self._future
        self._settled = result
        return result

    def __await__(self):
        return self.to_result().__await__()

    def map(
        self,
        func: Callable[[T], Union[U, Awaitable[U]]],
    ) -> "ResultAsync[U, E]":
        """Transform the success value with a sync or async function."""

        async def _map() -> Result[U, E]:
            result = await self.to_result()
            if result.is_err():
                return result  # type: ignore[return-value]
            value = func(result.data)
            if inspect.isawaitable(value):
                value = await value
            return Result.ok(value)

        return ResultAsync(_map())

    def flat_map(
        self,
        func: Callable[[T], ResultLike[U, F]],
    ) -> "ResultAsync[U, Any]":
        """Chain a fallible step that may itself be asynchronous."""

        async def _flat_map() -> Result[U, Any]:
            result = await self.to_result()
            if result.is_err():
                return result  # type: ignore[return-value]
            return await _settle(func(result.data))

        return ResultAsync(_flat_map())

    def map_err(self, func: Callable[[E], F]) -> "ResultAsync[T, F]":
        """Transform the failure value."""

        async def _map_err() -> Result[T, F]:
            result = await self.to_result()
            return result.map_err(func)

        return ResultAsync(_map_err())

    def or_else(
        self,
        func: Callable[[E], ResultLike[U, F]],
    ) -> "ResultAsync[Any, F]":
        """Recover from a failure with a sync or async fallible step."""

        async def _or_else() -> Result[Any, F]:
            result = await self.to_result()
            if result.is_ok():
                return result  # type: ignore[return-value]
            return await _settle(func(result.error))

        return ResultAsync(_or_else())

    def finally_(self, func: Callable[[], Any]) -> "ResultAsync[T, E]":
        """Run ``func`` once the result settles, keeping the outcome."""

        async def _finally() -> Result[T, E]:
            try:
                return await self.to_result()
            finally:
                func()

        return ResultAsync(_finally())

    async def match(
        self,
        on_ok: Callable[[T], Union[U, Awaitable[U]]],
        on_err: Callable[[E], Union[U, Awaitable[U]]],
    ) -> U:
        """Await the result and eliminate it into a single value."""

        result = await self.to_result()
        value = result.match(on_ok, on_err)
        if inspect.isawaitable(value):
            return await value
        return value

    async def unwrap(self) -> T:
        """Await the result and return its value or raise."""

        result = await self.to_result()
        return result.unwrap()

    def __repr__(self) -> str:
        if self._settled is not None:
            return f"ResultAsync({self._settled!r})"
        return "ResultAsync(<pending>)"


async def _settle(value: ResultLike[U, F]) -> Result[U, F]:
    if isinstance(value, Result):
        return value
    if isinstance(value, ResultAsync):
        return await value.to_result()
    return await value
