# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
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

"""
Validation errors and the Ok/Err result values returned by every
validator, instruction constructor and aggregator.

Nothing in the builder raises for invalid input. Failures travel as data:
an ``Err`` holding a non-empty tuple of ``ValidationError`` whose ``field``
is an access path from the document root, e.g.
``stages[1].instructions[0].image``.
"""
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Tuple, TypeVar, Union

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")
U = TypeVar("U")


class ValidationError(BaseModel):
    """
    A single rejected input.

    :param field: Dot/bracket path of the offending value.
    :param message: Human readable description of the problem.
    :param value: The value that was rejected, as received.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    field: str
    message: str
    value: Any = None

    def __str__(self) -> str:
        if not self.field:
            return self.message
        return f"{self.field}: {self.message}"


class UnwrapError(ValueError):
    """
    Raised when ``unwrap()`` is called on an ``Err``.
    """
    def __init__(self, errors: Tuple[ValidationError, ...]):
        self.errors = errors
        super().__init__("; ".join(str(e) for e in errors))


@dataclass(frozen=True)
class Ok(Generic[T]):
    """
    Successful result carrying a validated value.
    """
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        return Ok(fn(self.value))

    def map_err(self, fn: Callable) -> "Ok[T]":
        return self

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value

    def match(self, on_ok: Callable[[T], U], on_err: Callable) -> U:
        return on_ok(self.value)


@dataclass(frozen=True)
class Err:
    """
    Failed result carrying every error found.
    """
    errors: Tuple[ValidationError, ...]

    def __post_init__(self):
        # Accept any iterable but always store an immutable tuple
        object.__setattr__(self, "errors", tuple(self.errors))
        if not self.errors:
            raise ValueError("Err requires at least one ValidationError")

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def map(self, fn: Callable) -> "Err":
        return self

    def map_err(self, fn: Callable[[Tuple[ValidationError, ...]], Iterable[ValidationError]]) -> "Err":
        return Err(tuple(fn(self.errors)))

    def unwrap(self):
        raise UnwrapError(self.errors)

    def unwrap_or(self, default: Any) -> Any:
        return default

    def match(self, on_ok: Callable, on_err: Callable[[Tuple[ValidationError, ...]], U]) -> U:
        return on_err(self.errors)


Result = Union[Ok[T], Err]


def validation_error(field: str, message: str, value: Any) -> Err:
    """
    Shorthand for a failed result holding exactly one error.
    """
    return Err((ValidationError(field=field, message=message, value=value),))


def is_result(value: Any) -> bool:
    return isinstance(value, (Ok, Err))


def prefix_errors(prefix: str, errors: Iterable[ValidationError]) -> Tuple[ValidationError, ...]:
    """
    Re-roots error paths under ``prefix`` when a child result is embedded
    into a parent (``image`` becomes ``instructions[0].image``).

    :param prefix: Path segment of the child inside its parent.
    :param errors: Errors reported by the child.
    :return: New errors; the inputs are left untouched.
    """
    return tuple(
        e.model_copy(update={"field": f"{prefix}.{e.field}" if e.field else prefix})
        for e in errors
    )


def combine_with_all_errors(results: Iterable[Result]) -> Result:
    """
    Combines independent results.

    Every result is inspected, none is skipped after a failure. Returns
    ``Ok`` with a tuple of all values when everything succeeded, otherwise
    ``Err`` with the concatenation of every failure's errors in input order.
    """
    values = []
    errors = []
    for result in results:
        if result.is_err():
            errors.extend(result.errors)
        else:
            values.append(result.value)
    if errors:
        return Err(tuple(errors))
    return Ok(tuple(values))
