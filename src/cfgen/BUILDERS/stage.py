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
Stage aggregator for multi-stage builds.
"""
from typing import Any, List, Sequence

from ..MODELS.errors import (
    Err,
    Ok,
    Result,
    ValidationError,
    is_result,
    prefix_errors,
)
from ..MODELS.instructions import INSTRUCTION_TYPES, Stage
from ..UTILS.validators import validate_non_empty_string


def collect(items: Sequence[Any], prefix: str, expected: tuple, what: str):
    """
    Unwraps a list of results, re-rooting each failure under
    ``<prefix>[<index>]``.

    :param items: Results produced by constructors or aggregators.
    :param prefix: Name of the list inside its parent.
    :param expected: Model types an Ok element may carry.
    :param what: Element description used in error messages.
    :return: (values, errors), both lists in input order.
    """
    values = []
    errors: List[ValidationError] = []
    for i, item in enumerate(items):
        path = f"{prefix}[{i}]"
        if not is_result(item):
            errors.append(ValidationError(field=path, message=f"{path} must be {what} result", value=item))
        elif item.is_err():
            errors.extend(prefix_errors(path, item.errors))
        elif not isinstance(item.value, expected):
            errors.append(ValidationError(field=path, message=f"{path} must be {what}", value=item.value))
        else:
            values.append(item.value)
    return values, errors


def stage(name: str, instructions: Sequence[Result]) -> Result:
    """
    Creates a named build stage from instruction results.

    Every problem with the name or the instructions is reported.
    ``name`` does not make the stage referenceable; pass ``as_`` to the
    stage's ``from_()`` for that.

    :param name: Stage name.
    :param instructions: Results returned by the instruction constructors.
    :return: Ok(Stage) or Err with every error, instruction errors prefixed
        with ``instructions[<index>]``.
    """
    errors: List[ValidationError] = []

    name_result = validate_non_empty_string(name, "name")
    if name_result.is_err():
        errors.extend(name_result.errors)

    if not isinstance(instructions, (list, tuple)):
        errors.append(ValidationError(
            field="instructions",
            message="instructions must be a list of instruction results",
            value=instructions,
        ))
        return Err(tuple(errors))

    if not instructions:
        errors.append(ValidationError(
            field="instructions",
            message="stage must have at least one instruction",
            value=instructions,
        ))

    valid, instruction_errors = collect(instructions, "instructions", INSTRUCTION_TYPES, "an instruction")
    errors.extend(instruction_errors)

    if errors:
        return Err(tuple(errors))
    return Ok(Stage(name=name, instructions=tuple(valid)))
