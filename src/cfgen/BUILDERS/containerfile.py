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
Document aggregator: combines instruction or stage results into a
single-stage or multi-stage Containerfile.
"""
from typing import Any, Sequence

from ..MODELS.errors import Err, Ok, Result, is_result, validation_error
from ..MODELS.instructions import (
    INSTRUCTION_TYPES,
    MultiStageContainerfile,
    SingleStageContainerfile,
    Stage,
)
from .stage import collect


def _check_items(items: Any) -> Result:
    if not isinstance(items, (list, tuple)):
        return validation_error("items", "items must be a list of instruction or stage results", items)
    if not items:
        return validation_error("items", "containerfile must have at least one instruction or stage", items)
    return Ok(items)


def single_stage(instructions: Sequence[Result]) -> Result:
    """
    Builds a single-stage Containerfile from instruction results.
    Failures are reported under ``instructions[<index>]``.
    """
    checked = _check_items(instructions)
    if checked.is_err():
        return checked
    valid, errors = collect(instructions, "instructions", INSTRUCTION_TYPES, "an instruction")
    if errors:
        return Err(tuple(errors))
    return Ok(SingleStageContainerfile(instructions=tuple(valid)))


def multi_stage(stages: Sequence[Result]) -> Result:
    """
    Builds a multi-stage Containerfile from stage results.
    Failures are reported under ``stages[<index>]``.
    """
    checked = _check_items(stages)
    if checked.is_err():
        return checked
    valid, errors = collect(stages, "stages", (Stage,), "a stage")
    if errors:
        return Err(tuple(errors))
    return Ok(MultiStageContainerfile(stages=tuple(valid)))


def _holds_stages(items: Sequence[Any]) -> bool:
    # Only Ok elements tell the shape apart. Input where nothing is Ok is
    # treated as instructions; it fails either way.
    for item in items:
        if is_result(item) and item.is_ok():
            return isinstance(item.value, Stage)
    return False


def containerfile(items: Sequence[Result]) -> Result:
    """
    Builds a Containerfile from either instruction results (single-stage)
    or stage results (multi-stage).

    The shape is taken from the first successful element. Errors of every
    element are collected, prefixed with ``instructions[<index>]`` or
    ``stages[<index>]``.

    Example::

        containerfile([from_("nginx"), expose(80)])
        containerfile([stage("build", [...]), stage("runtime", [...])])

    :param items: Results from the instruction constructors or ``stage()``.
    :return: Ok(SingleStageContainerfile | MultiStageContainerfile) or Err.
    """
    checked = _check_items(items)
    if checked.is_err():
        return checked
    if _holds_stages(items):
        return multi_stage(items)
    return single_stage(items)
