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
Field validators for primitive Containerfile values.

Each validator takes a raw value and the field path to report, and returns
``Ok`` with the checked (branded) value or ``Err`` with a non-empty error
list. They never raise, whatever the input type.
"""
from collections.abc import Mapping
from typing import Annotated, Any, Callable

from pydantic import Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..MODELS.errors import (
    Err,
    Ok,
    Result,
    ValidationError,
    combine_with_all_errors,
    validation_error,
)
from ..MODELS.instructions import DockerPath, ImageName, Port, PortRange

# Optional registry host[:port]/, lowercase path segments, optional :tag,
# optional @algorithm:digest.
IMAGE_NAME_PATTERN = (
    r"^(?:(?:[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?\.)*"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]*[a-zA-Z0-9])?(?::[0-9]+)?/)?"
    r"[a-z0-9]+(?:[._-][a-z0-9]+)*(?:/[a-z0-9]+(?:[._-][a-z0-9]+)*)*"
    r"(?::[a-zA-Z0-9_][a-zA-Z0-9._-]{0,127})?"
    r"(?:@[a-z0-9]+:[a-f0-9]+)?$"
)

PROTOCOLS = ("tcp", "udp", "sctp")

_PORT = TypeAdapter(Annotated[int, Field(strict=True, ge=0, le=65535)])
_IMAGE_NAME = TypeAdapter(Annotated[str, Field(strict=True, min_length=1, pattern=IMAGE_NAME_PATTERN)])
_NON_EMPTY_STRING = TypeAdapter(Annotated[str, Field(strict=True, min_length=1)])
_STRING = TypeAdapter(Annotated[str, Field(strict=True)])


def _check(adapter: TypeAdapter, value: Any, field: str, requirement: str) -> Result:
    """
    Runs a pydantic adapter and turns each reported problem into a
    ValidationError for ``field``.
    """
    try:
        return Ok(adapter.validate_python(value))
    except PydanticValidationError as exc:
        errors = []
        for detail in exc.errors():
            if detail["type"] == "string_pattern_mismatch":
                reason = "does not match the image reference format"
            else:
                reason = detail["msg"]
            errors.append(ValidationError(
                field=field,
                message=f"{field} {requirement} ({reason})",
                value=value,
            ))
        return Err(tuple(errors))


def validate_port(value: Any, field: str = "port") -> Result:
    """
    Validates a port number: an integer in [0, 65535].
    """
    return _check(_PORT, value, field, "must be an integer between 0 and 65535").map(Port)


def validate_port_range(value: Any, field: str = "port") -> Result:
    """
    Validates a ``{"start": ..., "end": ...}`` port range.

    Both ends are validated independently and their errors accumulated.
    The ordering check only runs once both ends are valid ports.

    :param value: Mapping with ``start`` and ``end`` keys, or a PortRange.
    :param field: Field path of the range; ends report as ``<field>.start``
        and ``<field>.end``.
    :return: Ok(PortRange) or Err with every problem found.
    """
    if isinstance(value, PortRange):
        value = value.model_dump()
    if not isinstance(value, Mapping):
        return validation_error(field, f"{field} must be a mapping with start and end", value)

    ends = combine_with_all_errors([
        validate_port(value.get("start"), f"{field}.start"),
        validate_port(value.get("end"), f"{field}.end"),
    ])
    if ends.is_err():
        return ends

    start, end = ends.value
    if start > end:
        return validation_error(
            field,
            f"invalid port range: start ({start}) must be <= end ({end})",
            value,
        )
    return Ok(PortRange(start=start, end=end))


def validate_image_name(value: Any, field: str = "image") -> Result:
    """
    Validates an image reference such as ``nginx``, ``node:20-alpine``,
    ``ghcr.io/user/app:1.0`` or ``nginx@sha256:<hex>``.
    Repository path segments must be lowercase.
    """
    return _check(_IMAGE_NAME, value, field, "must be a valid image reference").map(ImageName)


def validate_docker_path(value: Any, field: str = "path") -> Result:
    """
    Validates a path in the build context or the image: any non-empty string.
    """
    return _check(_NON_EMPTY_STRING, value, field, "must be a non-empty path").map(DockerPath)


def validate_non_empty_string(value: Any, field: str) -> Result:
    return _check(_NON_EMPTY_STRING, value, field, "must be a non-empty string")


def validate_string(value: Any, field: str) -> Result:
    """
    Accepts any string, including the empty string.
    """
    return _check(_STRING, value, field, "must be a string")


def validate_string_array(values: Any, field: str) -> Result:
    """
    Validates a non-empty list of non-empty strings.

    Every element is checked; a bad element reports as ``<field>[<index>]``.
    """
    if not isinstance(values, (list, tuple)):
        return validation_error(field, f"{field} must be a list of strings", values)
    if not values:
        return validation_error(field, f"{field} must have at least one element", values)
    return combine_with_all_errors(
        validate_non_empty_string(v, f"{field}[{i}]") for i, v in enumerate(values)
    )


def validate_protocol(value: Any, field: str = "protocol") -> Result:
    if isinstance(value, str) and value in PROTOCOLS:
        return Ok(value)
    return validation_error(field, f"{field} must be one of {', '.join(PROTOCOLS)}", value)


def validate_optional(
    value: Any,
    validator: Callable[[Any, str], Result],
    field: str,
) -> Result:
    """
    Succeeds with None when ``value`` is None, without calling ``validator``.
    """
    if value is None:
        return Ok(None)
    return validator(value, field)
