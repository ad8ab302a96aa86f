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
Constructors for the eleven Containerfile instructions.

Every constructor validates all of its fields before returning, so a call
with three bad fields reports three errors. On success the result holds a
frozen instruction model; on failure it holds every ValidationError found,
in field declaration order.

Example::

    from_("node:20", as_="builder")   # Ok(FromInstruction(...))
    copy(["a.txt", ""], "/dest/")     # Err((ValidationError(field="src[1]", ...),))
"""
from collections.abc import Mapping
from typing import Any, Optional, Sequence, Union

from ..MODELS.errors import Result, combine_with_all_errors, validation_error
from ..MODELS.instructions import (
    AddInstruction,
    ArgInstruction,
    CmdInstruction,
    CopyInstruction,
    EntrypointInstruction,
    EnvInstruction,
    ExposeInstruction,
    FromInstruction,
    LabelInstruction,
    PortRange,
    RunInstruction,
    WorkdirInstruction,
)
from ..UTILS.validators import (
    validate_docker_path,
    validate_image_name,
    validate_non_empty_string,
    validate_optional,
    validate_port,
    validate_port_range,
    validate_protocol,
    validate_string,
    validate_string_array,
)

Sources = Union[str, Sequence[str]]
Command = Union[str, Sequence[str]]


def _validate_sources(src: Any, field: str) -> Result:
    """
    Normalizes COPY/ADD sources to a tuple and validates each entry.

    A single string becomes a one element tuple and reports as ``src[0]``.
    """
    if isinstance(src, str):
        return validate_docker_path(src, f"{field}[0]").map(lambda path: (path,))
    if not isinstance(src, (list, tuple)):
        return validation_error(field, f"{field} must be a string or a list of strings", src)
    if not src:
        return validation_error(field, f"{field} must have at least one source", src)
    return combine_with_all_errors(
        validate_docker_path(path, f"{field}[{i}]") for i, path in enumerate(src)
    )


def _validate_command(command: Any, field: str = "command") -> Result:
    """
    Shell form (non-empty string) or exec form (non-empty list of
    non-empty strings). The two forms are never converted into each other.
    """
    if isinstance(command, str):
        return validate_non_empty_string(command, field)
    if isinstance(command, (list, tuple)):
        return validate_string_array(command, field)
    return validation_error(field, f"{field} must be a string or a list of strings", command)


def from_(image: str, *, as_: Optional[str] = None, platform: Optional[str] = None) -> Result:
    """
    Creates a FROM instruction.

    :param image: Image reference, e.g. ``node:20-alpine``.
    :param as_: Stage alias, referenced by ``COPY --from``.
    :param platform: Target platform, e.g. ``linux/amd64``.
    :return: Ok(FromInstruction) or Err with every invalid field.
    """
    return combine_with_all_errors([
        validate_image_name(image, "image"),
        validate_optional(as_, validate_non_empty_string, "as"),
        validate_optional(platform, validate_non_empty_string, "platform"),
    ]).map(lambda fields: FromInstruction(image=fields[0], as_=fields[1], platform=fields[2]))


def run(command: Command) -> Result:
    """
    Creates a RUN instruction.

    :param command: Shell form string or exec form list.
    """
    return _validate_command(command).map(lambda value: RunInstruction(command=value))


def copy(
    src: Sources,
    dest: str,
    *,
    from_: Optional[str] = None,
    chown: Optional[str] = None,
    chmod: Optional[str] = None,
) -> Result:
    """
    Creates a COPY instruction.

    :param src: One source path or a list of them.
    :param dest: Destination inside the image.
    :param from_: Stage alias or image to copy from.
    :param chown: ``user[:group]`` ownership for copied files.
    :param chmod: Permission bits for copied files.
    :return: Ok(CopyInstruction) or Err with every invalid field.
    """
    return combine_with_all_errors([
        _validate_sources(src, "src"),
        validate_docker_path(dest, "dest"),
        validate_optional(from_, validate_non_empty_string, "from"),
        validate_optional(chown, validate_non_empty_string, "chown"),
        validate_optional(chmod, validate_non_empty_string, "chmod"),
    ]).map(lambda fields: CopyInstruction(
        src=fields[0],
        dest=fields[1],
        from_=fields[2],
        chown=fields[3],
        chmod=fields[4],
    ))


def add(
    src: Sources,
    dest: str,
    *,
    chown: Optional[str] = None,
    chmod: Optional[str] = None,
) -> Result:
    """
    Creates an ADD instruction. Sources may be local paths or URLs.
    """
    return combine_with_all_errors([
        _validate_sources(src, "src"),
        validate_docker_path(dest, "dest"),
        validate_optional(chown, validate_non_empty_string, "chown"),
        validate_optional(chmod, validate_non_empty_string, "chmod"),
    ]).map(lambda fields: AddInstruction(
        src=fields[0],
        dest=fields[1],
        chown=fields[2],
        chmod=fields[3],
    ))


def workdir(path: str) -> Result:
    return validate_docker_path(path, "path").map(lambda value: WorkdirInstruction(path=value))


def env(key: str, value: str) -> Result:
    """
    Creates an ENV instruction. ``value`` may be empty.
    """
    return combine_with_all_errors([
        validate_non_empty_string(key, "key"),
        validate_string(value, "value"),
    ]).map(lambda fields: EnvInstruction(key=fields[0], value=fields[1]))


def expose(port: Union[int, Mapping, PortRange], *, protocol: Optional[str] = None) -> Result:
    """
    Creates an EXPOSE instruction.

    :param port: A port number, or a ``{"start": ..., "end": ...}`` range.
    :param protocol: ``tcp``, ``udp`` or ``sctp``.
    :return: Ok(ExposeInstruction) with the range flattened into
        ``port``/``end_port``, or Err with every invalid field.
    """
    if isinstance(port, (int, float)):
        ports = validate_port(port, "port").map(lambda value: (value, None))
    elif isinstance(port, (Mapping, PortRange)):
        ports = validate_port_range(port, "port").map(lambda value: (value.start, value.end))
    else:
        ports = validation_error("port", "port must be a number or a port range", port)

    return combine_with_all_errors([
        ports,
        validate_optional(protocol, validate_protocol, "protocol"),
    ]).map(lambda fields: ExposeInstruction(
        port=fields[0][0],
        end_port=fields[0][1],
        protocol=fields[1],
    ))


def cmd(command: Command) -> Result:
    """
    Creates a CMD instruction from a shell form string or exec form list.
    """
    return _validate_command(command).map(lambda value: CmdInstruction(command=value))


def entrypoint(command: Command) -> Result:
    """
    Creates an ENTRYPOINT instruction from a shell form string or exec form list.
    """
    return _validate_command(command).map(lambda value: EntrypointInstruction(command=value))


def arg(name: str, *, default_value: Optional[str] = None) -> Result:
    """
    Creates an ARG instruction. A supplied default must be non-empty.
    """
    return combine_with_all_errors([
        validate_non_empty_string(name, "name"),
        validate_optional(default_value, validate_non_empty_string, "defaultValue"),
    ]).map(lambda fields: ArgInstruction(name=fields[0], default_value=fields[1]))


def label(key: str, value: str) -> Result:
    """
    Creates a LABEL instruction. ``value`` may be empty.
    """
    return combine_with_all_errors([
        validate_non_empty_string(key, "key"),
        validate_string(value, "value"),
    ]).map(lambda fields: LabelInstruction(key=fields[0], value=fields[1]))
