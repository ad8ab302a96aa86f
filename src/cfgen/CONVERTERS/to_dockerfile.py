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
Renders validated Containerfile models to Dockerfile text.

Rendering is total and deterministic: the same document always yields the
same bytes. Instructions go one per line and stages are separated by a
blank line, without a trailing newline.
"""
import json
import logging
import os
from typing import Callable, Dict, Sequence

from ..MODELS.instructions import (
    AddInstruction,
    ArgInstruction,
    CmdInstruction,
    Containerfile,
    CopyInstruction,
    EntrypointInstruction,
    EnvInstruction,
    ExposeInstruction,
    FromInstruction,
    Instruction,
    LabelInstruction,
    MultiStageContainerfile,
    RunInstruction,
    Stage,
    WorkdirInstruction,
)

logger = logging.getLogger(__name__)


def format_array(items: Sequence[str]) -> str:
    """
    Formats an exec form argument list: ``["a", "b"]``.
    """
    return "[" + ", ".join(json.dumps(item, ensure_ascii=False) for item in items) + "]"


def _command(command) -> str:
    if isinstance(command, str):
        return command
    return format_array(command)


def _flags(**flags) -> str:
    # Insertion order of the keyword arguments is the output order
    return "".join(f" --{name}={value}" for name, value in flags.items() if value is not None)


def render_from(instruction: FromInstruction) -> str:
    line = "FROM" + _flags(platform=instruction.platform) + f" {instruction.image}"
    if instruction.as_ is not None:
        line += f" AS {instruction.as_}"
    return line


def render_run(instruction: RunInstruction) -> str:
    return f"RUN {_command(instruction.command)}"


def render_copy(instruction: CopyInstruction) -> str:
    flags = _flags(**{"from": instruction.from_, "chown": instruction.chown, "chmod": instruction.chmod})
    return f"COPY{flags} {' '.join(instruction.src)} {instruction.dest}"


def render_add(instruction: AddInstruction) -> str:
    flags = _flags(chown=instruction.chown, chmod=instruction.chmod)
    return f"ADD{flags} {' '.join(instruction.src)} {instruction.dest}"


def render_workdir(instruction: WorkdirInstruction) -> str:
    return f"WORKDIR {instruction.path}"


def render_env(instruction: EnvInstruction) -> str:
    return f"ENV {instruction.key}={instruction.value}"


def render_expose(instruction: ExposeInstruction) -> str:
    line = f"EXPOSE {instruction.port}"
    if instruction.end_port is not None:
        line += f"-{instruction.end_port}"
    # tcp is the default and is never written out
    if instruction.protocol is not None and instruction.protocol != "tcp":
        line += f"/{instruction.protocol}"
    return line


def render_cmd(instruction: CmdInstruction) -> str:
    return f"CMD {_command(instruction.command)}"


def render_entrypoint(instruction: EntrypointInstruction) -> str:
    return f"ENTRYPOINT {_command(instruction.command)}"


def render_arg(instruction: ArgInstruction) -> str:
    if instruction.default_value is not None:
        return f"ARG {instruction.name}={instruction.default_value}"
    return f"ARG {instruction.name}"


def render_label(instruction: LabelInstruction) -> str:
    return f'LABEL {instruction.key}="{instruction.value}"'


RENDERERS: Dict[str, Callable] = {
    "FROM": render_from,
    "RUN": render_run,
    "COPY": render_copy,
    "ADD": render_add,
    "WORKDIR": render_workdir,
    "ENV": render_env,
    "EXPOSE": render_expose,
    "CMD": render_cmd,
    "ENTRYPOINT": render_entrypoint,
    "ARG": render_arg,
    "LABEL": render_label,
}


def render_instruction(instruction: Instruction) -> str:
    return RENDERERS[instruction.type](instruction)


def render_stage(stage: Stage) -> str:
    return "\n".join(render_instruction(i) for i in stage.instructions)


def render(containerfile: Containerfile) -> str:
    """
    Renders a single-stage or multi-stage Containerfile.

    :param containerfile: A document returned by ``containerfile()``.
    :return: Dockerfile text without a trailing newline.
    """
    if isinstance(containerfile, MultiStageContainerfile):
        return "\n\n".join(render_stage(s) for s in containerfile.stages)
    return "\n".join(render_instruction(i) for i in containerfile.instructions)


class DockerfileConverter:
    """
    Writes a validated Containerfile to disk.
    """

    def __init__(self, containerfile: Containerfile):
        """
        Initializes the converter.

        :param containerfile: The validated document to write.
        """
        self.containerfile = containerfile

    def convert(self, output_path: str = "Dockerfile") -> str:
        """
        Renders the document and writes it with a single trailing newline.

        :param output_path: Destination file; parent directories are created.
        :return: The path written.
        """
        directory = os.path.dirname(output_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            f.write(render(self.containerfile) + "\n")

        logger.info("Dockerfile written to %s", output_path)
        return output_path
