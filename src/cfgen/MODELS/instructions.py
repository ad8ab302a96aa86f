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
Models for validated Containerfile instructions, stages and documents.

Instances are only produced by the constructors in ``cfgen.BUILDERS``;
every model that exists has already passed validation. All models are
frozen. Field names that collide with Python keywords carry a trailing
underscore and dump under their Dockerfile name (``as_`` -> ``as``).
"""
from typing import Annotated, Literal, NewType, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

# Branded primitives. Only the validators in cfgen.UTILS.validators hand
# these out.
Port = NewType("Port", int)
ImageName = NewType("ImageName", str)
DockerPath = NewType("DockerPath", str)

Protocol = Literal["tcp", "udp", "sctp"]
Command = Union[str, Tuple[str, ...]]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PortRange(_Frozen):
    """
    Inclusive port range, ``start <= end``.
    """
    start: Port
    end: Port


class FromInstruction(_Frozen):
    """
    FROM - base image of a stage.
    """
    type: Literal["FROM"] = "FROM"
    image: ImageName
    as_: Optional[str] = Field(default=None, alias="as")
    platform: Optional[str] = None


class RunInstruction(_Frozen):
    """
    RUN - shell form (string) or exec form (tuple of arguments).
    """
    type: Literal["RUN"] = "RUN"
    command: Command


class CopyInstruction(_Frozen):
    """
    COPY - copies sources from the build context or another stage.
    """
    type: Literal["COPY"] = "COPY"
    src: Tuple[DockerPath, ...]
    dest: DockerPath
    from_: Optional[str] = Field(default=None, alias="from")
    chown: Optional[str] = None
    chmod: Optional[str] = None


class AddInstruction(_Frozen):
    """
    ADD - like COPY, with URL and archive sources.
    """
    type: Literal["ADD"] = "ADD"
    src: Tuple[DockerPath, ...]
    dest: DockerPath
    chown: Optional[str] = None
    chmod: Optional[str] = None


class WorkdirInstruction(_Frozen):
    type: Literal["WORKDIR"] = "WORKDIR"
    path: DockerPath


class EnvInstruction(_Frozen):
    type: Literal["ENV"] = "ENV"
    key: str
    value: str


class ExposeInstruction(_Frozen):
    """
    EXPOSE - a single port, or a range when ``end_port`` is set.
    """
    type: Literal["EXPOSE"] = "EXPOSE"
    port: Port
    end_port: Optional[Port] = Field(default=None, alias="endPort")
    protocol: Optional[Protocol] = None


class CmdInstruction(_Frozen):
    type: Literal["CMD"] = "CMD"
    command: Command


class EntrypointInstruction(_Frozen):
    type: Literal["ENTRYPOINT"] = "ENTRYPOINT"
    command: Command


class ArgInstruction(_Frozen):
    type: Literal["ARG"] = "ARG"
    name: str
    default_value: Optional[str] = Field(default=None, alias="defaultValue")


class LabelInstruction(_Frozen):
    type: Literal["LABEL"] = "LABEL"
    key: str
    value: str


Instruction = Annotated[
    Union[
        FromInstruction,
        RunInstruction,
        CopyInstruction,
        AddInstruction,
        WorkdirInstruction,
        EnvInstruction,
        ExposeInstruction,
        CmdInstruction,
        EntrypointInstruction,
        ArgInstruction,
        LabelInstruction,
    ],
    Field(discriminator="type"),
]

INSTRUCTION_TYPES = (
    FromInstruction,
    RunInstruction,
    CopyInstruction,
    AddInstruction,
    WorkdirInstruction,
    EnvInstruction,
    ExposeInstruction,
    CmdInstruction,
    EntrypointInstruction,
    ArgInstruction,
    LabelInstruction,
)


class Stage(_Frozen):
    """
    A named stage of a multi-stage build.

    ``name`` is bookkeeping only. ``COPY --from`` resolves against the
    ``as`` alias of the stage's FROM instruction, which is set separately.
    """
    name: str
    instructions: Tuple[Instruction, ...]


class SingleStageContainerfile(_Frozen):
    instructions: Tuple[Instruction, ...]


class MultiStageContainerfile(_Frozen):
    stages: Tuple[Stage, ...]


Containerfile = Union[SingleStageContainerfile, MultiStageContainerfile]
