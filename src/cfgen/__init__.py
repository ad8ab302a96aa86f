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
cfgen - Containerfile generator

Builds Dockerfile/Containerfile documents from typed, validated
instructions and renders them to canonical text. Invalid input is
returned as a complete list of errors instead of being raised.
"""

from .BUILDERS.containerfile import containerfile, multi_stage, single_stage
from .BUILDERS.instructions import (
    add,
    arg,
    cmd,
    copy,
    entrypoint,
    env,
    expose,
    from_,
    label,
    run,
    workdir,
)
from .BUILDERS.stage import stage
from .CONVERTERS.to_dockerfile import render, render_instruction
from .MODELS.errors import (
    Err,
    Ok,
    Result,
    UnwrapError,
    ValidationError,
    combine_with_all_errors,
    prefix_errors,
)

__version__ = "0.1.0"
__author__ = "Michael Maillet, Damien Davison, Sacha Davison"
__license__ = "Apache-2.0"

__all__ = [
    "add",
    "arg",
    "cmd",
    "combine_with_all_errors",
    "containerfile",
    "copy",
    "entrypoint",
    "env",
    "Err",
    "expose",
    "from_",
    "label",
    "multi_stage",
    "Ok",
    "prefix_errors",
    "render",
    "render_instruction",
    "Result",
    "run",
    "single_stage",
    "stage",
    "UnwrapError",
    "ValidationError",
    "workdir",
]
