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
Parser for YAML build definitions.

A definition lists instructions, or stages of instructions, as one-key
mappings::

    stages:
      - name: builder
        instructions:
          - from: {image: "node:20", as: builder}
          - run: npm run build
      - name: runtime
        instructions:
          - from: node:20-alpine
          - copy: {src: /app/dist, dest: ./dist, from: builder}

The entries are fed through the instruction constructors and aggregators,
so the result carries the same document-rooted error paths.
"""
import logging
from collections.abc import Mapping
from typing import Any, Callable, Dict, List, Tuple

import yaml

from ..BUILDERS import instructions as builders
from ..BUILDERS.containerfile import multi_stage, single_stage
from ..BUILDERS.stage import stage
from ..MODELS.errors import Err, Result, ValidationError, validation_error
from ..UTILS.validators import validate_non_empty_string

logger = logging.getLogger(__name__)

# kind -> (constructor, positional keys, {yaml option key: keyword argument})
INSTRUCTION_SPECS: Dict[str, Tuple[Callable[..., Result], Tuple[str, ...], Dict[str, str]]] = {
    "from": (builders.from_, ("image",), {"as": "as_", "platform": "platform"}),
    "run": (builders.run, ("command",), {}),
    "copy": (builders.copy, ("src", "dest"), {"from": "from_", "chown": "chown", "chmod": "chmod"}),
    "add": (builders.add, ("src", "dest"), {"chown": "chown", "chmod": "chmod"}),
    "workdir": (builders.workdir, ("path",), {}),
    "env": (builders.env, ("key", "value"), {}),
    "expose": (builders.expose, ("port",), {"protocol": "protocol"}),
    "cmd": (builders.cmd, ("command",), {}),
    "entrypoint": (builders.entrypoint, ("command",), {}),
    "arg": (builders.arg, ("name",), {"default": "default_value"}),
    "label": (builders.label, ("key", "value"), {}),
}


def _unknown_keys(data: Mapping, allowed: Tuple[str, ...], describe: Callable[[Any], Tuple[str, str]]):
    """
    Reports every key of ``data`` outside ``allowed``.

    :param describe: Maps a key to its (field, message) pair.
    """
    errors = []
    for key in data:
        if key not in allowed:
            field, message = describe(key)
            errors.append(ValidationError(field=field, message=message, value=data[key]))
    return errors


def _merge(result: Result, extra: List[ValidationError]) -> Result:
    # Errors of the known keys come first, then the extra ones
    if not extra:
        return result
    errors = list(result.errors) if result.is_err() else []
    return Err(tuple(errors + extra))


class DefinitionParser:
    """
    Parser for YAML build definitions.
    """
    def parse(self, definition_path: str) -> Result:
        """
        Parses a definition file from a path.

        :param definition_path: Path to the YAML definition.
        :return: Ok(Containerfile) or Err with every problem found.
        """
        try:
            with open(definition_path, 'r', encoding="utf-8") as f:
                content = f.read()
        except UnicodeDecodeError as e:
            return validation_error("", f"definition is not valid UTF-8: {e}", definition_path)
        return self.parse_from_string(content)

    def parse_from_string(self, content: str) -> Result:
        """
        Parses a definition from a string.

        :param content: YAML content of the definition.
        :return: Ok(Containerfile) or Err with every problem found.
        """
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            return validation_error("", f"invalid YAML: {e}", content)
        return self.parse_data(data)

    def parse_data(self, data: Any) -> Result:
        """
        Builds a Containerfile from already loaded YAML data.
        """
        if not isinstance(data, Mapping):
            return validation_error("", "definition must be a mapping with instructions or stages", data)

        unknown = _unknown_keys(
            data, ("instructions", "stages"),
            lambda k: (str(k), f"unknown top-level key: {k}"),
        )

        if "instructions" in data and "stages" in data:
            result = validation_error("stages", "stages cannot be combined with instructions", data["stages"])
        elif "stages" in data:
            logger.debug("Definition is multi-stage")
            stages = data["stages"]
            if isinstance(stages, list):
                result = multi_stage([self._parse_stage(s) for s in stages])
            else:
                result = validation_error("stages", "stages must be a list", stages)
        elif "instructions" in data:
            logger.debug("Definition is single-stage")
            entries = data["instructions"]
            if isinstance(entries, list):
                result = single_stage([self._parse_instruction(e) for e in entries])
            else:
                result = validation_error("instructions", "instructions must be a list", entries)
        else:
            result = validation_error("", "definition must have instructions or stages", data)

        return _merge(result, unknown)

    def _parse_stage(self, entry: Any) -> Result:
        """
        Parses one entry of ``stages``. Errors are relative to the stage;
        the aggregator adds the ``stages[<index>]`` prefix.
        """
        if not isinstance(entry, Mapping):
            return validation_error("", "stage must be a mapping with name and instructions", entry)

        unknown = _unknown_keys(
            entry, ("name", "instructions"),
            lambda k: (str(k), f"unknown stage key: {k}"),
        )

        entries = entry.get("instructions")
        if not isinstance(entries, list):
            errors = list(validate_non_empty_string(entry.get("name"), "name").match(lambda _: (), lambda e: e))
            errors.append(ValidationError(field="instructions", message="instructions must be a list", value=entries))
            return _merge(Err(tuple(errors)), unknown)
        return _merge(stage(entry.get("name"), [self._parse_instruction(e) for e in entries]), unknown)

    def _parse_instruction(self, entry: Any) -> Result:
        """
        Parses one ``kind: body`` entry by calling the matching constructor.

        :param entry: One-key mapping from the YAML document.
        :return: The constructor's result, or Err for structural problems.
        """
        if not isinstance(entry, Mapping) or len(entry) != 1:
            return validation_error("", "instruction must be a mapping with exactly one key", entry)

        (kind, body), = entry.items()
        name = str(kind).lower()
        if name not in INSTRUCTION_SPECS:
            return validation_error(str(kind), f"unknown instruction: {kind}", body)

        constructor, positional, options = INSTRUCTION_SPECS[name]

        if not isinstance(body, Mapping):
            if len(positional) > 1:
                return validation_error(
                    name,
                    f"{name} expects a mapping with keys: {', '.join(positional)}",
                    body,
                )
            return constructor(body)

        # expose: {start: .., end: ..} is a range, not keyword form
        if name == "expose" and "port" not in body and ("start" in body or "end" in body):
            return constructor(dict(body))

        unknown = _unknown_keys(
            body, positional + tuple(options),
            lambda k: (f"{name}.{k}", f"unknown option for {name.upper()}: {k}"),
        )
        args = [body.get(key) for key in positional]
        kwargs = {options[key]: body[key] for key in options if key in body}
        return _merge(constructor(*args, **kwargs), unknown)
