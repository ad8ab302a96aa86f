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
Unit tests for the instruction constructors.
"""
import pydantic
import pytest

from cfgen import add, arg, cmd, copy, entrypoint, env, expose, from_, label, run, workdir
from cfgen.MODELS.instructions import PortRange


def fields(result):
    return [e.field for e in result.errors]


class TestFrom:
    """Tests for from_()."""

    def test_simple_image(self):
        result = from_("nginx")
        assert result.is_ok()
        assert result.value.model_dump(by_alias=True) == {
            "type": "FROM",
            "image": "nginx",
            "as": None,
            "platform": None,
        }

    def test_options(self):
        instruction = from_("node:18", as_="builder", platform="linux/amd64").unwrap()
        assert instruction.as_ == "builder"
        assert instruction.platform == "linux/amd64"

    def test_empty_image(self):
        result = from_("")
        assert result.is_err()
        assert fields(result) == ["image"]

    def test_invalid_image_format(self):
        assert from_("INVALID IMAGE").is_err()

    def test_empty_alias(self):
        assert fields(from_("nginx", as_="")) == ["as"]

    def test_all_bad_fields_are_reported(self):
        assert fields(from_("", as_="", platform="")) == ["image", "as", "platform"]


class TestRun:
    """Tests for run()."""

    def test_shell_form(self):
        assert run("npm install && npm build").value.command == "npm install && npm build"

    def test_exec_form(self):
        assert run(["npm", "install"]).value.command == ("npm", "install")

    def test_empty_string(self):
        assert fields(run("")) == ["command"]

    def test_empty_list(self):
        assert fields(run([])) == ["command"]

    def test_bad_exec_element(self):
        assert fields(run(["npm", ""])) == ["command[1]"]

    def test_wrong_type(self):
        assert fields(run(42)) == ["command"]


class TestCopy:
    """Tests for copy()."""

    def test_single_source_is_normalized(self):
        instruction = copy("package.json", "/app/").unwrap()
        assert instruction.src == ("package.json",)
        assert instruction.dest == "/app/"
        assert instruction.from_ is None

    def test_options(self):
        instruction = copy(["a", "b"], "/app/", from_="builder", chown="node:node", chmod="644").unwrap()
        assert instruction.src == ("a", "b")
        assert (instruction.from_, instruction.chown, instruction.chmod) == ("builder", "node:node", "644")

    def test_bad_source_element(self):
        result = copy(["a.txt", ""], "/dest/")
        assert result.is_err()
        assert len(result.errors) == 1
        assert result.errors[0].field.endswith("src[1]")

    def test_bad_single_source(self):
        assert fields(copy("", "/dest/")) == ["src[0]"]

    def test_empty_source_list(self):
        assert fields(copy([], "/dest/")) == ["src"]

    def test_errors_in_field_order(self):
        result = copy(["", "ok", ""], "", from_="", chown="", chmod="")
        assert fields(result) == ["src[0]", "src[2]", "dest", "from", "chown", "chmod"]


class TestAdd:
    """Tests for add()."""

    def test_url_source(self):
        instruction = add("https://example.com/file.tar.gz", "/app/", chown="node", chmod="755").unwrap()
        assert instruction.type == "ADD"
        assert instruction.src == ("https://example.com/file.tar.gz",)

    def test_errors(self):
        assert fields(add(["x", ""], "", chmod="")) == ["src[1]", "dest", "chmod"]


class TestSimpleInstructions:
    """Tests for workdir(), env(), arg() and label()."""

    def test_workdir(self):
        assert workdir("/app").value.path == "/app"
        assert fields(workdir("")) == ["path"]

    def test_env_allows_empty_value(self):
        instruction = env("KEY", "").unwrap()
        assert (instruction.key, instruction.value) == ("KEY", "")

    def test_env_errors(self):
        assert fields(env("", None)) == ["key", "value"]

    def test_arg(self):
        assert arg("VERSION").value.default_value is None
        assert arg("VERSION", default_value="1.0").value.default_value == "1.0"
        assert arg("VERSION", default_value="1.0").value.model_dump(by_alias=True)["defaultValue"] == "1.0"

    def test_arg_errors(self):
        assert fields(arg("", default_value="")) == ["name", "defaultValue"]

    def test_label(self):
        assert label("version", "1.0.0").value.value == "1.0.0"
        assert label("empty", "").is_ok()
        assert fields(label("", 1)) == ["key", "value"]


class TestExpose:
    """Tests for expose()."""

    def test_single_port(self):
        instruction = expose(8080).unwrap()
        assert (instruction.port, instruction.end_port, instruction.protocol) == (8080, None, None)

    def test_range_is_flattened(self):
        instruction = expose({"start": 5000, "end": 5010}, protocol="udp").unwrap()
        assert (instruction.port, instruction.end_port, instruction.protocol) == (5000, 5010, "udp")

    def test_invalid_port(self):
        assert fields(expose(70000)) == ["port"]
        assert fields(expose(80.5)) == ["port"]

    def test_reversed_range(self):
        assert fields(expose({"start": 100, "end": 50})) == ["port"]

    def test_port_range_model_is_validated(self):
        assert fields(expose(PortRange(start=100, end=50))) == ["port"]
        assert fields(expose(PortRange(start=-5, end=99999))) == ["port.start", "port.end"]
        instruction = expose(PortRange(start=3000, end=3001)).unwrap()
        assert (instruction.port, instruction.end_port) == (3000, 3001)

    def test_invalid_range_and_protocol(self):
        result = expose({"start": -1, "end": 99999}, protocol="icmp")
        assert fields(result) == ["port.start", "port.end", "protocol"]

    def test_wrong_type(self):
        assert fields(expose("8080")) == ["port"]


class TestCmdEntrypoint:
    """Tests for cmd() and entrypoint()."""

    def test_cmd_forms(self):
        assert cmd(["node", "index.js"]).value.command == ("node", "index.js")
        assert cmd("npm start").value.command == "npm start"

    def test_entrypoint_forms(self):
        assert entrypoint(["/entrypoint.sh"]).value.type == "ENTRYPOINT"
        assert entrypoint("/entrypoint.sh").value.command == "/entrypoint.sh"

    def test_errors(self):
        assert fields(cmd(["", ""])) == ["command[0]", "command[1]"]
        assert fields(entrypoint("")) == ["command"]


def test_instructions_are_frozen():
    instruction = from_("nginx").unwrap()
    with pytest.raises(pydantic.ValidationError):
        instruction.image = "redis"


def test_constructors_are_deterministic():
    assert copy(["a", "b"], "/c", chmod="600") == copy(["a", "b"], "/c", chmod="600")
