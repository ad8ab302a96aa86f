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
Unit tests for the Dockerfile renderer.
"""
import pytest

from cfgen import (
    add,
    arg,
    cmd,
    containerfile,
    copy,
    entrypoint,
    env,
    expose,
    from_,
    label,
    render,
    render_instruction,
    run,
    stage,
    workdir,
)
from cfgen.CONVERTERS.to_dockerfile import RENDERERS, DockerfileConverter
from cfgen.MODELS.instructions import INSTRUCTION_TYPES


def line(result):
    return render_instruction(result.unwrap())


@pytest.mark.parametrize("result, expected", [
    (from_("nginx"), "FROM nginx"),
    (from_("node:18", as_="builder"), "FROM node:18 AS builder"),
    (from_("node:18", as_="builder", platform="linux/amd64"), "FROM --platform=linux/amd64 node:18 AS builder"),
    (run("npm ci"), "RUN npm ci"),
    (run(["npm", "ci"]), 'RUN ["npm", "ci"]'),
    (copy("a.txt", "/app/"), "COPY a.txt /app/"),
    (copy(["a", "b"], "/app/"), "COPY a b /app/"),
    (copy("dist/", "/app/", chmod="644", chown="node:node", from_="builder"),
     "COPY --from=builder --chown=node:node --chmod=644 dist/ /app/"),
    (add("x.tar.gz", "/app/", chmod="755", chown="root"), "ADD --chown=root --chmod=755 x.tar.gz /app/"),
    (workdir("/app"), "WORKDIR /app"),
    (env("NODE_ENV", "production"), "ENV NODE_ENV=production"),
    (env("KEY", ""), "ENV KEY="),
    (expose(8080), "EXPOSE 8080"),
    (expose(8080, protocol="tcp"), "EXPOSE 8080"),
    (expose(5353, protocol="udp"), "EXPOSE 5353/udp"),
    (expose({"start": 5000, "end": 5010}, protocol="udp"), "EXPOSE 5000-5010/udp"),
    (expose({"start": 8080, "end": 8090}, protocol="sctp"), "EXPOSE 8080-8090/sctp"),
    (cmd(["node", "index.js"]), 'CMD ["node", "index.js"]'),
    (cmd("npm start"), "CMD npm start"),
    (entrypoint(["/entrypoint.sh"]), 'ENTRYPOINT ["/entrypoint.sh"]'),
    (entrypoint("/entrypoint.sh"), "ENTRYPOINT /entrypoint.sh"),
    (arg("VERSION"), "ARG VERSION"),
    (arg("VERSION", default_value="18"), "ARG VERSION=18"),
    (label("version", "1.0.0"), 'LABEL version="1.0.0"'),
    (label("empty", ""), 'LABEL empty=""'),
])
def test_render_instruction(result, expected):
    assert line(result) == expected


def test_exec_form_escapes_quotes():
    assert line(run(["sh", "-c", 'echo "hi"'])) == 'RUN ["sh", "-c", "echo \\"hi\\""]'


def test_every_instruction_type_has_a_renderer():
    kinds = {model.model_fields["type"].default for model in INSTRUCTION_TYPES}
    assert kinds == set(RENDERERS)


def test_single_instruction_document():
    assert render(containerfile([from_("nginx")]).unwrap()) == "FROM nginx"


def test_single_stage_document():
    document = containerfile([
        from_("node:20-alpine"),
        workdir("/app"),
        run("npm ci"),
        cmd(["node", "index.js"]),
    ]).unwrap()
    assert render(document) == (
        "FROM node:20-alpine\n"
        "WORKDIR /app\n"
        "RUN npm ci\n"
        'CMD ["node", "index.js"]'
    )


def test_multi_stage_document():
    document = containerfile([
        stage("builder", [from_("node:20", as_="builder"), run("npm run build")]),
        stage("runtime", [from_("node:20-alpine"), copy("/app/dist", "./dist", from_="builder")]),
    ]).unwrap()
    assert render(document) == (
        "FROM node:20 AS builder\n"
        "RUN npm run build\n"
        "\n"
        "FROM node:20-alpine\n"
        "COPY --from=builder /app/dist ./dist"
    )


def test_render_is_deterministic():
    document = containerfile([
        from_("nginx"),
        label("a", "1"),
        copy(["x", "y"], "/z", chown="u", from_="s"),
    ]).unwrap()
    assert render(document) == render(document)
    assert not render(document).endswith("\n")


def test_converter_writes_file(tmp_path):
    document = containerfile([from_("nginx"), expose(80)]).unwrap()
    target = tmp_path / "out" / "Dockerfile"
    path = DockerfileConverter(document).convert(str(target))
    assert path == str(target)
    assert target.read_text() == "FROM nginx\nEXPOSE 80\n"
