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
Command Line Interface for cfgen.
"""
import json
import logging

import click

from ..CONVERTERS.to_dockerfile import DockerfileConverter, render
from ..PARSERS.definition_parser import DefinitionParser

logger = logging.getLogger(__name__)


def _load(ctx, definition):
    """
    Parses a definition, or reports every error and exits with status 1.
    """
    result = DefinitionParser().parse(definition)
    if result.is_err():
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        ctx.exit(1)
    return result.value


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, verbose):
    """
    cfgen - validated Dockerfile/Containerfile generator.

    Builds Dockerfiles from YAML build definitions, reporting every
    invalid field in one pass.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command("render")
@click.argument('definition', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', envvar='CFGEN_OUTPUT', default=None,
              help='Write the Dockerfile to this path instead of stdout')
@click.pass_context
def render_cmd(ctx, definition, output):
    """Render a build definition to a Dockerfile."""
    document = _load(ctx, definition)
    if output:
        DockerfileConverter(document).convert(output)
        click.echo(f"Dockerfile written to {output}")
    else:
        click.echo(render(document))


@cli.command()
@click.argument('definition', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def validate(ctx, definition):
    """Validate a build definition without rendering it."""
    _load(ctx, definition)
    logger.debug("%s is valid", definition)
    click.echo("OK")


@cli.command()
@click.argument('definition', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def export(ctx, definition):
    """Print the validated build definition as JSON."""
    document = _load(ctx, definition)
    click.echo(json.dumps(document.model_dump(mode="json", by_alias=True), indent=2))


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
