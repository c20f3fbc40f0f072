"""
Command Line Interface for dockgen.
"""
import logging
import os
import shlex

import click
from dotenv import dotenv_values
from pydantic import ValidationError

from ..BUILDERS.dockerfile import Dockerfile
from ..errors import DockgenError
from ..PARSERS.recipe_parser import RecipeParser


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
def cli(verbose):
    """
    dockgen - Dockerfile generator.

    Builds Dockerfiles from YAML recipes or command line options.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')


def _emit(content, out):
    if out:
        with open(out, 'w') as f:
            f.write(content)
        click.echo(f"Dockerfile written to {out}")
    else:
        click.echo(content, nl=False)


@cli.command()
@click.argument('recipe')
@click.option('--out', '-o', default=None, help='Output file (default: stdout)')
@click.option('--env-file', default=None, help='.env file with variables for ${VAR} interpolation')
def render(recipe, out, env_file):
    """Render a Dockerfile from a YAML recipe."""
    if not os.path.exists(recipe):
        click.echo(f"Error: {recipe} not found.")
        raise SystemExit(1)

    context = dict(os.environ)
    if env_file:
        if not os.path.exists(env_file):
            click.echo(f"Error: {env_file} not found.")
            raise SystemExit(1)
        context.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})

    try:
        dockerfile = RecipeParser(context).parse(recipe)
    except DockgenError as e:
        click.echo(f"Error: {e}")
        raise SystemExit(1)
    _emit(dockerfile.render(), out)


@cli.command('from-image')
@click.argument('image')
@click.option('--workdir', '-w', default=None, help='Working directory')
@click.option('--copy', 'copies', multiple=True, help='SRC:DST to copy into the image')
@click.option('--expose', '-p', 'ports', multiple=True, help='Port to expose, e.g. 80 or 53/udp')
@click.option('--env', '-e', 'envs', multiple=True, help='KEY=VALUE environment variable')
@click.option('--entrypoint', default=None, help='Entrypoint command line')
@click.option('--cmd', default=None, help='Default command line')
@click.option('--out', '-o', default=None, help='Output file (default: stdout)')
def from_image(image, workdir, copies, ports, envs, entrypoint, cmd, out):
    """Generate a simple Dockerfile for IMAGE."""
    try:
        dockerfile = Dockerfile(image)
        if workdir:
            dockerfile.workdir(workdir)
        for spec in copies:
            src, sep, dst = spec.rpartition(':')
            if not sep:
                src, dst = spec, '.'
            dockerfile.copy(src, dst)
        for spec in ports:
            port, _, protocol = spec.partition('/')
            dockerfile.expose(int(port), protocol or None)
        if envs:
            dockerfile.env(list(envs))
        if entrypoint:
            dockerfile.entrypoint(shlex.split(entrypoint))
        if cmd:
            dockerfile.cmd(shlex.split(cmd))
    except (DockgenError, ValidationError, ValueError) as e:
        click.echo(f"Error: {e}")
        raise SystemExit(1)
    _emit(dockerfile.render(), out)


def main():
    """
    Main entry point for the CLI.
    """
    cli()


if __name__ == '__main__':
    main()
