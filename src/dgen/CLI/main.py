"""
Command Line Interface for dgen.
"""
import logging
import os
from typing import Dict, Optional

import click
from dotenv import dotenv_values

from ..errors import DockerGenError
from ..MODELS.generation_config import GenerationConfig, GeneratorSettings
from ..PARSERS.config_parser import ConfigParser
from ..RUNTIME.container_fetcher import ContainerFetcher
from ..RUNTIME.docker_client import create_client
from ..GENERATORS.template_functions import marshal_json_pretty
from ..GENERATORS.template_generator import generate_file

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@click.group()
@click.option('--endpoint', '-e', default=None, help='Docker endpoint (unix:///path or tcp://host:port). Defaults to $DOCKER_HOST.')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, endpoint, verbose):
    """
    dgen - render templates from running Docker containers.

    Keeps configuration files (reverse proxies, service lists) in sync
    with the containers running on a host.
    """
    ctx.ensure_object(dict)
    ctx.obj['endpoint'] = endpoint
    ctx.obj.setdefault('client_factory', create_client)
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


def _fetch_containers(ctx, endpoint: Optional[str]):
    client = ctx.obj['client_factory'](endpoint)
    return ContainerFetcher(client).fetch()


def _host_environ(env_file: Optional[str]) -> Dict[str, str]:
    environ = dict(os.environ)
    if env_file:
        for key, value in dotenv_values(env_file).items():
            if value is not None:
                environ[key] = value
    return environ


def _load_settings(ctx, template, dest, config_path, only_published, only_exposed) -> GeneratorSettings:
    if config_path:
        settings = ConfigParser().parse(config_path)
        if ctx.obj['endpoint']:
            settings = settings.model_copy(update={'endpoint': ctx.obj['endpoint']})
        return settings

    if not template:
        raise click.UsageError("a TEMPLATE or --config is required")
    return GeneratorSettings(
        endpoint=ctx.obj['endpoint'],
        configs=[GenerationConfig(
            template=template,
            dest=dest,
            only_published=only_published,
            only_exposed=only_exposed,
        )],
    )


@cli.command()
@click.argument('template', required=False, type=click.Path(dir_okay=False))
@click.argument('dest', required=False, type=click.Path(dir_okay=False))
@click.option('--config', '-c', 'config_path', type=click.Path(dir_okay=False), help='YAML file listing templates and destinations')
@click.option('--only-published', is_flag=True, help='Only include containers with published ports')
@click.option('--only-exposed', is_flag=True, help='Only include containers with exposed ports')
@click.option('--env-file', type=click.Path(exists=True, dir_okay=False), help='Extra variables visible to hostEnviron')
@click.pass_context
def generate(ctx, template, dest, config_path, only_published, only_exposed, env_file):
    """Render TEMPLATE into DEST, or to stdout when DEST is omitted."""
    try:
        settings = _load_settings(ctx, template, dest, config_path, only_published, only_exposed)
        containers = _fetch_containers(ctx, settings.endpoint)
        environ = _host_environ(env_file)
        for config in settings.configs:
            generate_file(config, containers, environ=environ)
    except DockerGenError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)


@cli.command()
@click.pass_context
def containers(ctx):
    """Print the running containers as templates see them."""
    try:
        found = _fetch_containers(ctx, ctx.obj['endpoint'])
    except DockerGenError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    click.echo(marshal_json_pretty(found))


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
