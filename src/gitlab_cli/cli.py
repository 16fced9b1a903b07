#!/usr/bin/env python3
"""
Command-line interface for GitLab CLI.
"""

import functools
import logging
import signal
from dataclasses import dataclass
from typing import Dict, Optional

import click

from . import __version__
from .cloner import Cloner
from .config import Config, Context, InstanceConfig, Authentication, get_absolute_group_path
from .errors import GitlabCliError
from .log import setup_logging
from .render import PrintOptions, print_project
from .table import Table
from .walker import CancelToken, walk_concurrent


class AliasedGroup(click.Group):
    """A click group whose commands can also be called by short aliases."""

    def __init__(self, *args, aliases: Optional[Dict[str, str]] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.aliases = aliases or {}

    def get_command(self, ctx, cmd_name):
        return super().get_command(ctx, self.aliases.get(cmd_name, cmd_name))

    def resolve_command(self, ctx, args):
        name, cmd, args = super().resolve_command(ctx, args)
        return (cmd.name if cmd is not None else name), cmd, args


@dataclass
class State:
    config: Config
    logger: logging.Logger


def reports_errors(f):
    """Turn GitlabCliErrors into click errors."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except GitlabCliError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


@click.group(cls=AliasedGroup, aliases={'ctx': 'context', 'inst': 'instance', 'pr': 'project', 'proj': 'project'})
@click.version_option(__version__)
@click.option('--config', '-c', 'config_file', default=None,
              help='Config file location (default: ~/.gitlab-cli.json)')
@click.option('--use-config-context', '-u', is_flag=True,
              help='Use the context of the config instead of a possible local git repository')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Quiet mode - show only warnings and errors')
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], use_config_context: bool, verbose: bool, quiet: bool):
    """
    Work with the groups and projects of GitLab instances.
    """
    logger = setup_logging(verbose=verbose, quiet=quiet)
    try:
        config = Config(config_file, use_config_context, logger=logger.getChild('config'))
    except GitlabCliError as e:
        raise click.ClickException(str(e)) from e
    ctx.obj = State(config, logger)


@cli.result_callback()
@click.pass_obj
def save_config(state: State, *args, **kwargs):
    if not state.config.save_config():
        raise click.ClickException(f"could not write config file {state.config.config_file}")


# context

@cli.group(cls=AliasedGroup, aliases={'ls': 'list', 'sw': 'switch', 'cr': 'create', 'del': 'delete', 'rm': 'delete'})
def context():
    """
    List, create, switch or delete contexts.

    A context maps a namespace to an instance, the namespace being the root
    of all operations. Projects given as arguments work like directories:
    starting with a "/" they are absolute, otherwise relative to the
    namespace of the current context.
    """


@context.command('list')
@click.pass_obj
def context_list(state: State):
    """List all available contexts."""
    table = Table(min_width=1, padding=2)
    table.add_row("", "name", "instance", "namespace")
    table.add_row("", "----", "--------", "---------")
    for name, ctx in state.config.contexts.items():
        current = "*" if name == state.config.current_context else ""
        table.add_row(current, name, ctx.instance, ctx.namespace)
    click.echo(table.render(), nl=False)


@context.command('create')
@click.argument('name')
@click.argument('instance')
@click.argument('namespace', required=False, default='')
@click.pass_obj
def context_create(state: State, name: str, instance: str, namespace: str):
    """Create a context tied to an instance, with an optional group."""
    state.config.contexts[name] = Context(instance=instance, group=namespace)
    if instance not in state.config.instances:
        click.echo(f"Instance {instance} is not specified in config")


@context.command('switch')
@click.argument('name')
@click.pass_obj
def context_switch(state: State, name: str):
    """Switch to a context."""
    if name not in state.config.contexts:
        raise click.ClickException(f'no such context: "{name}"')
    state.config.current_context = name


@context.command('delete')
@click.argument('name')
@click.pass_obj
def context_delete(state: State, name: str):
    """Delete a context."""
    state.config.contexts.pop(name, None)


@context.command('clean')
@click.pass_obj
def context_clean(state: State):
    """Prune contexts that reference an instance that does not exist."""
    config = state.config
    for name in [n for n, ctx in config.contexts.items() if ctx.instance not in config.instances]:
        del config.contexts[name]


# instance

@cli.group(cls=AliasedGroup, aliases={'ls': 'list', 'cr': 'create', 'new': 'create', 'add': 'create'})
def instance():
    """
    Manage the GitLab instances of the config file.

    Instances are logged in to with access tokens.
    """


@instance.command('create')
@click.argument('args', nargs=-1, required=True, metavar='[SERVER] TOKEN')
@click.pass_obj
def instance_create(state: State, args: tuple):
    """Log in to a GitLab instance, gitlab.com if no server is given."""
    if len(args) > 2:
        raise click.UsageError("expected at most a server and a token")
    server, token = ("gitlab.com", args[0]) if len(args) == 1 else args

    config = state.config
    if not config.validate_access_token(token):
        raise click.UsageError("the access token must not be empty")

    config.instances[server] = InstanceConfig(server, Authentication(token=token))

    if server in config.contexts:
        click.echo(f"context with name {server} already exists, not modifying")
    else:
        config.contexts[server] = Context(instance=server)

    config.current_context = server
    click.echo(f"added login as context {server} and set as current context")


@instance.command('list')
@click.pass_obj
def instance_list(state: State):
    """List all instances in the config file."""
    config = state.config
    try:
        current_instance = config.get_current_context().instance
    except GitlabCliError:
        current_instance = ""

    table = Table(min_width=1, padding=2)
    table.add_row("", "name", "authentication type")
    table.add_row("", "----", "-------------------")
    for name, inst in config.instances.items():
        current = "*" if name == current_instance else ""
        table.add_row(current, name, inst.authentication.type)
    click.echo(table.render(), nl=False)


@instance.command('clean')
@click.pass_obj
def instance_clean(state: State):
    """Prune instances that are not referenced in a context."""
    config = state.config
    used = {ctx.instance for ctx in config.contexts.values()}
    for name in [n for n in config.instances if n not in used]:
        del config.instances[name]


# project

@cli.group(cls=AliasedGroup, aliases={'ls': 'list', 'cl': 'clone', 'use-ctx': 'use-context'})
def project():
    """Work with projects."""


@project.command('list')
@click.argument('proj', required=False, default='')
@click.option('--depth', '-d', default=0, show_default=True, help='Depth to list recursively, 0 means infinite')
@click.option('--desc', 'show_description', is_flag=True, help='Show the description of projects too')
@click.option('--all', '-a', 'show_all', is_flag=True, help='Show all projects, including archived ones')
@click.pass_obj
@reports_errors
def project_list(state: State, proj: str, depth: int, show_description: bool, show_all: bool):
    """List the projects of the current group, or of PROJ."""
    # a local git repository makes no sense as root here
    state.config.use_config_context = True

    cctx = state.config.get_current_context()
    group = get_absolute_group_path(cctx.group, proj)
    client = cctx.with_group(group).gitlab_client(logger=state.logger.getChild('client'))

    state.logger.info("fetching projects...")
    root = client.get_projects(include_archived=show_all)

    click.echo(print_project(root, PrintOptions(
        print_archived=show_all,
        print_description=show_description,
        depth=depth,
    ), logger=state.logger.getChild('render')), nl=False)


@project.command('clone')
@click.argument('proj', required=False, default='')
@click.option('--destination', '-C', default='.', show_default=True,
              type=click.Path(file_okay=False), help='Local directory to clone into')
@click.option('--jobs', '-j', type=click.IntRange(min=1), default=None,
              help='Number of concurrent clones (default: concurrent_clones from the config)')
@click.option('--all', '-a', 'include_archived', is_flag=True, help='Clone archived projects too')
@click.pass_obj
@reports_errors
def project_clone(state: State, proj: str, destination: str, jobs: Optional[int], include_archived: bool):
    """
    Clone a group or project recursively, creating the necessary folders.

    Existing working copies are pulled instead. With a trailing "/" on PROJ,
    the contents of the group are cloned without a folder for the group
    itself.
    """
    logger = state.logger
    state.config.use_config_context = True

    cctx = state.config.get_current_context()
    skip_root = proj.endswith("/")
    group = get_absolute_group_path(cctx.group, proj)
    client = cctx.with_group(group).gitlab_client(logger=logger.getChild('client'))

    token = CancelToken()

    def cancel(signum, frame):
        logger.debug("canceling, stopping all operations")
        token.cancel()

    previous = signal.signal(signal.SIGINT, cancel)
    try:
        logger.info("fetching projects...")
        root = client.get_projects(token, include_archived=include_archived)

        root_path = root.full_path if skip_root else root.namespace
        cloner = Cloner(root_path, skip_root, cctx.authentication, destination,
                        logger=logger.getChild('cloner'))
        walk_concurrent(token, root, cloner.visit,
                        max_workers=jobs or state.config.get('concurrent_clones'),
                        logger=logger.getChild('walker'))
    finally:
        signal.signal(signal.SIGINT, previous)

    cloner.print_statistics()
    if token.cancelled:
        logger.info("Operation cancelled by user")
        raise click.exceptions.Exit(1)


@project.command('use-context')
@click.argument('proj')
@click.argument('context_name', required=False)
@click.pass_obj
@reports_errors
def project_use_context(state: State, proj: str, context_name: Optional[str]):
    """
    Use PROJ as the namespace of a context.

    Without CONTEXT_NAME the current context is changed, otherwise a new
    context on the same instance is created.
    """
    config = state.config
    config.use_config_context = True

    cctx = config.get_current_context()
    group = get_absolute_group_path(cctx.group or cctx.user, proj)

    if context_name is None:
        cctx.group = group
        return

    config.contexts[context_name] = Context(instance=cctx.instance, group=group)


def main():
    cli(prog_name='gitlab-cli')


if __name__ == '__main__':
    main()
