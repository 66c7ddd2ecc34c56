"""
Command-line interface implementing the credential helper host protocol.

The host runs the helper with one of store, get, erase, list or version as
the command, writes the request payload to stdin and reads the reply from
stdout. Errors are reported as a single line on stdout with exit code 1.
"""

import json

import click

from . import __version__
from .config import DEFAULT_LOG_FILE, DEFAULT_LOG_LEVEL, LOG_FILE_VAR, LOG_LEVEL_VAR
from .creds import Credentials, GitHubActionsOidcHelper
from .errors import HelperError, MissingServerURLError, format_error_context
from .loggingx import AuditLog, get_logger, open_audit_sink, setup_logging

PROGRAM_NAME = "docker-credential-github-actions-oidc"

logger = get_logger(__name__)


def read_server_url() -> str:
    """Read a server URL from stdin, joining lines and trimming whitespace."""
    payload = click.get_text_stream('stdin').read()
    server_url = "".join(payload.splitlines()).strip()
    if not server_url:
        raise MissingServerURLError()
    return server_url


def fail(ctx: click.Context, command: str, error: Exception) -> None:
    """Report ``error`` to the host and exit with status 1."""
    logger.warning("Credential helper command failed", command=command,
                   **format_error_context(error))
    click.echo(str(error))
    ctx.exit(1)


class HelperGroup(click.Group):
    """Command group that reports unknown commands the way credential hosts expect."""

    def resolve_command(self, ctx, args):
        command_name = args[0] if args else None
        if (command_name and not command_name.startswith("-")
                and self.get_command(ctx, command_name) is None):
            click.echo(f"Unknown credential action `{command_name}`")
            ctx.exit(1)
        return super().resolve_command(ctx, args)


@click.group(cls=HelperGroup)
@click.version_option(version=__version__, prog_name=PROGRAM_NAME)
@click.option('--log-file', envvar=LOG_FILE_VAR, default=DEFAULT_LOG_FILE, show_default=True,
              help='Append-only audit log file')
@click.option('--log-level', envvar=LOG_LEVEL_VAR, default=DEFAULT_LOG_LEVEL, show_default=True,
              help='Diagnostic log level (diagnostics go to stderr)')
@click.option('-v', '--verbose', is_flag=True, help='Human readable diagnostic output')
@click.pass_context
def cli(ctx: click.Context, log_file: str, log_level: str, verbose: bool):
    """Docker credential helper serving GitHub Actions OIDC tokens."""
    try:
        setup_logging(log_level, verbose)
        sink = ctx.with_resource(open_audit_sink(log_file))
    except HelperError as e:
        click.echo(str(e))
        ctx.exit(1)

    ctx.obj = GitHubActionsOidcHelper(AuditLog(sink))


@cli.command()
@click.pass_context
def store(ctx: click.Context):
    """Store credentials read as JSON from stdin."""
    helper = ctx.obj
    try:
        payload = json.loads(click.get_text_stream('stdin').read())
        if not isinstance(payload, dict):
            raise HelperError("credentials payload must be a JSON object")
        helper.store(Credentials.from_json(payload))
    except (HelperError, ValueError) as e:
        fail(ctx, 'store', e)


@cli.command()
@click.pass_context
def get(ctx: click.Context):
    """Print credentials for the server URL read from stdin."""
    helper = ctx.obj
    try:
        server_url = read_server_url()
        username, secret = helper.get(server_url)
    except HelperError as e:
        fail(ctx, 'get', e)
        return

    credentials = Credentials(server_url=server_url, username=username, secret=secret)
    click.echo(json.dumps(credentials.to_json(), separators=(',', ':')))


@cli.command()
@click.pass_context
def erase(ctx: click.Context):
    """Erase credentials for the server URL read from stdin."""
    helper = ctx.obj
    try:
        helper.erase(read_server_url())
    except HelperError as e:
        fail(ctx, 'erase', e)


@cli.command(name='list')
@click.pass_context
def list_credentials(ctx: click.Context):
    """Print stored credentials as a JSON object."""
    helper = ctx.obj
    click.echo(json.dumps(helper.list_credentials(), separators=(',', ':')))


@cli.command()
def version():
    """Print the helper version."""
    click.echo(f"{PROGRAM_NAME} (oidc_helper) {__version__}")


if __name__ == '__main__':
    cli()
