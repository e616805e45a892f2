import click

from authbridge.cli.providers import list_providers
from authbridge.cli.serve import serve
from authbridge.version import PACKAGE_VERSION


@click.group(invoke_without_command=True)
@click.version_option(PACKAGE_VERSION, prog_name="authbridge")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """authbridge CLI"""
    # Show help when no subcommand is provided
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(serve)
cli.add_command(list_providers)
