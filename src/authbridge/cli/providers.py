import click

from authbridge.auth.contracts import ProviderDescriptor
from authbridge.auth.registry import ProviderRegistry
from authbridge.cli.utils import configure_logging, output_error, output_result
from authbridge.config.loader import load_config


def _describe(descriptor: ProviderDescriptor) -> str:
    return (
        f"{click.style(descriptor.name, fg='cyan')}  {descriptor.display_name}  "
        f"scopes={descriptor.scope_string}  callback={descriptor.callback_path}"
    )


@click.command(name="providers")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file path")
@click.option("--json-output", is_flag=True, help="Output in JSON format")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def list_providers(config_path: str | None, json_output: bool, debug: bool) -> None:
    """List the login providers that the current configuration registers.

    \b
    Examples:
        authbridge providers
        authbridge providers --config prod.yml --json-output
    """
    configure_logging(debug)
    try:
        config = load_config(config_path)
        registry = ProviderRegistry.from_config(
            config.providers,
            timeout=config.auth.http_timeout_seconds,
            route_prefix=config.auth.route_prefix,
        )
        if json_output:
            output_result(
                [
                    {
                        "name": adapter.descriptor.name,
                        "display_name": adapter.descriptor.display_name,
                        "scopes": list(adapter.descriptor.scopes),
                        "callback_path": adapter.descriptor.callback_path,
                    }
                    for adapter in registry
                ],
                json_output=True,
            )
        elif len(registry):
            output_result([_describe(adapter.descriptor) for adapter in registry])
        else:
            output_result(click.style("No providers configured.", fg="yellow"))
    except Exception as e:
        output_error(e, json_output=json_output, debug=debug)
