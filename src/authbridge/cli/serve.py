import click
import uvicorn

from authbridge.cli.utils import configure_logging, output_error
from authbridge.config.loader import load_config
from authbridge.server.app import create_app, create_auth_service


@click.command(name="serve")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file path")
@click.option("--host", help="Host to bind (defaults to config setting)")
@click.option("--port", type=int, help="Port number to use (defaults to config setting)")
@click.option("--debug", is_flag=True, help="Show detailed debug information")
def serve(config_path: str | None, host: str | None, port: int | None, debug: bool) -> None:
    """Start the authbridge HTTP server.

    \b
    Examples:
        authbridge serve                    # Use ./authbridge.yml or $AUTHBRIDGE_CONFIG
        authbridge serve --port 9000        # Override port from config
        authbridge serve --config prod.yml  # Use a specific config file
    """
    configure_logging(debug)

    try:
        config = load_config(config_path)

        # CLI flags take precedence over config settings
        final_host = host or config.transport.host
        final_port = port or config.transport.port
        config.transport.host = final_host
        config.transport.port = final_port

        auth_service = create_auth_service(config)
        app = create_app(auth_service, config)

        click.echo("\n" + "=" * 60)
        click.echo(click.style("authbridge starting", fg="green", bold=True).center(70))
        click.echo("=" * 60 + "\n")
        click.echo(click.style("Configuration:", fg="cyan", bold=True))
        click.echo(f"   - Host: {click.style(final_host, fg='yellow')}")
        click.echo(f"   - Port: {click.style(str(final_port), fg='yellow')}")
        click.echo(f"   - Routes: {click.style(config.auth.route_prefix or '/', fg='yellow')}")

        click.echo(f"\n{click.style('Providers:', fg='cyan', bold=True)}")
        names = auth_service.registry.names()
        if names:
            for name in names:
                click.echo(f"   - {click.style(name, fg='green')}")
        else:
            click.echo(f"   {click.style('No providers configured!', fg='yellow')}")
            click.echo("   Set e.g. GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET, or add a providers section.")

        click.echo("\n" + "-" * 60)
        click.echo(
            f"\nListening on {click.style(f'http://{final_host}:{final_port}', fg='cyan', underline=True)}"
        )
        click.echo(f"{click.style('Press Ctrl+C to stop', fg='yellow')}\n")

        uvicorn.run(
            app,
            host=final_host,
            port=final_port,
            log_level="debug" if debug else "info",
            proxy_headers=config.transport.trust_proxy,
        )
    except KeyboardInterrupt:
        pass
    except Exception as e:
        output_error(e, json_output=False, debug=debug)
