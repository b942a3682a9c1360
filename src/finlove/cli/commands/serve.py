"""HTTP server command."""

import click
import uvicorn

from finlove.web.app import create_app


@click.command("serve")
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", type=int, default=8000, show_default=True, help="Bind port")
@click.pass_context
def serve(ctx, host: str, port: int):
    """Run the HTTP API, including the /api/cron rollover trigger."""
    app = create_app(ctx.obj["app"])
    uvicorn.run(app, host=host, port=port, log_config=None)


def register_commands(cli):
    """Register serve command with main CLI."""
    cli.add_command(serve)
