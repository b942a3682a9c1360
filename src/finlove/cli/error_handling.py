"""CLI error handling helpers."""

from contextlib import contextmanager
from typing import Iterator

import click

from finlove.domain.errors import DomainError, ExternalServiceError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    click.echo(f"Error: {error}", err=True)
    ctx.exit(2 if isinstance(error, ExternalServiceError) else 1)


@contextmanager
def domain_errors(ctx: click.Context) -> Iterator[None]:
    """Turn domain errors raised inside the block into CLI errors."""
    try:
        yield
    except ValueError as e:
        handle_domain_error(ctx, e)
