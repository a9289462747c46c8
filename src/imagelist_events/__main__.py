"""Main entrypoint for the `imagelist-docker-events` command."""
from typing import Optional

import click

from imagelist_events.core.config import MAX_ATTEMPTS, RECONNECT_DELAY, RETRY_DELAY, load_config
from imagelist_events.core.errors import ConfigurationError
from imagelist_events.core.events import watch_events
from imagelist_events.utils import Logger

VERSION = "v0.0.1"


@click.command(name="imagelist-docker-events")
@click.option(
    "--imagelist-url",
    envvar="IMAGELIST_URL",
    default=None,
    help="imagelist service url",
)
@click.option(
    "--reconnect-delay",
    type=click.FloatRange(min=0),
    default=RECONNECT_DELAY,
    show_default=True,
    help="seconds to wait before reconnecting to docker",
)
@click.option(
    "--retry-delay",
    type=click.FloatRange(min=0),
    default=RETRY_DELAY,
    show_default=True,
    help="seconds to wait between two attempts to submit an image",
)
@click.option(
    "--max-attempts",
    type=click.IntRange(min=1),
    default=MAX_ATTEMPTS,
    show_default=True,
    help="maximum number of attempts to submit an image",
)
@click.version_option(VERSION, prog_name="imagelist-docker-events")
def cli(
    imagelist_url: Optional[str],
    reconnect_delay: float,
    retry_delay: float,
    max_attempts: int,
):
    """Poll docker for image push events and add them to imagelist service."""
    try:
        config = load_config(
            imagelist_url,
            reconnect_delay=reconnect_delay,
            retry_delay=retry_delay,
            max_attempts=max_attempts,
        )

    except ConfigurationError as exc:
        raise click.ClickException(str(exc)) from exc

    logger = Logger()
    logger.log(
        f"submitting pushed images to imagelist {config.imagelist_url} ({config.images_url})"
    )

    watch_events(config, logger)


if __name__ == "__main__":
    cli()  # pylint: disable=no-value-for-parameter
