"""Functions and data structures used to represent and validate the
configuration of imagelist-docker-events."""
from typing import Optional

from attrs import define, field
from attrs.validators import ge, gt, instance_of

from imagelist_events.core.errors import ConfigurationError
from imagelist_events.core.url import join_url

IMAGES_PATH = "/images"

RECONNECT_DELAY = 1.0
RECONNECT_MAX_DELAY = 30.0
RETRY_DELAY = 3.0
MAX_ATTEMPTS = 30


@define(frozen=True, kw_only=True)
class Config:
    """imagelist-docker-events' configuration.

    Arguments:
        imagelist_url: base URL of the imagelist service.
        images_url: URL where images are submitted.
        reconnect_delay: seconds to wait before subscribing again to the
            Docker events after a failure.
        reconnect_max_delay: upper bound of the backoff used while the Docker
            daemon is unreachable.
        retry_delay: seconds to wait between two attempts to submit an image.
        max_attempts: maximum number of attempts to submit a single image.
    """

    imagelist_url: str
    images_url: str
    reconnect_delay: float = field(default=RECONNECT_DELAY, validator=ge(0))
    reconnect_max_delay: float = field(default=RECONNECT_MAX_DELAY, validator=ge(0))
    retry_delay: float = field(default=RETRY_DELAY, validator=ge(0))
    max_attempts: int = field(default=MAX_ATTEMPTS, validator=[instance_of(int), gt(0)])


def load_config(
    imagelist_url: Optional[str],
    reconnect_delay: float = RECONNECT_DELAY,
    retry_delay: float = RETRY_DELAY,
    max_attempts: int = MAX_ATTEMPTS,
) -> Config:
    """Validates the settings and builds the configuration.

    Arguments:
        imagelist_url: base URL of the imagelist service.
        reconnect_delay: seconds to wait before reconnecting to Docker.
        retry_delay: seconds to wait between two submission attempts.
        max_attempts: maximum number of submission attempts per image.

    Returns:
        The configuration.

    Raises:
        ConfigurationError: if the URL is missing or any setting is invalid.
    """
    if not imagelist_url:
        raise ConfigurationError("imagelist-url needs to be set")

    try:
        images_url = join_url(imagelist_url, IMAGES_PATH)

    except ConfigurationError as exc:
        raise ConfigurationError(f"failed to parse imagelist url: {exc}") from exc

    try:
        return Config(
            imagelist_url=imagelist_url,
            images_url=images_url,
            reconnect_delay=reconnect_delay,
            reconnect_max_delay=max(RECONNECT_MAX_DELAY, reconnect_delay),
            retry_delay=retry_delay,
            max_attempts=max_attempts,
        )

    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc
