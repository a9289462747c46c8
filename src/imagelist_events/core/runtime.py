"""Thin wrappers around the Docker SDK."""
import time
from typing import Any, Callable, Dict, Iterator

import docker
import requests

from imagelist_events.core.errors import (
    EventStreamError,
    RuntimeConnectionError,
    RuntimeQueryError,
)
from imagelist_events.utils import Logger

# restricts the subscription to image events only.
EVENT_FILTERS = {"type": ["image"]}

# errors raised by the SDK either by the daemon or by the underlying transport.
DOCKER_ERRORS = (docker.errors.DockerException, requests.exceptions.RequestException)

# a truncated event payload fails JSON decoding.
STREAM_ERRORS = DOCKER_ERRORS + (ValueError,)


def connect() -> docker.DockerClient:
    """Opens a new connection to the Docker daemon configured in the
    environment (i.e. `DOCKER_HOST`).

    Raises:
        RuntimeConnectionError: if the daemon is unreachable.
    """
    try:
        return docker.from_env()

    except DOCKER_ERRORS as exc:
        raise RuntimeConnectionError(f"docker connection failed: {exc}") from exc


def connect_with_backoff(
    logger: Logger,
    delay: float,
    max_delay: float,
    connect_fn: Callable[[], docker.DockerClient] = connect,
    sleep: Callable[[float], None] = time.sleep,
) -> docker.DockerClient:
    """Connects to the Docker daemon retrying until it succeeds.

    The delay between two attempts doubles after each failure up to
    `max_delay`.

    Arguments:
        logger: where connection failures are reported.
        delay: seconds to wait after the first failure.
        max_delay: upper bound of the delay.
        connect_fn: opens a single connection.
        sleep: used to wait between attempts.

    Returns:
        A connected Docker client.
    """
    while True:
        try:
            return connect_fn()

        except RuntimeConnectionError as exc:
            logger.error(f"{exc}, retrying in {delay} seconds")

        sleep(delay)
        delay = min(delay * 2, max_delay)


def inspect_image(client: docker.DockerClient, name: str) -> Dict[str, Any]:
    """Gets the low-level metadata of a local image.

    Arguments:
        client: connected Docker client.
        name: the image reference (i.e. `quay.io/foo/bar:v1`).

    Raises:
        RuntimeQueryError: if the image does not exist or Docker fails.
    """
    try:
        return client.api.inspect_image(name)

    except DOCKER_ERRORS as exc:
        raise RuntimeQueryError(f"failed to inspect {name!r} image: {exc}") from exc


def subscribe(client: docker.DockerClient) -> Iterator[Dict[str, Any]]:
    """Yields the image events emitted by the Docker daemon.

    The iteration ends when the daemon closes the stream.

    Raises:
        EventStreamError: if the events cannot be read.
    """
    try:
        stream = client.events(decode=True, filters=EVENT_FILTERS)

    except DOCKER_ERRORS as exc:
        raise EventStreamError(f"failed to read events: {exc}") from exc

    events = iter(stream)

    try:
        while True:
            try:
                event = next(events)

            except StopIteration:
                return

            except STREAM_ERRORS as exc:
                raise EventStreamError(f"failed to read events: {exc}") from exc

            yield event

    finally:
        stream.close()
