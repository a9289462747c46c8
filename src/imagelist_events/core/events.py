"""Watches the Docker events and dispatches pushed images to imagelist."""
import threading
import time
from typing import Any, Callable, Iterable, Mapping

import docker
import httpx

from imagelist_events.core import runtime
from imagelist_events.core.config import Config
from imagelist_events.core.errors import EventStreamError, ImageListError
from imagelist_events.core.image import resolve_image
from imagelist_events.core.publish import publish_record
from imagelist_events.utils import Logger

Spawn = Callable[..., Any]


def spawn(target: Callable[..., Any], *args, **kwargs) -> threading.Thread:
    """Runs a function in a new daemon thread without waiting for it.

    Arguments:
        target: the function to run.
        args: positional arguments passed to the function.
        kwargs: keyword arguments passed to the function.

    Returns:
        The started thread.
    """
    thread = threading.Thread(target=target, args=args, kwargs=kwargs, daemon=True)
    thread.start()

    return thread


def is_push_event(event: Mapping[str, Any]) -> bool:
    """Checks if a Docker event reports an image pushed to a registry."""
    return event.get("Type") == "image" and event.get("Action") == "push"


def dispatch_push(
    name: str,
    config: Config,
    logger: Logger,
    connect: Callable[[], docker.DockerClient] = runtime.connect,
    client_factory: Callable[[], httpx.Client] = httpx.Client,
    spawn_fn: Spawn = spawn,
):
    """Resolves a pushed image and starts a submission for each of its
    records.

    Failures are logged, with their traceback if unexpected, and end the
    dispatch of this image only.

    Arguments:
        name: the pushed image reference (i.e. `quay.io/foo/bar:v1`).
        config: imagelist-docker-events' configuration.
        logger: where failures are reported.
        connect: opens the connection to Docker.
        client_factory: creates the HTTP clients used for submissions.
        spawn_fn: starts a submission without waiting for it.
    """
    try:
        records = resolve_image(name, connect=connect)

    except ImageListError as exc:
        logger.error(str(exc))
        return

    except Exception:  # pylint: disable=broad-except
        logger.exception(f"failed to resolve {name!r} image")
        return

    for record in records:
        spawn_fn(
            publish_record,
            record,
            config.images_url,
            config,
            logger,
            client_factory=client_factory,
        )


def handle_event(
    event: Mapping[str, Any],
    config: Config,
    logger: Logger,
    spawn_fn: Spawn = spawn,
    dispatch: Callable[..., Any] = dispatch_push,
) -> bool:
    """Dispatches an event if it reports a pushed image.

    Arguments:
        event: the decoded Docker event.
        config: imagelist-docker-events' configuration.
        logger: where the dispatch is reported.
        spawn_fn: starts the dispatch without waiting for it.
        dispatch: resolves and submits the pushed image.

    Returns:
        `True` if the event got dispatched.
    """
    if not is_push_event(event):
        return False

    name = event.get("id") or event.get("Actor", {}).get("ID", "")
    logger.log(f"image {name} pushed")

    spawn_fn(dispatch, name, config, logger)

    return True


def process_events(
    events: Iterable[Mapping[str, Any]],
    config: Config,
    logger: Logger,
    spawn_fn: Spawn = spawn,
    dispatch: Callable[..., Any] = dispatch_push,
):
    """Handles the events one at a time until the stream ends.

    Raises:
        EventStreamError: if reading the events fails.
    """
    for event in events:
        handle_event(event, config, logger, spawn_fn=spawn_fn, dispatch=dispatch)


def watch_events(
    config: Config,
    logger: Logger,
    connect: Callable[[], docker.DockerClient] = runtime.connect,
    subscribe: Callable[[docker.DockerClient], Iterable[Mapping[str, Any]]] = runtime.subscribe,
    spawn_fn: Spawn = spawn,
    sleep: Callable[[float], None] = time.sleep,
):
    """Subscribes to the Docker image events and dispatches every pushed
    image, forever.

    A new connection and subscription is created whenever the stream fails
    or gets closed by the daemon.

    Arguments:
        config: imagelist-docker-events' configuration.
        logger: where the progress is reported.
        connect: opens the connection to Docker.
        subscribe: yields the image events from a connected client.
        spawn_fn: starts a dispatch without waiting for it.
        sleep: used to wait before reconnecting.
    """
    while True:
        client = runtime.connect_with_backoff(
            logger,
            delay=config.reconnect_delay,
            max_delay=config.reconnect_max_delay,
            connect_fn=connect,
            sleep=sleep,
        )
        logger.log("watching docker image events")

        try:
            process_events(subscribe(client), config, logger, spawn_fn=spawn_fn)

        except EventStreamError as exc:
            logger.error(str(exc))
            client.close()
            sleep(config.reconnect_delay)
            continue

        logger.log("docker events stream closed, reconnecting")
        client.close()
