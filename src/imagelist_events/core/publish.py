"""Submission of image records to the imagelist service."""
import enum
import time
from typing import Callable

import httpx
from attrs import define

from imagelist_events.core.config import Config
from imagelist_events.core.errors import (
    ClientError,
    SerializationError,
    ServerError,
    TransportError,
)
from imagelist_events.core.image import ImageRecord, encode_record
from imagelist_events.utils import Logger

CONTENT_TYPE = "application/json"


class PublishOutcome(enum.Enum):
    """Terminal state of a submission."""

    SUCCEEDED = "succeeded"
    GIVEN_UP = "given_up"


@define(frozen=True, kw_only=True)
class PublishResult:
    """Reports how a submission ended.

    Arguments:
        outcome: the terminal state reached.
        attempts: number of requests sent to imagelist.
    """

    outcome: PublishOutcome
    attempts: int


def put_record(client: httpx.Client, url: str, data: bytes):
    """Sends one encoded record to imagelist.

    The response body is drained and released before returning.

    Raises:
        TransportError: if the request cannot be sent.
        ServerError: if imagelist fails with a 500.
        ClientError: if imagelist returns any other unexpected status.
    """
    try:
        with client.stream(
            "PUT", url, content=data, headers={"Content-Type": CONTENT_TYPE}
        ) as response:
            response.read()

    except httpx.RequestError as exc:
        raise TransportError(str(exc) or type(exc).__name__) from exc

    match response.status_code:
        case httpx.codes.OK:
            return

        case httpx.codes.INTERNAL_SERVER_ERROR:
            raise ServerError(response.status_code)

        case _:
            raise ClientError(response.status_code)


def publish_record(
    record: ImageRecord,
    url: str,
    config: Config,
    logger: Logger,
    client_factory: Callable[[], httpx.Client] = httpx.Client,
    sleep: Callable[[float], None] = time.sleep,
) -> PublishResult:
    """Submits a record to imagelist retrying on transient failures.

    Transport errors and 500 responses are retried up to `config.max_attempts`
    times, waiting `config.retry_delay` seconds between attempts. Any other
    failure stops the submission immediately, unexpected errors are logged
    with their traceback.

    Arguments:
        record: the record to submit.
        url: the URL accepting images (i.e. `http://imagelist/images`).
        config: provides the retry settings.
        logger: where the outcome is reported.
        client_factory: creates the HTTP client used by a single attempt.
        sleep: used to wait between attempts.

    Returns:
        How the submission ended.
    """
    attempt = 0

    while attempt < config.max_attempts:
        if attempt != 0:
            sleep(config.retry_delay)
        attempt += 1

        try:
            data = encode_record(record)

        except SerializationError as exc:
            logger.error(f"error submitting {record.repository!r} image: {exc}")
            return PublishResult(outcome=PublishOutcome.GIVEN_UP, attempts=attempt - 1)

        try:
            with client_factory() as client:
                put_record(client, url, data)

        except (TransportError, ServerError) as exc:
            logger.error(f"error submitting {record.repository!r} image: {exc}")
            continue

        except ClientError as exc:
            logger.error(f"error submitting {record.repository!r} image: {exc}")
            return PublishResult(outcome=PublishOutcome.GIVEN_UP, attempts=attempt)

        except Exception:  # pylint: disable=broad-except
            logger.exception(f"error submitting {record.repository!r} image")
            return PublishResult(outcome=PublishOutcome.GIVEN_UP, attempts=attempt)

        logger.success(f"submitted {record.digest} tags={','.join(record.tags)}")
        return PublishResult(outcome=PublishOutcome.SUCCEEDED, attempts=attempt)

    logger.error(f"error submitting {record.repository!r} image: max retries reached")
    return PublishResult(outcome=PublishOutcome.GIVEN_UP, attempts=attempt)
