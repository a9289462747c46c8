"""Resolution of pushed images into the records submitted to imagelist."""
import json
from typing import Any, Callable, Dict, List, Mapping, Tuple

import docker
from attrs import define, field
from cattrs import Converter
from cattrs.gen import make_dict_unstructure_fn, override

from imagelist_events.core import runtime
from imagelist_events.core.errors import NoDigestsFoundError, NoTagError, SerializationError
from imagelist_events.core.url import extract_tag, has_tag, strip_tag


@define(frozen=True, kw_only=True)
class ImageRecord:
    """A repo digest of an image together with its known tags.

    Arguments:
        digest: the repo digest (i.e. `quay.io/foo/bar@sha256:abc`).
        repository: the image name without tag (i.e. `quay.io/foo/bar`).
        tags: all the local tags sharing the repository of the digest.
    """

    digest: str
    repository: str
    tags: Tuple[str, ...] = field(converter=tuple, factory=tuple)


CONVERTER = Converter()
CONVERTER.register_unstructure_hook(
    ImageRecord,
    make_dict_unstructure_fn(
        ImageRecord,
        CONVERTER,
        digest=override(rename="id"),
        repository=override(rename="name"),
    ),
)


def encode_record(record: ImageRecord) -> bytes:
    """Encodes a record as the JSON payload expected by imagelist.

    Raises:
        SerializationError: if the record cannot be encoded.
    """
    try:
        return json.dumps(CONVERTER.unstructure(record)).encode("utf-8")

    except (TypeError, ValueError) as exc:
        raise SerializationError(f"failed to encode {record!r}: {exc}") from exc


def map_repo_digests_to_tags(name: str, image: Mapping[str, Any]) -> Dict[str, List[str]]:
    """Finds the repo digests that match the image name and maps each of them
    to the tags of the same repository.

    Digests and tags are only correlated by their repository prefix, so all the
    digests of a repository get the same tags even when a tag points to a
    different digest.

    Arguments:
        name: the image reference, its tag is ignored if present.
        image: the image metadata as returned by `docker inspect`.

    Returns:
        A mapping of repo digests to tags.
    """
    if not name:
        return {}

    name = strip_tag(name)

    tags = []
    for entry in image.get("RepoTags") or []:
        if entry.startswith(name):
            tag = extract_tag(entry)
            if tag is not None:
                tags.append(tag)

    return {
        entry: list(tags)
        for entry in image.get("RepoDigests") or []
        if entry.startswith(name)
    }


def resolve_image(
    name: str,
    connect: Callable[[], docker.DockerClient] = runtime.connect,
) -> List[ImageRecord]:
    """Gets the records to submit for a local image.

    A new Docker client is created for each call because the SDK does not
    reconnect on its own.

    Arguments:
        name: the image reference, it must include a tag (i.e. `foo/bar:v1`).
        connect: opens the connection to Docker.

    Returns:
        One record for each repo digest matching the image name.

    Raises:
        NoTagError: if the image reference has no tag.
        RuntimeConnectionError: if Docker is unreachable.
        RuntimeQueryError: if the image cannot be inspected.
        NoDigestsFoundError: if no repo digest matches the image name.
    """
    if not has_tag(name):
        raise NoTagError(f"unable to find image {name!r} without a tag")

    client = connect()
    try:
        image = runtime.inspect_image(client, name)

    finally:
        client.close()

    digests = map_repo_digests_to_tags(name, image)
    if not digests:
        raise NoDigestsFoundError(f"unable to find repo digests for {name!r} image")

    repository = strip_tag(name)

    return [
        ImageRecord(digest=digest, repository=repository, tags=tags)
        for digest, tags in digests.items()
    ]
