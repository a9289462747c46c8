import json
from unittest import mock

import docker
import pytest
from testfixtures import ShouldRaise, compare

from imagelist_events.core.errors import (
    NoDigestsFoundError,
    NoTagError,
    RuntimeConnectionError,
    RuntimeQueryError,
    SerializationError,
)
from imagelist_events.core.image import (
    ImageRecord,
    encode_record,
    map_repo_digests_to_tags,
    resolve_image,
)

INSPECT = {
    "RepoDigests": [
        "vaijab/did@sha256:b3bedb83fb69f207d69adffb2e5690b449b658ea2c139240d20f2ef56bcb4c6f",
        "quay.io/vaijab/did@sha256:42c5ace3ac1e133a49d81086993e5817e70c67cdbf808bf8934aac78e3e416f0",
        "quay.io/vaijab/did@sha256:4a967d63c7d5a2da1fd23d5c6733940b2bd8cb1997575d148d5863fd4f460844",
    ],
    "RepoTags": [
        "foo/bar:notpushedyet",
        "vaijab/did:v1",
        "quay.io/vaijab/did:v1",
        "quay.io/vaijab/did:v1.1",
        "quay.io/vaijab/did:latest",
        "vaijab/did:latest",
    ],
}


def _connect(inspect=None, error=None):
    client = mock.Mock()
    client.api.inspect_image.return_value = inspect
    client.api.inspect_image.side_effect = error

    return mock.Mock(return_value=client), client


@pytest.mark.parametrize(
    ["name", "repo_digest", "tags"],
    [
        (
            "quay.io/vaijab/did",
            "quay.io/vaijab/did@sha256:42c5ace3ac1e133a49d81086993e5817e70c67cdbf808bf8934aac78e3e416f0",
            ["v1", "v1.1", "latest"],
        ),
        (
            "quay.io/vaijab/did:v1.1",
            "quay.io/vaijab/did@sha256:4a967d63c7d5a2da1fd23d5c6733940b2bd8cb1997575d148d5863fd4f460844",
            ["v1", "v1.1", "latest"],
        ),
        (
            "vaijab/did:v1",
            "vaijab/did@sha256:b3bedb83fb69f207d69adffb2e5690b449b658ea2c139240d20f2ef56bcb4c6f",
            ["v1", "latest"],
        ),
    ],
)
def test_map_repo_digests_to_tags__group_tags_by_repository(name, repo_digest, tags):
    res = map_repo_digests_to_tags(name, INSPECT)

    compare(res[repo_digest], tags)


def test_map_repo_digests_to_tags__give_same_tags_to_all_digests_of_a_repository():
    res = map_repo_digests_to_tags("quay.io/vaijab/did:v1", INSPECT)

    compare(
        res,
        {
            "quay.io/vaijab/did@sha256:42c5ace3ac1e133a49d81086993e5817e70c67cdbf808bf8934aac78e3e416f0": [
                "v1",
                "v1.1",
                "latest",
            ],
            "quay.io/vaijab/did@sha256:4a967d63c7d5a2da1fd23d5c6733940b2bd8cb1997575d148d5863fd4f460844": [
                "v1",
                "v1.1",
                "latest",
            ],
        },
    )


@pytest.mark.parametrize(
    ["name", "image"],
    [
        ("foo/bar:notpushedyet", INSPECT),
        ("", INSPECT),
        ("vaijab/did:v1", {"RepoDigests": None, "RepoTags": None}),
        ("vaijab/did:v1", {}),
    ],
)
def test_map_repo_digests_to_tags__return_empty_mapping_if_nothing_matches(name, image):
    res = map_repo_digests_to_tags(name, image)

    compare(res, {})


def test_resolve_image__return_a_record_for_each_matching_digest():
    connect, client = _connect(
        inspect={
            "RepoTags": ["foo/bar:notpushedyet", "a/b:v1", "a/b:latest"],
            "RepoDigests": ["a/b@sha1", "c/d@sha2"],
        }
    )

    res = resolve_image("a/b:v1", connect=connect)

    compare(res, [ImageRecord(digest="a/b@sha1", repository="a/b", tags=("v1", "latest"))])
    client.api.inspect_image.assert_called_once_with("a/b:v1")
    client.close.assert_called_once_with()


def test_resolve_image__is_idempotent():
    connect, _ = _connect(inspect=INSPECT)

    first = resolve_image("quay.io/vaijab/did:v1", connect=connect)
    second = resolve_image("quay.io/vaijab/did:v1", connect=connect)

    compare(
        {(rec.digest, frozenset(rec.tags)) for rec in first},
        {(rec.digest, frozenset(rec.tags)) for rec in second},
    )
    compare(connect.call_count, 2)


def test_resolve_image__raise_NoTagError_without_connecting():
    connect, _ = _connect(inspect=INSPECT)

    with ShouldRaise(NoTagError):
        resolve_image("vaijab/did", connect=connect)

    connect.assert_not_called()


def test_resolve_image__raise_NoDigestsFoundError_for_unpushed_image():
    connect, client = _connect(inspect=INSPECT)

    with ShouldRaise(NoDigestsFoundError):
        resolve_image("foo/bar:notpushedyet", connect=connect)

    client.close.assert_called_once_with()


def test_resolve_image__raise_RuntimeQueryError_and_close_client():
    connect, client = _connect(error=docker.errors.ImageNotFound("no such image"))

    with ShouldRaise(RuntimeQueryError):
        resolve_image("vaijab/did:v1", connect=connect)

    client.close.assert_called_once_with()


def test_resolve_image__propagate_connection_errors():
    connect = mock.Mock(side_effect=RuntimeConnectionError("docker connection failed"))

    with ShouldRaise(RuntimeConnectionError):
        resolve_image("vaijab/did:v1", connect=connect)


def test_encode_record__use_imagelist_field_names():
    record = ImageRecord(digest="a/b@sha1", repository="a/b", tags=["v1", "latest"])

    res = json.loads(encode_record(record))

    compare(res, {"id": "a/b@sha1", "name": "a/b", "tags": ["v1", "latest"]})


def test_encode_record__raise_SerializationError_if_not_encodable():
    record = ImageRecord(digest="a/b@sha1", repository="a/b", tags=[object()])

    with ShouldRaise(SerializationError):
        encode_record(record)
