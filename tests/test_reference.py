import pytest

from imagegate.reference import (
    ImageReference,
    InvalidReferenceError,
    parse_digest,
    parse_reference,
    parse_tag,
)

DIGEST = "sha256:" + "0" * 64


def test_docker_hub_image_expands_to_library():
    ref = parse_tag("redis:7.0")
    assert ref.context() == "index.docker.io/library/redis"
    assert ref.tag == "7.0"
    assert ref.digest is None


def test_missing_tag_gets_default():
    ref = parse_tag("gcr.io/distroless/base")
    assert ref.tag == "latest"
    assert ref.registry == "gcr.io"
    assert ref.repository == "distroless/base"


def test_digest_reference():
    ref = parse_digest(f"gcr.io/some/image@{DIGEST}")
    assert ref.digest == DIGEST
    assert ref.tag is None
    assert ref.context() == "gcr.io/some/image"


def test_digest_with_tag_keeps_same_context():
    tagged = parse_tag("gcr.io/kritis-project/kritis-server:tag")
    pinned = parse_digest(f"gcr.io/kritis-project/kritis-server:tag@{DIGEST}")
    assert pinned.context() == tagged.context()


@pytest.mark.parametrize(
    "image",
    [
        "gcr.io/distroless/base:debug",
        f"gcr.io/p/img@sha256:{'a' * 63}",
        "gcr.io/p/img@sha256:foo",
        "a@b@" + DIGEST,
    ],
)
def test_parse_digest_rejects(image):
    with pytest.raises(InvalidReferenceError):
        parse_digest(image)


def test_parse_tag_rejects_digest_reference():
    with pytest.raises(InvalidReferenceError):
        parse_tag(f"gcr.io/some/image@{DIGEST}")


@pytest.mark.parametrize("image", ["UPPER/Case:tag", "a", "img:bad tag", ""])
def test_parse_reference_rejects(image):
    with pytest.raises(InvalidReferenceError):
        parse_reference(image)


def test_parse_reference_falls_back_to_digest():
    ref = parse_reference(f"gcr.io/some/image@{DIGEST}")
    assert ref.digest == DIGEST
    assert ref == parse_digest(f"gcr.io/some/image@{DIGEST}")


def test_parse_reference_prefers_tag():
    assert parse_reference("busybox") == parse_tag("busybox")


@pytest.mark.parametrize(
    "image",
    [
        "redis:7.0",
        "busybox",
        "gcr.io/distroless/base:debug",
        f"gcr.io/some/image@{DIGEST}",
        "localhost:5000/img:1",
    ],
)
def test_string_round_trip(image):
    ref = parse_reference(image)
    assert parse_reference(str(ref)) == ref


def test_registry_with_port_is_not_prefixed():
    ref = parse_tag("localhost:5000/img:1")
    assert ref.registry == "localhost:5000"
    assert ref.repository == "img"


def test_docker_io_is_normalised():
    assert parse_tag("docker.io/busybox").context() == parse_tag("busybox").context()


def test_context_equal_for_tag_and_digest_of_same_repository():
    by_tag = parse_reference("gcr.io/some/image:v1")
    by_digest = parse_reference(f"gcr.io/some/image@{DIGEST}")
    assert by_tag.context() == by_digest.context()
    assert by_tag != by_digest


def test_reference_is_immutable():
    ref = ImageReference("gcr.io", "some/image", tag="v1")
    with pytest.raises(AttributeError):
        ref.tag = "v2"
    assert ref.tag == "v1"
    assert ref.context() == "gcr.io/some/image"