"""Parsing of container image references (registry, repository, tag, digest)."""

from __future__ import annotations

import re
from dataclasses import dataclass

DEFAULT_REGISTRY = "index.docker.io"
DEFAULT_TAG = "latest"

_TAG_RE = re.compile(r"^[A-Za-z0-9_.-]{1,127}$")
_REPOSITORY_RE = re.compile(r"^[a-z0-9_./-]{2,255}$")
_DIGEST_RE = re.compile(r"^sha256:[0-9a-f]{64}$")
_REGISTRY_RE = re.compile(r"^[A-Za-z0-9.-]+(:[0-9]+)?$")


class InvalidReferenceError(ValueError):
    """Raised when an image reference cannot be parsed."""


@dataclass(frozen=True)
class ImageReference:
    """A parsed image reference; exactly one of ``tag`` and ``digest`` is set."""

    registry: str
    repository: str
    tag: str | None = None
    digest: str | None = None

    def context(self) -> str:
        """Return the fully expanded ``registry/repository`` name."""
        return f"{self.registry}/{self.repository}"

    def __str__(self) -> str:
        if self.digest is not None:
            return f"{self.context()}@{self.digest}"
        return f"{self.context()}:{self.tag}"


def _parse_repository(name: str) -> tuple[str, str]:
    if not name:
        raise InvalidReferenceError("a repository name must be specified")
    first, sep, rest = name.partition("/")
    if sep and ("." in first or ":" in first or first == "localhost"):
        registry, repository = first, rest
    else:
        registry, repository = "", name
    if not _REPOSITORY_RE.match(repository):
        raise InvalidReferenceError(f"repository {repository!r} is invalid")
    if registry:
        if not _REGISTRY_RE.match(registry):
            raise InvalidReferenceError(f"registry {registry!r} is invalid")
        if registry == "docker.io":
            registry = DEFAULT_REGISTRY
    else:
        registry = DEFAULT_REGISTRY
    if registry == DEFAULT_REGISTRY and "/" not in repository:
        repository = f"library/{repository}"
    return registry, repository


def _split_tag(image: str) -> tuple[str, str]:
    head, sep, last = image.rpartition(":")
    if sep and "/" not in last:
        return head, last
    return image, ""


def parse_tag(image: str) -> ImageReference:
    """Parse ``image`` as a tagged reference, defaulting the tag to ``latest``."""
    base, tag = _split_tag(image)
    if not tag:
        tag = DEFAULT_TAG
    if not _TAG_RE.match(tag):
        raise InvalidReferenceError(f"tag {tag!r} is invalid")
    registry, repository = _parse_repository(base)
    return ImageReference(registry, repository, tag=tag)


def parse_digest(image: str) -> ImageReference:
    """Parse ``image`` as a reference pinned by a ``sha256`` digest."""
    parts = image.split("@")
    if len(parts) != 2:
        raise InvalidReferenceError(
            "a digest must contain exactly one '@' separator"
        )
    base, digest = parts
    if not _DIGEST_RE.match(digest):
        raise InvalidReferenceError(f"digest {digest!r} is invalid")
    stripped, tag = _split_tag(base)
    if tag and _TAG_RE.match(tag):
        base = stripped
    registry, repository = _parse_repository(base)
    return ImageReference(registry, repository, digest=digest)


def parse_reference(image: str) -> ImageReference:
    """Parse ``image`` as a tag reference, falling back to a digest reference."""
    try:
        return parse_tag(image)
    except InvalidReferenceError:
        pass
    try:
        return parse_digest(image)
    except InvalidReferenceError as exc:
        raise InvalidReferenceError(f"could not parse reference: {image}") from exc