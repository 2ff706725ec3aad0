"""Resolution of tagged images in Kubernetes manifests to digest references."""

from __future__ import annotations

import hashlib
import logging
import re
from collections.abc import Callable, Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

import requests
import yaml

from imagegate.reference import (
    ImageReference,
    InvalidReferenceError,
    parse_digest,
    parse_tag,
)

log = logging.getLogger(__name__)

YAML_SEPARATOR = "---\n"

_MANIFEST_TYPES = (
    "application/vnd.docker.distribution.manifest.v2+json",
    "application/vnd.oci.image.manifest.v1+json",
)
_CHALLENGE_PARAM_RE = re.compile(r'(\w+)="([^"]*)"')
_TIMEOUT = 30
_NO_WRAP = 2**31 - 1

Resolver = Callable[[str], str]


class _Pairs(list):
    """An ordered YAML mapping that keeps duplicate keys."""


class _Loader(yaml.SafeLoader):
    """Loads mappings as ordered key/value pairs."""


def _construct_pairs(loader: _Loader, node: yaml.MappingNode) -> _Pairs:
    loader.flatten_mapping(node)
    return _Pairs(
        (
            loader.construct_object(key, deep=True),
            loader.construct_object(value, deep=True),
        )
        for key, value in node.value
    )


_Loader.add_constructor(yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_pairs)


class _Dumper(yaml.SafeDumper):
    """Dumps ordered pairs as mappings."""


def _represent_pairs(dumper: _Dumper, data: _Pairs) -> yaml.Node:
    return dumper.represent_mapping(
        yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, list(data)
    )


_Dumper.add_representer(_Pairs, _represent_pairs)


def _load_document(text: str) -> _Pairs:
    document = yaml.load(text, Loader=_Loader)
    if document is None:
        return _Pairs()
    if not isinstance(document, _Pairs):
        raise ValueError("a manifest document must be a mapping")
    return document


def _dump_document(document: Any) -> str:
    # Documents given here are freshly rebuilt by replace_images, so no
    # container is shared and no aliases are emitted.
    return yaml.dump(
        document,
        Dumper=_Dumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=_NO_WRAP,
    )


def _pairs_of(node: Any) -> Iterable[tuple[Any, Any]] | None:
    if isinstance(node, _Pairs):
        return node
    if isinstance(node, Mapping):
        return node.items()
    return None


def fully_qualified_image(image: str) -> bool:
    """Return True if ``image`` is pinned by a digest."""
    try:
        parse_digest(image)
    except InvalidReferenceError:
        return False
    return True


def _iter_tagged(node: Any) -> Iterator[str]:
    pairs = _pairs_of(node)
    if pairs is not None:
        for key, value in pairs:
            if key == "image":
                if not isinstance(value, str):
                    raise ValueError(f"image must be a string, got {value!r}")
                if not fully_qualified_image(value):
                    yield value
            else:
                yield from _iter_tagged(value)
    elif isinstance(node, list):
        for item in node:
            yield from _iter_tagged(item)


def tagged_images(document: Any) -> list[str]:
    """Return every ``image`` value in ``document`` that is not pinned by digest."""
    return list(_iter_tagged(document))


def _replace_value(key: Any, value: Any, replacements: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        if key == "image":
            return replacements.get(value, value)
        return value
    return replace_images(value, replacements)


def replace_images(document: Any, replacements: Mapping[str, str]) -> Any:
    """Return ``document`` with each ``image`` value swapped per ``replacements``."""
    if isinstance(document, _Pairs):
        return _Pairs(
            (key, _replace_value(key, value, replacements)) for key, value in document
        )
    if isinstance(document, Mapping):
        return {
            key: _replace_value(key, value, replacements)
            for key, value in document.items()
        }
    if isinstance(document, list):
        return [replace_images(item, replacements) for item in document]
    return document


def _registry_url(registry: str) -> str:
    host = registry.split(":")[0]
    insecure = host in ("localhost", "127.0.0.1") or host.endswith(".local")
    return f"{'http' if insecure else 'https'}://{registry}"


def _anonymous_token(
    session: requests.Session, challenge: str, reference: ImageReference
) -> str | None:
    scheme, _, params = challenge.partition(" ")
    if scheme.lower() != "bearer":
        return None
    fields = dict(_CHALLENGE_PARAM_RE.findall(params))
    realm = fields.get("realm")
    if not realm:
        return None
    query = {"scope": fields.get("scope", f"repository:{reference.repository}:pull")}
    if "service" in fields:
        query["service"] = fields["service"]
    response = session.get(realm, params=query, timeout=_TIMEOUT)
    response.raise_for_status()
    body = response.json()
    return body.get("token") or body.get("access_token")


def _fetch_manifest(reference: ImageReference) -> bytes:
    url = (
        f"{_registry_url(reference.registry)}/v2/{reference.repository}"
        f"/manifests/{reference.tag}"
    )
    headers = {"Accept": ", ".join(_MANIFEST_TYPES)}
    with requests.Session() as session:
        try:
            response = session.get(url, headers=headers, timeout=_TIMEOUT)
            if response.status_code == 401:
                bearer = _anonymous_token(
                    session, response.headers.get("WWW-Authenticate", ""), reference
                )
                if bearer:
                    headers["Authorization"] = f"Bearer {bearer}"
                    response = session.get(url, headers=headers, timeout=_TIMEOUT)
            response.raise_for_status()
        except (requests.RequestException, ValueError) as exc:
            raise RuntimeError(f"fetching manifest of {reference}: {exc}") from exc
        return response.content


def resolve_remote(image: str) -> str:
    """Resolve a tagged image to ``registry/repository@sha256:<digest>`` via its registry."""
    log.info("Resolving image %s ...", image)
    reference = parse_tag(image)
    digest = hashlib.sha256(_fetch_manifest(reference)).hexdigest()
    digest_name = f"{reference.context()}@sha256:{digest}"
    log.info("%s resolves to %s", image, digest_name)
    return digest_name


def resolve_tags_to_digests(
    images: Iterable[str], resolver: Resolver = resolve_remote
) -> dict[str, str]:
    """Map each tagged image to the digest reference ``resolver`` gives for it."""
    return {image: resolver(image) for image in images}


def _substitute(text: str, resolver: Resolver) -> str:
    document = _load_document(text)
    resolved = resolve_tags_to_digests(tagged_images(document), resolver)
    return _dump_document(replace_images(document, resolved))


def execute_substitution(contents: str, resolver: Resolver = resolve_remote) -> str:
    """Replace tagged images with digest references in each document of ``contents``."""
    return YAML_SEPARATOR.join(
        _substitute(text, resolver) for text in contents.split(YAML_SEPARATOR)
    )


def execute(
    files: Iterable[str | Path], resolver: Resolver = resolve_remote
) -> dict[str, str]:
    """Return a map of each file name to its contents with images pinned by digest."""
    substitutes: dict[str, str] = {}
    for file in files:
        log.info("Reading %s ...", file)
        contents = Path(file).read_text()
        substitutes[str(file)] = execute_substitution(contents, resolver)
    return substitutes