# imagegate

Building blocks for deciding which container images may run in a cluster:

- `imagegate.reference`: parse image references into registry, repository,
  tag and digest.
- `imagegate.policy`: the kinds of security policy violation and a plain
  violation record.
- `imagegate.strategy`: strategies that decide what happens when an image has
  violations or attestations.
- `imagegate.config`: load the certificate configuration for a metadata
  store from YAML.
- `imagegate.resolve`: rewrite every `image` field in multi-document
  Kubernetes YAML from a tag to a digest reference.

## Image references

```python
from imagegate.reference import parse_reference, parse_tag, parse_digest

ref = parse_reference("busybox")
ref.registry     # "index.docker.io"
ref.repository   # "library/busybox"
ref.tag          # "latest"
ref.context()    # "index.docker.io/library/busybox"
```

`parse_tag` reads a tagged reference (the tag defaults to `latest`),
`parse_digest` reads a reference pinned by a `sha256:` digest, and
`parse_reference` tries a tag first and then a digest. Each raises
`InvalidReferenceError` (a `ValueError`) for a reference it cannot parse.
An `ImageReference` is a frozen dataclass; `str()` gives it back in
`registry/repository:tag` or `registry/repository@digest` form.

## Violations and strategies

```python
from imagegate.policy import SimpleViolation, ViolationType
from imagegate.strategy import LoggingStrategy, MemoryStrategy

violation = SimpleViolation(ViolationType.SEVERITY, "severity HIGH exceeds the limit")

strategy = MemoryStrategy()
strategy.handle_violation("gcr.io/project/app:1.0", None, [violation])
strategy.handle_attestation("gcr.io/project/app:1.0", None, True)
strategy.violations     # {"gcr.io/project/app:1.0": True}
strategy.attestations   # {"gcr.io/project/app:1.0": True}
```

`ViolationType` has `UNQUALIFIED_IMAGE`, `FIX_UNAVAILABLE` and `SEVERITY`.
Any object with `type`, `reason` and `details` attributes satisfies the
`Violation` protocol. `Strategy` is the abstract base; `LoggingStrategy`
only writes to the `imagegate.strategy` logger, and `MemoryStrategy`
records which images it was told about.

## Certificate configuration

```python
from imagegate.config import load_config

certs = load_config("grafeas.yaml")
certs.cert_file, certs.key_file, certs.ca_file
```

The file holds a `grafeascerts` mapping with `certfile`, `keyfile` and
`cafile` entries, each naming a PEM file. An empty file name gives an empty
`CertConfig`; a file without a `grafeascerts` section gives `None`.

## Pinning images to digests

`execute_substitution` splits its input on `---` lines, collects every
`image` value in each document that is not already pinned to a digest,
resolves it, and writes the digest reference back in its place. Key order
is kept; the documents are written out again as block-style YAML.

```python
from imagegate.resolve import execute_substitution

manifest = """\
apiVersion: v1
kind: Pod
metadata:
  name: test
spec:
  containers:
  - name: first
    image: image:tag
"""

def resolver(image):
    return {"image:tag": "image@sha256:" + "0" * 64}[image]

print(execute_substitution(manifest, resolver))
```

The default resolver, `resolve_remote`, asks the image's registry for the
manifest of the tag (fetching an anonymous bearer token when the registry
asks for one) and returns `registry/repository@sha256:<digest>` from the
SHA-256 of the manifest. Registries on `localhost`, `127.0.0.1` or a
`.local` host are reached over plain HTTP, all others over HTTPS.

Other helpers:

- `execute(files, resolver)` reads each file and returns a mapping of file
  name to rewritten contents; it does not write the files back.
- `fully_qualified_image(image)` tells whether a reference is pinned to a
  digest.
- `tagged_images(document)` lists the images in a parsed document that
  still need resolving.
- `replace_images(document, replacements)` returns a copy of a document
  with its `image` values swapped by the given mapping.
- `resolve_tags_to_digests(images, resolver)` maps each image to its
  resolved reference.

## What this package does not do

There is no command-line tool and no admission webhook or server. The
package does not talk to a vulnerability or attestation metadata store,
does not verify or create PGP attestations, and keeps no cache of such
lookups; the strategies and violation records are the pieces such a
reviewer would be built from.

## Running the tests

Install the `test` extra and run `pytest` from the project directory.