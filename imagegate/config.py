"""Loading of the metadata-store certificate configuration."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass
class CertConfig:
    """PEM-encoded certificate, private key and CA certificate file paths."""

    cert_file: str = ""
    key_file: str = ""
    ca_file: str = ""


def _as_string(value: Any, key: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ValueError(f"{key} must be a scalar value")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def load_config(file_name: str) -> CertConfig | None:
    """Load the certificate configuration from a YAML file.

    An empty file name gives an empty configuration; a file without a
    ``grafeascerts`` section gives None.
    """
    if not file_name:
        return CertConfig()
    data = yaml.safe_load(Path(file_name).read_text())
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ValueError(f"{file_name}: configuration must be a mapping")
    certs = data.get("grafeascerts")
    if certs is None:
        return None
    if not isinstance(certs, dict):
        raise ValueError(f"{file_name}: grafeascerts must be a mapping")
    return CertConfig(
        cert_file=_as_string(certs.get("certfile"), "certfile"),
        key_file=_as_string(certs.get("keyfile"), "keyfile"),
        ca_file=_as_string(certs.get("cafile"), "cafile"),
    )