"""Strategies for handling policy violations and attestation results."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from imagegate.policy import Violation

log = logging.getLogger(__name__)


class Strategy(ABC):
    """Decides what happens when an image is reviewed."""

    @abstractmethod
    def handle_violation(
        self, image: str, pod: Any, violations: Sequence[Violation]
    ) -> None:
        """Handle the violations found in ``image``."""

    @abstractmethod
    def handle_attestation(self, image: str, pod: Any, is_attested: bool) -> None:
        """Handle whether ``image`` carries a valid attestation."""


class LoggingStrategy(Strategy):
    """Only logs what it is told."""

    def handle_violation(
        self, image: str, pod: Any, violations: Sequence[Violation]
    ) -> None:
        log.info("HandleViolation via LoggingStrategy")
        if not violations:
            return
        log.warning("Found violations in image %s", image)
        for violation in violations:
            log.warning("%s", violation.reason)

    def handle_attestation(self, image: str, pod: Any, is_attested: bool) -> None:
        log.info("Handling attestation via LoggingStrategy")
        if is_attested:
            log.info("Image %s has one or more valid attestation(s)", image)
        else:
            log.info(
                "No valid attestations found for image %s. Proceeding with next checks",
                image,
            )


@dataclass
class MemoryStrategy(Strategy):
    """Records the images it was told about."""

    violations: dict[str, bool] = field(default_factory=dict)
    attestations: dict[str, bool] = field(default_factory=dict)

    def handle_violation(
        self, image: str, pod: Any, violations: Sequence[Violation]
    ) -> None:
        self.violations[image] = True

    def handle_attestation(self, image: str, pod: Any, is_attested: bool) -> None:
        self.attestations[image] = is_attested