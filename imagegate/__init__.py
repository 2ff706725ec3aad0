"""Container image admission helpers: image references, policy violations, strategies, certificate configuration and digest resolution."""

__version__ = "0.1.0"

__all__ = [
    "config",
    "policy",
    "reference",
    "resolve",
    "strategy",
]