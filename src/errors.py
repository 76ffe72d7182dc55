"""Domain exceptions raised by the qualification and quoting core."""

from __future__ import annotations


class InvalidPricingInput(ValueError):
    """Raised when a pricing request has a bad duration or an unsupported SKU.

    Fatal to the pricing call: the caller must not create a quote or lines.
    """


class PricingTableError(ValueError):
    """Raised when a tier table is not contiguous, not decreasing or empty."""


class EnrichmentFailure(RuntimeError):
    """Raised inside the extractor when the LLM call or its output fails.

    Never escapes the extractor module; it is logged and the turn continues
    with no new fields.
    """


class InvalidTransition(RuntimeError):
    """Raised when a conversation state change is not in the transition table."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Invalid conversation transition {current} -> {target}")
        self.current = current
        self.target = target
