"""Reply generation for inbound user messages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from app.config import Settings

ECHO_FILLER = "Long text. "


class ResponseGenerator(Protocol):
    """Protocol for reply providers."""

    def generate(self, text: str) -> str:
        """Return the assistant reply for ``text``."""


@dataclass(slots=True)
class EchoResponder:
    """Stand-in for a language model: echoes the message back.

    ``filler_repeats`` pads the reply so multi-chunk delivery can be exercised.
    """

    filler_repeats: int = 0

    def generate(self, text: str) -> str:
        return f"Echo from the model. You said:\n\n{text}\n\n" + ECHO_FILLER * self.filler_repeats


def get_default_responder(settings: Settings) -> ResponseGenerator:
    return EchoResponder(filler_repeats=settings.echo_filler_repeats)
