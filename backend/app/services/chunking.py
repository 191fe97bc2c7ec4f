"""Positional splitting of long replies into transport-sized chunks."""

DEFAULT_CHUNK_LENGTH = 3900


def split_into_chunks(text: str, limit: int = DEFAULT_CHUNK_LENGTH) -> list[str]:
    """Split ``text`` into consecutive pieces of at most ``limit`` characters.

    Splitting ignores word and sentence boundaries: every piece but the last is
    exactly ``limit`` long and joining the pieces gives back ``text``. Empty
    input yields no chunks.
    """

    if limit < 1:
        raise ValueError("limit must be a positive integer")
    return [text[start : start + limit] for start in range(0, len(text), limit)]
