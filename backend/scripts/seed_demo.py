"""Seed a demo conversation whose replies are stored as multiple chunks.

Usage (from repository root):
    python backend/scripts/seed_demo.py

Usage (from backend directory):
    python scripts/seed_demo.py
    # or
    python -m scripts.seed_demo

Rows are appended; running the script twice continues the group sequence.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Make `app` imports work whether the script is run from repo root or backend/.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.db.session import SessionLocal
from app.models.message import ROLE_ASSISTANT
from app.services.chunking import split_into_chunks
from app.services.history import load_history
from app.services.messages import create_message, create_user_message
from app.services.responder import EchoResponder


DEFAULT_CONVERSATION_ID = "demo-chat-001"
DEMO_PROMPTS = (
    "Hi! Can you summarise what you can do?",
    "Tell me something long.",
    "Thanks, that's all.",
)


def parse_args() -> argparse.Namespace:
    """Parse script CLI arguments."""

    parser = argparse.ArgumentParser(description="Seed a demo conversation with chunked replies.")
    parser.add_argument(
        "--conversation-id",
        default=DEFAULT_CONVERSATION_ID,
        help=f"Conversation ID to seed (default: {DEFAULT_CONVERSATION_ID})",
    )
    parser.add_argument(
        "--chunk-length",
        type=int,
        default=120,
        help="Maximum chunk length used when storing replies (default: 120).",
    )
    parser.add_argument(
        "--filler-repeats",
        type=int,
        default=40,
        help="Filler sentences appended to each echo reply (default: 40).",
    )
    return parser.parse_args()


def main() -> None:
    """Seed demo data and print the merged history."""

    args = parse_args()
    conversation_id: str = args.conversation_id
    responder = EchoResponder(filler_repeats=args.filler_repeats)

    stored = 0
    with SessionLocal() as db:
        for prompt in DEMO_PROMPTS:
            user_message = create_user_message(db, conversation_id, prompt)
            stored += 1
            for chunk in split_into_chunks(responder.generate(prompt), args.chunk_length):
                create_message(
                    db,
                    conversation_id,
                    role=ROLE_ASSISTANT,
                    content=chunk,
                    group_id=user_message.group_id,
                )
                stored += 1
        turns = load_history(db, conversation_id)

    print("Seed complete")
    print(f"conversation_id={conversation_id}")
    print(f"rows_created={stored}")
    print(f"turns_total={len(turns)}")
    for turn in turns:
        print(f"  [{turn.role} g={turn.group_id} chunks={turn.chunk_count}] {turn.content[:60]!r}")


if __name__ == "__main__":
    main()
