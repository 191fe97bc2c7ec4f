"""Print a signed Web App ``initData`` string for calling the history API locally.

Usage (from backend/):
    python scripts/sign_init_data.py --user-id 279058397
    curl "http://localhost:8000/api/history?initData=$(python scripts/sign_init_data.py --user-id 1 --quote)"
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from pathlib import Path
from urllib.parse import quote, urlencode

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from app.config import get_settings
from app.services.signature import sign_init_data


def main() -> None:
    parser = argparse.ArgumentParser(description="Sign a Web App initData payload with the configured bot token.")
    parser.add_argument("--user-id", help="Embedded user id (the conversation id).")
    parser.add_argument("--chat-instance", help="Chat instance id used when no user id is given.")
    parser.add_argument("--quote", action="store_true", help="URL-quote the output for use as a query parameter.")
    args = parser.parse_args()

    bot_token = get_settings().bot_token
    if not bot_token:
        raise SystemExit("BOT_TOKEN is not configured. Set it in backend/.env first.")

    fields = {"auth_date": str(int(time.time()))}
    if args.user_id:
        fields["user"] = json.dumps({"id": int(args.user_id)}, separators=(",", ":"))
    if args.chat_instance:
        fields["chat_instance"] = args.chat_instance

    init_data = urlencode({**fields, "hash": sign_init_data(bot_token, fields)})
    print(quote(init_data, safe="") if args.quote else init_data)


if __name__ == "__main__":
    main()
