"""Unit tests for Web App init data signature verification."""

import hashlib
import hmac
import json
import unittest
from urllib.parse import urlencode

from app.services.signature import (
    build_data_check_string,
    check_webapp_signature,
    parse_init_data,
    resolve_conversation_id,
    sign_init_data,
)

BOT_TOKEN = "123456:TEST-token"


def _signed_init_data(fields: dict[str, str], token: str = BOT_TOKEN) -> str:
    return urlencode({**fields, "hash": sign_init_data(token, fields)})


class SignatureTests(unittest.TestCase):
    def setUp(self) -> None:
        self.fields = {
            "auth_date": "1760000000",
            "query_id": "AAHdF6IQAAAAAN0XohDhrOrc",
            "user": json.dumps({"id": 279058397, "first_name": "Ann"}),
        }

    def test_signature_uses_documented_key_derivation(self) -> None:
        secret = hashlib.sha256(b"WebAppData" + BOT_TOKEN.encode("utf-8")).digest()
        data_check_string = "\n".join(f"{key}={self.fields[key]}" for key in sorted(self.fields))
        expected = hmac.new(secret, data_check_string.encode("utf-8"), hashlib.sha256).hexdigest()

        self.assertEqual(build_data_check_string({**self.fields, "hash": "ignored"}), data_check_string)
        self.assertEqual(sign_init_data(BOT_TOKEN, self.fields), expected)

    def test_valid_payload_is_accepted(self) -> None:
        self.assertTrue(check_webapp_signature(BOT_TOKEN, _signed_init_data(self.fields)))

    def test_changed_field_value_is_rejected(self) -> None:
        init_data = _signed_init_data(self.fields)
        position = init_data.index("query_id=") + len("query_id=")
        flipped = "B" if init_data[position] != "B" else "C"
        tampered = init_data[:position] + flipped + init_data[position + 1 :]

        self.assertFalse(check_webapp_signature(BOT_TOKEN, tampered))

    def test_every_single_character_flip_outside_hash_is_rejected(self) -> None:
        init_data = _signed_init_data(self.fields)
        hash_start = init_data.index("&hash=")
        for position in range(hash_start):
            flipped = "x" if init_data[position] != "x" else "y"
            tampered = init_data[:position] + flipped + init_data[position + 1 :]
            self.assertFalse(check_webapp_signature(BOT_TOKEN, tampered), msg=f"position {position}")

    def test_wrong_token_missing_hash_and_garbage_are_rejected(self) -> None:
        self.assertFalse(check_webapp_signature("other-token", _signed_init_data(self.fields)))
        self.assertFalse(check_webapp_signature(BOT_TOKEN, urlencode(self.fields)))
        self.assertFalse(check_webapp_signature(BOT_TOKEN, "not a query string"))

    def test_max_age_rejects_stale_payload(self) -> None:
        init_data = _signed_init_data(self.fields)

        self.assertTrue(check_webapp_signature(BOT_TOKEN, init_data, max_age_seconds=60, now=1760000030))
        self.assertFalse(check_webapp_signature(BOT_TOKEN, init_data, max_age_seconds=60, now=1760000500))

    def test_conversation_id_prefers_user_then_chat_instance(self) -> None:
        self.assertEqual(resolve_conversation_id(parse_init_data(urlencode(self.fields))), "279058397")
        self.assertEqual(resolve_conversation_id({"chat_instance": "-8812"}), "-8812")
        self.assertEqual(resolve_conversation_id({"user": json.dumps({"first_name": "Ann"}), "chat_instance": "7"}), "7")
        self.assertIsNone(resolve_conversation_id({"auth_date": "1"}))

    def test_malformed_user_field_raises(self) -> None:
        with self.assertRaises(json.JSONDecodeError):
            resolve_conversation_id({"user": "{not json"})


if __name__ == "__main__":
    unittest.main()
