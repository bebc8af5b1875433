import json
import unittest

from motortown_admin.models import (
    Player,
    PlayerCountData,
    ResponseEnvelope,
    decode_envelope,
    decode_no_data,
    decode_player_count,
    decode_player_list,
)
from motortown_admin.services.errors import EnvelopeDecodeError


class EnvelopeDecodeTests(unittest.TestCase):
    def test_player_count_round_trip(self) -> None:
        original = ResponseEnvelope(data=PlayerCountData(num_players=12), message="ok", succeeded=True)
        decoded = decode_envelope(original.to_json(), decode_player_count)
        self.assertEqual(decoded, original)

    def test_player_list(self) -> None:
        body = json.dumps(
            {
                "data": {"0": {"name": "Alice", "unique_id": "7656"}, "1": {"name": "Bob", "unique_id": "8811"}},
                "message": "",
                "succeeded": True,
                "extra": "ignored",
            }
        )
        envelope = decode_envelope(body, decode_player_list)
        self.assertEqual(envelope.data, {"0": Player("Alice", "7656"), "1": Player("Bob", "8811")})

    def test_missing_data_is_none(self) -> None:
        envelope = decode_envelope('{"message": "nothing", "succeeded": false}', decode_player_list)
        self.assertIsNone(envelope.data)
        self.assertFalse(envelope.succeeded)

    def test_rejects_bad_shapes(self) -> None:
        bad_bodies = [
            "not json",
            "[]",
            '{"succeeded": true}',
            '{"message": "x"}',
            '{"message": "x", "succeeded": "yes"}',
            '{"data": {"num_players": "3"}, "message": "x", "succeeded": true}',
            '{"data": {"num_players": true}, "message": "x", "succeeded": true}',
            '{"data": {"num_players": 4294967296}, "message": "x", "succeeded": true}',
        ]
        for body in bad_bodies:
            with self.subTest(body=body):
                with self.assertRaises(EnvelopeDecodeError):
                    decode_envelope(body, decode_player_count)

    def test_action_envelope_requires_null_data(self) -> None:
        with self.assertRaises(EnvelopeDecodeError):
            decode_envelope('{"data": {}, "message": "x", "succeeded": true}', decode_no_data)
        envelope = decode_envelope('{"data": null, "message": "x", "succeeded": true}', decode_no_data)
        self.assertIsNone(envelope.data)


if __name__ == "__main__":
    unittest.main()
