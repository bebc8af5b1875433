import unittest

from motortown_admin.models import UNIT, BannedPlayer, ResponseEnvelope, decode_player_count
from motortown_admin.services.errors import BodyReadError, EnvelopeDecodeError, RequestTimeoutError, TransportError
from motortown_admin.services.normalizer import (
    NormalizationMode,
    from_body_read_error,
    from_transport_error,
    normalize,
    normalize_ban_list,
    normalize_lenient,
    status_line,
)


class LenientModeTests(unittest.TestCase):
    def test_plain_text_success(self) -> None:
        envelope = normalize_lenient(200, "OK")
        self.assertEqual(envelope, ResponseEnvelope(data=UNIT, message="Status: 200 OK. Raw Body: OK", succeeded=True))

    def test_plain_text_server_error(self) -> None:
        envelope = normalize_lenient(500, "boom")
        self.assertFalse(envelope.succeeded)
        self.assertIsNone(envelope.data)
        self.assertEqual(envelope.message, "Status: 500 Internal Server Error. Raw Body: boom")

    def test_json_envelope_is_kept(self) -> None:
        envelope = normalize_lenient(500, '{"data": null, "message": "Player kicked", "succeeded": true}')
        self.assertEqual(envelope, ResponseEnvelope(data=None, message="Player kicked", succeeded=True))

    def test_empty_body_falls_back(self) -> None:
        envelope = normalize_lenient(204, "")
        self.assertTrue(envelope.succeeded)
        self.assertEqual(envelope.data, UNIT)

    def test_reason_phrases_are_pinned(self) -> None:
        self.assertEqual(normalize_lenient(418, "x").message, "Status: 418 I'm a teapot. Raw Body: x")
        self.assertEqual(status_line(413), "413 Payload Too Large")
        self.assertEqual(status_line(422), "422 Unprocessable Entity")
        self.assertEqual(status_line(599), "599 <unknown status code>")


class StrictModeTests(unittest.TestCase):
    def test_decode_failure_is_raised(self) -> None:
        with self.assertRaises(EnvelopeDecodeError):
            normalize(NormalizationMode.STRICT, 200, "OK", decode_player_count)

    def test_decodes_envelope(self) -> None:
        envelope = normalize(
            NormalizationMode.STRICT, 200, '{"data": {"num_players": 3}, "message": "", "succeeded": true}', decode_player_count
        )
        self.assertEqual(envelope.data.num_players, 3)


class BanListModeTests(unittest.TestCase):
    def test_no_banned_players_text(self) -> None:
        envelope = normalize_ban_list(200, "No banned players on this server.")
        self.assertEqual(envelope, ResponseEnvelope(data={}, message="No banned players", succeeded=True))

    def test_no_banned_players_regardless_of_status(self) -> None:
        envelope = normalize_ban_list(404, "Error: No banned players")
        self.assertTrue(envelope.succeeded)
        self.assertEqual(envelope.data, {})

    def test_empty_body(self) -> None:
        envelope = normalize_ban_list(200, "")
        self.assertEqual(envelope, ResponseEnvelope(data=None, message="Empty response received", succeeded=False))

    def test_malformed_json(self) -> None:
        envelope = normalize_ban_list(200, '{"data": {"1": ')
        self.assertFalse(envelope.succeeded)
        self.assertIsNone(envelope.data)
        self.assertTrue(envelope.message.startswith("JSON parsing error: "))

    def test_flat_mapping(self) -> None:
        body = '{"data": {"3": {"name": "Carol", "unique_id": "999"}}, "message": "", "succeeded": true}'
        envelope = normalize(NormalizationMode.HEURISTIC, 200, body)
        self.assertEqual(envelope.data, {"3": BannedPlayer(name="Carol", unique_id="999")})

    def test_null_data(self) -> None:
        envelope = normalize_ban_list(200, '{"data": null, "message": "none", "succeeded": true}')
        self.assertIsNone(envelope.data)
        self.assertTrue(envelope.succeeded)


class TransportFailureTests(unittest.TestCase):
    def test_timeout(self) -> None:
        envelope = from_transport_error(RequestTimeoutError("request timed out after 3s"))
        self.assertEqual(envelope, ResponseEnvelope(data=None, message="Request timed out", succeeded=False))

    def test_other_failure(self) -> None:
        envelope = from_transport_error(TransportError("Connection refused"))
        self.assertFalse(envelope.succeeded)
        self.assertEqual(envelope.message, "Request failed: Connection refused")


class BodyReadFailureTests(unittest.TestCase):
    def setUp(self) -> None:
        self.error = BodyReadError(200, "Response payload is not completed")

    def test_lenient_uses_status(self) -> None:
        envelope = from_body_read_error(NormalizationMode.LENIENT, self.error)
        self.assertEqual(
            envelope,
            ResponseEnvelope(
                data=UNIT,
                message="Status: 200 OK. Raw Body: Failed to read response body: Response payload is not completed",
                succeeded=True,
            ),
        )

    def test_lenient_failed_status(self) -> None:
        envelope = from_body_read_error(NormalizationMode.LENIENT, BodyReadError(502, "reset"))
        self.assertFalse(envelope.succeeded)
        self.assertIsNone(envelope.data)

    def test_ban_list(self) -> None:
        envelope = from_body_read_error(NormalizationMode.HEURISTIC, self.error)
        self.assertEqual(
            envelope,
            ResponseEnvelope(
                data=None, message="Failed to read response body: Response payload is not completed", succeeded=False
            ),
        )

    def test_strict_raises(self) -> None:
        with self.assertRaises(EnvelopeDecodeError):
            from_body_read_error(NormalizationMode.STRICT, self.error)


if __name__ == "__main__":
    unittest.main()
