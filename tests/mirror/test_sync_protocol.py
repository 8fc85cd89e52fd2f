import datetime as dt
import json
import unittest

from mirror import ControlRequest, StatePush, decode_message, encode_message


class SyncProtocolTests(unittest.TestCase):
    def test_state_push_serializes_type_timestamp_and_fields(self) -> None:
        now = dt.datetime(2026, 2, 21, 10, 0, tzinfo=dt.timezone.utc)
        raw = encode_message(
            StatePush(seconds_remaining=1499, running=True, mode="focus", duration_seconds=1500),
            now_fn=lambda: now,
        )
        payload = json.loads(raw)

        self.assertEqual("state-push", payload["type"])
        self.assertEqual(now.isoformat(), payload["timestamp"])
        self.assertEqual(1499, payload["secondsRemaining"])
        self.assertTrue(payload["running"])
        self.assertEqual("focus", payload["mode"])
        self.assertEqual(1500, payload["durationSeconds"])
        self.assertNotIn("countsUp", payload)

    def test_control_request_serializes_action(self) -> None:
        payload = json.loads(encode_message(ControlRequest(action="reset")))

        self.assertEqual("control", payload["type"])
        self.assertEqual("reset", payload["action"])

    def test_decode_accepts_minimal_state_push(self) -> None:
        message = decode_message(
            '{"type": "state-push", "secondsRemaining": 300, "running": false, "mode": "short-break"}'
        )

        self.assertEqual(
            StatePush(seconds_remaining=300, running=False, mode="short-break"),
            message,
        )

    def test_decode_reads_counts_up_flag(self) -> None:
        message = decode_message(
            {"type": "state-push", "secondsRemaining": 42, "running": True, "mode": "focus", "countsUp": True}
        )

        self.assertIsInstance(message, StatePush)
        self.assertTrue(message.counts_up)  # type: ignore[union-attr]

    def test_decode_accepts_bytes(self) -> None:
        message = decode_message(b'{"type": "control", "action": "start"}')
        self.assertEqual(ControlRequest(action="start"), message)

    def test_decode_ignores_unknown_and_malformed_messages(self) -> None:
        rejected = [
            "not json",
            "[]",
            '{"type": "hello"}',
            '{"secondsRemaining": 1, "running": true, "mode": "focus"}',
            '{"type": "state-push", "secondsRemaining": -1, "running": true, "mode": "focus"}',
            '{"type": "state-push", "secondsRemaining": 1, "running": "yes", "mode": "focus"}',
            '{"type": "state-push", "secondsRemaining": 1, "running": true, "mode": "nap"}',
            '{"type": "state-push", "secondsRemaining": true, "running": true, "mode": "focus"}',
            '{"type": "control", "action": "skip"}',
            '{"type": "control"}',
        ]
        for raw in rejected:
            with self.subTest(raw=raw):
                self.assertIsNone(decode_message(raw))

    def test_invalid_duration_is_dropped_not_rejected(self) -> None:
        message = decode_message(
            {"type": "state-push", "secondsRemaining": 5, "running": True, "mode": "focus", "durationSeconds": "x"}
        )

        self.assertIsInstance(message, StatePush)
        self.assertIsNone(message.duration_seconds)  # type: ignore[union-attr]


if __name__ == "__main__":
    unittest.main()
