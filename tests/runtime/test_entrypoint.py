import asyncio
import logging
import tempfile
import unittest
from pathlib import Path

import main
from mirror import LocalSurfaceHost, MirrorSyncChannel, StatePush


class EntrypointTests(unittest.TestCase):
    def test_parse_args_defaults(self) -> None:
        args = main.parse_args([])

        self.assertIsNone(args.config)
        self.assertFalse(args.inline_mirror)
        self.assertFalse(args.debug)

    def test_parse_args_flags(self) -> None:
        args = main.parse_args(["--config", "other.toml", "--inline-mirror", "--debug"])

        self.assertEqual("other.toml", args.config)
        self.assertTrue(args.inline_mirror)
        self.assertTrue(args.debug)

    def test_malformed_config_exits_with_status_one(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            config_path.write_text("[timer]\ntick_seconds = -1\n", encoding="utf-8")

            with self.assertLogs("focus_timer", level="ERROR"):
                status = main.main(["--config", str(config_path)])

        self.assertEqual(1, status)


class InlineMirrorTests(unittest.IsolatedAsyncioTestCase):
    async def test_inline_view_renders_pushed_state(self) -> None:
        logger = logging.getLogger("mirror.view")
        host = LocalSurfaceHost(view_factory=main.inline_view_factory(logger))
        channel = MirrorSyncChannel(host, liveness_poll_seconds=0.05)
        handle = await channel.open()

        with self.assertLogs("mirror.view", level="DEBUG") as logs:
            channel.send(handle, StatePush(seconds_remaining=65, running=False, mode="focus"))
            for _ in range(3):
                await asyncio.sleep(0)

        self.assertTrue(any("Focus 01:05" in line for line in logs.output))
        channel.close(handle)


if __name__ == "__main__":
    unittest.main()
