import os
import sys
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest.mock import patch

from app_config import (
    AppConfigurationError,
    load_app_config,
    resolve_config_path,
)
from mirror import MirrorConfig, MirrorConfigurationError


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


class AppConfigLoadingTests(unittest.TestCase):
    def test_load_app_config_reads_sections_and_resolves_paths(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            config_path = root / "config.toml"
            _write_text(
                config_path,
                textwrap.dedent(
                    """
                    [timer]
                    tick_seconds = 0.5
                    ambient_fallback_minutes = 10

                    [mirror]
                    enabled = false
                    port = 9000
                    launcher = ""
                    liveness_poll_seconds = 2

                    [settings]
                    file = "state/settings.json"
                    """
                ).strip(),
            )

            app_config = load_app_config(str(config_path))

            self.assertEqual(str(config_path), app_config.source_file)
            self.assertEqual(0.5, app_config.timer.tick_seconds)
            self.assertEqual(10, app_config.timer.ambient_fallback_minutes)
            self.assertFalse(app_config.mirror.enabled)
            self.assertEqual(9000, app_config.mirror.port)
            self.assertEqual("", app_config.mirror.launcher)
            self.assertEqual(2.0, app_config.mirror.liveness_poll_seconds)
            self.assertEqual(
                str((root / "state/settings.json").resolve()),
                app_config.settings.file,
            )

    def test_missing_config_file_yields_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            app_config = load_app_config(str(Path(temp_dir) / "absent.toml"))

        self.assertEqual("", app_config.source_file)
        self.assertEqual(1.0, app_config.timer.tick_seconds)
        self.assertTrue(app_config.mirror.enabled)
        self.assertEqual(8766, app_config.mirror.port)
        self.assertEqual(
            str(Path("~/.config/focus-mirror/settings.json").expanduser()),
            app_config.settings.file,
        )

    def test_malformed_toml_raises(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "[timer\ntick_seconds = ")

            with self.assertRaises(AppConfigurationError):
                load_app_config(str(config_path))

    def test_invalid_field_types_raise_with_field_name(self) -> None:
        cases = {
            "[timer]\ntick_seconds = 'fast'\n": "timer.tick_seconds",
            "[timer]\ntick_seconds = 0\n": "timer.tick_seconds",
            "[timer]\nambient_fallback_minutes = 0\n": "timer.ambient_fallback_minutes",
            "[mirror]\nenabled = 'maybe'\n": "mirror.enabled",
            "[mirror]\nport = true\n": "mirror.port",
            "mirror = 5\n": "[mirror]",
        }
        for content, field in cases.items():
            with self.subTest(field=field), tempfile.TemporaryDirectory() as temp_dir:
                config_path = Path(temp_dir) / "config.toml"
                _write_text(config_path, content)

                with self.assertRaises(AppConfigurationError) as context:
                    load_app_config(str(config_path))

                self.assertIn(field, str(context.exception))

    def test_resolve_config_path_prefers_environment_variable(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            env_config = Path(temp_dir) / "env.toml"
            _write_text(env_config, "[timer]\n")

            with patch.dict(os.environ, {"APP_CONFIG_FILE": str(env_config)}, clear=True):
                resolved = resolve_config_path()

            self.assertEqual(env_config, resolved)

    def test_resolve_config_path_uses_executable_dir_fallback_in_frozen_mode(self) -> None:
        with tempfile.TemporaryDirectory() as cwd_dir, tempfile.TemporaryDirectory() as exe_dir:
            cwd = Path(cwd_dir)
            executable_dir_config = Path(exe_dir) / "config.toml"
            _write_text(executable_dir_config, "[timer]\ntick_seconds = 1\n")
            executable = Path(exe_dir) / "main"

            with patch.dict(os.environ, {}, clear=True):
                with patch("app_config.Path.cwd", return_value=cwd):
                    with patch.object(sys, "frozen", True, create=True):
                        with patch.object(sys, "executable", str(executable), create=True):
                            resolved = resolve_config_path()

            self.assertEqual(executable_dir_config.resolve(), resolved)


class MirrorConfigTests(unittest.TestCase):
    def test_from_settings_splits_launcher(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            _write_text(config_path, "[mirror]\nlauncher = \"xterm -title 'Focus mirror' -e\"\n")
            settings = load_app_config(str(config_path)).mirror

        config = MirrorConfig.from_settings(settings)

        self.assertEqual(("xterm", "-title", "Focus mirror", "-e"), config.launcher)
        self.assertEqual("/ws", config.websocket_path)

    def test_invalid_values_raise(self) -> None:
        with self.assertRaises(MirrorConfigurationError):
            MirrorConfig(port=70000)
        with self.assertRaises(MirrorConfigurationError):
            MirrorConfig(host=" ")
        with self.assertRaises(MirrorConfigurationError):
            MirrorConfig(open_timeout_seconds=0)
        with self.assertRaises(MirrorConfigurationError):
            MirrorConfig(width=0)


if __name__ == "__main__":
    unittest.main()
