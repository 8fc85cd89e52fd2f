import argparse
import asyncio
import logging
import sys
from typing import Callable, Optional

from app_config import (
    AppConfig,
    AppConfigurationError,
    load_app_config,
    resolve_config_path,
)
from mirror import (
    DetachedMirrorClock,
    LocalSurface,
    LocalSurfaceHost,
    MirrorConfig,
    MirrorConfigurationError,
    MirrorState,
    MirrorSyncChannel,
    encode_message,
)
from mirror.server import WebSocketSurfaceHost
from presets import PresetCatalog
from runtime import TimerConsole, attach_line_reader
from session.messages import format_duration, mode_label
from settings import JsonFileSettingsRepository


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("focus_timer")


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Focus timer with a detached mirror view")
    parser.add_argument("--config", default=None, help="path to config.toml")
    parser.add_argument(
        "--inline-mirror",
        action="store_true",
        help="run the mirror view inside this process instead of its own window",
    )
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def inline_view_factory(logger: logging.Logger) -> Callable[[LocalSurface], None]:
    """Attach a DetachedMirrorClock to each in-process surface."""

    def attach(surface: LocalSurface) -> None:
        def send(request) -> None:
            surface.send_from_view(encode_message(request))

        def render(state: MirrorState) -> None:
            if surface.closed:
                clock.close()
                return
            logger.debug(
                "%s: %s %s",
                surface.options.title,
                mode_label(state.mode),
                format_duration(state.seconds),
            )

        clock = DetachedMirrorClock(send, render=render, logger=logger)
        surface.attach_view(clock.handle_raw)

    return attach


async def run_primary(
    app_config: AppConfig,
    *,
    inline_mirror: bool,
    logger: logging.Logger,
) -> int:
    repository = JsonFileSettingsRepository(
        app_config.settings.file,
        logger=logging.getLogger("settings"),
    )
    catalog = PresetCatalog(repository, logger=logging.getLogger("presets"))
    catalog.load()

    mirror_config = MirrorConfig.from_settings(app_config.mirror)
    web_host: Optional[WebSocketSurfaceHost] = None
    if inline_mirror:
        host = LocalSurfaceHost(
            view_factory=inline_view_factory(logging.getLogger("mirror.view")),
            logger=logging.getLogger("mirror"),
        )
    else:
        web_host = WebSocketSurfaceHost(
            mirror_config,
            logger=logging.getLogger("mirror.server"),
        )
        host = web_host

    channel = MirrorSyncChannel(
        host,
        liveness_poll_seconds=mirror_config.liveness_poll_seconds,
        logger=logging.getLogger("mirror"),
    )
    console = TimerConsole(
        catalog,
        channel,
        logger=logging.getLogger("runtime"),
        tick_seconds=app_config.timer.tick_seconds,
        ambient_fallback_minutes=app_config.timer.ambient_fallback_minutes,
        mirror_size=(mirror_config.width, mirror_config.height),
    )

    loop = asyncio.get_running_loop()
    lines: asyncio.Queue[Optional[str]] = asyncio.Queue()
    if not attach_line_reader(loop, lines, logger):
        logger.error("Interactive input is required to drive the timer")
        return 1

    try:
        await console.run(lines)
    finally:
        loop.remove_reader(sys.stdin.fileno())
        console.page.close()
        if web_host is not None:
            await web_host.stop()
    logger.info("Focus timer stopped")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    """Run the focus timer primary surface."""
    args = parse_args(argv)
    logger = setup_logging(level=logging.DEBUG if args.debug else logging.INFO)

    try:
        config_path = resolve_config_path(args.config)
        app_config = load_app_config(str(config_path))
        if app_config.source_file:
            logger.info("Loaded runtime config: %s", app_config.source_file)
        else:
            logger.info("No config file at %s, using defaults", config_path)
    except AppConfigurationError as error:
        logger.error("App configuration error: %s", error)
        return 1

    try:
        return asyncio.run(
            run_primary(app_config, inline_mirror=args.inline_mirror, logger=logger)
        )
    except MirrorConfigurationError as error:
        logger.error("Mirror configuration error: %s", error)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping")
        return 0


if __name__ == "__main__":
    sys.exit(main())
