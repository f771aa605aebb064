"""AION Notifier — entry point."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading

from dotenv import load_dotenv

from aion_notifier.classifier import Channel
from aion_notifier.config import CONFIG_FILE, AppConfig
from aion_notifier.pipeline import NotifierPipeline, PipelineConfig
from aion_notifier.router import ChannelRouter, StreamSink
from aion_notifier.tailer import TailError

_LOG_FMT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
logger = logging.getLogger(__name__)


def _setup_logging(level: str, headless: bool) -> None:
    """File log always; stderr too in GUI mode (stdout carries chat when headless)."""
    handlers: list[logging.Handler] = [
        logging.FileHandler("aion_notifier.log", encoding="utf-8", mode="w"),
    ]
    if not headless:
        handlers.append(logging.StreamHandler(sys.stderr))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=_LOG_FMT,
        handlers=handlers,
    )


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Tail the AION chat log by channel")
    parser.add_argument("--config", default=CONFIG_FILE, help="Path to config.json")
    parser.add_argument("--chatlog", default="", help="Path to Chat.log (overrides config)")
    parser.add_argument("--headless", action="store_true", help="Print to the terminal, no window")
    parser.add_argument("--debug", action="store_true", help="Verbose logging")
    return parser.parse_args(argv)


def _run_headless(pipeline_config: PipelineConfig) -> int:
    router = ChannelRouter({Channel.ALL: StreamSink(sys.stdout)})
    failed = threading.Event()

    def on_error(error: TailError) -> None:
        print(f"Error: {error}", file=sys.stderr)
        failed.set()

    pipeline = NotifierPipeline(pipeline_config, router, on_error=on_error)
    if not pipeline.start():
        return 1

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())
    while not stop.is_set() and not failed.is_set():
        stop.wait(0.5)

    pipeline.stop()
    return 1 if failed.is_set() else 0


def _run_gui(config: AppConfig, pipeline_config: PipelineConfig, config_path: str) -> int:
    from PyQt6.QtCore import QTimer
    from PyQt6.QtWidgets import QApplication

    from aion_notifier.window import ChatWindow

    app = QApplication(sys.argv)
    window = ChatWindow(config)
    window.show()
    window.realize_consoles()

    router = ChannelRouter(window.sinks)
    pipeline = NotifierPipeline(
        pipeline_config, router, on_error=lambda e: window.error_reported.emit(str(e)),
    )
    pipeline.start()

    def shutdown() -> None:
        logger.info("Shutting down...")
        pipeline.stop()
        config.save(config_path)

    signal.signal(signal.SIGINT, lambda *_: app.quit())
    # Let the Python interpreter run so SIGINT is handled
    timer = QTimer()
    timer.start(500)
    timer.timeout.connect(lambda: None)
    app.aboutToQuit.connect(shutdown)

    logger.info("AION Notifier started")
    return app.exec()


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    args = _parse_args(argv)

    config = AppConfig.load(args.config)
    if args.chatlog:
        config.chatlog_path = args.chatlog
    _setup_logging("DEBUG" if args.debug else config.log_level, args.headless)

    pipeline_config = PipelineConfig.from_app_config(config)
    logger.info("Chat log: %s", pipeline_config.chatlog_path)

    if args.headless:
        return _run_headless(pipeline_config)
    return _run_gui(config, pipeline_config, args.config)


if __name__ == "__main__":
    sys.exit(main())
