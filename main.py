#!/usr/bin/env python3
"""
Frame Recognition replay tool.

Replays a JSON Lines recording of raw detector output through the
tracking engine and logs the confident object whenever it changes.

Usage:
    python main.py RECORDING [--config CONFIG_PATH] [--height H --width W]

Recording format (one frame per line):
    {"boxes": [left, top, right, bottom, ...], "labels": {"0": 3}, "scores": [0.8]}
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from frame_recognition.config import load_config, recognition_config_from_file
from frame_recognition.core.contracts import ConfidentObject, FrameRecognitionError
from frame_recognition.capture import get_source
from frame_recognition.pipeline import RecognitionPipeline
from frame_recognition.tracking import FrameRecognition


# ============================================================
# LOGGING CONFIGURATION
# ============================================================

def setup_logging(log_level: str = "INFO", log_file: Optional[str] = None):
    """Configure logging."""
    logger.remove()  # Remove default handler

    # Console output with colors
    logger.add(
        sys.stderr,
        level=log_level,
        format="<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>",
        colorize=True,
    )

    # File output
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {module}:{line} | {message}",
            rotation="10 MB",
            retention="7 days",
        )


def describe(obj: Optional[ConfidentObject]) -> str:
    if obj is None:
        return "none"
    box = obj.bounding_box
    return (
        f"track {obj.track_id} label={obj.label} score={obj.score:.3f} "
        f"seen={obj.recognition_count} box=({box.top:.3f}, {box.left:.3f}, "
        f"{box.bottom:.3f}, {box.right:.3f})"
    )


# ============================================================
# REPLAY
# ============================================================

def replay(args: argparse.Namespace) -> int:
    """Run a recording through the engine. Returns the exit code."""
    config = recognition_config_from_file(
        args.config,
        height=args.height,
        width=args.width,
    )
    engine = FrameRecognition.from_config(config)
    pipeline = RecognitionPipeline(get_source("log", path=args.recording), engine)

    if not pipeline.start():
        return 1

    last_track_id = None
    try:
        for result in pipeline.run():
            for track_id in result.evicted_track_ids:
                logger.debug(f"Frame {result.frame_id}: track {track_id} evicted")

            current = result.confident_object
            current_id = current.track_id if current is not None else None
            if current_id != last_track_id:
                logger.info(f"Frame {result.frame_id}: confident object -> {describe(current)}")
                last_track_id = current_id
    finally:
        pipeline.stop()

    logger.info(
        f"Replayed {pipeline.frames_processed} frames, "
        f"{engine.active_track_count} active tracks, "
        f"avg latency {pipeline.average_latency_ms:.3f}ms"
    )
    print(describe(engine.get_confident_object()))
    return 0


# ============================================================
# ENTRY POINT
# ============================================================

def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Replay recorded detections through the frame recognition engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "recording",
        type=str,
        help="Path to a JSON Lines detection recording",
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to configuration file",
    )

    parser.add_argument("--height", type=float, default=None, help="Device height (overrides config)")
    parser.add_argument("--width", type=float, default=None, help="Device width (overrides config)")

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config, else INFO)",
    )

    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log file path (default: from config, else none)",
    )

    args = parser.parse_args(argv)

    try:
        logging_settings = load_config(args.config).get("logging") or {}
    except FrameRecognitionError as e:
        setup_logging("INFO")
        logger.error(str(e))
        return 1

    # Setup logging
    setup_logging(
        args.log_level or logging_settings.get("level", "INFO"),
        args.log_file or logging_settings.get("file"),
    )

    try:
        return replay(args)
    except FrameRecognitionError as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"Cannot read recording: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
