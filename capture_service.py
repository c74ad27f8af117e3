"""
Capture Service

Process entry point for the single-session capture controller.
Wires the platform, the rendering surface and the session state machine
together and maps operator commands onto the session operations.

Architecture:
- One asyncio event loop, no threads
- Session state lives in SessionStateMachine (derived, never duplicated)
- Remote control file for operator commands (SSH/scripts)
- Synchronous teardown on SIGTERM/SIGINT

State Flow:
    LOADING → READY → RECORDING → REVIEWING → READY
       ↓        ↺ SWITCH
    PERMISSION_DENIED → RETRY → LOADING

Operator Commands (echo "START" > /tmp/capture_control.cmd):
- RETRY: Re-run the permission probe
- START: Start recording
- STOP: Stop recording
- SWITCH: Switch to the next camera
- RESET: Discard the clip and record again
- STATUS: Log current status
"""

import asyncio
import logging
import logging.handlers
import signal
import sys
from pathlib import Path
from typing import Optional

from capture import SessionStateMachine, create_platform
from capture.implementations.logging_surface import LoggingSurface
from capture.interfaces.capture_platform_interface import CapturePlatformInterface
from capture.interfaces.rendering_surface_interface import RenderingSurfaceInterface
from config.settings import (
    CONTROL_FILE,
    CONTROL_POLL_INTERVAL,
    LOG_BACKUP_COUNT,
    LOG_DIR,
    LOG_SERVICE_FILE,
)


class CaptureService:
    """
    Main service coordinator.

    Usage:
        service = CaptureService()
        asyncio.run(service.run())  # Runs until shutdown signal
    """

    def __init__(
        self,
        platform: Optional[CapturePlatformInterface] = None,
        surface: Optional[RenderingSurfaceInterface] = None,
        control_file: str = CONTROL_FILE,
    ):
        """Initialize platform, surface and session."""
        self.logger = logging.getLogger(__name__)
        self.logger.info("Initializing Capture Service...")

        self.running = False
        self.control_file = Path(control_file)

        self.platform = platform or create_platform()
        self.surface = surface or LoggingSurface()
        self.session = SessionStateMachine(self.platform, self.surface)

        self.logger.info("Capture Service initialized successfully")

    async def run(self) -> None:
        """
        Main service loop.

        Runs the permission probe, then polls for operator commands until
        a shutdown signal is received.
        """
        loop = asyncio.get_running_loop()
        for signum in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(signum, self._signal_handler, signum)

        self.running = True
        self.logger.info("Starting Capture Service main loop...")

        try:
            await self.session.initialize()
            while self.running:
                await self._check_control_commands()
                await asyncio.sleep(CONTROL_POLL_INTERVAL)
        finally:
            for signum in (signal.SIGTERM, signal.SIGINT):
                loop.remove_signal_handler(signum)
            self._shutdown()

    async def _check_control_commands(self) -> None:
        """
        Check for and process a remote control command.

        The control file is deleted as soon as it is read.
        """
        if not self.control_file.exists():
            return  # No command waiting - most common case

        try:
            command = self.control_file.read_text().strip().upper()
            self.control_file.unlink()
        except OSError as e:
            self.logger.error(f"Failed to read control command: {e}")
            return

        self.logger.info(f"Remote command received: {command}")
        await self.process_command(command)

    async def process_command(self, command: str) -> bool:
        """
        Run one operator command.

        Args:
            command: RETRY, START, STOP, SWITCH, RESET or STATUS

        Returns:
            True if the command was accepted by the session
        """
        if command == "RETRY":
            return await self.session.retry_permissions()
        if command == "START":
            return await self.session.start_recording()
        if command == "STOP":
            return await self.session.stop_recording()
        if command == "SWITCH":
            return await self.session.switch_camera()
        if command == "RESET":
            return await self.session.reset_to_ready()
        if command == "STATUS":
            self.logger.info(f"Remote STATUS → {self.session.get_status()}")
            return True

        self.logger.warning(f"Unknown remote command: {command}")
        return False

    def _signal_handler(self, signum: int) -> None:
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received signal {signal_name}, shutting down...")
        self.running = False

    def _shutdown(self) -> None:
        """
        Graceful shutdown.

        Synchronous: the countdown is stopped and every stream is released
        before returning.
        """
        self.logger.info("Shutting down Capture Service...")
        self.session.dispose()
        self.platform.cleanup()
        self.logger.info("Capture Service shutdown complete")


def setup_logging() -> None:
    """
    Configure logging for the service.

    Logs to both console and file with rotation:
    - Daily rotation
    - Keep LOG_BACKUP_COUNT days of logs
    """
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)

    log_format = logging.Formatter("%(asctime)s %(levelname)s %(message)s | %(name)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(log_format)
    logger.addHandler(console_handler)

    log_file = Path(LOG_DIR) / LOG_SERVICE_FILE
    try:
        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(log_file),
            when="midnight",
            interval=1,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except (PermissionError, FileNotFoundError):
        # Fallback to local logs directory if LOG_DIR not writable
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)
        fallback_log = logs_dir / "capture-service.log"
        logger.warning(f"Cannot write to {log_file}, using fallback: {fallback_log}")

        file_handler = logging.handlers.TimedRotatingFileHandler(
            str(fallback_log),
            when="midnight",
            interval=1,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )

    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(log_format)
    logger.addHandler(file_handler)


def main() -> None:
    """
    Main entry point for the service.

    Sets up logging and runs the service.
    """
    setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("=" * 60)
    logger.info("Capture Service Starting")
    logger.info("=" * 60)

    try:
        asyncio.run(CaptureService().run())
    except Exception as e:
        logger.critical(f"Fatal error in main: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
