"""Creation of the platform devices used by the application."""

from __future__ import annotations

import sys
from typing import Any

from mediaconsole.interfaces import AudioOutput, CdDrive, DisplayControl, GpioMonitor
from mediaconsole.stubs import (
    StubAudioOutput,
    StubCdDrive,
    StubDisplayControl,
    StubGpioMonitor,
)


def create_audio_output() -> AudioOutput:
    """Return the audio output for this platform."""
    return StubAudioOutput()


def create_cd_drive() -> CdDrive:
    """Return the CD drive for this platform."""
    return StubCdDrive()


def create_gpio_monitor(config: Any) -> GpioMonitor:
    """Return the GPIO monitor for this platform; ``config`` holds pin settings."""
    return StubGpioMonitor()


def create_display_control() -> DisplayControl:
    """Return the display control for this platform."""
    return StubDisplayControl()


def is_linux() -> bool:
    """Whether the program runs on a Linux kernel."""
    return sys.platform.startswith("linux")