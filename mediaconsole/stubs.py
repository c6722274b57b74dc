"""Hardware-free implementations of the platform interfaces."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from mediaconsole.interfaces import (
    AudioOutput,
    CdDrive,
    DisplayControl,
    GpioMonitor,
    TocEntry,
)

log = logging.getLogger(__name__)

STUB_DEVICE_NAME = "stub:null"
STUB_DISPLAY_BUS = 1


class StubAudioOutput(AudioOutput):
    """Accepts and discards all audio, keeping count of what it was given."""

    def __init__(self) -> None:
        self._open = False
        self._device_name = ""
        self._paused = False
        self._frames_written = 0
        self._reset_count = 0

    @property
    def paused(self) -> bool:
        """Whether the output is currently paused."""
        return self._paused

    @property
    def frames_written(self) -> int:
        """Total frames accepted since the last reset."""
        return self._frames_written

    @property
    def reset_count(self) -> int:
        """How many times the output has been reset."""
        return self._reset_count

    def open(self, device_name: str, sample_rate: int, channels: int, bit_depth: int) -> bool:
        self._device_name = STUB_DEVICE_NAME
        self._open = True
        log.info(
            "StubAudioOutput: opened %s %d Hz %d ch %d bit",
            device_name, sample_rate, channels, bit_depth,
        )
        return True

    def close(self) -> None:
        self._open = False
        log.info("StubAudioOutput: closed")

    def reset(self) -> None:
        self._frames_written = 0
        self._paused = False
        self._reset_count += 1
        log.info("StubAudioOutput: reset")

    def pause(self, paused: bool) -> None:
        self._paused = paused
        log.info("StubAudioOutput: pause = %s", paused)

    def write_frames(self, interleaved: Sequence[int], frames: int) -> int:
        self._frames_written += frames
        return frames

    def is_open(self) -> bool:
        return self._open

    def device_name(self) -> str:
        return self._device_name


class StubCdDrive(CdDrive):
    """A drive whose disc, contents and identifier are set directly.

    The attributes ``disc_present``, ``audio_disc``, ``toc`` and ``disc_id``
    control what the drive reports; ``eject_call_count`` and
    ``stop_spindle_call_count`` record how often those were called.
    """

    def __init__(
        self,
        *,
        disc_present: bool = False,
        audio_disc: bool = True,
        toc: Optional[List[TocEntry]] = None,
        disc_id: str = "",
    ) -> None:
        self.disc_present = disc_present
        self.audio_disc = audio_disc
        self.toc: List[TocEntry] = list(toc) if toc else []
        self.disc_id = disc_id
        self.eject_call_count = 0
        self.stop_spindle_call_count = 0

    def open_device(self, device_path: str) -> bool:
        log.info("StubCdDrive: open_device %s", device_path)
        return True

    def read_toc(self) -> List[TocEntry]:
        return list(self.toc)

    def get_disc_id(self) -> str:
        return self.disc_id

    def eject(self) -> bool:
        log.info("StubCdDrive: eject")
        self.eject_call_count += 1
        self.disc_present = False
        return True

    def stop_spindle(self) -> bool:
        log.info("StubCdDrive: stop_spindle")
        self.stop_spindle_call_count += 1
        return True

    def is_disc_present(self) -> bool:
        return self.disc_present

    def is_audio_disc(self) -> bool:
        return self.disc_present and self.audio_disc

    def track_count(self) -> int:
        return len(self.toc)


class StubDisplayControl(DisplayControl):
    """Records power and brightness without touching any display."""

    def __init__(self) -> None:
        super().__init__()
        self._powered = True
        self._brightness = 100

    def auto_detect_display(self) -> bool:
        log.info("StubDisplayControl: auto-detect display (bus %d)", STUB_DISPLAY_BUS)
        self.display_detected.emit(STUB_DISPLAY_BUS)
        return True

    def set_power(self, on: bool) -> bool:
        self._powered = on
        log.info("StubDisplayControl: power %s", "ON" if on else "OFF")
        self.power_changed.emit(on)
        return True

    def set_brightness(self, percent: int) -> bool:
        self._brightness = percent
        log.info("StubDisplayControl: brightness %d%%", percent)
        self.brightness_changed.emit(percent)
        return True

    def brightness(self) -> int:
        return self._brightness

    def is_powered(self) -> bool:
        return self._powered


class StubGpioMonitor(GpioMonitor):
    """GPIO monitor whose events are raised by calling the ``simulate_*`` methods."""

    def __init__(self) -> None:
        super().__init__()
        self._running = False

    @property
    def running(self) -> bool:
        """Whether the monitor has been started and not yet stopped."""
        return self._running

    def start(self) -> bool:
        self._running = True
        log.info("StubGpioMonitor: started")
        return True

    def stop(self) -> None:
        self._running = False
        log.info("StubGpioMonitor: stopped")

    def simulate_volume_change(self, delta: int) -> None:
        self.volume_changed.emit(delta)

    def simulate_mute_toggle(self) -> None:
        self.mute_toggled.emit()

    def simulate_input_next(self) -> None:
        self.input_next.emit()

    def simulate_input_previous(self) -> None:
        self.input_previous.emit()

    def simulate_input_select(self) -> None:
        self.input_select.emit()

    def simulate_reed_switch(self, magnets_apart: bool) -> None:
        self.reed_switch_changed.emit(magnets_apart)