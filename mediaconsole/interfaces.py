"""Abstract hardware interfaces and a small signal primitive for event delivery."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, List, Sequence


class Signal:
    """A list of callables that are invoked, in connection order, on :meth:`emit`."""

    def __init__(self) -> None:
        self._slots: List[Callable[..., Any]] = []

    def connect(self, slot: Callable[..., Any]) -> None:
        """Register ``slot`` to be called on every emission."""
        self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        """Remove ``slot``; raises ValueError if it was never connected."""
        try:
            self._slots.remove(slot)
        except ValueError:
            raise ValueError("slot is not connected to this signal") from None

    def emit(self, *args: Any) -> None:
        """Call every connected slot with ``args``."""
        for slot in list(self._slots):
            slot(*args)

    def __len__(self) -> int:
        return len(self._slots)


@dataclass
class TocEntry:
    """One track in a CD's table of contents."""

    track_number: int = 0
    start_sector: int = 0
    end_sector: int = 0
    duration_seconds: int = 0


class AudioOutput(ABC):
    """A sink for interleaved 16-bit PCM frames."""

    @abstractmethod
    def open(self, device_name: str, sample_rate: int, channels: int, bit_depth: int) -> bool:
        """Open the device with the given format; return whether it succeeded."""

    @abstractmethod
    def close(self) -> None:
        """Close the device."""

    @abstractmethod
    def reset(self) -> None:
        """Drop any queued audio."""

    @abstractmethod
    def pause(self, paused: bool) -> None:
        """Pause or resume output."""

    @abstractmethod
    def write_frames(self, interleaved: Sequence[int], frames: int) -> int:
        """Write ``frames`` frames of interleaved samples; return frames written or -1."""

    @abstractmethod
    def is_open(self) -> bool:
        """Whether the device is open."""

    @abstractmethod
    def device_name(self) -> str:
        """Name of the opened device."""


class CdDrive(ABC):
    """An optical drive able to read audio CD tables of contents."""

    @abstractmethod
    def open_device(self, device_path: str) -> bool:
        """Open the drive at ``device_path``."""

    @abstractmethod
    def read_toc(self) -> List[TocEntry]:
        """Return the disc's table of contents."""

    @abstractmethod
    def get_disc_id(self) -> str:
        """Return the disc identifier."""

    @abstractmethod
    def eject(self) -> bool:
        """Eject the disc."""

    @abstractmethod
    def stop_spindle(self) -> bool:
        """Stop the disc spinning."""

    @abstractmethod
    def is_disc_present(self) -> bool:
        """Whether a disc is in the drive."""

    @abstractmethod
    def is_audio_disc(self) -> bool:
        """Whether the disc in the drive is an audio CD."""

    @abstractmethod
    def track_count(self) -> int:
        """Number of tracks on the disc."""


class DisplayControl(ABC):
    """Power and brightness control of the attached display.

    Signals: ``display_detected(bus_number)``, ``power_changed(on)``,
    ``brightness_changed(percent)``.
    """

    def __init__(self) -> None:
        self.display_detected = Signal()
        self.power_changed = Signal()
        self.brightness_changed = Signal()

    @abstractmethod
    def auto_detect_display(self) -> bool:
        """Find the display; return whether one was found."""

    @abstractmethod
    def set_power(self, on: bool) -> bool:
        """Switch the display on or off."""

    @abstractmethod
    def set_brightness(self, percent: int) -> bool:
        """Set brightness in percent."""

    @abstractmethod
    def brightness(self) -> int:
        """Current brightness in percent."""

    @abstractmethod
    def is_powered(self) -> bool:
        """Whether the display is on."""


class GpioMonitor(ABC):
    """Watches the front-panel encoders and the door reed switch.

    Signals: ``volume_changed(delta)``, ``mute_toggled()``, ``input_next()``,
    ``input_previous()``, ``input_select()``, ``reed_switch_changed(magnets_apart)``.
    """

    def __init__(self) -> None:
        self.volume_changed = Signal()
        self.mute_toggled = Signal()
        self.input_next = Signal()
        self.input_previous = Signal()
        self.input_select = Signal()
        self.reed_switch_changed = Signal()

    @abstractmethod
    def start(self) -> bool:
        """Begin monitoring; return whether it started."""

    @abstractmethod
    def stop(self) -> None:
        """Stop monitoring."""