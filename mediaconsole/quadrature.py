"""Direction decoding for two-channel rotary encoders."""

from __future__ import annotations

# Indexed as _TABLE[previous_state][new_state], state = (A << 1) | B.
# Clockwise:        00 -> 01 -> 11 -> 10 -> 00  (each step +1)
# Counter-clockwise: 00 -> 10 -> 11 -> 01 -> 00  (each step -1)
# Unchanged state or a skipped step gives 0.
_TABLE = (
    (0, +1, -1, 0),
    (-1, 0, 0, +1),
    (+1, 0, 0, -1),
    (0, -1, +1, 0),
)


def _state(channel_a: int, channel_b: int) -> int:
    for value in (channel_a, channel_b):
        if value not in (0, 1):
            raise ValueError(f"channel value must be 0 or 1, got {value!r}")
    return (int(channel_a) << 1) | int(channel_b)


class QuadratureDecoder:
    """Gray-code state machine turning A/B channel levels into rotation steps."""

    def __init__(self) -> None:
        self._prev_state = 0

    def update(self, channel_a: int, channel_b: int) -> int:
        """Feed new channel levels; return +1 (clockwise), -1 (counter-clockwise) or 0."""
        new_state = _state(channel_a, channel_b)
        direction = _TABLE[self._prev_state][new_state]
        self._prev_state = new_state
        return direction

    def reset(self, channel_a: int, channel_b: int) -> None:
        """Set the starting state from the current channel levels."""
        self._prev_state = _state(channel_a, channel_b)