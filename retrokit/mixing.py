"""Sound effect channels and 16-bit sample mixing."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, MutableSequence, Optional, Sequence, Mapping, Union

MAX_VOLUME = 100
CHANNEL_COUNT = 4
MIX_BUFFER_SAMPLES = 256
SFX_COUNT = 0x100

INT16_MAX = (1 << 15) - 1
INT16_MIN = -(1 << 15)


class MusicStatus(IntEnum):
    """States of the music stream."""

    STOPPED = 0
    PLAYING = 1
    PAUSED = 2
    LOADING = 3
    READY = 4


@dataclass
class SoundEffect:
    """Decoded samples of one sound effect."""

    name: str = ""
    samples: tuple[int, ...] = ()
    loaded: bool = False

    @property
    def length(self) -> int:
        return len(self.samples)

    def release(self) -> None:
        """Drop the samples and mark the slot unused."""
        self.name = ""
        self.samples = ()
        self.loaded = False


@dataclass
class Channel:
    """Playback state of one sound effect channel."""

    sfx_id: int = -1
    samples: Optional[tuple[int, ...]] = None
    position: int = 0
    remaining: int = 0
    loop: bool = False
    pan: int = 0

    @property
    def active(self) -> bool:
        return self.sfx_id >= 0

    def _start(self, samples: Sequence[int]) -> None:
        self.samples = tuple(samples) if samples else None
        self.position = 0
        self.remaining = len(samples) if samples else 0

    def _clear(self) -> None:
        self.samples = None
        self.position = 0
        self.remaining = 0
        self.loop = False
        self.pan = 0
        self.sfx_id = -1


Effects = Union[Sequence[SoundEffect], Mapping[int, SoundEffect]]


def _f32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def _scale_volume(sample: int, volume: int) -> int:
    product = sample * volume
    quotient = abs(product) // MAX_VOLUME
    return -quotient if product < 0 else quotient


def _to_sbyte(value: int) -> int:
    return ((value + 128) & 0xFF) - 128


def mix_into(
    dst: MutableSequence[int], src: Iterable[int], volume: int, pan: int
) -> None:
    """Add ``src`` into ``dst`` at ``volume`` (0-100), panned between -100 and 100.

    Even positions are the left channel and odd positions the right.
    """
    if volume == 0:
        return
    volume = min(volume, MAX_VOLUME)

    pan_left = 0.0
    pan_right = 0.0
    if pan < 0:
        pan_right = _f32(1.0 - abs(_f32(pan / 100.0)))
        pan_left = 1.0
    elif pan > 0:
        pan_left = _f32(1.0 - abs(_f32(pan / 100.0)))
        pan_right = 1.0

    for index, raw in enumerate(src):
        if index >= len(dst):
            break
        sample = _scale_volume(raw, volume)
        if pan != 0:
            factor = pan_right if index % 2 else pan_left
            sample = int(_f32(float(sample) * factor))
        dst[index] += sample


def clamp_to_int16(samples: Iterable[int]) -> list[int]:
    """Clamp mixed samples into the signed 16-bit range."""
    return [max(INT16_MIN, min(INT16_MAX, sample)) for sample in samples]


def sfx_display_name(path: str) -> str:
    """Name shown for a sound effect path: the part after the first folder,
    without its extension and without spaces."""
    name: list[str] = []
    mode = 0
    for char in path:
        if char == "." and mode == 1:
            mode = 2
        elif char in "/\\" and mode == 0:
            mode = 1
        elif char != " " and mode == 1:
            name.append(char)
    return "".join(name)


@dataclass
class ChannelSet:
    """The fixed group of sound effect channels."""

    channels: list[Channel] = field(
        default_factory=lambda: [Channel() for _ in range(CHANNEL_COUNT)]
    )
    next_channel_pos: int = 0

    def __len__(self) -> int:
        return len(self.channels)

    def __getitem__(self, index: int) -> Channel:
        return self.channels[index]

    def play(self, sfx_id: int, effect: SoundEffect, loop: bool) -> int:
        """Start ``effect`` on a channel and return that channel's index.

        A channel already playing ``sfx_id`` is restarted; otherwise the next
        channel in rotation is taken.
        """
        channel_id = self.next_channel_pos
        self.next_channel_pos += 1
        for index, channel in enumerate(self.channels):
            if channel.sfx_id == sfx_id:
                channel_id = index
                break

        channel = self.channels[channel_id]
        channel.sfx_id = sfx_id
        channel._start(effect.samples)
        channel.loop = bool(loop)
        channel.pan = 0
        if self.next_channel_pos == CHANNEL_COUNT:
            self.next_channel_pos = 0
        return channel_id

    def stop(self, sfx_id: int) -> None:
        """Silence every channel playing ``sfx_id``."""
        for channel in self.channels:
            if channel.sfx_id == sfx_id:
                channel._clear()

    def stop_all(self) -> None:
        """Mark every channel free."""
        for channel in self.channels:
            channel.sfx_id = -1

    def set_attributes(
        self, sfx_id: int, effect: SoundEffect, loop_count: int, pan: int
    ) -> Optional[int]:
        """Restart ``effect`` with new looping and panning.

        Uses the first channel playing ``sfx_id`` or the first free one and
        returns its index, or None when no channel qualifies. A ``loop_count``
        of -1 keeps the channel's current looping.
        """
        channel_id = next(
            (
                index
                for index, channel in enumerate(self.channels)
                if channel.sfx_id in (sfx_id, -1)
            ),
            None,
        )
        if channel_id is None:
            return None

        channel = self.channels[channel_id]
        channel._start(effect.samples)
        if loop_count != -1:
            channel.loop = bool(loop_count & 0xFF)
        channel.pan = _to_sbyte(pan)
        channel.sfx_id = sfx_id
        return channel_id

    def mix(
        self, dst: MutableSequence[int], count: int, volume: int, effects: Effects
    ) -> None:
        """Mix the next ``count`` samples of every active channel into ``dst``."""
        if count < 0 or count > len(dst) or count > MIX_BUFFER_SAMPLES:
            raise ValueError(f"invalid sample count {count}")

        for channel in self.channels:
            if channel.sfx_id < 0 or channel.samples is None:
                continue

            buffer: list[int] = []
            while len(buffer) != count:
                assert channel.samples is not None
                take = min(channel.remaining, count - len(buffer))
                buffer.extend(channel.samples[channel.position:channel.position + take])
                channel.position += take
                channel.remaining -= take

                if channel.remaining == 0:
                    restart = effects[channel.sfx_id].samples if channel.loop else ()
                    if restart:
                        channel._start(restart)
                    else:
                        channel._clear()
                        break

            mix_into(dst, buffer, volume, channel.pan)