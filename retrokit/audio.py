"""Music tracks, sound effect slots and the audio render loop."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from retrokit.mixing import (
    CHANNEL_COUNT,
    MAX_VOLUME,
    MIX_BUFFER_SAMPLES,
    SFX_COUNT,
    ChannelSet,
    MusicStatus,
    SoundEffect,
    clamp_to_int16,
    mix_into,
    sfx_display_name,
)

log = logging.getLogger(__name__)

TRACK_COUNT = 0x10
STREAMFILE_COUNT = 2
MUSIC_DIR = "Data/Music/"
SFX_DIR = "Data/SoundFX/"
MUSIC_CHANNELS = 2

SampleLoader = Callable[[str], Optional[Sequence[int]]]


@dataclass
class TrackInfo:
    """A music slot: the file to stream and how it loops."""

    file_name: str = ""
    track_loop: bool = False
    loop_point: int = 0


class _ConfigReader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def take(self, count: int) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise ValueError(f"game config truncated at offset {self._pos}")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]

    def text(self) -> str:
        return self.take(self.byte()).decode("latin-1")


def read_config_sfx_paths(data: bytes) -> list[str]:
    """Return the global sound effect paths listed in game config bytes.

    Raises ValueError when the data ends early.
    """
    reader = _ConfigReader(data)
    for _ in range(3):  # game name, data folder, description
        reader.text()
    object_count = reader.byte()
    for _ in range(object_count * 2):  # object names, then script paths
        reader.text()
    for _ in range(reader.byte()):
        reader.text()
        reader.take(4)
    return [reader.text() for _ in range(reader.byte())]


@dataclass
class _MusicStream:
    samples: tuple[int, ...]
    track_loop: bool
    loop_point: int
    position: int = 0


@dataclass
class AudioEngine:
    """Music and sound effect state, mixed into signed 16-bit stereo samples.

    ``music_loader`` receives a music path and returns its decoded,
    interleaved stereo samples, or None when the file cannot be opened.
    """

    music_loader: Optional[SampleLoader] = None
    audio_enabled: bool = True
    master_volume: int = MAX_VOLUME
    sfx_volume: int = MAX_VOLUME
    bgm_volume: int = MAX_VOLUME
    track_id: int = -1
    music_status: MusicStatus = MusicStatus.STOPPED
    global_sfx_count: int = 0
    stage_sfx_count: int = 0
    tracks: list[TrackInfo] = field(
        default_factory=lambda: [TrackInfo() for _ in range(TRACK_COUNT)]
    )
    sfx_list: list[SoundEffect] = field(
        default_factory=lambda: [SoundEffect() for _ in range(SFX_COUNT)]
    )
    channels: ChannelSet = field(default_factory=ChannelSet)
    global_sfx_names: dict[int, str] = field(default_factory=dict)
    stage_sfx_names: dict[int, str] = field(default_factory=dict)
    _stream: Optional[_MusicStream] = field(default=None, repr=False)

    # Music -----------------------------------------------------------------

    def set_music_track(self, file_path: str, track_id: int, loop: bool, loop_point: int) -> None:
        """Assign a file under the music folder to ``track_id``."""
        track = self.tracks[track_id]
        track.file_name = MUSIC_DIR + file_path
        track.track_loop = bool(loop)
        track.loop_point = loop_point

    def play_music(self, track: int) -> bool:
        """Start streaming ``track``; False if audio is off or nothing was started."""
        if not self.audio_enabled:
            return False
        info = self.tracks[track]
        if not info.file_name:
            self.stop_music()
            return False
        if self.music_status == MusicStatus.LOADING:
            log.warning("music tried to play while music was loading")
            return False
        self.music_status = MusicStatus.LOADING
        self._load_music(track)
        return True

    def _load_music(self, track: int) -> None:
        self._stream = None
        info = self.tracks[track]
        samples = self.music_loader(info.file_name) if self.music_loader else None
        if samples is None:
            self.music_status = MusicStatus.STOPPED
            return
        self._stream = _MusicStream(
            samples=tuple(samples),
            track_loop=info.track_loop,
            loop_point=info.loop_point * MUSIC_CHANNELS,
        )
        self.music_status = MusicStatus.PLAYING
        self.master_volume = MAX_VOLUME
        self.track_id = track

    def stop_music(self) -> None:
        """Stop the music and drop its stream."""
        self.music_status = MusicStatus.STOPPED
        self._stream = None

    def pause_sound(self) -> bool:
        """Pause playing music; True if it was playing."""
        if self.music_status == MusicStatus.PLAYING:
            self.music_status = MusicStatus.PAUSED
            return True
        return False

    def resume_sound(self) -> None:
        """Resume paused music."""
        if self.music_status == MusicStatus.PAUSED:
            self.music_status = MusicStatus.PLAYING

    def set_music_volume(self, volume: int) -> None:
        """Set the master music volume, clamped to 0..100."""
        self.master_volume = max(0, min(MAX_VOLUME, volume))

    # Sound effects ---------------------------------------------------------

    def load_sfx(self, file_path: str, sfx_id: int, samples: Optional[Sequence[int]]) -> None:
        """Store decoded ``samples`` in slot ``sfx_id``; None means the file was missing."""
        if not self.audio_enabled or samples is None:
            return
        effect = self.sfx_list[sfx_id]
        effect.name = file_path
        effect.samples = tuple(samples)
        effect.loaded = True

    def load_global_sfx(self, config_data: Optional[bytes], sample_loader: SampleLoader) -> None:
        """Load every global sound effect named in the game config."""
        self.global_sfx_count = 0
        if config_data is not None:
            paths = read_config_sfx_paths(config_data)
            self.global_sfx_count = len(paths)
            for sfx_id, path in enumerate(paths):
                self.load_sfx(path, sfx_id, sample_loader(SFX_DIR + path))
                self.global_sfx_names[sfx_id] = sfx_display_name(path)
        self.channels.next_channel_pos = 0
        self.channels.stop_all()

    def release_global_sfx(self) -> None:
        """Stop all effects and free the global slots."""
        self.channels.stop_all()
        for sfx_id in range(self.global_sfx_count - 1, -1, -1):
            if self.sfx_list[sfx_id].loaded:
                self.sfx_list[sfx_id].release()
        self.global_sfx_count = 0

    def release_stage_sfx(self) -> None:
        """Free the slots that follow the global effects."""
        top = min(self.stage_sfx_count + self.global_sfx_count, SFX_COUNT - 1)
        for sfx_id in range(top, self.global_sfx_count - 1, -1):
            if self.sfx_list[sfx_id].loaded:
                self.sfx_list[sfx_id].release()
        self.stage_sfx_count = 0

    def play_sfx(self, sfx: int, loop: bool) -> int:
        """Play effect ``sfx`` and return the channel it went to."""
        return self.channels.play(sfx, self.sfx_list[sfx], loop)

    def stop_sfx(self, sfx: int) -> None:
        """Silence every channel playing ``sfx``."""
        self.channels.stop(sfx)

    def set_sfx_attributes(self, sfx: int, loop_count: int, pan: int) -> Optional[int]:
        """Restart ``sfx`` with new looping and panning."""
        return self.channels.set_attributes(sfx, self.sfx_list[sfx], loop_count, pan)

    # Rendering -------------------------------------------------------------

    def _music_chunk(self, count: int) -> list[int]:
        stream = self._stream
        out: list[int] = []
        if stream is None or not stream.samples:
            return out
        while self.music_status == MusicStatus.PLAYING and len(out) < count:
            piece = stream.samples[stream.position:stream.position + count - len(out)]
            if piece:
                out.extend(piece)
                stream.position += len(piece)
                continue
            if stream.track_loop and stream.loop_point < len(stream.samples):
                stream.position = stream.loop_point
            else:
                self.music_status = MusicStatus.STOPPED
        return out

    def render(self, sample_count: int) -> list[int]:
        """Produce ``sample_count`` mixed, clamped samples."""
        if sample_count < 0:
            raise ValueError(f"invalid sample count {sample_count}")
        if not self.audio_enabled:
            return [0] * sample_count
        output: list[int] = []
        remaining = sample_count
        while remaining:
            todo = min(remaining, MIX_BUFFER_SAMPLES)
            mix_buffer = [0] * todo
            music = self._music_chunk(todo)
            if music:
                mix_into(mix_buffer, music, self.bgm_volume * self.master_volume // MAX_VOLUME, 0)
            self.channels.mix(mix_buffer, todo, self.sfx_volume, self.sfx_list)
            output.extend(clamp_to_int16(mix_buffer))
            remaining -= todo
        return output

    def release(self) -> None:
        """Stop everything and free all sound effects."""
        self.stop_music()
        self.channels.stop_all()
        self.release_stage_sfx()
        self.release_global_sfx()


__all__ = ["AudioEngine", "TrackInfo", "read_config_sfx_paths", "CHANNEL_COUNT", "TRACK_COUNT"]