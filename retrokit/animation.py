"""Sprite animation files: parsing, storage and frame stepping."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Optional

ANIFILE_COUNT = 0x100
ANIMATION_COUNT = 0x400
SPRITEFRAME_COUNT = 0x1000
HITBOX_COUNT = 0x20
HITBOX_DIR_COUNT = 8

ANIMATION_DIR = "Data/Animations/"

_SHEET_SLOTS = 0x18
_NAME_LIMIT = 16
_TIMER_LIMIT = 0xF0


class AnimationFormatError(ValueError):
    """Raised when animation data is truncated or exceeds the engine's limits."""


class RotationStyle(IntEnum):
    """How an animation's frames may be rotated."""

    NONE = 0
    FULL = 1
    DEG45 = 2
    STATIC_FRAMES = 3


@dataclass
class AnimationFile:
    """Where one file's animations and hitboxes sit in the bank."""

    file_name: str = ""
    anim_count: int = 0
    ani_list_offset: int = 0
    hitbox_list_offset: int = 0


@dataclass
class SpriteAnimation:
    """A named sequence of frames."""

    name: str = ""
    frame_count: int = 0
    speed: int = 0
    loop_point: int = 0
    rotation_style: int = RotationStyle.NONE
    frame_list_offset: int = 0


@dataclass
class SpriteFrame:
    """A rectangle on a sprite sheet and its pivot."""

    spr_x: int = 0
    spr_y: int = 0
    width: int = 0
    height: int = 0
    pivot_x: int = 0
    pivot_y: int = 0
    sheet_id: int = 0
    hitbox_id: int = 0


def _directions() -> list[int]:
    return [0] * HITBOX_DIR_COUNT


@dataclass
class Hitbox:
    """Collision box edges for each of the eight directions."""

    left: list[int] = field(default_factory=_directions)
    top: list[int] = field(default_factory=_directions)
    right: list[int] = field(default_factory=_directions)
    bottom: list[int] = field(default_factory=_directions)


@dataclass
class AnimatedEntity:
    """The animation state carried by an entity."""

    animation: int = 0
    prev_animation: int = 0
    frame: int = 0
    animation_timer: int = 0
    animation_speed: int = 0


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    def take(self, count: int) -> bytes:
        end = self._pos + count
        if end > len(self._data):
            raise AnimationFormatError(f"unexpected end of data at offset {self._pos}")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]

    def sbyte(self) -> int:
        return int.from_bytes(self.take(1), "little", signed=True)

    def text(self) -> str:
        return self.take(self.byte()).decode("latin-1")


class AnimationBank:
    """All loaded animation files, animations, frames and hitboxes."""

    def __init__(self) -> None:
        self.files: list[AnimationFile] = []
        self.animations: list[SpriteAnimation] = []
        self.frames: list[SpriteFrame] = []
        self.hitboxes: list[Hitbox] = []
        self.script_frames: list[SpriteFrame] = []

    def load(self, data: bytes, register_sheet: Callable[[str], int]) -> AnimationFile:
        """Parse animation file bytes into the bank and describe where they went.

        ``register_sheet`` is called with each sprite sheet path and returns the
        sheet id that frames referring to it should use.
        """
        reader = _Reader(data)
        sheet_ids = [0] * _SHEET_SLOTS

        sheet_count = reader.byte()
        if sheet_count > _SHEET_SLOTS:
            raise AnimationFormatError(f"too many sprite sheets: {sheet_count}")
        for slot in range(sheet_count):
            sheet_name = reader.text()
            if sheet_name:
                sheet_ids[slot] = register_sheet(sheet_name)

        anim_count = reader.byte()
        anim_file = AnimationFile(anim_count=anim_count, ani_list_offset=len(self.animations))
        new_animations: list[SpriteAnimation] = []
        new_frames: list[SpriteFrame] = []

        for _ in range(anim_count):
            name = reader.text()
            if len(name) >= _NAME_LIMIT:
                raise AnimationFormatError(f"animation name too long: {name!r}")
            frame_count, speed, loop_point, rotation_style = reader.take(4)
            animation = SpriteAnimation(
                name=name,
                frame_count=frame_count,
                speed=speed,
                loop_point=loop_point,
                rotation_style=rotation_style,
                frame_list_offset=len(self.frames) + len(new_frames),
            )
            for _ in range(frame_count):
                sheet_slot = reader.byte()
                if sheet_slot >= _SHEET_SLOTS:
                    raise AnimationFormatError(f"invalid sheet index {sheet_slot}")
                hitbox_id, spr_x, spr_y, width, height = reader.take(5)
                new_frames.append(
                    SpriteFrame(
                        spr_x=spr_x,
                        spr_y=spr_y,
                        width=width,
                        height=height,
                        pivot_x=reader.sbyte(),
                        pivot_y=reader.sbyte(),
                        sheet_id=sheet_ids[sheet_slot],
                        hitbox_id=hitbox_id,
                    )
                )
            if animation.rotation_style == RotationStyle.STATIC_FRAMES:
                animation.frame_count >>= 1
            new_animations.append(animation)

        anim_file.hitbox_list_offset = len(self.hitboxes)
        new_hitboxes: list[Hitbox] = []
        for _ in range(reader.byte()):
            hitbox = Hitbox()
            for direction in range(HITBOX_DIR_COUNT):
                hitbox.left[direction] = reader.sbyte()
                hitbox.top[direction] = reader.sbyte()
                hitbox.right[direction] = reader.sbyte()
                hitbox.bottom[direction] = reader.sbyte()
            new_hitboxes.append(hitbox)

        if len(self.animations) + len(new_animations) > ANIMATION_COUNT:
            raise AnimationFormatError("animation limit exceeded")
        if len(self.frames) + len(new_frames) > SPRITEFRAME_COUNT:
            raise AnimationFormatError("sprite frame limit exceeded")
        if len(self.hitboxes) + len(new_hitboxes) > HITBOX_COUNT:
            raise AnimationFormatError("hitbox limit exceeded")

        self.animations.extend(new_animations)
        self.frames.extend(new_frames)
        self.hitboxes.extend(new_hitboxes)
        return anim_file

    def add_file(
        self,
        file_name: str,
        loader: Callable[[str], Optional[bytes]],
        register_sheet: Callable[[str], int],
    ) -> Optional[AnimationFile]:
        """Return the file already loaded under ``file_name`` or load it.

        ``loader`` receives the full path and returns the file's bytes, or None
        when it does not exist; a missing file is still registered, empty.
        Returns None once every file slot is taken.
        """
        for existing in self.files:
            if existing.file_name == file_name:
                return existing
        if len(self.files) >= ANIFILE_COUNT:
            return None
        data = loader(ANIMATION_DIR + file_name)
        anim_file = self.load(data, register_sheet) if data is not None else AnimationFile()
        anim_file.file_name = file_name
        self.files.append(anim_file)
        return anim_file

    def clear(self) -> None:
        """Remove everything from the bank."""
        self.files.clear()
        self.animations.clear()
        self.frames.clear()
        self.hitboxes.clear()
        self.script_frames.clear()

    def default(self) -> Optional[AnimationFile]:
        """Return the first loaded file, or None when nothing is loaded."""
        return self.files[0] if self.files else None

    def animation(self, anim_file: AnimationFile, index: int) -> SpriteAnimation:
        """Return animation ``index`` of ``anim_file``."""
        return self.animations[anim_file.ani_list_offset + index]


def process_object_animation(animation: SpriteAnimation, entity: AnimatedEntity) -> None:
    """Advance ``entity`` one tick through ``animation``."""
    if entity.animation_speed <= 0:
        entity.animation_timer += animation.speed
    else:
        entity.animation_speed = min(entity.animation_speed, _TIMER_LIMIT)
        entity.animation_timer += entity.animation_speed

    if entity.animation != entity.prev_animation:
        entity.prev_animation = entity.animation
        entity.frame = 0
        entity.animation_timer = 0
        entity.animation_speed = 0

    if entity.animation_timer >= _TIMER_LIMIT:
        entity.animation_timer -= _TIMER_LIMIT
        entity.frame += 1

    if entity.frame >= animation.frame_count:
        entity.frame = animation.loop_point