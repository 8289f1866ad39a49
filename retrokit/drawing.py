"""Drawing flags, render limits and the graphics surface table."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, Optional

SURFACE_COUNT = 32
GFXDATA_SIZE = 0x800 * 0x800
DRAWLAYER_COUNT = 8

VERTEX_COUNT = 0x4000
INDEX_COUNT = VERTEX_COUNT * 6
VERTEX3D_COUNT = 0x1904
TILEUV_SIZE = 0x1000
HW_TEXTURE_COUNT = 6
HW_TEXTURE_SIZE = 0x400
HW_TEXTURE_DATASIZE = HW_TEXTURE_SIZE * HW_TEXTURE_SIZE * 2
HW_TEXBUFFER_SIZE = HW_TEXTURE_SIZE * HW_TEXTURE_SIZE


class FlipFlags(IntEnum):
    """Sprite mirroring modes."""

    NONE = 0
    X = 1
    Y = 2
    XY = 3


class InkFlags(IntEnum):
    """Blending modes used when drawing sprites."""

    NONE = 0
    BLEND = 1
    ALPHA = 2
    ADD = 3
    SUB = 4


class DrawFX(IntEnum):
    """Effects a sprite draw call may apply."""

    SCALE = 0
    ROTATE = 1
    ROTOZOOM = 2
    INK = 3
    TINT = 4
    FLIP = 5


@dataclass
class GfxSurface:
    """A sprite sheet stored in the shared graphics data area."""

    file_name: str = ""
    height: int = 0
    width: int = 0
    width_shifted: int = 0
    tex_start_x: int = 0
    tex_start_y: int = 0
    data_position: int = 0


def check_surface_size(size: int) -> bool:
    """Return True if ``size`` is a power of two from 2 up to 1024."""
    return size in {1 << shift for shift in range(1, 11)}


@dataclass
class SurfaceTable:
    """The fixed set of graphics surfaces and the next free data position."""

    surfaces: list[GfxSurface] = field(
        default_factory=lambda: [GfxSurface() for _ in range(SURFACE_COUNT)]
    )
    data_position: int = 0

    def clear(self) -> None:
        """Forget every surface's file name and rewind the data position."""
        for surface in self.surfaces:
            surface.file_name = ""
        self.data_position = 0

    def find(self, file_name: str) -> Optional[int]:
        """Return the index of the surface loaded from ``file_name``, if any."""
        if not file_name:
            return None
        return next(
            (i for i, surface in enumerate(self.surfaces) if surface.file_name == file_name),
            None,
        )

    def __len__(self) -> int:
        return len(self.surfaces)

    def __getitem__(self, index: int) -> GfxSurface:
        return self.surfaces[index]

    def __iter__(self) -> Iterator[GfxSurface]:
        return iter(self.surfaces)