"""Script bytecode descriptors and interpreter state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from retrokit.animation import AnimationFile

SCRIPTDATA_COUNT = 0x40000
JUMPTABLE_COUNT = 0x4000
FUNCTION_COUNT = 0x200
JUMPSTACK_COUNT = 0x400
FUNCSTACK_COUNT = 0x400

OPERAND_COUNT = 10
TEMP_VALUE_COUNT = 8
ARRAY_POSITION_COUNT = 3


class ScriptSub(IntEnum):
    """The entry points an object script may define."""

    MAIN = 0
    PLAYER_INTERACTION = 1
    DRAW = 2
    SETUP = 3


@dataclass
class ScriptPtr:
    """Offsets into the script code and jump table."""

    script_code_ptr: int = 0
    jump_table_ptr: int = 0


@dataclass
class ScriptFunction:
    """A named script function and where its code starts."""

    name: str = ""
    ptr: ScriptPtr = field(default_factory=ScriptPtr)


@dataclass
class ObjectScript:
    """Compiled entry points and animation data for one object type."""

    frame_count: int = 0
    sprite_sheet_id: int = 0
    sub_main: ScriptPtr = field(default_factory=ScriptPtr)
    sub_player_interaction: ScriptPtr = field(default_factory=ScriptPtr)
    sub_draw: ScriptPtr = field(default_factory=ScriptPtr)
    sub_startup: ScriptPtr = field(default_factory=ScriptPtr)
    frame_list_offset: int = 0
    anim_file: Optional["AnimationFile"] = None
    mobile: bool = False

    def sub(self, which: int) -> ScriptPtr:
        """Return the entry point for a :class:`ScriptSub` value."""
        kind = ScriptSub(which)
        return {
            ScriptSub.MAIN: self.sub_main,
            ScriptSub.PLAYER_INTERACTION: self.sub_player_interaction,
            ScriptSub.DRAW: self.sub_draw,
            ScriptSub.SETUP: self.sub_startup,
        }[kind]


@dataclass
class ScriptEngine:
    """Registers used while a script runs."""

    operands: list[int] = field(default_factory=lambda: [0] * OPERAND_COUNT)
    temp_value: list[int] = field(default_factory=lambda: [0] * TEMP_VALUE_COUNT)
    array_position: list[int] = field(default_factory=lambda: [0] * ARRAY_POSITION_COUNT)
    check_result: int = 0

    def reset(self) -> None:
        """Zero every register."""
        self.operands = [0] * OPERAND_COUNT
        self.temp_value = [0] * TEMP_VALUE_COUNT
        self.array_position = [0] * ARRAY_POSITION_COUNT
        self.check_result = 0