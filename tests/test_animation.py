import struct

import pytest

from retrokit.animation import (
    HITBOX_COUNT,
    HITBOX_DIR_COUNT,
    AnimatedEntity,
    AnimationBank,
    AnimationFile,
    AnimationFormatError,
    RotationStyle,
    SpriteAnimation,
    process_object_animation,
)


def _text(value):
    raw = value.encode("latin-1")
    return bytes([len(raw)]) + raw


def _frame(sheet=0, hitbox=0, x=0, y=0, w=0, h=0, px=0, py=0):
    return bytes([sheet, hitbox, x, y, w, h]) + struct.pack("bb", px, py)


def _anim(name, frames, speed=0, loop=0, rotation=0, frame_count=None):
    count = len(frames) if frame_count is None else frame_count
    return _text(name) + bytes([count, speed, loop, rotation]) + b"".join(frames)


def _file(sheets, anims, hitboxes=()):
    out = bytes([len(sheets)]) + b"".join(_text(s) for s in sheets)
    out += bytes([len(anims)]) + b"".join(anims)
    out += bytes([len(hitboxes)])
    for box in hitboxes:
        out += struct.pack(f"{4 * HITBOX_DIR_COUNT}b", *box)
    return out


class _Sheets:
    def __init__(self, start=7):
        self.names = []
        self.start = start

    def __call__(self, name):
        self.names.append(name)
        return self.start + len(self.names) - 1


def test_load_parses_animations_and_frames():
    sheets = _Sheets()
    data = _file(
        ["Players/Sonic1.gif", "Players/Sonic2.gif"],
        [
            _anim("Stopped", [_frame(1, 0, 10, 20, 30, 40, -15, -20)], speed=1),
            _anim("Walking", [_frame(0), _frame(1)], speed=60, loop=1),
        ],
    )
    bank = AnimationBank()
    anim_file = bank.load(data, sheets)

    assert sheets.names == ["Players/Sonic1.gif", "Players/Sonic2.gif"]
    assert anim_file.anim_count == 2
    assert anim_file.ani_list_offset == 0
    walking = bank.animation(anim_file, 1)
    assert (walking.name, walking.frame_count, walking.speed, walking.loop_point) == ("Walking", 2, 60, 1)
    assert walking.frame_list_offset == 1
    first = bank.frames[0]
    assert (first.spr_x, first.spr_y, first.width, first.height) == (10, 20, 30, 40)
    assert (first.pivot_x, first.pivot_y) == (-15, -20)
    assert first.sheet_id == 8
    assert [f.sheet_id for f in bank.frames[1:]] == [7, 8]


def test_empty_sheet_name_is_not_registered():
    sheets = _Sheets()
    bank = AnimationBank()
    bank.load(_file(["", "b.gif"], [_anim("A", [_frame(1)])]), sheets)
    assert sheets.names == ["b.gif"]
    assert bank.frames[0].sheet_id == 7


def test_static_frames_halves_frame_count_but_keeps_frames():
    bank = AnimationBank()
    frames = [_frame(), _frame(), _frame(), _frame()]
    anim_file = bank.load(_file([], [_anim("Spin", frames, rotation=RotationStyle.STATIC_FRAMES)]), _Sheets())
    assert bank.animation(anim_file, 0).frame_count == 2
    assert len(bank.frames) == 4


def test_hitboxes_are_read_per_direction():
    box = list(range(-16, 16))
    bank = AnimationBank()
    anim_file = bank.load(_file([], [], [box]), _Sheets())
    assert anim_file.hitbox_list_offset == 0
    hitbox = bank.hitboxes[0]
    assert hitbox.left == box[0::4]
    assert hitbox.top == box[1::4]
    assert hitbox.right == box[2::4]
    assert hitbox.bottom == box[3::4]


def test_second_load_offsets_follow_first():
    bank = AnimationBank()
    bank.load(_file([], [_anim("A", [_frame()])], [[0] * 32]), _Sheets())
    second = bank.load(_file([], [_anim("B", [_frame(), _frame()])], [[1] * 32]), _Sheets())
    assert second.ani_list_offset == 1
    assert second.hitbox_list_offset == 1
    assert bank.animation(second, 0).frame_list_offset == 1


def test_truncated_data_raises():
    data = _file([], [_anim("A", [_frame()])])
    with pytest.raises(AnimationFormatError):
        AnimationBank().load(data[:-4], _Sheets())


def test_too_many_hitboxes_raises_and_leaves_bank_unchanged():
    bank = AnimationBank()
    boxes = [[0] * 32] * (HITBOX_COUNT + 1)
    with pytest.raises(AnimationFormatError):
        bank.load(_file([], [_anim("A", [_frame()])], boxes), _Sheets())
    assert bank.animations == [] and bank.hitboxes == []


def test_add_file_loads_once_and_prefixes_path():
    requested = []

    def loader(path):
        requested.append(path)
        return _file([], [_anim("A", [_frame()])])

    bank = AnimationBank()
    first = bank.add_file("Sonic.ani", loader, _Sheets())
    again = bank.add_file("Sonic.ani", loader, _Sheets())
    assert first is again
    assert requested == ["Data/Animations/Sonic.ani"]
    assert first.file_name == "Sonic.ani"
    assert bank.default() is first


def test_add_file_missing_file_registers_empty_entry():
    bank = AnimationBank()
    result = bank.add_file("Gone.ani", lambda path: None, _Sheets())
    assert result == AnimationFile(file_name="Gone.ani")
    assert bank.files == [result]


def test_clear_empties_bank():
    bank = AnimationBank()
    bank.add_file("A.ani", lambda path: _file([], [_anim("A", [_frame()])], [[0] * 32]), _Sheets())
    bank.clear()
    assert bank.default() is None
    assert (bank.animations, bank.frames, bank.hitboxes) == ([], [], [])


def test_animation_uses_own_speed_until_timer_wraps():
    anim = SpriteAnimation(frame_count=4, speed=120)
    entity = AnimatedEntity()
    process_object_animation(anim, entity)
    assert (entity.frame, entity.animation_timer) == (0, 120)
    process_object_animation(anim, entity)
    assert (entity.frame, entity.animation_timer) == (1, 0)


def test_entity_speed_is_capped():
    anim = SpriteAnimation(frame_count=4, speed=1)
    entity = AnimatedEntity(animation_speed=1000)
    process_object_animation(anim, entity)
    assert entity.animation_speed == 0xF0
    assert (entity.frame, entity.animation_timer) == (1, 0)


def test_changing_animation_resets_state():
    anim = SpriteAnimation(frame_count=4, speed=200)
    entity = AnimatedEntity(animation=2, prev_animation=1, frame=3, animation_timer=100, animation_speed=50)
    process_object_animation(anim, entity)
    assert entity.prev_animation == 2
    assert (entity.frame, entity.animation_timer, entity.animation_speed) == (0, 0, 0)


def test_frame_past_end_returns_to_loop_point():
    anim = SpriteAnimation(frame_count=3, speed=0xF0, loop_point=1)
    entity = AnimatedEntity(frame=2)
    process_object_animation(anim, entity)
    assert entity.frame == 1