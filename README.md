# retrokit

Building blocks for a 2D retro game engine, with no runtime dependencies.

## Modules

- `retrokit.animation`: `AnimationBank` parses binary animation files
  (sprite sheet names, animations, frames and hitboxes) into one shared bank.
  `add_file` returns an already loaded file by name or loads it through a
  `loader` callable, which is given the path under `Data/Animations/`.
  `register_sheet` is called for each sprite sheet name and returns the sheet
  id that frames should use. Data that is truncated or goes over the bank's
  limits raises `AnimationFormatError`. `process_object_animation(animation,
  entity)` advances an `AnimatedEntity` by one tick.
- `retrokit.drawing`: the `FlipFlags`, `InkFlags` and `DrawFX` enums, and a
  `SurfaceTable` of 32 `GfxSurface` entries with `clear()` and `find(file_name)`.
  `check_surface_size(size)` is true for the powers of two from 2 to 1024.
- `retrokit.script`: script records. `ScriptPtr`, `ScriptFunction`,
  `ObjectScript`, whose `sub()` returns the entry point for a `ScriptSub`, and
  the `ScriptEngine` register file, whose `reset()` zeroes every register.
- `retrokit.mixing`: `mix_into` adds samples at a volume from 0 to 100. Pan
  runs from -100 to 100; even positions are left and odd positions are right.
  `clamp_to_int16` clamps samples to 16 bits, and `sfx_display_name` gives the
  display name for a sound effect path. `ChannelSet` holds four sound effect
  channels with `play`, `stop`, `stop_all`, `set_attributes` and `mix`.
- `retrokit.audio`: `AudioEngine` holds 16 music track slots
  (`set_music_track`, `play_music`, `stop_music`, `pause_sound`,
  `resume_sound`, `set_music_volume`) and 256 sound effect slots (`load_sfx`,
  `load_global_sfx`, `release_global_sfx`, `release_stage_sfx`, `play_sfx`,
  `stop_sfx`, `set_sfx_attributes`). `render(sample_count)` returns the mixed
  and clamped samples. `read_config_sfx_paths` lists the global sound effect
  paths found in game config bytes.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example: advancing an animation

```python
from pathlib import Path

from retrokit.animation import AnimationBank, AnimatedEntity, process_object_animation


def load(path):
    file = Path(path)
    return file.read_bytes() if file.exists() else None


bank = AnimationBank()
anim_file = bank.add_file("Player.ani", loader=load, register_sheet=lambda name: 0)
walk = bank.animation(anim_file, 0)

entity = AnimatedEntity()
process_object_animation(walk, entity)
print(entity.frame)
```

## Example: mixing sound effects

```python
from retrokit.audio import AudioEngine

engine = AudioEngine()
engine.load_sfx("Jump.wav", 0, [1000, -1000] * 64)
engine.play_sfx(0, loop=False)
samples = engine.render(256)
```

`render` mixes music at the music volume times the master volume, divided by
100, and sound effects at the effect volume. The result is clamped to the
signed 16-bit range. When `audio_enabled` is false, it returns silence.

## What it does not do

The package does not decode audio or image files and does not open an audio
device or a window. `AudioEngine` takes already decoded, interleaved stereo
samples. Music comes in through its `music_loader` callable and sound effects
through `load_sfx` or the `sample_loader` given to `load_global_sfx`. Sending
the rendered samples to an output is left to the caller. There is no sprite
renderer, and `retrokit.script` holds records only, with no script compiler
or interpreter.