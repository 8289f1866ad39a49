"""Retro game engine components: animation banks, surface tables, script records and audio mixing."""

__version__ = "1.3.2"
__all__ = ["animation", "audio", "drawing", "mixing", "script"]