from .catalog import PresetCatalog, defaults, merge, resolve
from .constants import DEFAULT_PRESET_ID
from .model import Preset, PresetKind

__all__ = [
    "DEFAULT_PRESET_ID",
    "Preset",
    "PresetCatalog",
    "PresetKind",
    "defaults",
    "merge",
    "resolve",
]
