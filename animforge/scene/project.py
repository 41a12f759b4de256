"""
Project - Root aggregate of an animation.

A project contains:
- Canvas size and name
- Timebase: frame rate and duration (seconds)
- Playback state: current time and playing flag
- Layers (ordered, first = bottom of the paint order)
- Keyframes (flat list, joined to layers by layerId)

Projects are treated as immutable values by the store: every edit builds a
new Project with ``model_copy`` and swaps it in whole.
"""

from typing import Any, ClassVar, Optional, Union
from pathlib import Path
import json

from pydantic import BaseModel, ConfigDict, Field, model_validator

from animforge.animation.keyframes import Keyframe
from animforge.animation.timebase import clamp_time, end_frame, last_frame
from animforge.config import settings

from .layer import Layer


class Project(BaseModel):
    """
    Project model.

    Serialization format:
    {
        "_version": 1,
        "name": "Untitled Project",
        "width": 800,
        "height": 600,
        "fps": 30,
        "duration": 5,
        "currentTime": 0,
        "isPlaying": false,
        "layers": [...],
        "selectedLayerId": null,
        "keyframes": [...]
    }
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        extra='ignore',
    )

    # Serialization version
    VERSION: ClassVar[int] = 1

    version: int = Field(default=1, alias='_version')

    name: str = Field(default_factory=lambda: settings.DEFAULT_NAME)
    width: int = Field(default_factory=lambda: settings.DEFAULT_WIDTH, ge=1)
    height: int = Field(default_factory=lambda: settings.DEFAULT_HEIGHT, ge=1)

    # Timebase
    fps: float = Field(default_factory=lambda: settings.DEFAULT_FPS, gt=0)
    duration: float = Field(default_factory=lambda: settings.DEFAULT_DURATION, ge=0)

    # Playback state
    current_time: float = Field(default=0.0, alias='currentTime')
    is_playing: bool = Field(default=False, alias='isPlaying')

    layers: list[Layer] = Field(default_factory=list)
    selected_layer_id: Optional[str] = Field(default=None, alias='selectedLayerId')
    keyframes: list[Keyframe] = Field(default_factory=list)

    @model_validator(mode='after')
    def _clamp_current_time(self) -> 'Project':
        self.current_time = clamp_time(self.current_time, self.duration)
        return self

    # --- Timebase helpers ---

    @property
    def last_frame(self) -> int:
        """Highest valid frame index, ``round(duration * fps)``."""
        return last_frame(self.duration, self.fps)

    @property
    def end_frame(self) -> int:
        """Exported out-point, ``ceil(duration * fps)``."""
        return end_frame(self.duration, self.fps)

    # --- Lookup ---

    def get_layer(self, layer_id: str) -> Optional[Layer]:
        """
        Get a layer by ID.

        Args:
            layer_id: Layer ID to find

        Returns:
            Layer or None if not found
        """
        for layer in self.layers:
            if layer.id == layer_id:
                return layer
        return None

    def get_layer_index(self, layer_id: str) -> Optional[int]:
        for i, layer in enumerate(self.layers):
            if layer.id == layer_id:
                return i
        return None

    @property
    def selected_layer(self) -> Optional[Layer]:
        if self.selected_layer_id is None:
            return None
        return self.get_layer(self.selected_layer_id)

    # --- Serialization ---

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary with camelCase keys."""
        self.version = self.VERSION
        return self.model_dump(by_alias=True, mode='json')

    @classmethod
    def migrate(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Migrate serialized data from older versions.

        Args:
            data: Serialized project data

        Returns:
            Migrated data at current version
        """
        version = data.get('_version', 0)

        # v0 -> v1: position keyframes were stored as "x"/"y"
        if version < 1:
            renamed = {'x': 'positionX', 'y': 'positionY'}
            keyframes = []
            for kf in data.get('keyframes', []):
                kf = dict(kf)
                kf['property'] = renamed.get(kf.get('property'), kf.get('property'))
                keyframes.append(kf)
            data['keyframes'] = keyframes
            data['_version'] = 1

        return data

    @classmethod
    def from_api_dict(cls, data: dict[str, Any]) -> 'Project':
        """
        Create Project from a serialized dictionary.

        Args:
            data: Serialized project data

        Returns:
            Project instance
        """
        data = cls.migrate(dict(data))
        return cls.model_validate(data)

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_api_dict(), indent=indent)

    @classmethod
    def from_json(cls, text: str) -> 'Project':
        return cls.from_api_dict(json.loads(text))

    def save(self, file: Union[str, Path]) -> None:
        """Write the project as JSON."""
        Path(file).write_text(self.to_json(indent=settings.JSON_INDENT), encoding='utf-8')

    @classmethod
    def load(cls, file: Union[str, Path]) -> 'Project':
        """Read a project written by ``save``."""
        return cls.from_json(Path(file).read_text(encoding='utf-8'))
