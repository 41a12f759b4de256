"""Library configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Library settings."""

    # Blank project defaults
    DEFAULT_NAME: str = "Untitled Project"
    DEFAULT_WIDTH: int = 800
    DEFAULT_HEIGHT: int = 600
    DEFAULT_FPS: float = 30.0
    DEFAULT_DURATION: float = 5.0  # Seconds

    # Export settings
    LOTTIE_VERSION: str = "5.5.7"  # Bodymovin version written to "v"
    EMBED_EASING: bool = False  # Write i/o tangents (or h) per keyframe
    JSON_INDENT: int = 2

    # Numeric tolerances
    BEZIER_EPSILON: float = 1e-5  # Cubic-bezier solver tolerance
    SEEK_EPSILON: float = 0.01  # Seconds; below this engine/UI times are in sync

    model_config = {"env_prefix": "ANIMFORGE_"}


settings = Settings()
