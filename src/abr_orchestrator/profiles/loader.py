"""Ladder file loading and validation.

A ladder file is a YAML mapping describing the audio settings and the
ordered set of video profiles for a run:

    audio:
      bitrate_kbps: 128
    profiles:
      720p:
        width: 720
        height: 1280
        bitrate_kbps: 2800
        quality_crf: 32

The order of the ``profiles`` mapping is kept as the profile insertion order.
When ``audio.bitrate_kbps`` is left out, the caller's configured default
applies.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from abr_orchestrator.exceptions import ConfigError
from abr_orchestrator.profiles.models import (
    MAX_CRF,
    AudioProfile,
    ProfileSet,
    VideoProfile,
    is_valid_profile_name,
)


class LadderValidationError(ConfigError):
    """Error raised when a ladder file is malformed."""


class VideoProfileModel(BaseModel):
    """Pydantic model for one video profile entry."""

    model_config = ConfigDict(extra="forbid")

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    bitrate_kbps: int = Field(gt=0)
    quality_crf: int = Field(default=32, ge=0, le=MAX_CRF)


class AudioProfileModel(BaseModel):
    """Pydantic model for the global audio settings."""

    model_config = ConfigDict(extra="forbid")

    bitrate_kbps: int | None = Field(default=None, ge=0)


class LadderModel(BaseModel):
    """Pydantic model for a complete ladder file."""

    model_config = ConfigDict(extra="forbid")

    audio: AudioProfileModel = Field(default_factory=AudioProfileModel)
    profiles: dict[str, VideoProfileModel]

    @field_validator("profiles")
    @classmethod
    def validate_profiles(
        cls, v: dict[str, VideoProfileModel]
    ) -> dict[str, VideoProfileModel]:
        """Require at least one profile, each with a safe name."""
        if not v:
            raise ValueError("at least one profile is required")
        for name in v:
            if not is_valid_profile_name(name):
                raise ValueError(
                    f"invalid profile name {name!r}: use letters, digits, '_', "
                    f"'.' and '-', starting with a letter or digit"
                )
        return v


@dataclass(frozen=True)
class Ladder:
    """A validated profile set together with its audio settings."""

    profiles: ProfileSet
    audio: AudioProfile = field(default_factory=AudioProfile)


def load_ladder(path: Path, default_audio_kbps: int | None = None) -> Ladder:
    """Load and validate a ladder from a YAML file.

    Args:
        path: Path to the YAML ladder file.
        default_audio_kbps: Audio bitrate used when the file has no
            ``audio.bitrate_kbps``. None keeps the AudioProfile default.

    Returns:
        Validated Ladder.

    Raises:
        LadderValidationError: If the file is not a valid ladder.
        FileNotFoundError: If the file does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Ladder file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise LadderValidationError(f"Invalid YAML syntax: {e}") from e

    if data is None:
        raise LadderValidationError("Ladder file is empty")

    if not isinstance(data, dict):
        raise LadderValidationError("Ladder file must be a YAML mapping")

    return load_ladder_from_dict(data, default_audio_kbps)


def load_ladder_from_dict(
    data: dict[str, Any], default_audio_kbps: int | None = None
) -> Ladder:
    """Validate a ladder given as a plain dictionary.

    Raises:
        LadderValidationError: If the data is not a valid ladder.
    """
    try:
        model = LadderModel.model_validate(data)
    except ValidationError as e:
        raise LadderValidationError(_format_validation_error(e)) from e

    profiles = ProfileSet(
        (
            name,
            VideoProfile(
                width=entry.width,
                height=entry.height,
                bitrate_kbps=entry.bitrate_kbps,
                quality_crf=entry.quality_crf,
            ),
        )
        for name, entry in model.profiles.items()
    )
    audio_kbps = model.audio.bitrate_kbps
    if audio_kbps is None:
        audio_kbps = default_audio_kbps
    audio = AudioProfile() if audio_kbps is None else AudioProfile(audio_kbps)
    return Ladder(profiles=profiles, audio=audio)


def _format_validation_error(error: ValidationError) -> str:
    """Format a Pydantic validation error into a user-friendly message."""
    errors = error.errors()
    if errors:
        first_error = errors[0]
        loc = ".".join(str(x) for x in first_error.get("loc", []))
        msg = first_error.get("msg", str(error))
        if loc:
            return f"Ladder validation failed: {loc}: {msg}"
        return f"Ladder validation failed: {msg}"
    return f"Ladder validation failed: {error}"
