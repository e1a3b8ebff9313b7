"""Profile data models.

VideoProfile and AudioProfile are immutable value objects. ProfileSet keeps
the (name, profile) pairs in insertion order so that every consumer sees the
same sequence; ordering by bitrate happens only where it is needed.
"""

import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass

from abr_orchestrator.exceptions import ConfigError

MAX_CRF = 51

# Names become directory names, file names and playlist attribute values.
PROFILE_NAME_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]*")


def is_valid_profile_name(name: object) -> bool:
    """True if name is safe as a directory name and an HLS NAME attribute."""
    return isinstance(name, str) and PROFILE_NAME_PATTERN.fullmatch(name) is not None


@dataclass(frozen=True)
class VideoProfile:
    """One output rendition of the source video."""

    width: int
    height: int
    bitrate_kbps: int
    quality_crf: int

    def __post_init__(self) -> None:
        """Validate profile values."""
        for field_name in ("width", "height", "bitrate_kbps"):
            value = getattr(self, field_name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigError(
                    f"{field_name} must be a positive integer, got {value!r}",
                    field=field_name,
                )
        if (
            not isinstance(self.quality_crf, int)
            or isinstance(self.quality_crf, bool)
            or not 0 <= self.quality_crf <= MAX_CRF
        ):
            raise ConfigError(
                f"quality_crf must be between 0 and {MAX_CRF}, "
                f"got {self.quality_crf!r}",
                field="quality_crf",
            )

    @property
    def is_portrait(self) -> bool:
        return self.width < self.height

    @property
    def resolution(self) -> str:
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class AudioProfile:
    """Audio settings applied to every variant.

    A bitrate of 0 is accepted; what the encoder does with it is up to the
    encoder.
    """

    bitrate_kbps: int = 128

    def __post_init__(self) -> None:
        """Validate audio bitrate."""
        if (
            not isinstance(self.bitrate_kbps, int)
            or isinstance(self.bitrate_kbps, bool)
            or self.bitrate_kbps < 0
        ):
            raise ConfigError(
                f"audio bitrate_kbps must be a non-negative integer, "
                f"got {self.bitrate_kbps!r}",
                field="bitrate_kbps",
            )


class ProfileSet:
    """Ordered, name-unique collection of video profiles.

    Iteration yields (name, profile) pairs in insertion order.
    """

    def __init__(self, entries: Iterable[tuple[str, VideoProfile]] = ()) -> None:
        items: list[tuple[str, VideoProfile]] = []
        seen: set[str] = set()
        for name, profile in entries:
            if not is_valid_profile_name(name):
                raise ConfigError(
                    f"Invalid profile name {name!r}: use letters, digits, '_', "
                    f"'.' and '-', starting with a letter or digit",
                    field=str(name),
                )
            if name in seen:
                raise ConfigError(f"Duplicate profile name: {name}", field=name)
            if not isinstance(profile, VideoProfile):
                raise ConfigError(
                    f"Profile {name} must be a VideoProfile, "
                    f"got {type(profile).__name__}",
                    field=name,
                )
            seen.add(name)
            items.append((name, profile))
        self._items: tuple[tuple[str, VideoProfile], ...] = tuple(items)

    @classmethod
    def from_mapping(cls, profiles: Mapping[str, VideoProfile]) -> "ProfileSet":
        """Build a profile set from a mapping, keeping its iteration order."""
        return cls(profiles.items())

    def __iter__(self) -> Iterator[tuple[str, VideoProfile]]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __contains__(self, name: object) -> bool:
        return any(name == item_name for item_name, _ in self._items)

    def __getitem__(self, name: str) -> VideoProfile:
        for item_name, profile in self._items:
            if item_name == name:
                return profile
        raise KeyError(name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProfileSet):
            return NotImplemented
        return self._items == other._items

    def __hash__(self) -> int:
        return hash(self._items)

    def __repr__(self) -> str:
        names = ", ".join(name for name, _ in self._items)
        return f"ProfileSet([{names}])"

    @property
    def names(self) -> list[str]:
        return [name for name, _ in self._items]

    def by_bitrate(self) -> list[tuple[str, VideoProfile]]:
        """Return entries sorted ascending by bitrate.

        Equal bitrates are ordered by profile name; Python's stable sort keeps
        insertion order for anything still tied.
        """
        return sorted(self._items, key=lambda item: (item[1].bitrate_kbps, item[0]))
