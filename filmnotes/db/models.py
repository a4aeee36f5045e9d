"""Dataclasses for all database entities."""

from dataclasses import dataclass
from enum import Enum, IntEnum

DATE_FORMAT = "%Y-%m-%d %H:%M"


class Increment(IntEnum):
    """Stop increments used when picking aperture values for a lens."""
    THIRD = 0
    HALF = 1
    FULL = 2

    @classmethod
    def from_value(cls, value) -> "Increment":
        try:
            return cls(value)
        except ValueError:
            return cls.THIRD


class FilmFormat(IntEnum):
    MM35 = 0
    MEDIUM_FORMAT_120 = 1
    APS_110 = 2
    SHEET = 3

    @classmethod
    def from_value(cls, value) -> "FilmFormat":
        try:
            return cls(value)
        except ValueError:
            return cls.MM35


class RollFilter(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    ALL = "all"


@dataclass
class Camera:
    id: int | None = None
    make: str = ""
    model: str = ""
    serial_no: str | None = None
    min_shutter: str | None = None   # e.g. "30"
    max_shutter: str | None = None   # e.g. "1/4000"

    @property
    def name(self) -> str:
        return f"{self.make} {self.model}"


@dataclass
class Lens:
    id: int | None = None
    make: str = ""
    model: str = ""
    serial_no: str | None = None
    min_aperture: str | None = None
    max_aperture: str | None = None
    min_focal_length: int | None = None
    max_focal_length: int | None = None
    aperture_increments: Increment = Increment.THIRD

    def __post_init__(self):
        self.aperture_increments = Increment.from_value(self.aperture_increments)

    @property
    def name(self) -> str:
        return f"{self.make} {self.model}"


@dataclass
class Filter:
    id: int | None = None
    make: str = ""
    model: str = ""

    @property
    def name(self) -> str:
        return f"{self.make} {self.model}"


@dataclass
class Roll:
    id: int | None = None
    name: str = ""
    date: str = ""
    note: str | None = None
    camera_id: int | None = None
    iso: int = 0
    push: str | None = None          # push/pull stops, e.g. "+1" or "-1/3"
    format: FilmFormat = FilmFormat.MM35
    archived: bool = False
    unloaded: str | None = None
    developed: str | None = None

    @property
    def latest_date(self) -> str:
        """Most advanced processing date: developed, else unloaded, else loaded."""
        return self.developed or self.unloaded or self.date

    def __post_init__(self):
        self.format = FilmFormat.from_value(self.format)
        self.archived = bool(self.archived)
        if self.iso is None:
            self.iso = 0


@dataclass
class Frame:
    id: int | None = None
    roll_id: int | None = None
    count: int = 1
    date: str = ""
    lens_id: int | None = None
    shutter: str = ""
    aperture: str = ""
    note: str | None = None
    location: str | None = None      # "lat lon" in decimal degrees
    focal_length: int | None = None
    exposure_comp: str | None = None
    no_of_exposures: int = 1
    flash_used: bool = False
    flash_power: str | None = None
    flash_comp: str | None = None
    frame_size: str | None = None
    filter_id: int | None = None
    metering_mode: str | None = None

    def __post_init__(self):
        self.flash_used = bool(self.flash_used)
        if self.no_of_exposures is None:
            self.no_of_exposures = 1


@dataclass
class Mountable:
    camera_id: int = 0
    lens_id: int = 0
