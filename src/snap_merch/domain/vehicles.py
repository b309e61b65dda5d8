"""Domain models for vehicle identification."""

from dataclasses import dataclass

from pydantic import BaseModel


@dataclass(frozen=True)
class VehicleColor:
    """Primary exterior paint color."""

    name: str
    hex: str


@dataclass(frozen=True)
class VehicleIdentity:
    """Identified (or vendor-edited) vehicle snapshot."""

    year: str
    make: str
    model: str
    trim: str
    color: VehicleColor

    @property
    def display_name(self) -> str:
        """Return a short "<year> <make> <model>" label."""
        return f"{self.year} {self.make} {self.model}".strip()


PLACEHOLDER_IDENTITY = VehicleIdentity(
    year="?",
    make="Unknown",
    model="Vehicle",
    trim="",
    color=VehicleColor(name="Unknown", hex="#666666"),
)


class ColorExtract(BaseModel):
    """Paint color returned by the identification model."""

    name: str
    hex: str

    def to_color(self) -> VehicleColor:
        return VehicleColor(name=self.name.strip(), hex=self.hex.strip())


class VehicleExtract(BaseModel):
    """Structured output for vehicle identification."""

    year: str
    make: str
    model: str
    trim: str
    color: ColorExtract

    def to_identity(self) -> VehicleIdentity:
        return VehicleIdentity(
            year=self.year.strip(),
            make=self.make.strip(),
            model=self.model.strip(),
            trim=self.trim.strip(),
            color=self.color.to_color(),
        )
