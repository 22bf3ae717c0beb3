"""Enumerations shared across the alert pipeline."""

from enum import Enum, IntEnum


class Survey(Enum):
    """An astronomical survey producing alerts."""

    ZTF = "ZTF"
    LSST = "LSST"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.upper():
                    return member
        return None


class ProgramId(IntEnum):
    """Data-access program of an alert; partnership and Caltech are ZTF only."""

    PUBLIC = 1
    PARTNERSHIP = 2
    CALTECH = 3

    def __str__(self) -> str:
        return str(self.value)

    @property
    def serialized(self) -> str:
        """The kebab-case name used when serializing."""
        return self.name.lower().replace("_", "-")

    @classmethod
    def default(cls) -> "ProgramId":
        return cls.PUBLIC

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            text = value.strip().lower()
            for member in cls:
                if text in (member.serialized, str(member.value)):
                    return member
        return None