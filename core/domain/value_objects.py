"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum

MACHINE_HASH_LENGTH = 8


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


@dataclass(frozen=True)
class Email(ValueObject):
    """Email value object with validation."""

    value: str

    def __post_init__(self):
        """Validate email format."""
        if not self.value or "@" not in self.value:
            raise ValueError(f"Invalid email address: {self.value}")

    def __str__(self) -> str:
        """Return email as string."""
        return self.value


@dataclass(frozen=True)
class MachineId(ValueObject):
    """Identifier of the installation a license is bound to."""

    value: str

    def __post_init__(self):
        """Validate machine identifier."""
        if not self.value or len(self.value.strip()) == 0:
            raise ValueError("Machine identifier cannot be empty")
        if len(self.value) < MACHINE_HASH_LENGTH:
            raise ValueError(
                f"Machine identifier must be at least {MACHINE_HASH_LENGTH} characters"
            )
        if len(self.value) > 500:
            raise ValueError("Machine identifier too long")

    @property
    def hash(self) -> str:
        """
        Return the machine hash embedded in license keys.

        Upper-casing comes first: it may expand a character (``ß`` to ``SS``),
        and the hash must stay exactly MACHINE_HASH_LENGTH characters.
        """
        return self.value.upper()[:MACHINE_HASH_LENGTH]

    def __str__(self) -> str:
        """Return identifier as string."""
        return self.value


class LicenseType(Enum):
    """Entitlement duration class."""

    MONTHLY = "M"
    YEARLY = "Y"
    PERPETUAL = "P"

    def __str__(self) -> str:
        """Return license type as string."""
        return self.value


class OrderStatus(Enum):
    """Order status value object."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value
