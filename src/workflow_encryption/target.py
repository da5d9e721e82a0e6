"""Selection of the parts of a value that get encrypted."""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


@dataclass(frozen=True)
class EncryptionTarget:
    """Either the whole value or named top-level fields of an object.

    Selection is shallow: a selected field is encrypted as a whole, and
    fields that are not selected pass through untouched even when they hold
    nested objects.

    Example:
        >>> EncryptionTarget.whole().is_whole
        True
        >>> EncryptionTarget.of_fields("email", "ssn").fields
        ('email', 'ssn')
    """

    fields: Optional[Tuple[str, ...]] = None

    @classmethod
    def whole(cls) -> "EncryptionTarget":
        return WHOLE_VALUE

    @classmethod
    def of_fields(cls, *fields: str) -> "EncryptionTarget":
        return cls(fields=tuple(fields))

    @classmethod
    def from_fields(cls, fields: Optional[Iterable[str]]) -> "EncryptionTarget":
        """Build a target from an optional field list; None means whole value."""
        if fields is None:
            return WHOLE_VALUE
        return cls(fields=tuple(fields))

    @property
    def is_whole(self) -> bool:
        return self.fields is None


WHOLE_VALUE = EncryptionTarget()
