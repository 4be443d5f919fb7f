"""Exceptions raised by the dashboard services.

The lookup errors derive from ``KeyError`` and the validation error from
``ValueError`` so callers can keep handling them with the builtin types.
"""

from __future__ import annotations


class InvalidArgumentError(ValueError):
    """A submitted value cannot be accepted (non-finite temperature, bad unit)."""


class _LookupMessageError(KeyError):
    # KeyError.__str__ wraps the message in quotes; keep it readable for HTTP details.
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ReadingNotFoundError(_LookupMessageError):
    def __init__(self, reading_id: int) -> None:
        super().__init__(f"Temperature reading {reading_id} not found.")
        self.reading_id = reading_id


class FacilityNotFoundError(_LookupMessageError):
    def __init__(self, facility_id: int) -> None:
        super().__init__(f"Facility {facility_id} not found.")
        self.facility_id = facility_id
