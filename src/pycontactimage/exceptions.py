"""Custom exception hierarchy for pycontactimage."""

from __future__ import annotations


class ContactImageError(Exception):
    """Base exception for all pycontactimage errors."""


class ContactImageConfigError(ContactImageError):
    """Invalid or missing configuration."""


class RecordStoreError(ContactImageError):
    """The external record store rejected a lookup or save request.

    Raised as-is for failures without a dedicated subclass; ``code``
    then carries the raw store error code.
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
    ) -> None:
        self.code = code
        super().__init__(message)


class RecordPermissionDeniedError(RecordStoreError):
    """Access to the record store is not authorised.

    Terminal: the feature is switched off rather than retried.
    """


class RecordCommunicationError(RecordStoreError):
    """The record store could not be reached."""


class DuplicateRecordError(RecordStoreError):
    """An add was rejected because the record already exists."""


class RecordDataAccessError(RecordStoreError):
    """The record store failed to read or write its data."""
