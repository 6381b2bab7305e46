"""Domain exceptions raised by the contact import services."""


class ContactImportError(Exception):
    """Base class for import pipeline failures."""


class ContactNotFoundError(ContactImportError):
    def __init__(self, contact_id) -> None:
        self.contact_id = contact_id
        super().__init__(f"Contact {contact_id} not found")


class ImportTransactionError(ContactImportError):
    """The import transaction could not be opened or committed.

    Distinct from row-level failures, which are reported inside the
    ImportOutcome and never raised.
    """
