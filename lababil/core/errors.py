"""Error taxonomy for the dashboard core.

Every error carries a human-readable ``message`` suitable for showing to the
cashier or admin, and the HTTP status the API layer answers with.
"""


class LababilError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LababilError):
    """Bad input; nothing was changed"""


class EmptyNameError(ValidationError):
    pass


class DuplicateError(ValidationError):
    status_code = 409


class NotFoundError(LababilError):
    """A referenced entity is missing, e.g. a product deleted mid-transaction"""
    status_code = 404


class PersistenceError(LababilError):
    """The remote store rejected or failed a write; safe to retry"""
    status_code = 503


class ImportFormatError(LababilError):
    """Malformed snapshot; the import was aborted and prior state kept"""
    status_code = 422


class PermissionDeniedError(LababilError):
    status_code = 403
