"""Error taxonomy shared by services, adapters and the API."""


class RecipeCostingError(Exception):
    """Base class for application errors."""


class ValidationError(RecipeCostingError):
    """Input was rejected before any write happened."""


class ImportFormatError(ValidationError):
    """An import table is structurally unusable (missing columns, unreadable)."""


class NotFoundError(RecipeCostingError):
    """A referenced product code, recipe or menu does not exist."""


class PersistenceError(RecipeCostingError):
    """A row store operation failed."""
