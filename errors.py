class CatalogError(Exception):
    pass


class ValidationError(CatalogError):
    """A record failed a declared constraint on create or update."""

    def __init__(self, message: str, errors=None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(CatalogError):
    pass
