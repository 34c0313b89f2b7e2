"""
Catalog error taxonomy.

Services raise these on the first violation they find. The HTTP layer maps
``status_code`` onto the response; nothing inside the engine recovers from them.
"""


class CatalogError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(CatalogError):
    """Referenced attribute, category, product or binding does not exist"""
    status_code = 404


class ValidationError(CatalogError):
    """Input is malformed or violates the category schema"""
    status_code = 400


class ConflictError(CatalogError):
    """Duplicate name/SKU/unique value, or a definition that is still referenced"""
    status_code = 409
