"""
Exceptions raised by the menu and offer services
"""


class MenuAdminError(Exception):
    """Base class for every error the admin services raise."""


class ValidationError(MenuAdminError):
    """Form input rejected before anything is written."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class NotFoundError(MenuAdminError):
    pass


class DuplicateItemError(MenuAdminError):
    """Two items with one name at one location, or an ambiguous twin lookup."""


class LocationMismatchError(MenuAdminError):
    """Records from different locations were mixed in one call."""
