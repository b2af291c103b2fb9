"""
Admin context passed explicitly to every service call and UI tab
"""
from dataclasses import dataclass, replace

from core.config import ADMIN_EMAIL, DEFAULT_LOCATION, LOCATIONS
from core.errors import ValidationError


def check_location(location: str) -> str:
    """Return the location if it is one of the two shops, else raise."""
    if location not in LOCATIONS:
        raise ValidationError(f"Unknown location {location!r}; expected one of {', '.join(LOCATIONS)}", "location")
    return location


def other_location(location: str) -> str:
    """The twin location of `location`."""
    check_location(location)
    return LOCATIONS[1] if location == LOCATIONS[0] else LOCATIONS[0]


@dataclass(frozen=True)
class AdminContext:
    """Who is acting and which shop they are looking at."""
    admin_email: str
    location: str

    def __post_init__(self):
        check_location(self.location)

    def switch_location(self, location: str) -> "AdminContext":
        return replace(self, location=location)


def start_session(admin_email: str = None, location: str = None) -> AdminContext:
    """Build the context for a new admin panel session."""
    return AdminContext(admin_email=admin_email or ADMIN_EMAIL, location=location or DEFAULT_LOCATION)
