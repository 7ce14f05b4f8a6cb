"""Auth-related enums."""

from enum import Enum


class Role(str, Enum):
    """
    User roles within an organization.

    - OWNER: Organization root, unrestricted task-status authority
    - MANAGER: Manages direct reports and the firms mapped to them
    - STAFF: Works the firms mapped to them
    - INDIVIDUAL: Single-person practice, always its own organization root
    """

    OWNER = "owner"
    MANAGER = "manager"
    STAFF = "staff"
    INDIVIDUAL = "individual"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class UserStatus(str, Enum):
    """Account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"
