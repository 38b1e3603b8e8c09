"""Constants for REST Academy.

This module centralizes all magic numbers and default values used throughout the application.
"""

# Field constraints
NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 50
EMAIL_MAX_LENGTH = 100
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
MAX_AGE = 150
DEPARTMENT_MIN_LENGTH = 2
DEPARTMENT_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100

# Pagination
DEFAULT_PAGE = 0
DEFAULT_PAGE_SIZE = 10
DEFAULT_SORT_FIELD = "id"
DEFAULT_SORT_DIRECTION = "asc"
SORT_DIRECTIONS = ("asc", "desc")

# Sortable fields: public (camelCase) name -> column attribute name.
# snake_case spellings are accepted too.
SORT_FIELDS = {
    "id": "id",
    "firstName": "first_name",
    "lastName": "last_name",
    "email": "email",
    "age": "age",
    "department": "department",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}
SORT_FIELDS.update({column: column for column in list(SORT_FIELDS.values())})

# Service metadata (health/info endpoints)
SERVICE_NAME = "REST Academy API"
SERVICE_VERSION = "1.0.0"
