"""User management and authentication services for REST Academy."""
