class UserTableError(Exception):
    """Base exception for user table population errors."""
    pass

class ConfigurationError(UserTableError):
    """Raised when the population configuration is invalid."""
    pass

class UsageError(UserTableError):
    """Raised when the job is invoked with invalid arguments."""
    pass

class InvalidTableError(UsageError):
    """Raised when one or more requested tables are not in the registry."""

    def __init__(self, invalid_tables):
        self.invalid_tables = list(invalid_tables)
        super().__init__(f"Invalid tables provided: {','.join(self.invalid_tables)}")

class TablesWithActorSchemeError(UsageError):
    """Raised when a table list is given while the actor table is in use."""

    def __init__(self):
        super().__init__(
            'The "tables" parameter can\'t be provided when the actor table is being used.'
        )

class UnsupportedDatabaseError(UserTableError):
    """Raised when the database dialect has no conflict-tolerant insert."""
    pass

class CursorStalledError(UserTableError):
    """Raised when a page fetch does not move the scan cursor forward."""
    pass
