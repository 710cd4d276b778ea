"""Exceptions raised while seeding a table from a CSV file."""


class SeederError(Exception):
    """Base class for every seeder failure."""


class ConfigurationError(SeederError):
    """Filename, table or model is missing or cannot be resolved."""


class FileAccessError(SeederError):
    """The CSV file does not exist or is not readable."""


class MappingError(SeederError):
    """No mapped column exists on the destination table."""


class InsertionError(SeederError):
    """A chunk could not be inserted."""
