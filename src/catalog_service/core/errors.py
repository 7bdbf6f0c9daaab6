class CatalogError(Exception):
    """Base class for catalog service errors"""


class ValidationError(CatalogError):
    """Request input is invalid; raised before the store or cache is touched"""


class NotFoundError(CatalogError):
    """The store has no matching row"""


class TransientInfraError(CatalogError):
    """Store, cache or queue unreachable or timed out"""


class SerializationError(CatalogError):
    """A cached payload could not be decoded"""
