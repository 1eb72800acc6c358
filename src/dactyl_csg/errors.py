class ConfigurationError(ValueError):
    """
    Raised when a keyboard configuration cannot produce a case.

    Always raised while the configuration is being built, before any geometry exists.
    """


class DegenerateGeometryError(ValueError):
    """
    Raised when a hull is requested over fewer than two shapes.
    """
