class ConfigurationError(ValueError):
    """Raised when the stack cannot be assembled from the given configuration.

    Always raised synchronously while constructing the app, before any
    resource is added for the offending input.
    """
