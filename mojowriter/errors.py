"""Exception types for Mojo Writer."""


class MojoWriterError(Exception):
    """Base exception for Mojo Writer."""
    pass


class ConfigError(MojoWriterError):
    """Raised when configuration values are missing or invalid."""
    pass


class ProjectError(MojoWriterError):
    """Raised when a project cannot be read, written or validated."""
    pass


class GenerationError(MojoWriterError):
    """Raised when the generation provider fails to produce a result."""

    user_message = "The AI request failed. Please try again."

    def __init__(self, message: str = "", *, user_message: str = None):
        super().__init__(message or self.user_message)
        if user_message:
            self.user_message = user_message


class ProviderRateLimited(GenerationError):
    """The provider rejected the request because of rate limiting."""

    user_message = "The AI service is receiving too many requests. Please wait a moment and try again."


class ProviderAuthInvalid(GenerationError):
    """The provider rejected the configured credentials."""

    user_message = "The API key was rejected. Please check your API key in the settings."


class ProviderGenericFailure(GenerationError):
    """Any other provider or parsing failure."""
    pass
