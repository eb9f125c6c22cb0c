"""Custom exception classes."""


class AmugonnaException(Exception):
    """Base exception for the Amugonna application."""

    pass


class AuthenticationError(AmugonnaException):
    """Raised when the caller identity is missing or invalid."""

    pass


class InvalidRequestError(AmugonnaException):
    """Raised when a generation request has nothing to generate from."""

    pass


class RecipeNotFoundError(AmugonnaException):
    """Raised when a recipe does not exist or belongs to someone else."""

    pass


class GenerationError(AmugonnaException):
    """Base class for generation-layer faults.

    These never reach the HTTP layer: the recipe generator recovers from
    every one of them with the fallback recipe.
    """

    kind = "generation_failed"


class ServiceUnavailableError(GenerationError):
    """Raised on network/transport faults or when the call times out."""

    kind = "service_unavailable"


class GenerationServiceError(GenerationError):
    """Raised when the generation service answers with a well-formed error."""

    kind = "service_error"


class EmptyResponseError(GenerationError):
    """Raised when the generation service succeeds but returns no content."""

    kind = "empty_response"


class MalformedOutputError(GenerationError):
    """Raised when the generated text cannot be parsed as a JSON object."""

    kind = "malformed_output"


class CatalogError(AmugonnaException):
    """Raised when the ingredient catalog cannot be read or written."""

    pass


class PersistenceError(AmugonnaException):
    """Raised when a recipe cannot be durably stored."""

    pass
