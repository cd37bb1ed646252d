class GenerationError(Exception):
    """Base error for the blog generation pipeline."""


class GenerationNotFound(GenerationError):
    """No writable (non-terminal) generation job exists for the blog."""


class BlogNotFound(GenerationError):
    """The blog referenced by a generation job does not exist."""


class GenerationNotClaimable(GenerationError):
    """The job is missing or has already left PENDING, so another run owns it."""
