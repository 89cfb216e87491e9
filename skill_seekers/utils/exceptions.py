"""Custom exception hierarchy for the application."""


class SkillSeekersError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, is_retryable: bool = False) -> None:
        """Initialize exception.

        Args:
            message: Error message
            is_retryable: Whether the operation can be retried
        """
        super().__init__(message)
        self.message = message
        self.is_retryable = is_retryable


class ConfigurationError(SkillSeekersError):
    """Invalid scrape configuration or environment setup."""

    pass


class SourceFetchError(SkillSeekersError):
    """A required source (page, repository, PDF) could not be fetched."""

    pass


class ExtractionError(SkillSeekersError):
    """Content could not be extracted from a fetched source."""

    pass


class PackagingError(SkillSeekersError):
    """Skill package assembly or archiving error."""

    pass


class StorageError(SkillSeekersError):
    """Key-value store read or write error."""

    pass


class JobError(SkillSeekersError):
    """Job lifecycle error (unknown job, illegal transition)."""

    pass
