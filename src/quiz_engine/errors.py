"""
Exceptions for quiz-engine

Configuration problems inside readable data never raise; they degrade and
are reported as diagnostics. These exceptions cover the rest.
"""


class QuizError(Exception):
    """Base exception for quiz engine errors."""
    pass


class ConfigurationError(QuizError):
    """Quiz configuration could not be read at all."""
    pass


class SequenceError(QuizError):
    """Invalid move of the question sequencer."""
    pass


class SelectionError(QuizError):
    """Invalid option selection."""
    pass


class RestartDisabledError(QuizError):
    """Restart requested on a quiz that doesn't allow it."""
    pass


class StorageError(QuizError):
    """Persistence backend failed."""
    pass


class StorageAuthenticationError(StorageError):
    """Persistence backend credentials missing or rejected."""
    pass
