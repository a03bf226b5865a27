"""
Custom exception classes for the Moses story companion.

Provider failures are normally caught and logged where they happen; these
exceptions carry domain errors up to the API layer, which maps them to HTTP
status codes.
"""


class CompanionBaseException(Exception):
    """
    Base exception class for all application-specific exceptions.
    """

    def __init__(self, message: str, error_code: str = None):
        """
        Initialize the base exception.

        Args:
            message (str): Human-readable error message.
            error_code (str, optional): Machine-readable error code.
        """
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class ConfigurationError(CompanionBaseException):
    """
    Raised when required configuration is missing for a provider call.
    """
    pass


class StoryNotFoundError(CompanionBaseException):
    """
    Raised when a requested story is not in the story table.
    """
    pass


class ChatbotError(CompanionBaseException):
    """
    Raised when a chat message cannot be processed (bad index, wrong role).
    """
    pass


class SpeechGenerationError(CompanionBaseException):
    """
    Raised by the speech service when the provider call fails.
    """
    pass


class VideoGenerationError(CompanionBaseException):
    """
    Raised by the video service when a generation job fails or times out.
    """
    pass


class NoteNotFoundError(CompanionBaseException):
    """
    Raised when a note id is not present in the session's notes.
    """
    pass


class QuizError(CompanionBaseException):
    """
    Raised when submitted quiz answers do not match the quiz.
    """
    pass


class WidgetBusyError(CompanionBaseException):
    """
    Raised when a widget already has a request in flight for the session.
    """

    def __init__(self, widget: str):
        super().__init__(f"{widget} request already in progress", error_code="BUSY")
        self.widget = widget
