"""Errors raised by the DashScope provider layer and caught by AIService."""


class TranslationError(Exception):
    """Provider or configuration failure; code names the category, status_code the HTTP status if any."""

    def __init__(self, message: str, code: str = None, details: dict = None, status_code: int = None):
        super().__init__(message)
        self.code = code
        self.details = details or {}
        self.status_code = status_code
