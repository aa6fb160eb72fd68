"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class MissingAPIKeyError(DomainException):
    """No generative AI credential is configured"""

    def __init__(self, message: str = "Gemini API key not configured"):
        super().__init__(message)


class InvalidResponseError(DomainException):
    """Generative AI endpoint returned an unusable response"""

    pass


class GeminiAPIError(InvalidResponseError):
    """Generative AI endpoint answered with a non-200 status"""

    def __init__(self, status_code: int):
        super().__init__(f"Gemini API error (status code: {status_code})")
        self.status_code = status_code


class ParsingFailedError(DomainException):
    """Response envelope lacks the expected text field"""

    pass


class LocationNotFoundError(DomainException):
    """No postal code could be resolved for a location"""

    def __init__(self, message: str = "Unable to determine location information"):
        super().__init__(message)


class InvalidJSONFormatError(DomainException):
    """Model output is not the expected ranking JSON"""

    def __init__(self, details: str):
        super().__init__(f"Invalid JSON format: {details}")
        self.details = details


class MaxRetriesExceededError(DomainException):
    """Ranking did not succeed within the retry budget"""

    def __init__(self, attempts: int):
        super().__init__(f"Maximum retry attempts exceeded ({attempts})")
        self.attempts = attempts


class CatalogError(DomainException):
    """Vehicle catalog is missing or malformed"""

    pass


class InvalidTaxInfoError(DomainException):
    """Manually entered county or tax rate is not acceptable"""

    pass
