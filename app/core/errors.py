"""
Error types raised while processing an interest list submission.

Each error carries a ``kind`` tag so log lines can tell a malformed body from a
missing API key, even though both end up as the same generic 500 for the caller.
Only validation errors are ever shown to the submitter verbatim.
"""


class InterestListError(Exception):
    """Base class for all submission processing errors"""
    kind = "unexpected"


class BodyDecodeError(InterestListError):
    """The request body could not be decoded for its declared content type"""
    kind = "decoding"


class SubmissionValidationError(InterestListError):
    """A required field is missing or the email address is malformed"""
    kind = "validation"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class CrmConfigurationError(InterestListError):
    """CRM credentials are not configured"""
    kind = "configuration"


class CrmRequestError(InterestListError):
    """The CRM answered with a non-success status or could not be reached"""
    kind = "upstream"

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code
