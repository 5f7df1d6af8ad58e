"""Account workflow errors. Each carries the HTTP status the API reports it with."""


class AccountError(Exception):
    status_code = 400
    default_message = "Request failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AccountError):
    status_code = 404
    default_message = "Not found."


class NotVerifiedError(AccountError):
    status_code = 400
    default_message = "User not verified. Please register first."


class InvalidCodeError(AccountError):
    """Wrong code; the caller may retry until the attempt limit is reached."""
    status_code = 400
    default_message = "Invalid OTP."


class ExpiredCodeError(AccountError):
    status_code = 400
    default_message = "OTP expired. Please request a new one."


class RateLimitError(AccountError):
    """Attempt limit exceeded; the code was discarded and the flow must be restarted."""
    status_code = 429
    default_message = "Too many invalid attempts. Please try again later."


class ConflictError(AccountError):
    status_code = 409
    default_message = "User already exists with this email or phone."


class InvalidCredentialsError(AccountError):
    status_code = 401
    default_message = "Invalid password."


class DeliveryError(AccountError):
    """SMS provider rejected or did not answer; already persisted state is kept."""
    status_code = 502
    default_message = "Failed to send OTP SMS."
