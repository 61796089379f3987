class HubError(Exception):
    """Base error caught at the handler boundary and rendered as ``{"error": message}``."""

    error_code = "internal_error"

    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        if error_code:
            self.error_code = error_code
        super().__init__(message)


class GatewayNotConfiguredError(HubError):
    error_code = "configuration_missing"

    def __init__(self, message: str = "Evolution API not configured"):
        super().__init__(message)


class ConversationNotFoundError(HubError):
    error_code = "not_found"


class GatewayDeliveryError(HubError):
    error_code = "upstream_failure"

    def __init__(self, message: str = "Failed to send message", status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class InvalidUploadError(HubError):
    error_code = "input_invalid"


class UnknownSettingError(HubError):
    error_code = "input_invalid"
