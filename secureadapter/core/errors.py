from typing import Optional

class AdapterError(Exception):
    """Base class for every error raised by the adapter or its backend client."""

class InvalidAuthorization(AdapterError):
    """The registry authorization header is not a decodable Basic credential."""

class InvalidScanHandle(AdapterError):
    """The scan response ID was not produced by this adapter."""

class ScanRequestIDNotFound(AdapterError):
    def __init__(self, message: str = "scan request ID not found"):
        super().__init__(message)

class VulnerabilityReportNotReady(AdapterError):
    def __init__(self, message: str = "vulnerability report not ready"):
        super().__init__(message)

# Backend client errors. The message is the one reported by Secure, unchanged.

class SecureError(AdapterError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

class RegistryAlreadyExists(SecureError):
    pass

class ImageNotFound(SecureError):
    pass

class ReportNotReady(SecureError):
    pass

class RegistrationFailed(SecureError):
    pass

class SubmissionFailed(SecureError):
    pass

class BackendUnavailable(SecureError):
    pass
