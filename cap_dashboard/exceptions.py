"""
Exception types raised by the cap table dashboard.

Every error the pages can surface derives from CapTableError so a page can
turn it into a notice without knowing which layer raised it.
"""

from typing import Any, Dict, Optional


class CapTableError(Exception):
    """Base exception for all dashboard errors"""
    title = "Error"

    def __init__(self, message: str, code: str = "CAP_TABLE_ERROR", details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(CapTableError):
    """Raised when required settings are missing"""
    title = "Configuration error"

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(message, "CONFIG_ERROR", {"setting": setting} if setting else None)
        self.setting = setting


class ValidationError(CapTableError):
    """Raised before any network call when user input is rejected"""

    def __init__(self, title: str, message: str, field: Optional[str] = None):
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else None)
        self.title = title
        self.field = field


class QueryError(CapTableError):
    """Raised when a read or write against the data store fails"""
    title = "Database error"

    def __init__(self, message: str, table: Optional[str] = None, operation: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "QUERY_ERROR", details)
        self.table = table
        self.operation = operation


class StorageError(CapTableError):
    """Raised when an object storage upload fails"""
    title = "Upload failed"

    def __init__(self, message: str, bucket: Optional[str] = None, key: Optional[str] = None):
        super().__init__(message, "STORAGE_ERROR", {"bucket": bucket, "key": key})
        self.bucket = bucket
        self.key = key


class AnalysisError(CapTableError):
    """Raised when the remote pitch-deck analysis call fails"""
    title = "Upload failed"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, "ANALYSIS_ERROR", {"status_code": status_code})
        self.status_code = status_code


class AuthenticationError(CapTableError):
    """Raised when an operation needs a signed-in session"""
    title = "Authentication required"

    def __init__(self, message: str = "Please log in to continue."):
        super().__init__(message, "AUTH_ERROR")
