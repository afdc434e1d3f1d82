"""
Custom exceptions for the application
"""

class BaseAppException(Exception):
    """Base application exception"""
    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class ValidationError(BaseAppException):
    """Raised when request input fails validation"""
    def __init__(self, message: str, details: str = None, error_code: str = None):
        super().__init__(message, details)
        self.error_code = error_code


class BusinessLogicError(BaseAppException):
    """Raised when business logic constraints are violated"""
    pass


class DuplicateEntryError(BusinessLogicError):
    """Raised when an email is already on the waitlist"""
    pass


class DatabaseError(BaseAppException):
    """Raised when database operations fail"""
    pass
