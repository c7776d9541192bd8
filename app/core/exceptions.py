"""Service-level exceptions, translated to HTTP errors by the routers"""


class AppError(Exception):
    """Base class for application errors"""


class NotFoundError(AppError):
    """Requested record does not exist"""


class ValidationError(AppError):
    """Input rejected before reaching the store"""


class UpstreamError(AppError):
    """External source or gateway failed"""
