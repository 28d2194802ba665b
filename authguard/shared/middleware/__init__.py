# authguard/shared/middleware/__init__.py

from authguard.shared.middleware.error_handler_middleware import ErrorHandlerMiddleware, register_exception_handlers
from authguard.shared.middleware.logging_middleware import AsyncRequestLoggingMiddleware
from authguard.shared.middleware.security_headers_middleware import AsyncSecurityHeadersMiddleware

# Export all for easy imports
__all__ = [
    "AsyncRequestLoggingMiddleware",
    "AsyncSecurityHeadersMiddleware",
    "ErrorHandlerMiddleware",
    "register_exception_handlers",
]
