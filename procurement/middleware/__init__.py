"""HTTP middleware: request timeout and request ID.

Applied in procurement.main; last added = outermost.
"""

from procurement.middleware.request_id import RequestIDMiddleware
from procurement.middleware.timeout import TimeoutMiddleware

__all__ = ["RequestIDMiddleware", "TimeoutMiddleware"]
