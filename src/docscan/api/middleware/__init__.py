from .catchall import CatchAllExceptionMiddleware
from .request_size_limit import RequestSizeLimitMiddleware

__all__ = ["CatchAllExceptionMiddleware", "RequestSizeLimitMiddleware"]
