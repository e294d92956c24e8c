# pocketbook/observability.py
import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request, call_next):
        start = time.perf_counter()

        response = await call_next(request)
        ms = (time.perf_counter() - start) * 1000

        # set by get_current_user; absent on public routes and auth failures
        user_id = getattr(request.state, "user_id", None)
        logging.getLogger("pb.req").info(
            "%s %s -> %s in %.1fms user=%s",
            request.method,
            request.url.path,
            response.status_code,
            ms,
            user_id,
        )
        return response
