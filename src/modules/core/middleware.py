import uuid
from contextvars import ContextVar
from typing import Callable

import structlog
from django.http import HttpRequest, HttpResponse

REQUEST_ID_HEADER = "X-Request-ID"

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")

logger = structlog.get_logger(__name__)


class CorrelationIdMiddleware:
    """Tag every log line of a request with a correlation id.

    The id comes from the ``X-Request-ID`` header when the client sends
    one, otherwise a UUID4 is generated.  It is bound into structlog's
    contextvars for the lifetime of the request and echoed back on the
    response.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        cid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = correlation_id_var.set(cid)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=cid)
        log = logger.bind(method=request.method, path=request.path)
        log.info("request.started")

        try:
            response = self.get_response(request)
        finally:
            correlation_id_var.reset(token)

        log.info("request.finished", status_code=response.status_code)
        response[REQUEST_ID_HEADER] = cid
        return response
