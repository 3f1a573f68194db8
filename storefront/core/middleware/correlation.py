import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware

CORRELATION_HEADER = 'x-correlation-id'

correlation_id_var: ContextVar[str] = ContextVar('correlation_id', default='-')


def get_correlation_id() -> str:
	return correlation_id_var.get()


class CorrelationIdFilter(logging.Filter):
	"""Adds `correlation_id` to every log record"""

	def filter(self, record):
		record.correlation_id = correlation_id_var.get()
		return True


class CorrelationIdMiddleware(BaseHTTPMiddleware):
	async def dispatch(self, request, call_next):
		cid = request.headers.get(CORRELATION_HEADER) or f"sf-{uuid.uuid4()}"
		request.state.correlation_id = cid
		token = correlation_id_var.set(cid)
		try:
			response = await call_next(request)
		finally:
			correlation_id_var.reset(token)
		response.headers[CORRELATION_HEADER] = cid
		return response
