import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from config.settings import settings

logger = logging.getLogger(__name__)


def elapsed_ms(request: Request) -> int:
    """요청 시작 이후 경과 시간(ms). 미들웨어를 거치지 않은 요청이면 0"""
    start = getattr(request.state, "start", None)
    if start is None:
        return 0
    return int((time.perf_counter() - start) * 1000)


class TimingMiddleware(BaseHTTPMiddleware):
    """응답 헤더 X-Latency-Ms 추가 + 느린 집계 요청 경고"""

    def __init__(self, app, slow_request_ms: int = settings.SLOW_REQUEST_MS):
        super().__init__(app)
        self.slow_request_ms = slow_request_ms

    async def dispatch(self, request: Request, call_next):
        # 에러 핸들러도 같은 시작 시각으로 latency_ms 계산
        request.state.start = time.perf_counter()
        response = await call_next(request)
        latency_ms = elapsed_ms(request)
        response.headers["X-Latency-Ms"] = str(latency_ms)

        if latency_ms >= self.slow_request_ms:
            logger.warning(f"느린 요청: {request.method} {request.url.path} {latency_ms}ms")
        else:
            logger.debug(f"{request.method} {request.url.path} {latency_ms}ms")
        return response
