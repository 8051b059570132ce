"""异常处理模块：定义统一的业务异常与响应格式。"""

from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.packages.portal.core.constants import MSG_INTERNAL_ERROR, MSG_INVALID_INPUT, MSG_UNAUTHORIZED
from app.packages.portal.core.logger import logger


class AppException(HTTPException):
    """携带统一响应结构的业务异常，方便在全局处理中转换响应体。"""

    def __init__(self, msg: str, code: int = status.HTTP_400_BAD_REQUEST, data=None) -> None:
        super().__init__(status_code=code, detail=msg)
        self.data = data


class BadRequestError(AppException):
    """请求内容不合法（字段缺失、格式错误、引用不存在等），在任何写入之前抛出。"""

    def __init__(self, msg: str = MSG_INVALID_INPUT, data=None) -> None:
        super().__init__(msg, status.HTTP_400_BAD_REQUEST, data)


class UnauthorizedError(AppException):
    def __init__(self, msg: str = MSG_UNAUTHORIZED, data=None) -> None:
        super().__init__(msg, status.HTTP_401_UNAUTHORIZED, data)


class NotFoundError(AppException):
    def __init__(self, msg: str = "Not found", data=None) -> None:
        super().__init__(msg, status.HTTP_404_NOT_FOUND, data)


def _payload(message: Any, code: int, data: Any = None) -> dict:
    return {"message": message, "code": code, "data": data}


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:  # pragma: no cover - framework glue
    """将 FastAPI 的 ``HTTPException`` 转换为统一响应格式。"""
    return JSONResponse(
        status_code=exc.status_code,
        content=_payload(exc.detail, exc.status_code, getattr(exc, "data", None)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # pragma: no cover - framework glue
    """请求体验证失败统一返回 400，并附带字段级错误明细。"""

    def _serialize(obj: Any) -> Any:
        if isinstance(obj, Exception):
            return str(obj)
        if isinstance(obj, dict):
            return {key: _serialize(value) for key, value in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [_serialize(item) for item in obj]
        return obj

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_payload(MSG_INVALID_INPUT, status.HTTP_400_BAD_REQUEST, _serialize(exc.errors())),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # pragma: no cover - framework glue
    """兜底处理：将未捕获异常转换为标准的 500 响应结构。"""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_payload(MSG_INTERNAL_ERROR, status.HTTP_500_INTERNAL_SERVER_ERROR),
    )
