"""通用响应模型与字段命名约定。"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """对外字段使用 camelCase，入参同时接受 camelCase 与 snake_case。"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """全局异常处理器返回的错误结构。"""

    message: str
    code: int
    data: Optional[Any] = None
