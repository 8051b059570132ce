"""认证相关的请求模型。"""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """登录请求的字段校验规则；校验失败与凭证错误返回同一个 401。"""

    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1, max_length=128)
