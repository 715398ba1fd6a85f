"""调用方上下文与归属范围

CallerContext 由外部身份提供方逐请求给出，核心层原样信任；
OwnerScope 描述一次操作可见的归属者集合：单个 owner 或不受限。
"""

from pydantic import BaseModel, ConfigDict, Field


class CallerContext(BaseModel):
    """调用方上下文"""

    model_config = ConfigDict(frozen=True)

    caller_id: str = Field(description="调用方标识")
    is_privileged: bool = Field(default=False, description="是否可访问他人任务（管理员角色）")


class OwnerScope(BaseModel):
    """归属范围 -- owner_id 为 None 表示不受限"""

    model_config = ConfigDict(frozen=True)

    owner_id: str | None = Field(default=None, description="限定的归属者标识")

    @classmethod
    def for_owner(cls, owner_id: str) -> "OwnerScope":
        return cls(owner_id=owner_id)

    @classmethod
    def unrestricted(cls) -> "OwnerScope":
        return cls(owner_id=None)

    @property
    def is_unrestricted(self) -> bool:
        return self.owner_id is None
