"""TaskDesk 异常体系

领域错误（NotFound / AccessDenied）直接抛给服务层调用方，不重试。
存储层异常（aiosqlite.Error 等）不做包装，原样向上传播。
"""


class TaskDeskError(Exception):
    """TaskDesk 基础异常"""


class TaskNotFoundError(TaskDeskError):
    """目标任务不存在（或已被删除）"""

    def __init__(self, task_id: str) -> None:
        """
        Args:
            task_id: 请求的任务 ID
        """
        super().__init__(f"Task with id {task_id} does not exist")
        self.task_id = task_id


class TaskAccessDeniedError(TaskDeskError):
    """任务存在，但不在调用方的授权范围内

    错误消息不包含任务的任何信息，避免向非归属方泄露记录内容。
    """

    def __init__(self, task_id: str, caller_id: str) -> None:
        """
        Args:
            task_id: 请求的任务 ID（仅供服务端日志使用）
            caller_id: 调用方标识
        """
        super().__init__("You do not have access to this task")
        self.task_id = task_id
        self.caller_id = caller_id
