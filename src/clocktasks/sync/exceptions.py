"""同步层异常体系

核心引擎不抛异常；只有存储后端 I/O 失败会在同步层以下列异常暴露。
"""


class SyncError(Exception):
    """同步层基础异常"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            recoverable: 是否可通过重试或降级为仅本地存储恢复
        """
        super().__init__(message)
        self.recoverable = recoverable


class StorageProviderError(SyncError):
    """存储后端读写失败

    远端失败可降级为仅本地存储（recoverable=True）；本地失败不可恢复。
    """

    def __init__(self, provider: str, operation: str, original_error: Exception) -> None:
        """
        Args:
            provider: 后端角色（local / remote）
            operation: 失败的操作（load / save / clear）
            original_error: 原始异常
        """
        super().__init__(
            f"存储后端 {provider} {operation} 失败: {original_error}",
            recoverable=provider != "local",
        )
        self.provider = provider
        self.operation = operation
        self.original_error = original_error


class UnknownStorageBackendError(SyncError):
    """未知的存储后端名称"""

    def __init__(self, backend: str) -> None:
        super().__init__(f"未知存储后端: {backend}", recoverable=False)
        self.backend = backend
