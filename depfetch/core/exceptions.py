"""统一异常体系

所有业务异常继承 DepFetchError，替代散落的 ValueError / RuntimeError。
CLI 层可据此输出带错误码的友好提示。

本地文件系统错误（权限、磁盘满）不做包装，以内置 OSError 原样抛出。
"""

from __future__ import annotations


class DepFetchError(Exception):
    """框架基础异常"""

    code: str = "UNKNOWN"

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigError(DepFetchError):
    """配置文件或仓库清单缺失、内容无效"""

    code = "CONFIG_ERROR"


class ValidationError(DepFetchError):
    """输入数据校验失败"""

    code = "VALIDATION_ERROR"

    def __init__(self, message: str, details: list[str] | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class FetchError(DepFetchError):
    """制品拉取失败的公共基类"""

    code = "FETCH_ERROR"


class MissingArtifactError(FetchError):
    """预期已存在于本地/镜像中的制品文件缺失"""

    code = "MISSING_ARTIFACT"

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class TransportError(FetchError):
    """网络传输失败（DNS、连接、非 2xx 响应）"""

    code = "TRANSPORT_ERROR"

    def __init__(self, message: str, uri: str = "", status: int | None = None) -> None:
        super().__init__(message)
        self.uri = uri
        self.status = status


class InsecureTransportError(FetchError):
    """无法为 URI 建立安全通道，且策略禁止降级为明文"""

    code = "INSECURE_TRANSPORT"

    def __init__(self, message: str, uri: str = "") -> None:
        super().__init__(message)
        self.uri = uri


class VerificationError(FetchError):
    """安全仓库的签名/元数据校验失败，不回退到未校验下载"""

    code = "VERIFICATION_ERROR"

    def __init__(self, message: str, package_id: str = "") -> None:
        super().__init__(message)
        self.package_id = package_id
