"""原子落盘工具

缓存目录是唯一共享的可变资源，写入方绝不能让半写文件出现在最终路径上。
统一做法: 在目标同目录创建临时文件，写完后 os.replace 原子替换。
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from collections.abc import Iterator
from pathlib import Path


@contextlib.contextmanager
def atomic_target(path: Path) -> Iterator[Path]:
    """为 ``path`` 提供一个同目录临时文件，代码块正常结束后原子替换到目标

    用法:
        >>> with atomic_target(dest) as tmp:
        ...     transport.download(uri, tmp)

    代码块抛出任何异常时临时文件被删除、目标路径保持原状，异常原样上抛。
    同目录保证 rename 不跨文件系统，因此替换是原子的。
    """
    fd, tmp = tempfile.mkstemp(
        dir=str(path.parent), prefix=f".{path.name}.", suffix=".part",
    )
    os.close(fd)
    tmp_path = Path(tmp)
    try:
        yield tmp_path
        os.replace(tmp_path, path)
    except BaseException:
        # 取消（KeyboardInterrupt）同样不能留下残留文件，清理后继续上抛
        with contextlib.suppress(OSError):
            tmp_path.unlink()
        raise
