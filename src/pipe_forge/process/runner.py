"""
子进程执行：整块写入 stdin，整块捕获 stdout / stderr。

一次 ``run_process()`` 调用启动一个子进程并阻塞到它结束：

- 写线程：把输入整块写入子进程 stdin，写完后关闭 stdin
- 读线程：持续读取子进程 stderr
- 调用线程：持续读取子进程 stdout

三个流并发处理，子进程在 stdin 缓冲区写满、尚未开始输出时不会死锁。
两个线程都 join 之后才调用 wait()，此后本阶段才算完成。

已知限制：输出全部缓存在内存中，没有超时，也没有取消机制。
一个挂起的子进程会让调用方无限期阻塞。
"""

from __future__ import annotations

import logging
import subprocess
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessOutput:
    """
    子进程的原始输出。

    属性:
        returncode: 退出码（被信号终止时为负数）
        stdout: 捕获的标准输出
        stderr: 捕获的标准错误
        io_error: 写入 stdin 时发生的 I/O 错误（BrokenPipe 除外）
    """

    returncode: int
    stdout: bytes
    stderr: bytes
    io_error: OSError | None = None


def run_process(
    argv: Sequence[str],
    stdin: bytes = b"",
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ProcessOutput:
    """
    运行一个子进程并等待其结束。

    参数:
        argv: 程序名 + 参数列表，不经过 shell 解释，程序名按 PATH 查找
        stdin: 写入子进程标准输入的字节
        cwd: 工作目录（None 表示继承当前目录）
        env: 完整的环境变量（None 表示继承当前进程环境）

    返回:
        ProcessOutput 实例

    异常:
        OSError: 启动失败（程序不存在、没有执行权限、cwd 不存在等）
    """
    proc = subprocess.Popen(
        list(argv),
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=cwd,
        env=dict(env) if env is not None else None,
    )

    io_errors: list[OSError] = []
    stderr_chunks: list[bytes] = []

    writer = threading.Thread(
        target=_feed_stdin,
        args=(proc.stdin, stdin, io_errors),
        name=f"pipe-forge-stdin-{proc.pid}",
        daemon=True,
    )
    drainer = threading.Thread(
        target=_drain,
        args=(proc.stderr, stderr_chunks),
        name=f"pipe-forge-stderr-{proc.pid}",
        daemon=True,
    )
    writer.start()
    drainer.start()

    try:
        stdout = proc.stdout.read() if proc.stdout is not None else b""
    finally:
        writer.join()
        drainer.join()
        if proc.stdout is not None:
            proc.stdout.close()
        if proc.stderr is not None:
            proc.stderr.close()
        returncode = proc.wait()

    logger.debug(
        "进程 %s（pid=%d）退出码 %d：stdin %d 字节，stdout %d 字节",
        argv[0] if argv else "",
        proc.pid,
        returncode,
        len(stdin),
        len(stdout),
    )

    return ProcessOutput(
        returncode=returncode,
        stdout=stdout,
        stderr=b"".join(stderr_chunks),
        io_error=io_errors[0] if io_errors else None,
    )


def _feed_stdin(pipe: IO[bytes] | None, data: bytes, errors: list[OSError]) -> None:
    """写线程：写入全部输入后关闭 stdin。"""
    if pipe is None:
        return
    try:
        if data:
            pipe.write(data)
    except BrokenPipeError:
        # 子进程没有读完输入就退出了（例如 echo），不算失败
        pass
    except OSError as e:
        errors.append(e)
    finally:
        try:
            pipe.close()
        except BrokenPipeError:
            pass
        except OSError as e:
            errors.append(e)


def _drain(pipe: IO[bytes] | None, chunks: list[bytes]) -> None:
    """读线程：读取全部 stderr。"""
    if pipe is None:
        return
    chunks.append(pipe.read())
