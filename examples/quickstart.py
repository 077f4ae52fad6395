"""
Pipe Forge 快速上手示例。

演示最基本的用法：命令模板、流水线、绑定输入、文件输入和错误处理。

运行方式：
    python examples/quickstart.py

只需要系统中有 echo、grep、wc、tr 等常见命令。
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from pipe_forge import Cmd, Dump, Pipe, PipeWith, Read, Runner

CRAWL = """
A long time ago, in a galaxy far, far away....

It is a period of civil war. Rebel
spaceships, striking from a hidden
base, have won their first victory
against the evil Galactic Empire.
"""


def main() -> None:
    echo = Cmd("echo")
    grep = Cmd("grep")
    wc = Cmd("wc")
    upper = Cmd("tr", "[:lower:]", "[:upper:]")

    # ===== 场景 1：单个命令 =====
    print("=" * 60)
    print("场景 1：单个命令    $ echo Hi there!!")
    print("=" * 60)
    print(echo("Hi there!!"))

    # ===== 场景 2：管道 =====
    print("=" * 60)
    print("场景 2：管道    $ echo Hi there!! | grep -o Hi | wc -w")
    print("=" * 60)
    print(Pipe(echo("Hi there!!"), grep("-o", "Hi"), wc("-w")))

    # 也可以用 | 连接
    print(echo("Hi there!!") | grep("-o", "Hi") | wc("-w"))

    # ===== 场景 3：绑定输入 =====
    print("=" * 60)
    print("场景 3：绑定输入")
    print("=" * 60)
    print(PipeWith(CRAWL, grep("far"), upper()))

    # ===== 场景 4：文件和流 =====
    print("=" * 60)
    print("场景 4：文件和流    $ cat crawl.txt | grep far | tr ...")
    print("=" * 60)
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "crawl.txt"
        path.write_text(CRAWL, encoding="utf-8")

        print(Pipe(Dump(path), grep("far"), upper()))

        with open(path, "rb") as f:
            print(Pipe(Read(f), grep("Rebel"), wc("-l")))

        grep_far = Runner("grep", "far")
        print(grep_far(str(path)))

    # ===== 场景 5：失败处理 =====
    print("=" * 60)
    print("场景 5：失败处理")
    print("=" * 60)
    output, error = Pipe(echo("nothing here"), grep("far"), upper()).run()
    if error is not None:
        print(f"失败阶段：{error.stage_name}")
        print(f"错误信息：\n{error}")
        print(f"捕获的输出：{output!r}")

    # 纯文本访问在失败时返回空字符串
    print(repr(Pipe(echo("nothing here"), grep("far")).text()))


if __name__ == "__main__":
    main()
