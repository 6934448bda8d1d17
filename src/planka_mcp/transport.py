"""Stdio transport: newline-delimited UTF-8 lines in, lines out.

Reading goes through ``anyio.wrap_file`` so the blocking ``readline`` runs
in a worker thread and never stalls in-flight handlers. Stdout carries
protocol data only; diagnostics go to stderr via logging.
"""

from __future__ import annotations

import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from io import TextIOWrapper
from typing import BinaryIO, Protocol, TextIO

import anyio


class LineWriter(Protocol):
    async def write(self, data: str) -> None: ...


class AsyncFileWriter:
    """Writes and flushes each chunk to a wrapped text file."""

    def __init__(self, file: anyio.AsyncFile[str]) -> None:
        self._file = file

    async def write(self, data: str) -> None:
        await self._file.write(data)
        await self._file.flush()


async def _lines(file: anyio.AsyncFile[bytes]) -> AsyncIterator[bytes]:
    async for line in file:
        yield line


@asynccontextmanager
async def stdio_streams(
    stdin: BinaryIO | None = None,
    stdout: TextIO | None = None,
) -> AsyncIterator[tuple[AsyncIterator[bytes], LineWriter]]:
    """Yield ``(lines, writer)`` bound to the process's stdin/stdout.

    Input lines are raw bytes; decoding is left to the protocol layer so an
    undecodable line becomes a parse error for that line alone.
    """
    if stdin is None:
        stdin = sys.stdin.buffer
    if stdout is None:
        stdout = TextIOWrapper(sys.stdout.buffer, encoding="utf-8", newline="\n")

    reader = anyio.wrap_file(stdin)
    writer = AsyncFileWriter(anyio.wrap_file(stdout))
    yield _lines(reader), writer
