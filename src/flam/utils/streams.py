"""sequential byte streams for archive upload and download."""

import logging
import os
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ArchiveReader:
    """
    read side of an upload: a binary file consumed chunk by chunk.

    exposes read/seek/tell/fileno so httpx can size and rewind it while
    building a multipart body, and records when end of file was reached.
    """

    def __init__(self, path: Path, chunk_size: int = CHUNK_SIZE):
        self.path = path
        self.chunk_size = chunk_size
        self.bytes_read = 0
        self.finished = False
        self._file: Optional[BinaryIO] = None

    def open(self) -> "ArchiveReader":
        self._file = open(self.path, "rb")
        return self

    def close(self):
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self) -> "ArchiveReader":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def name(self) -> str:
        return self.path.name

    def read(self, size: int = -1) -> bytes:
        if self._file is None:
            raise ValueError(f"{self.path} is not open")
        chunk = self._file.read(size)
        self.bytes_read += len(chunk)
        if not chunk or size < 0:
            self.finished = True
        return chunk

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        if self._file is None:
            raise ValueError(f"{self.path} is not open")
        position = self._file.seek(offset, whence)
        if whence == os.SEEK_SET and offset == 0:
            # rewound for a fresh pass
            self.bytes_read = 0
            self.finished = False
        return position

    def tell(self) -> int:
        if self._file is None:
            raise ValueError(f"{self.path} is not open")
        return self._file.tell()

    def fileno(self) -> int:
        if self._file is None:
            raise ValueError(f"{self.path} is not open")
        return self._file.fileno()

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self.read(self.chunk_size)
            if not chunk:
                return
            yield chunk


class ArchiveWriter:
    """
    write side of a download.

    bytes go to a hidden ``.part`` file next to the target. only ``finish()``
    moves it to the target name, so an interrupted download never leaves a
    file that looks complete.
    """

    def __init__(self, target: Path):
        self.target = target
        self.part_path = target.with_name(f".{target.name}.part")
        self.bytes_written = 0
        self.finished = False
        self._file: Optional[BinaryIO] = None

    def open(self) -> "ArchiveWriter":
        self._file = open(self.part_path, "wb")
        return self

    def __enter__(self) -> "ArchiveWriter":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        if not self.finished:
            self.abort()

    def write(self, chunk: bytes) -> int:
        if self._file is None:
            raise ValueError(f"{self.part_path} is not open")
        written = self._file.write(chunk)
        self.bytes_written += written
        return written

    def finish(self) -> Path:
        """flush to disk and move the archive to its final name."""
        if self._file is None:
            raise ValueError(f"{self.part_path} is not open")
        self._file.flush()
        os.fsync(self._file.fileno())
        self._file.close()
        self._file = None
        os.replace(self.part_path, self.target)
        self.finished = True
        logger.debug(f"wrote {self.bytes_written} bytes to {self.target}")
        return self.target

    def abort(self):
        """discard everything written so far."""
        if self._file is not None:
            self._file.close()
            self._file = None
        if self.part_path.exists():
            self.part_path.unlink()
            logger.debug(f"removed incomplete download {self.part_path}")
