"""Archiver - streams a zip of an upload's files without buffering the bundle."""

import logging
import os
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import BinaryIO

from trackdrop.api.download.services.resolver import SecureFileResolver
from trackdrop.api.uploads.dto.upload import FileRecord
from trackdrop.exceptions import SandboxViolationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB


@dataclass
class BundleResult:
    bytes_written: int = 0
    entries: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    completed: bool = False


def unique_arcname(name: str, used: set[str]) -> str:
    """name, or "stem (n).ext" when an earlier entry already took it."""
    candidate = name
    counter = 1
    path = PurePosixPath(name)
    while candidate in used:
        candidate = f"{path.stem} ({counter}){path.suffix}"
        counter += 1
    used.add(candidate)
    return candidate


class _ChunkBuffer:
    """Write-only, non-seekable target for ZipFile; drained after every write."""

    def __init__(self):
        self._chunks: list[bytes] = []

    def write(self, data) -> int:
        if data:
            self._chunks.append(bytes(data))
        return len(data)

    def flush(self):
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


class Archiver:
    def __init__(self, resolver: SecureFileResolver, compresslevel: int = 9):
        self.resolver = resolver
        self.compresslevel = compresslevel

    def stream(
        self,
        upload_id: str,
        files: list[FileRecord],
        result: BundleResult | None = None,
    ) -> Iterator[bytes]:
        """Yield the zip archive chunk by chunk.

        Files that cannot be resolved or opened are skipped and logged.
        Closing the generator early closes the file currently being read.
        """
        result = result if result is not None else BundleResult()
        buffer = _ChunkBuffer()
        used_names: set[str] = set()
        with zipfile.ZipFile(
            buffer, mode="w", compression=zipfile.ZIP_DEFLATED, compresslevel=self.compresslevel
        ) as zf:
            for record in files:
                try:
                    path = self.resolver.resolve_record(upload_id, record)
                    src = open(path, "rb")
                except SandboxViolationError:
                    result.skipped.append(record.original_name)
                    continue
                except OSError as e:
                    logger.warning(
                        "Skipping %s in bundle %s: %s", record.original_name, upload_id, e
                    )
                    result.skipped.append(record.original_name)
                    continue

                with src:
                    arcname = unique_arcname(record.original_name, used_names)
                    large = os.fstat(src.fileno()).st_size >= zipfile.ZIP64_LIMIT
                    with zf.open(arcname, mode="w", force_zip64=large) as dest:
                        while chunk := src.read(CHUNK_SIZE):
                            dest.write(chunk)
                            data = buffer.drain()
                            if data:
                                yield data
                result.entries.append(arcname)
                data = buffer.drain()
                if data:
                    yield data
        # Central directory is written when the ZipFile closes
        data = buffer.drain()
        if data:
            yield data
        result.completed = True

    def bundle(self, upload_id: str, files: list[FileRecord], sink: BinaryIO) -> BundleResult:
        """Write the archive into sink; a failing sink ends the bundle quietly."""
        result = BundleResult()
        chunks = self.stream(upload_id, files, result)
        try:
            for chunk in chunks:
                sink.write(chunk)
                result.bytes_written += len(chunk)
        except OSError as e:
            logger.info("Bundle %s aborted after %d bytes: %s", upload_id, result.bytes_written, e)
            result.completed = False
        finally:
            chunks.close()
        return result
