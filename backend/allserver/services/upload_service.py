"""
All-Server Backend — SVG Upload Service
=========================================

What:  Validates, stores, and verifies uploaded SVG logos.
How:   Pre-checks (presence, declared MIME type, declared size) run before any
       byte is written; the file is then streamed to <upload_root>/svg under a
       generated name, read back, and checked for the SVG signature.
Who:   Called by POST /api/navigation/upload.

Upload outcomes:
    1. Rejected before storage  → 400, nothing on disk
       (no file part, MIME type is not image/svg+xml, declared size too big)
    2. Stored, then rejected    → file deleted, 400
       (streamed size over the limit, content not bounded by <svg ... </svg>)
    3. Accepted                 → 201 with filename, public path, size
    Any unexpected failure after the write started deletes the file
    (best effort, deletion errors only logged) and surfaces as 500.

Filenames:
    <milliseconds since epoch>-<sanitized original base name>.svg
    e.g. "My Logo.svg" uploaded at 1736150400000 → 1736150400000-My_Logo.svg
"""

import logging
import os
import re
import time
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import Request, UploadFile

from allserver.exceptions import AllServerError, FileStorageError, ValidationError
from allserver.schemas.navigation import UploadedFileInfo, UploadResponse

logger = logging.getLogger(__name__)

SVG_MIME_TYPE = "image/svg+xml"
SVG_SUBDIRECTORY = "svg"
PUBLIC_SVG_PREFIX = "/uploads/svg/"

# Streaming chunk size for writing uploads to disk
CHUNK_SIZE = 64 * 1024

# Room for boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD = 16 * 1024

_UNSAFE_NAME_CHARS = re.compile(r"[^\w.\-]+")


def sanitize_base_name(filename: Optional[str]) -> str:
    """
    Reduce a client-supplied filename to a safe base name without extension.

    Directory components are dropped and any run of characters other than
    word characters, dots, and dashes becomes a single underscore.
    """
    base = Path((filename or "").replace("\\", "/")).name
    stem = Path(base).stem if base else ""
    stem = _UNSAFE_NAME_CHARS.sub("_", stem).strip("._")
    return stem or "file"


def has_svg_signature(content: str) -> bool:
    """Signature check: trimmed content starts with <svg and ends with </svg>."""
    trimmed = content.strip()
    return trimmed.startswith("<svg") and trimmed.endswith("</svg>")


class UploadService:
    """
    Manages the SVG upload lifecycle.

    Directory Structure:
        <upload_root>/
        └── svg/
            ├── 1736150400000-github.svg
            └── 1736150400123-gitlab.svg
    """

    def __init__(self, upload_root: str, max_size: int):
        self.upload_root = Path(upload_root).resolve()
        self.svg_dir = self.upload_root / SVG_SUBDIRECTORY
        self.max_size = max_size

    def ensure_directories(self) -> None:
        """Create <upload_root>/svg. Called on startup, not on construction."""
        self.svg_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Upload directory ready: %s", self.svg_dir)

    @property
    def max_size_label(self) -> str:
        return f"{self.max_size / (1024 * 1024):g}MB"

    # ── Pre-checks (nothing written yet) ──────────────────────────────────

    def check_content_type(self, content_type: Optional[str]) -> None:
        # Parameters (charset=...) and case do not change the media type
        media_type = (content_type or "").split(";")[0].strip().lower()
        if media_type != SVG_MIME_TYPE:
            raise ValidationError(
                message="只允许上传SVG文件",
                field="file",
                context={"content_type": content_type},
            )

    def check_size(self, size: Optional[int]) -> None:
        if size is not None and size > self.max_size:
            raise ValidationError(
                message=f"文件大小不能超过{self.max_size_label}",
                field="file",
                context={"size": size, "max_size": self.max_size},
            )

    def check_request_length(self, content_length: Optional[str]) -> None:
        """
        Reject a request whose Content-Length already rules the file out.

        Runs before the multipart body is read. MULTIPART_OVERHEAD covers the
        boundaries and part headers around the file. A missing or unparsable
        header is left to the per-chunk check while the file is written.
        """
        try:
            length = int(content_length) if content_length else None
        except ValueError:
            return
        if length is not None and length > self.max_size + MULTIPART_OVERHEAD:
            raise ValidationError(
                message=f"文件大小不能超过{self.max_size_label}",
                field="file",
                context={"content_length": length, "max_size": self.max_size},
            )

    def precheck(self, upload: Optional[UploadFile]) -> UploadFile:
        """
        Run every check that does not need the file on disk.

        Raises:
            ValidationError: missing file part, wrong MIME type, or too large
        """
        if upload is None or not upload.filename:
            raise ValidationError(message="请选择要上传的SVG文件", field="file")
        self.check_content_type(upload.content_type)
        self.check_size(upload.size)
        return upload

    # ── Storage ───────────────────────────────────────────────────────────

    def destination(self, filename: Optional[str], content_type: Optional[str]) -> Path:
        """
        Storage strategy: where an accepted upload is written.

        Only SVG uploads reach this point, so the extension is always .svg
        whatever the client called the file.
        """
        self.svg_dir.mkdir(parents=True, exist_ok=True)
        timestamp = int(time.time() * 1000)
        return self.svg_dir / f"{timestamp}-{sanitize_base_name(filename)}.svg"

    async def _write(self, upload: UploadFile, path: Path) -> int:
        """Stream the upload to path; returns the byte count."""
        size = 0
        async with aiofiles.open(path, "wb") as out:
            while True:
                chunk = await upload.read(CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                # Declared size can be missing or wrong
                self.check_size(size)
                await out.write(chunk)
        return size

    async def _read_text(self, path: Path) -> str:
        async with aiofiles.open(path, "r", encoding="utf-8", errors="replace") as f:
            return await f.read()

    async def cleanup_file(self, file_path: Path) -> None:
        """
        Remove a stored upload (after a failed check or processing error).

        Best effort: missing files are ignored and other failures are logged,
        never raised.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except Exception as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))

    async def save_svg(self, upload: UploadFile) -> UploadResponse:
        """
        Store a pre-checked upload and verify its SVG signature.

        Returns:
            UploadResponse with generated filename, public path, and size

        Raises:
            ValidationError: oversized stream or invalid SVG content (file removed)
            FileStorageError: unexpected I/O failure (file removed)
        """
        path: Optional[Path] = None
        try:
            path = self.destination(upload.filename, upload.content_type)
            size = await self._write(upload, path)

            content = await self._read_text(path)
            if not has_svg_signature(content):
                raise ValidationError(
                    message="无效的SVG文件格式",
                    field="file",
                    context={"filename": path.name},
                )

            logger.info("SVG stored: %s (%d bytes)", path.name, size)
            return UploadResponse(
                message="SVG文件上传成功",
                file=UploadedFileInfo(
                    filename=path.name,
                    path=f"{PUBLIC_SVG_PREFIX}{path.name}",
                    size=size,
                ),
            )

        except AllServerError:
            if path is not None:
                await self.cleanup_file(path)
            raise

        except Exception as e:
            logger.error("上传SVG文件失败: %s", str(e), exc_info=True)
            if path is not None:
                await self.cleanup_file(path)
            raise FileStorageError(
                message="上传SVG文件失败",
                context={"path": str(path) if path else None, "error": str(e)},
            )


def get_upload_service(request: Request) -> UploadService:
    """FastAPI dependency: the UploadService built by create_app()."""
    return request.app.state.upload_service
