"""
File and data services
Uploads files into the data directory and imports/exports knowledge data as JSON

HTML uploads are converted to Markdown with markdownify so their text can
become node content.
"""
import asyncio
import json
import mimetypes
import re
from pathlib import Path
from typing import Any, List, Optional

from loguru import logger
from markdownify import markdownify as md
from pydantic import ValidationError

from lucid.models import FileUpload, ImportResult, KnowledgeNode, ServiceResponse, UploadProgress
from lucid.services.base import ProgressCallback, describe_error, to_jsonable

CHUNK_SIZE = 64 * 1024
TEXT_SUFFIXES = {".md", ".markdown", ".txt"}
HTML_SUFFIXES = {".html", ".htm"}


def extract_text(path: Path) -> Optional[str]:
    """
    Extract readable text from an uploaded file

    Returns:
        Markdown/plain text for text and HTML files, None for other types
    """
    suffix = path.suffix.lower()
    if suffix in TEXT_SUFFIXES:
        return path.read_text(encoding="utf-8", errors="replace")
    if suffix in HTML_SUFFIXES:
        html = path.read_text(encoding="utf-8", errors="replace")
        return md(html, heading_style="ATX").strip()
    return None


class LocalFileService:
    """Copies uploads into a local directory in chunks, reporting progress"""

    def __init__(self, upload_dir: Path, chunk_size: int = CHUNK_SIZE):
        self.upload_dir = Path(upload_dir)
        self.chunk_size = chunk_size

    async def upload(self, path: Path, on_progress: Optional[ProgressCallback] = None) -> ServiceResponse:
        path = Path(path)
        logger.info(f"Uploading file: {path}")

        if not path.is_file():
            return ServiceResponse.fail(f"File not found: {path}")

        upload = FileUpload(
            name=path.name,
            type=mimetypes.guess_type(path.name)[0] or "application/octet-stream",
            size=path.stat().st_size,
            status="uploading",
        )
        target = self.upload_dir / f"{upload.id}{path.suffix}"

        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            loaded = 0
            with path.open("rb") as source, target.open("wb") as sink:
                while True:
                    chunk = await asyncio.to_thread(source.read, self.chunk_size)
                    if not chunk:
                        break
                    sink.write(chunk)
                    loaded += len(chunk)
                    if on_progress:
                        on_progress(UploadProgress(file_name=path.name, loaded=loaded, total=upload.size))

            extracted = await asyncio.to_thread(extract_text, path)
            upload = upload.model_copy(update={
                "status": "completed",
                "progress": 100.0,
                "url": target.as_uri(),
                "extracted_content": extracted,
            })
            logger.info(f"Upload complete: {path.name} -> {target}")
            return ServiceResponse.ok(upload)
        except Exception as e:
            logger.exception(f"Error uploading file {path}: {e}")
            return ServiceResponse.fail(describe_error(e, "File upload failed"))


def _markdown_title(text: str, fallback: str) -> str:
    match = re.search(r"^#\s+(.+)$", text, flags=re.MULTILINE)
    return match.group(1).strip() if match else fallback


class LocalDataService:
    """Imports knowledge nodes from JSON/Markdown files and exports data as JSON"""

    def __init__(self, export_dir: Path):
        self.export_dir = Path(export_dir)

    async def import_nodes(self, path: Path) -> ImportResult:
        """
        Import knowledge nodes from a file

        A ``.json`` file must hold a list of node objects; invalid items are
        reported in ``errors`` while valid ones are still imported. A Markdown
        file becomes a single markdown node titled by its first heading.

        Args:
            path: File to import

        Returns:
            ImportResult with the parsed nodes
        """
        path = Path(path)
        logger.info(f"Importing knowledge nodes from: {path}")

        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except OSError as e:
            message = f"Cannot read import file {path.name}: {e}"
            logger.error(message)
            return ImportResult(success=False, error=message, errors=[message])

        if path.suffix.lower() in TEXT_SUFFIXES:
            node = KnowledgeNode(
                title=_markdown_title(text, path.stem),
                content=text,
                type="markdown",
            ).with_content_metrics()
            return ImportResult(success=True, nodes=[node])

        try:
            raw = json.loads(text)
        except ValueError as e:
            message = f"Invalid JSON in {path.name}: {e}"
            logger.warning(message)
            return ImportResult(success=False, error=message, errors=[message])

        if isinstance(raw, dict):
            raw = raw.get("knowledge_nodes", raw.get("nodes"))
        if not isinstance(raw, list):
            message = f"{path.name} does not contain a list of knowledge nodes"
            return ImportResult(success=False, error=message, errors=[message])

        nodes: List[KnowledgeNode] = []
        errors: List[str] = []
        for index, item in enumerate(raw):
            try:
                nodes.append(KnowledgeNode.model_validate(item))
            except ValidationError as e:
                errors.append(f"Item {index}: {e.errors()[0]['msg']}")

        logger.info(f"Parsed {len(nodes)} nodes from {path.name} ({len(errors)} rejected)")
        return ImportResult(
            success=bool(nodes) or not errors,
            nodes=nodes,
            errors=errors,
            error=None if nodes or not errors else "No valid knowledge nodes found",
        )

    async def export_data(self, data: Any, filename: str) -> ServiceResponse:
        target = self.export_dir / filename
        try:
            payload = json.dumps(to_jsonable(data), ensure_ascii=False, indent=2)
            self.export_dir.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(target.write_text, payload, encoding="utf-8")
            logger.info(f"Exported data to {target}")
            return ServiceResponse.ok(str(target))
        except Exception as e:
            logger.exception(f"Error exporting data to {target}: {e}")
            return ServiceResponse.fail(describe_error(e, "Export failed"))
