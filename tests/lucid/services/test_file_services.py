from __future__ import annotations

import asyncio
import json

from lucid.services import LocalDataService, LocalFileService
from lucid.services.files import extract_text


def test_extract_text_converts_html_to_markdown(tmp_path) -> None:
    page = tmp_path / "page.html"
    page.write_text("<h1>Title</h1><p>Body <b>text</b></p>", encoding="utf-8")

    text = extract_text(page)

    assert text.startswith("# Title")
    assert "**text**" in text
    assert extract_text(tmp_path / "scan.pdf") is None


def test_upload_copies_file_and_reports_progress(tmp_path) -> None:
    source = tmp_path / "paper.pdf"
    source.write_bytes(b"%PDF-1.4 fake")
    service = LocalFileService(tmp_path / "uploads", chunk_size=5)
    updates = []

    result = asyncio.run(service.upload(source, updates.append))

    assert result.success
    upload = result.data
    assert upload.type == "application/pdf"
    assert upload.size == 13
    assert upload.extracted_content is None
    assert [u.loaded for u in updates] == [5, 10, 13]
    assert updates[-1].percentage == 100
    assert (tmp_path / "uploads" / f"{upload.id}.pdf").read_bytes() == b"%PDF-1.4 fake"


def test_import_rejects_non_list_json(tmp_path) -> None:
    source = tmp_path / "bad.json"
    source.write_text(json.dumps({"something": 1}), encoding="utf-8")

    result = asyncio.run(LocalDataService(tmp_path).import_nodes(source))

    assert result.success is False
    assert "does not contain a list" in result.error


def test_import_unreadable_file(tmp_path) -> None:
    result = asyncio.run(LocalDataService(tmp_path).import_nodes(tmp_path / "missing.json"))

    assert result.success is False
    assert result.errors


def test_import_all_invalid_items_fails(tmp_path) -> None:
    source = tmp_path / "nodes.json"
    source.write_text(json.dumps([{"content": "no title"}]), encoding="utf-8")

    result = asyncio.run(LocalDataService(tmp_path).import_nodes(source))

    assert result.success is False
    assert result.error == "No valid knowledge nodes found"
    assert result.errors[0].startswith("Item 0")
