"""Shared test fixtures: build Day One export bundles on disk."""

from __future__ import annotations

import json
import zipfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

ExportBuilder = Callable[..., Path]


def make_entry(**overrides: Any) -> dict[str, Any]:
    """A minimal Day One entry record with camelCase keys."""
    entry: dict[str, Any] = {
        "uuid": "AAAAAAAA1111",
        "creationDate": "2024-01-15T10:00:00Z",
        "text": "# Trip\nWe went somewhere.",
    }
    entry.update(overrides)
    return entry


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep user config files and env vars out of every test."""
    import dayone_obsidian.config as config

    monkeypatch.setattr(config, "GLOBAL_CONFIG_PATH", tmp_path / "no-global-config.toml")
    monkeypatch.delenv("DAYONE_OBSIDIAN_OUTPUT_DIR", raising=False)
    monkeypatch.delenv("DAYONE_OBSIDIAN_DEDUPLICATE", raising=False)


@pytest.fixture
def build_export(tmp_path: Path) -> ExportBuilder:
    """Return a function that writes an export directory (or ZIP).

    ``documents`` maps JSON file names to entry lists (or raw strings for
    broken documents). ``media`` maps relative paths to file bytes.
    """

    def _build(
        documents: dict[str, list[dict[str, Any]] | str] | None = None,
        media: dict[str, bytes] | None = None,
        *,
        as_zip: bool = False,
        name: str = "export",
    ) -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        if documents is None:
            documents = {"Journal.json": [make_entry()]}

        for doc_name, content in documents.items():
            path = root / doc_name
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                path.write_text(content, encoding="utf-8")
            else:
                path.write_text(json.dumps({"entries": content}), encoding="utf-8")

        for rel_path, data in (media or {}).items():
            path = root / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

        if not as_zip:
            return root

        archive = tmp_path / f"{name}.zip"
        with zipfile.ZipFile(archive, "w", zipfile.ZIP_STORED) as zf:
            for file in sorted(root.rglob("*")):
                if file.is_file():
                    zf.write(file, file.relative_to(root).as_posix())
        return archive

    return _build


@pytest.fixture
def corrupt_zip() -> Callable[[Path, bytes], None]:
    """Return a function that flips the last byte of *payload* inside an archive.

    Members are stored uncompressed, so the payload bytes appear verbatim
    and the archive stays readable apart from the member's CRC check.
    """

    def _corrupt(archive: Path, payload: bytes) -> None:
        data = archive.read_bytes()
        assert data.count(payload) == 1
        flipped = payload[:-1] + bytes([payload[-1] ^ 0x01])
        archive.write_bytes(data.replace(payload, flipped))

    return _corrupt
