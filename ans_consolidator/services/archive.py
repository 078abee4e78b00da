from __future__ import annotations

import logging
import shutil
import zipfile
from dataclasses import dataclass, field
from pathlib import Path

"""Recursive expansion of downloaded statement archives.

Quarterly releases arrive as .zip files that may themselves contain .zip
files. Everything is expanded under one working directory; nested archives
are expanded next to the entry that contained them.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "ArchiveError",
    "ExpansionResult",
    "expand_archive",
    "expand_archives",
]


class ArchiveError(Exception):
    """Archive is corrupt or contains an entry escaping the target directory."""


@dataclass
class ExpansionResult:
    expanded: list[Path] = field(default_factory=list)  # archives successfully expanded
    failed: dict[Path, str] = field(default_factory=dict)  # archive -> error
    extracted_files: int = 0


def _safe_target(root: Path, member: str) -> Path:
    target = (root / member).resolve()
    if target != root and root not in target.parents:
        raise ArchiveError(f"entry escapes target directory: {member}")
    return target


def expand_archive(archive: Path, destination: Path, result: ExpansionResult | None = None) -> ExpansionResult:
    """Expand ``archive`` into ``destination``, then any nested .zip entries.

    Raises:
        ArchiveError: corrupt archive or unsafe entry path
    """
    if result is None:
        result = ExpansionResult()
    root = destination.resolve()
    nested: list[Path] = []
    try:
        root.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                target = _safe_target(root, info.filename)
                if info.is_dir():
                    target.mkdir(parents=True, exist_ok=True)
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as src, target.open("wb") as dst:
                    shutil.copyfileobj(src, dst)
                result.extracted_files += 1
                if target.suffix.lower() == ".zip":
                    nested.append(target)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
        raise ArchiveError(f"{archive.name}: {e}") from e
    result.expanded.append(archive)
    logger.debug("expanded %s into %s", archive.name, root)

    for inner in nested:
        try:
            expand_archive(inner, inner.parent, result)
        except ArchiveError as e:
            logger.warning("nested archive %s skipped: %s", inner.name, e)
            result.failed[inner] = str(e)
    return result


def expand_archives(downloads_dir: Path, extracted_dir: Path) -> ExpansionResult:
    """Expand every .zip under ``downloads_dir`` (recursive) into ``extracted_dir``.

    A corrupt archive is logged and recorded in ``failed``; the remaining
    archives are still expanded. A missing ``downloads_dir`` is a no-op.
    """
    result = ExpansionResult()
    if not downloads_dir.is_dir():
        logger.info("downloads directory not found, nothing to expand: %s", downloads_dir)
        return result
    archives = sorted(p for p in downloads_dir.rglob("*") if p.is_file() and p.suffix.lower() == ".zip")
    for archive in archives:
        try:
            expand_archive(archive, extracted_dir, result)
        except ArchiveError as e:
            logger.warning("archive %s skipped: %s", archive.name, e)
            result.failed[archive] = str(e)
    logger.info(
        "archives expanded=%d failed=%d files=%d",
        len(result.expanded), len(result.failed), result.extracted_files,
    )
    return result
