"""
Question Collections - Convert authored collections to pattern files
====================================================================

Authors write questions grouped by category::

    {"categories": [{"name": "forms", "questions": [
        {"pattern": "...", "template": "...", "confidence": 0.9,
         "keywords": ["..."]}]}]}

The matcher reads a flat list where each entry carries its category.
This module flattens collections, merges them into existing pattern
files and reports per-category counts.
"""

import json
import shutil
import time
from pathlib import Path
from typing import Any, Dict, List, Tuple

from core.exceptions import PatternSourceError
from core.logging import get_logger

from .store import FilePatternSource

logger = get_logger("matching.collection")


def flatten_collection(collection: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Flatten a categorised collection into pattern entries.

    Raises:
        PatternSourceError: If the collection has no 'categories' list, or
            a category or question is not a mapping
    """
    categories = collection.get("categories") if isinstance(collection, dict) else None
    if not isinstance(categories, list):
        raise PatternSourceError("Collection must contain a 'categories' list")

    entries = []
    for index, category in enumerate(categories):
        if not isinstance(category, dict):
            raise PatternSourceError(
                "Collection category must be a mapping", {"category": index}
            )

        questions = category.get("questions", [])
        if not isinstance(questions, list) or not all(isinstance(q, dict) for q in questions):
            raise PatternSourceError(
                "Category 'questions' must be a list of mappings",
                {"category": category.get("name", index)}
            )

        for question in questions:
            entries.append({
                "pattern": question.get("pattern"),
                "template": question.get("template"),
                "confidence": question.get("confidence"),
                "category": category.get("name"),
                "keywords": question.get("keywords", []),
            })
    return entries


def merge_collection(
    collection: Dict[str, Any],
    existing: List[Dict[str, Any]]
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Append collection questions whose pattern is not already present.

    Existing entries, including custom additions, are kept as they are.

    Returns:
        Tuple of (merged entries, number of entries added)
    """
    merged = list(existing)
    seen = {entry.get("pattern") for entry in existing if isinstance(entry, dict)}
    added = 0

    for entry in flatten_collection(collection):
        if entry["pattern"] in seen:
            continue
        merged.append(entry)
        seen.add(entry["pattern"])
        added += 1

    return merged, added


def collection_stats(entries: List[Dict[str, Any]]) -> Dict[str, int]:
    """Entry count per category, largest first."""
    counts: Dict[str, int] = {}
    for entry in entries:
        category = entry.get("category")
        counts[category] = counts.get(category, 0) + 1
    return dict(sorted(counts.items(), key=lambda item: item[1], reverse=True))


def backup_path(path: Path) -> Path:
    """``patterns.json`` -> ``patterns-backup-<epoch ms>.json``."""
    stamp = int(time.time() * 1000)
    return path.with_name(f"{path.stem}-backup-{stamp}{path.suffix}")


def convert_collection(
    src: str,
    dest: str,
    merge: bool = False,
    backup: bool = True
) -> Dict[str, Any]:
    """
    Write a pattern file from a question collection.

    Args:
        src: Collection file (JSON)
        dest: Pattern file to write
        merge: Keep the existing entries of ``dest`` and add new ones;
            otherwise ``dest`` is replaced
        backup: Copy an existing ``dest`` aside before writing

    Returns:
        Summary with ``total``, ``added``, ``backup`` and ``categories``

    Raises:
        PatternSourceError: If either file cannot be read or written
    """
    src_path = Path(src)
    try:
        with open(src_path, "r", encoding="utf-8") as f:
            collection = json.load(f)
    except OSError as e:
        raise PatternSourceError(f"Failed to read collection: {e}", {"path": str(src_path)})
    except ValueError as e:
        raise PatternSourceError(f"Failed to parse collection: {e}", {"path": str(src_path)})

    target = FilePatternSource(dest)

    if merge and target.path.exists():
        entries, added = merge_collection(collection, target.load())
    else:
        entries = flatten_collection(collection)
        added = len(entries)

    saved_backup = None
    if backup and target.path.exists():
        saved_backup = backup_path(target.path)
        try:
            shutil.copyfile(target.path, saved_backup)
        except OSError as e:
            raise PatternSourceError(f"Failed to back up pattern file: {e}", {"path": str(target.path)})
        logger.info(f"Backed up existing patterns to {saved_backup.name}")

    target.save(entries)
    logger.info(f"Saved {len(entries)} training patterns ({added} new) to {target.path}")

    return {
        "total": len(entries),
        "added": added,
        "backup": str(saved_backup) if saved_backup else None,
        "categories": collection_stats(entries),
    }
