"""
Pattern Store - Pattern records, sources and the in-memory collection
=====================================================================

This module provides:
- PatternRecord: an immutable pattern/template pair with its metadata
- PatternOptions: optional fields and defaults for new patterns
- FilePatternSource / InMemoryPatternSource: where records are loaded from
- PatternStore: the ordered collection the matcher scores against

Pattern files use the shape ``{"categories": [{pattern, template,
confidence, category, keywords}, ...]}`` in JSON or YAML.
"""

import json
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Pattern, Tuple

import yaml

from core.exceptions import PatternSourceError, PatternValidationError
from core.logging import get_logger

from .normalizer import compile_pattern

logger = get_logger("matching.store")

DEFAULT_CONFIDENCE = 0.9
DEFAULT_CATEGORY = "custom"


@dataclass
class PatternOptions:
    """
    Optional settings for a new pattern.

    Attributes:
        confidence (float): Author's prior confidence, 0-1
        category (str): Grouping label
        keywords (list): Extra words that boost a match
    """
    confidence: float = DEFAULT_CONFIDENCE
    category: str = DEFAULT_CATEGORY
    keywords: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PatternRecord:
    """
    A single trained pattern.

    Attributes:
        pattern (str): Query template, ``*`` stands for any run of words
        template (str): Answer text, may contain {timestamp} / {query}
        confidence (float): Prior confidence in [0, 1]
        category (str): Grouping label
        keywords (tuple): Keywords used as a secondary signal
    """
    pattern: str
    template: str
    confidence: float = DEFAULT_CONFIDENCE
    category: str = DEFAULT_CATEGORY
    keywords: Tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.pattern, str) or not self.pattern.strip():
            raise PatternValidationError("Pattern text is required")
        if not isinstance(self.template, str) or not self.template.strip():
            raise PatternValidationError(
                "Template text is required", {"pattern": self.pattern}
            )

        if isinstance(self.confidence, bool):
            raise PatternValidationError(
                "Confidence must be a number", {"pattern": self.pattern}
            )
        try:
            confidence = float(self.confidence)
        except (TypeError, ValueError):
            raise PatternValidationError(
                "Confidence must be a number",
                {"pattern": self.pattern, "confidence": self.confidence}
            )
        if not 0 <= confidence <= 1:
            raise PatternValidationError(
                "Confidence must be between 0 and 1",
                {"pattern": self.pattern, "confidence": confidence}
            )

        keywords = self.keywords or ()
        if isinstance(keywords, str):
            keywords = (keywords,)

        object.__setattr__(self, "confidence", confidence)
        object.__setattr__(self, "category", str(self.category or DEFAULT_CATEGORY))
        object.__setattr__(self, "keywords", tuple(str(k) for k in keywords))

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to the pattern file shape."""
        return {
            "pattern": self.pattern,
            "template": self.template,
            "confidence": self.confidence,
            "category": self.category,
            "keywords": list(self.keywords),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatternRecord":
        """
        Create record from dictionary.

        Raises:
            PatternValidationError: If required fields are missing or invalid
        """
        if not isinstance(data, dict):
            raise PatternValidationError(
                "Pattern entry must be a mapping", {"entry": repr(data)[:80]}
            )

        keywords = data.get("keywords") or ()
        if not isinstance(keywords, (list, tuple, str)):
            raise PatternValidationError(
                "Keywords must be a list", {"pattern": data.get("pattern")}
            )

        confidence = data.get("confidence")
        return cls(
            pattern=data.get("pattern"),
            template=data.get("template"),
            confidence=DEFAULT_CONFIDENCE if confidence is None else confidence,
            category=data.get("category") or DEFAULT_CATEGORY,
            keywords=keywords,
        )


class InMemoryPatternSource:
    """Pattern source backed by a list of dictionaries."""

    def __init__(self, entries: Optional[List[Dict[str, Any]]] = None):
        self.entries = list(entries or [])

    def load(self) -> List[Dict[str, Any]]:
        return [dict(entry) for entry in self.entries]

    def describe(self) -> str:
        return f"memory ({len(self.entries)} entries)"


class FilePatternSource:
    """
    Pattern source backed by a JSON or YAML file.

    Files ending in ``.yaml`` / ``.yml`` are read with PyYAML, anything
    else as JSON.

    Example:
        source = FilePatternSource("data/patterns.json")
        entries = source.load()
    """

    def __init__(self, path: str):
        self.path = Path(path)

    @property
    def is_yaml(self) -> bool:
        return self.path.suffix.lower() in (".yaml", ".yml")

    def load(self) -> List[Dict[str, Any]]:
        """
        Read all pattern entries.

        Returns:
            Raw entry dictionaries in file order

        Raises:
            PatternSourceError: If the file is missing, unreadable or malformed
        """
        details = {"path": str(self.path)}

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                if self.is_yaml:
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except FileNotFoundError:
            raise PatternSourceError("Pattern file not found", details)
        except OSError as e:
            raise PatternSourceError(f"Failed to read pattern file: {e}", details)
        except (ValueError, yaml.YAMLError) as e:
            raise PatternSourceError(f"Failed to parse pattern file: {e}", details)

        if not isinstance(data, dict) or not isinstance(data.get("categories"), list):
            raise PatternSourceError("Pattern file must contain a 'categories' list", details)

        return data["categories"]

    def save(self, entries: List[Dict[str, Any]]) -> None:
        """
        Write entries back in the pattern file shape.

        Raises:
            PatternSourceError: If the file cannot be written
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {"categories": list(entries)}

        try:
            with open(self.path, "w", encoding="utf-8") as f:
                if self.is_yaml:
                    yaml.dump(data, f, default_flow_style=False, sort_keys=False)
                else:
                    json.dump(data, f, indent=2)
        except OSError as e:
            raise PatternSourceError(
                f"Failed to write pattern file: {e}", {"path": str(self.path)}
            )

    def describe(self) -> str:
        return str(self.path)


StoreEntry = Tuple[PatternRecord, Pattern]


def build_entries(raw_entries: List[Dict[str, Any]]) -> Tuple[StoreEntry, ...]:
    """
    Validate raw entries and compile their regexes.

    Malformed entries are skipped with a warning so one bad record does
    not invalidate the whole collection.
    """
    entries = []
    for index, raw in enumerate(raw_entries):
        try:
            record = PatternRecord.from_dict(raw)
        except PatternValidationError as e:
            logger.warning(f"Skipping pattern entry #{index}: {e}")
            continue
        entries.append((record, compile_pattern(record.pattern)))
    return tuple(entries)


class PatternStore:
    """
    Ordered, snapshot-based collection of pattern records.

    Readers take the current snapshot (an immutable tuple) without
    locking. Writers build a new tuple under a lock and swap the
    reference, so a reader never observes a half-replaced collection.
    Each record's wildcard regex is compiled once, when it is stored.
    """

    def __init__(self, records: Optional[List[PatternRecord]] = None):
        self._lock = threading.Lock()
        self._entries: Tuple[StoreEntry, ...] = tuple(
            (record, compile_pattern(record.pattern)) for record in (records or [])
        )

    def load(self, source) -> int:
        """
        Replace the collection with the contents of a source.

        Raises:
            PatternSourceError: If the source cannot be loaded; the current
                collection is left unchanged in that case
        """
        entries = build_entries(source.load())
        with self._lock:
            self._entries = entries
        return len(entries)

    def replace(self, records: List[PatternRecord]) -> None:
        """Swap in a new set of records."""
        entries = tuple((record, compile_pattern(record.pattern)) for record in records)
        with self._lock:
            self._entries = entries

    def append(self, record: PatternRecord) -> None:
        """Add a record at the end of the collection."""
        entry = (record, compile_pattern(record.pattern))
        with self._lock:
            self._entries = self._entries + (entry,)

    def clear(self) -> None:
        with self._lock:
            self._entries = ()

    def entries(self) -> Tuple[StoreEntry, ...]:
        """Current snapshot of (record, regex) pairs."""
        return self._entries

    def records(self) -> Tuple[PatternRecord, ...]:
        """Current snapshot of records in insertion order."""
        return tuple(record for record, _ in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PatternRecord]:
        return iter(self.records())


DEFAULT_PATTERNS = [
    {
        "pattern": "HOW DO I *",
        "template": "You asked: \"{query}\". Start with the official application guide "
                    "for your form and check the filing instructions before submitting.",
        "confidence": 0.9,
        "category": "general_process",
        "keywords": ["apply", "file", "submit"],
    },
    {
        "pattern": "WHAT IS THE PROCESSING TIME FOR *",
        "template": "Processing times vary by form and service center. "
                    "Figures shown are current as of {timestamp}.",
        "confidence": 0.85,
        "category": "processing_times",
        "keywords": ["processing time", "how long", "wait"],
    },
    {
        "pattern": "HOW MANY APPLICATIONS ARE PENDING",
        "template": "The pending backlog is reported in the monthly status summary.",
        "confidence": 0.8,
        "category": "backlog",
        "keywords": ["pending", "backlog"],
    },
    {
        "pattern": "WHAT DOCUMENTS DO I NEED",
        "template": "Most applications need proof of identity, supporting evidence "
                    "and the filing fee. Check the form instructions for the full list.",
        "confidence": 0.9,
        "category": "documents",
        "keywords": ["documents", "evidence", "paperwork"],
    },
]


def create_default_patterns(path: str) -> FilePatternSource:
    """
    Write the default pattern file if it does not exist yet.

    Returns:
        Source for the pattern file
    """
    source = FilePatternSource(path)
    if not source.path.exists():
        source.save(DEFAULT_PATTERNS)
        logger.info(f"Created default pattern file at {source.path}")
    return source
