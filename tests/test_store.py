"""
Test Pattern Store Module
=========================

Unit tests for pattern records, pattern sources and the store.
"""

import json
import pytest
import yaml
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from matching.store import (
    PatternRecord, PatternOptions, PatternStore,
    FilePatternSource, InMemoryPatternSource,
    create_default_patterns, DEFAULT_PATTERNS,
)
from core.exceptions import PatternSourceError, PatternValidationError


ENTRIES = [
    {
        "pattern": "HOW DO I *",
        "template": "Start here.",
        "confidence": 0.9,
        "category": "general",
        "keywords": ["apply"],
    },
    {
        "pattern": "WHAT DOCUMENTS DO I NEED",
        "template": "Bring evidence.",
        "confidence": 0.8,
        "category": "documents",
        "keywords": [],
    },
]


class TestPatternRecord:
    """Tests for PatternRecord."""

    def test_from_dict(self):
        """Test creation from dictionary."""
        record = PatternRecord.from_dict(ENTRIES[0])
        assert record.pattern == "HOW DO I *"
        assert record.confidence == 0.9
        assert record.category == "general"
        assert record.keywords == ("apply",)

    def test_defaults(self):
        """Test optional fields fall back to defaults."""
        record = PatternRecord.from_dict({"pattern": "HI", "template": "Hello"})
        assert record.confidence == 0.9
        assert record.category == "custom"
        assert record.keywords == ()

    def test_to_dict(self):
        """Test dictionary serialization."""
        data = PatternRecord.from_dict(ENTRIES[0]).to_dict()
        assert data == ENTRIES[0]

    @pytest.mark.parametrize("data", [
        {"template": "no pattern"},
        {"pattern": "   ", "template": "blank pattern"},
        {"pattern": "NO TEMPLATE"},
        {"pattern": "X", "template": "Y", "confidence": 1.5},
        {"pattern": "X", "template": "Y", "confidence": -0.1},
        {"pattern": "X", "template": "Y", "confidence": "high"},
        {"pattern": "X", "template": "Y", "keywords": 5},
        "not a mapping",
    ])
    def test_invalid_entries(self, data):
        """Test malformed entries are rejected."""
        with pytest.raises(PatternValidationError):
            PatternRecord.from_dict(data)

    def test_immutable(self):
        """Test records cannot be edited in place."""
        record = PatternRecord.from_dict(ENTRIES[0])
        with pytest.raises(Exception):
            record.pattern = "CHANGED"


class TestPatternOptions:
    """Tests for PatternOptions."""

    def test_default_values(self):
        """Test documented defaults."""
        options = PatternOptions()
        assert options.confidence == 0.9
        assert options.category == "custom"
        assert options.keywords == []


class TestFilePatternSource:
    """Tests for FilePatternSource."""

    def test_load_json(self, tmp_path):
        """Test loading the JSON categories shape."""
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps({"categories": ENTRIES}), encoding="utf-8")

        entries = FilePatternSource(str(path)).load()

        assert [e["pattern"] for e in entries] == ["HOW DO I *", "WHAT DOCUMENTS DO I NEED"]

    def test_load_yaml(self, tmp_path):
        """Test loading YAML pattern files."""
        path = tmp_path / "patterns.yaml"
        path.write_text(yaml.dump({"categories": ENTRIES}), encoding="utf-8")

        entries = FilePatternSource(str(path)).load()

        assert len(entries) == 2
        assert entries[1]["category"] == "documents"

    def test_missing_file(self, tmp_path):
        """Test a missing file raises PatternSourceError."""
        with pytest.raises(PatternSourceError):
            FilePatternSource(str(tmp_path / "missing.json")).load()

    def test_invalid_json(self, tmp_path):
        """Test unparseable files raise PatternSourceError."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(PatternSourceError):
            FilePatternSource(str(path)).load()

    def test_wrong_shape(self, tmp_path):
        """Test files without a categories list are rejected."""
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps(ENTRIES), encoding="utf-8")

        with pytest.raises(PatternSourceError):
            FilePatternSource(str(path)).load()

    def test_save_and_load(self, tmp_path):
        """Test saved files load back."""
        source = FilePatternSource(str(tmp_path / "nested" / "patterns.json"))
        source.save(ENTRIES)

        assert source.load() == ENTRIES


class TestInMemoryPatternSource:
    """Tests for InMemoryPatternSource."""

    def test_load_returns_copies(self):
        """Test callers cannot mutate the source through load()."""
        source = InMemoryPatternSource(ENTRIES)
        entries = source.load()
        entries[0]["pattern"] = "CHANGED"

        assert source.load()[0]["pattern"] == "HOW DO I *"


class TestPatternStore:
    """Tests for PatternStore."""

    def test_load_keeps_order(self):
        """Test records keep source order."""
        store = PatternStore()
        count = store.load(InMemoryPatternSource(ENTRIES))

        assert count == 2
        assert [r.pattern for r in store.records()] == ["HOW DO I *", "WHAT DOCUMENTS DO I NEED"]

    def test_load_skips_malformed_entries(self):
        """Test one bad entry does not invalidate the collection."""
        store = PatternStore()
        count = store.load(InMemoryPatternSource([{"template": "orphan"}] + ENTRIES))

        assert count == 2
        assert len(store) == 2

    def test_regex_compiled_once_per_record(self):
        """Test entries carry a compiled regex."""
        store = PatternStore()
        store.load(InMemoryPatternSource(ENTRIES))

        record, regex = store.entries()[0]
        assert regex.match("HOW DO I FILE")

    def test_append_swaps_snapshot(self):
        """Test appends do not alter snapshots already handed out."""
        store = PatternStore()
        store.load(InMemoryPatternSource(ENTRIES))
        snapshot = store.entries()

        store.append(PatternRecord("NEW ONE", "Answer"))

        assert len(snapshot) == 2
        assert len(store) == 3
        assert store.records()[-1].pattern == "NEW ONE"

    def test_failed_load_leaves_collection(self, tmp_path):
        """Test a failing source leaves the current records in place."""
        store = PatternStore([PatternRecord("KEEP ME", "Answer")])

        with pytest.raises(PatternSourceError):
            store.load(FilePatternSource(str(tmp_path / "missing.json")))

        assert [r.pattern for r in store] == ["KEEP ME"]

    def test_replace_and_clear(self):
        """Test wholesale replacement and clearing."""
        store = PatternStore()
        store.replace([PatternRecord("A", "a"), PatternRecord("B", "b")])
        assert [r.pattern for r in store] == ["A", "B"]

        store.clear()
        assert len(store) == 0


class TestDefaultPatterns:
    """Tests for create_default_patterns()."""

    def test_creates_file(self, tmp_path):
        """Test the default file is written when missing."""
        path = tmp_path / "patterns.json"
        source = create_default_patterns(str(path))

        assert path.exists()
        assert len(source.load()) == len(DEFAULT_PATTERNS)

    def test_does_not_overwrite(self, tmp_path):
        """Test an existing file is left alone."""
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps({"categories": ENTRIES[:1]}), encoding="utf-8")

        source = create_default_patterns(str(path))

        assert len(source.load()) == 1


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
