"""Tests for knowledge base loading (examples, consultation template, signature)."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from replydesk.llm.knowledge_base import (
    DEFAULT_KB_DIR,
    load_consultation_template,
    load_examples,
    load_signature,
)
from replydesk.llm.models import HistoricalExample


class TestLoadExamples:
    """Tests for load_examples."""

    def test_loads_examples_in_order(self, tmp_path: Path) -> None:
        data = [
            {"question": "Q1", "answer": "A1"},
            {"question": "Q2", "answer": "A2"},
        ]
        (tmp_path / "email_samples.json").write_text(json.dumps(data), encoding="utf-8")

        examples = load_examples(tmp_path)

        assert examples == [
            HistoricalExample(question="Q1", answer="A1"),
            HistoricalExample(question="Q2", answer="A2"),
        ]

    def test_missing_file_yields_empty(self, tmp_path: Path) -> None:
        assert load_examples(tmp_path) == []

    def test_malformed_file_yields_empty(self, tmp_path: Path) -> None:
        (tmp_path / "email_samples.json").write_text("{not json", encoding="utf-8")
        assert load_examples(tmp_path) == []

    def test_wrong_shape_yields_empty(self, tmp_path: Path) -> None:
        (tmp_path / "email_samples.json").write_text(json.dumps([{"q": "x"}]), encoding="utf-8")
        assert load_examples(tmp_path) == []

    def test_bundled_corpus_loads(self) -> None:
        examples = load_examples(DEFAULT_KB_DIR)
        assert len(examples) > 0


class TestLoadConsultationTemplate:
    """Tests for load_consultation_template."""

    def test_loads_and_strips(self, tmp_path: Path) -> None:
        (tmp_path / "consultation_offer.md").write_text("\nOffer text\n\n", encoding="utf-8")
        assert load_consultation_template(tmp_path) == "Offer text"

    def test_missing_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_consultation_template(tmp_path)


class TestLoadSignature:
    """Tests for load_signature."""

    def test_loads_html(self, tmp_path: Path) -> None:
        (tmp_path / "signature.html").write_text("<br/><b>Desk</b>", encoding="utf-8")
        assert load_signature(tmp_path) == "<br/><b>Desk</b>"

    def test_missing_yields_empty(self, tmp_path: Path) -> None:
        assert load_signature(tmp_path) == ""
