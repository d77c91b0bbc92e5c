"""
Smoke tests for the command-line entry point.
"""

import sys

import pytest

from deduce.__main__ import main
from deduce.core.store import KnowledgeBase


class TestCLI:
    def test_family_quiet(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["deduce", "--domain", "family", "--quiet"])
        main()
        out = capsys.readouterr().out
        assert "grandparent(alice, Who): 2 answers" in out
        assert "Semantic cache" in out

    def test_save_and_load(self, monkeypatch, tmp_path, capsys):
        path = str(tmp_path / "kb.json")
        monkeypatch.setattr(sys, "argv", ["deduce", "--domain", "marriage", "--quiet", "--save", path])
        main()
        kb = KnowledgeBase.load(path)
        assert len(kb.derived) == 2

        monkeypatch.setattr(sys, "argv", ["deduce", "--domain", "marriage", "--quiet", "--load", path])
        main()
        assert KnowledgeBase.load(path).writes == 2

    def test_dot_export(self, monkeypatch, tmp_path):
        path = tmp_path / "graph.dot"
        monkeypatch.setattr(sys, "argv", ["deduce", "--quiet", "--dot", str(path)])
        main()
        assert path.read_text().startswith("digraph deduce {")
