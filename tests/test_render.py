"""
Tests for multivcs.render
"""
from unittest.mock import patch

from rich.console import Console

from multivcs.domain.checkout import Checkout, RepoType
from multivcs.render import render_checkout_table


class TestRenderCheckoutTable:

    def render(self, checkouts):
        console = Console(record=True, width=200)
        with patch('multivcs.render.console', console):
            render_checkout_table(checkouts)
        return console.export_text()

    def test_rows(self, tmp_path):
        text = self.render([
            Checkout(RepoType.CVS, str(tmp_path / "c"), ":pserver:h:/cvs", "proj/c"),
            Checkout(RepoType.HG, str(tmp_path / "h")),
        ])
        assert "Directory" in text
        assert str(tmp_path / "c") in text
        assert ":pserver:h:/cvs" in text
        assert "proj/c" in text
        assert "HG" in text

    def test_empty(self):
        assert "No checkouts found." in self.render([])
