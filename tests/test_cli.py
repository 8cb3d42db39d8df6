"""Tests for the mdmermaid CLI (render, normalize, scan, script, config)."""

from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from mdmermaid.cli import app

runner = CliRunner()

DOC = "# Title\n\n```mermaid\ngraph TD\n    A-->B\n```\n\n```mermaid\nnot a diagram\n```\n"

HTML = (
    "<html><body>\n"
    '<pre><code class="language-mermaid"><span class="hljs-keyword">graph</span> TD</code></pre>\n'
    "</body></html>\n"
)


@pytest.fixture(autouse=True)
def _isolated(tmp_path: Path, monkeypatch):
    """Run every command in an empty directory with no user-global config."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path))


# ── mdmermaid render ─────────────────────────────────────────────────


def test_render_to_stdout(tmp_path: Path):
    (tmp_path / "doc.md").write_text(DOC)
    result = runner.invoke(app, ["render", "doc.md"])
    assert result.exit_code == 0
    assert "<title>doc</title>" in result.output
    assert result.output.count('<div class="mermaid"') == 2
    assert result.output.count("window.mdmermaidRun") == 1


def test_render_to_file(tmp_path: Path):
    (tmp_path / "doc.md").write_text(DOC)
    result = runner.invoke(app, ["render", "doc.md", "-o", "out.html", "--title", "Docs"])
    assert result.exit_code == 0
    page = (tmp_path / "out.html").read_text()
    assert "<title>Docs</title>" in page


def test_render_missing_file():
    result = runner.invoke(app, ["render", "nope.md"])
    assert result.exit_code == 1
    assert "Not a file" in result.output


def test_render_with_config(tmp_path: Path):
    (tmp_path / "doc.md").write_text(DOC)
    (tmp_path / "custom.yaml").write_text("mermaid:\n  customClass: wide\n  appendBootstrap: false\n")
    result = runner.invoke(app, ["--config", "custom.yaml", "render", "doc.md"])
    assert result.exit_code == 0
    assert 'class="mermaid wide"' in result.output
    assert "<script" not in result.output


def test_invalid_config_exits(tmp_path: Path):
    (tmp_path / "bad.yaml").write_text("mermaid: [unclosed\n")
    result = runner.invoke(app, ["--config", "bad.yaml", "script"])
    assert result.exit_code == 1
    assert "Invalid YAML" in result.output


# ── mdmermaid normalize ──────────────────────────────────────────────


def test_normalize_to_stdout(tmp_path: Path):
    (tmp_path / "page.html").write_text(HTML)
    result = runner.invoke(app, ["normalize", "page.html"])
    assert result.exit_code == 0
    assert '<div class="mermaid" id="mermaid-' in result.output
    assert ">graph TD</div>" in result.output
    assert "<pre>" not in result.output


def test_normalize_in_place(tmp_path: Path):
    page = tmp_path / "page.html"
    page.write_text(HTML)
    result = runner.invoke(app, ["normalize", "page.html", "--in-place"])
    assert result.exit_code == 0
    rewritten = page.read_text()
    assert ">graph TD</div>" in rewritten
    assert rewritten.count("window.mdmermaidRun") == 1


# ── mdmermaid scan ───────────────────────────────────────────────────


def test_scan_lists_blocks(tmp_path: Path):
    (tmp_path / "doc.md").write_text(DOC)
    result = runner.invoke(app, ["scan", "doc.md"])
    assert result.exit_code == 0
    assert "Diagrams in doc.md (2)" in result.output
    assert "graph" in result.output
    assert "ok" in result.output


def test_scan_no_blocks(tmp_path: Path):
    (tmp_path / "plain.md").write_text("Nothing.\n")
    result = runner.invoke(app, ["scan", "plain.md"])
    assert result.exit_code == 0
    assert "(0)" in result.output


# ── mdmermaid script ─────────────────────────────────────────────────


def test_script_prints_bootstrap():
    result = runner.invoke(app, ["script"])
    assert result.exit_code == 0
    assert "mermaid.min.js" in result.output
    assert "window.mdmermaidRun" in result.output


# ── mdmermaid config ─────────────────────────────────────────────────


def test_config_init_creates_file(tmp_path: Path):
    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 0
    assert (tmp_path / "mdmermaid.yaml").is_file()


def test_config_init_refuses_overwrite(tmp_path: Path):
    (tmp_path / "mdmermaid.yaml").write_text("log_level: debug\n")
    result = runner.invoke(app, ["config", "init"])
    assert result.exit_code == 1
    assert "already exists" in result.output
    assert (tmp_path / "mdmermaid.yaml").read_text() == "log_level: debug\n"


def test_config_init_force(tmp_path: Path):
    (tmp_path / "mdmermaid.yaml").write_text("log_level: debug\n")
    result = runner.invoke(app, ["config", "init", "--force"])
    assert result.exit_code == 0
    assert "mermaid:" in (tmp_path / "mdmermaid.yaml").read_text()


def test_config_show():
    result = runner.invoke(app, ["config", "show"])
    assert result.exit_code == 0
    assert "base_class" in result.output
    assert "provider" in result.output
