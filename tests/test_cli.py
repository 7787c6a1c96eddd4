from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest
from bs4 import BeautifulSoup

from htmlgen.cli import build_parser, main

REPO_ROOT = Path(__file__).resolve().parents[1]

PAGE = """\
document:
  lang: en
  head:
    - tag: title
      children: Demo
  body:
    tag: ul
    classes: nav-menu
    styles:
      - property: padding
        value: 0
    children:
      - tag: li
        children: One
      - tag: li
        children: Two
"""


def _run_cli(*args: str) -> subprocess.CompletedProcess[bytes]:
    cmd = [sys.executable, "-m", "htmlgen.cli", *args]
    return subprocess.run(cmd, cwd=str(REPO_ROOT), capture_output=True)


def _write_page(tmp_path: Path, content: str = PAGE) -> Path:
    path = tmp_path / "page.yaml"
    path.write_text(content, encoding="utf-8")
    return path


def test_render_writes_file(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    out = tmp_path / "out" / "index.html"

    main(["render", "--in", str(page), "--out", str(out)])

    html = out.read_text(encoding="utf-8")
    assert html.startswith("<!doctype html><html lang=\"en\">")
    soup = BeautifulSoup(html, "html.parser")
    assert soup.title.string == "Demo"
    assert soup.ul["class"] == ["nav-menu", "padding-0"]
    assert soup.style.string == ".padding-0{padding:0}"


def test_render_pretty_with_config(tmp_path: Path) -> None:
    page = _write_page(tmp_path, "tag: div\nchildren:\n  - tag: p\n    children: x\n")
    config = tmp_path / "render.yaml"
    config.write_text('indentation: "\\t"\n', encoding="utf-8")
    out = tmp_path / "index.html"

    main(["render", "--in", str(page), "--config", str(config), "--pretty", "--out", str(out)])

    assert out.read_bytes() == b"\n<div>\n\t<p>x\n\t</p>\n</div>"


def test_render_document_flag_wraps_fragment(tmp_path: Path) -> None:
    page = _write_page(tmp_path, "tag: p\nchildren: x\n")
    out = tmp_path / "index.html"

    main(["render", "--in", str(page), "--document", "--out", str(out)])

    assert out.read_bytes() == b"<!doctype html><html><head></head><body><p>x</p></body></html>"


def test_missing_page_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["render", "--in", str(tmp_path / "missing.yaml")])
    assert "Page file not found" in str(excinfo.value)


def test_invalid_page_exits(tmp_path: Path) -> None:
    page = _write_page(tmp_path, "tag: p\nbogus: 1\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["render", "--in", str(page)])
    assert "Invalid page file" in str(excinfo.value)


def test_invalid_config_exits(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    config = tmp_path / "render.yaml"
    config.write_text("mode: loud\n", encoding="utf-8")
    with pytest.raises(SystemExit):
        main(["render", "--in", str(page), "--config", str(config)])


def test_parser_requires_input() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["render"])


def test_render_to_stdout(tmp_path: Path) -> None:
    page = _write_page(tmp_path, "tag: p\nchildren: a & b\n")
    result = _run_cli("render", "--in", str(page))
    assert result.returncode == 0, result.stderr
    assert result.stdout == b"<p>a &amp; b</p>"


def test_stream_to_stdout(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    expected = _run_cli("render", "--in", str(page)).stdout

    result = _run_cli("stream", "--in", str(page), "--chunk-size", "8")

    assert result.returncode == 0, result.stderr
    assert result.stdout == expected
    assert b"Streamed" in result.stderr


def test_stream_rejects_invalid_chunk_size(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    result = _run_cli("stream", "--in", str(page), "--chunk-size", "0")
    assert result.returncode != 0
    assert b"chunk_size" in result.stderr


def test_undefined_template_variable_exits(tmp_path: Path) -> None:
    page = _write_page(tmp_path, "template: '<b>{{ missing }}</b>'\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["render", "--in", str(page)])
    assert "missing" in str(excinfo.value)

    result = _run_cli("render", "--in", str(page))
    assert result.returncode != 0
    assert b"Traceback" not in result.stderr
    assert b"Template error" in result.stderr


def test_missing_template_file_exits(tmp_path: Path) -> None:
    page = _write_page(tmp_path, "template_file: absent.html\n")
    templates = tmp_path / "templates"
    templates.mkdir()
    with pytest.raises(SystemExit) as excinfo:
        main(["render", "--in", str(page), "--templates", str(templates)])
    assert "absent.html" in str(excinfo.value)


def test_malformed_page_yaml_exits(tmp_path: Path) -> None:
    page = _write_page(tmp_path, "tag: [p\n")
    with pytest.raises(SystemExit) as excinfo:
        main(["render", "--in", str(page)])
    assert "Invalid page file" in str(excinfo.value)


def test_malformed_config_yaml_exits(tmp_path: Path) -> None:
    page = _write_page(tmp_path)
    config = tmp_path / "render.yaml"
    config.write_text("mode: [pretty\n", encoding="utf-8")
    with pytest.raises(SystemExit) as excinfo:
        main(["render", "--in", str(page), "--config", str(config)])
    assert "Invalid config file" in str(excinfo.value)


def test_style_value_with_markup_is_rejected(tmp_path: Path) -> None:
    page = _write_page(
        tmp_path,
        "tag: p\nstyles:\n  - property: color\n    value: 'red}</style>'\n",
    )
    with pytest.raises(SystemExit) as excinfo:
        main(["render", "--in", str(page)])
    assert "Invalid page file" in str(excinfo.value)
