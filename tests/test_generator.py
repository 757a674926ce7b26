import logging
import os
from pathlib import Path

import pytest

from neur.config import Config
from neur.errors import (
    FileSystemError,
    FrontMatterError,
    GeneratorError,
    StylesheetError,
    TemplateRenderError,
)
from neur.generator import Generator, RunResult, build_context

LAYOUT = "<html><head><title>{{ title }}</title></head><body>{{ content }}</body></html>\n"
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\xff\xfe"


def create_project(tmp_path: Path) -> Path:
    source = tmp_path / "src"
    (source / "blog").mkdir(parents=True)
    (source / "assets" / "img").mkdir(parents=True)
    (source / "empty").mkdir()

    (source / "_template.html").write_text(LAYOUT, encoding="utf-8")
    (source / "post.md").write_text('---\ntitle: "Hi"\n---\n# Hello\n', encoding="utf-8")
    (source / "index.html").write_text(
        "<html>\n  <body>\n    {% include \"_nav.html\" %}\n    <p>{{ 1 + 1 }}</p>\n  </body>\n</html>\n",
        encoding="utf-8",
    )
    (source / "_nav.html").write_text("<nav>links</nav>", encoding="utf-8")
    (source / "__escaped.html").write_text("<p>escaped page</p>\n", encoding="utf-8")
    (source / "style.css").write_text(
        "body {\n  margin: 0px;\n  color: #ffffff;\n}\n", encoding="utf-8"
    )
    (source / "blog" / "entry.md").write_text("Plain *entry*.\n", encoding="utf-8")
    (source / "assets" / "img" / "logo.png").write_bytes(PNG_BYTES)
    (source / "assets" / "app.js").write_text("console.log( 1 );\n", encoding="utf-8")
    (source / "CNAME").write_text("example.com", encoding="utf-8")
    return source


def make_generator(tmp_path: Path, minify: bool = False) -> Generator:
    return Generator(Config(tmp_path / "src", tmp_path / "dist", minify=minify))


def test_run_mirrors_tree(tmp_path):
    create_project(tmp_path)
    result = make_generator(tmp_path).run()
    dist = tmp_path / "dist"

    assert isinstance(result, RunResult)
    assert result.output_dir == dist
    assert (dist / "empty").is_dir()
    assert (dist / "blog" / "entry.html").exists()
    assert (dist / "style.css").exists()
    assert (dist / "index.html").exists()
    assert (dist / "__escaped.html").exists()
    assert set(result.written) == {
        p for p in dist.rglob("*") if p.is_file()
    }


def test_other_files_are_byte_identical(tmp_path):
    source = create_project(tmp_path)
    make_generator(tmp_path).run()
    dist = tmp_path / "dist"
    for rel in ("assets/img/logo.png", "assets/app.js", "CNAME"):
        assert (dist / rel).read_bytes() == (source / rel).read_bytes()


def test_partials_are_not_written(tmp_path):
    create_project(tmp_path)
    make_generator(tmp_path).run()
    dist = tmp_path / "dist"
    assert not (dist / "_nav.html").exists()
    assert not (dist / "_template.html").exists()


def test_pages_render_with_includes(tmp_path):
    create_project(tmp_path)
    make_generator(tmp_path).run()
    html = (tmp_path / "dist" / "index.html").read_text(encoding="utf-8")
    assert "<nav>links</nav>" in html
    assert "<p>2</p>" in html
    escaped = (tmp_path / "dist" / "__escaped.html").read_text(encoding="utf-8")
    assert escaped == "<p>escaped page</p>\n"


def test_document_rendered_inside_layout(tmp_path):
    create_project(tmp_path)
    make_generator(tmp_path).run()
    html = (tmp_path / "dist" / "post.html").read_text(encoding="utf-8")
    assert html == (
        "<html><head><title>Hi</title></head>"
        "<body><h1>Hello</h1>\n</body></html>\n"
    )
    assert not (tmp_path / "dist" / "post.md").exists()


def test_document_uses_ancestor_layout(tmp_path):
    create_project(tmp_path)
    make_generator(tmp_path).run()
    html = (tmp_path / "dist" / "blog" / "entry.html").read_text(encoding="utf-8")
    assert html.startswith("<html><head><title></title></head><body>")
    assert "<p>Plain <em>entry</em>.</p>" in html


def test_nested_layout_wins_over_ancestor(tmp_path):
    source = create_project(tmp_path)
    (source / "blog" / "_template.html").write_text(
        "<article>{{ content }}</article>", encoding="utf-8"
    )
    make_generator(tmp_path).run()
    html = (tmp_path / "dist" / "blog" / "entry.html").read_text(encoding="utf-8")
    assert html == "<article><p>Plain <em>entry</em>.</p>\n</article>"


def test_document_without_layout_uses_fallback(tmp_path):
    source = tmp_path / "src"
    source.mkdir()
    (source / "post.md").write_text('---\ntitle: "Hi"\n---\n# Hello\n', encoding="utf-8")
    make_generator(tmp_path).run()
    assert (tmp_path / "dist" / "post.html").read_text(encoding="utf-8") == "<h1>Hello</h1>\n"


def test_layout_discovered_before_documents_regardless_of_order(tmp_path):
    source = tmp_path / "src"
    (source / "Docs").mkdir(parents=True)
    # "Docs" sorts before "_template.html", so the walk reaches the document first
    (source / "Docs" / "doc.md").write_text("text", encoding="utf-8")
    (source / "_template.html").write_text("[{{ content }}]", encoding="utf-8")
    make_generator(tmp_path).run()
    assert (tmp_path / "dist" / "Docs" / "doc.html").read_text(encoding="utf-8") == (
        "[<p>text</p>\n]"
    )


def test_front_matter_is_escaped_but_content_is_not(tmp_path):
    source = tmp_path / "src"
    source.mkdir()
    (source / "_template.html").write_text("{{ title }}|{{ content }}", encoding="utf-8")
    (source / "post.md").write_text(
        '---\ntitle: "<script>x</script>"\n---\n<em>raw</em>\n', encoding="utf-8"
    )
    make_generator(tmp_path).run()
    html = (tmp_path / "dist" / "post.html").read_text(encoding="utf-8")
    assert html.startswith("&lt;script&gt;x&lt;/script&gt;|")
    assert "<em>raw</em>" in html


def test_front_matter_cannot_shadow_content(tmp_path, caplog):
    source = tmp_path / "src"
    source.mkdir()
    (source / "_template.html").write_text("{{ content }}", encoding="utf-8")
    (source / "post.md").write_text("---\ncontent: hijacked\n---\nbody\n", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="neur.generator"):
        make_generator(tmp_path).run()
    assert (tmp_path / "dist" / "post.html").read_text(encoding="utf-8") == "<p>body</p>\n"
    assert "reserved" in caplog.text


def test_build_context_merges_front_matter():
    context = build_context({"title": "T", "tags": ["a"]}, "<p>x</p>")
    assert context == {"title": "T", "tags": ["a"], "content": "<p>x</p>"}


def test_stylesheet_transform(tmp_path):
    create_project(tmp_path)
    make_generator(tmp_path).run()
    css = (tmp_path / "dist" / "style.css").read_text(encoding="utf-8")
    assert css == "body {\n  margin:0;\n  color:#fff;\n}\n"


def test_minify_output_never_longer(tmp_path):
    create_project(tmp_path)
    make_generator(tmp_path).run()
    plain = {
        rel: (tmp_path / "dist" / rel).read_text(encoding="utf-8")
        for rel in ("index.html", "post.html", "style.css")
    }

    Generator(Config(tmp_path / "src", tmp_path / "min", minify=True)).run()
    for rel, text in plain.items():
        minified = (tmp_path / "min" / rel).read_text(encoding="utf-8")
        assert len(minified) <= len(text)

    assert (tmp_path / "min" / "style.css").read_text(encoding="utf-8") == (
        "body{margin:0;color:#fff}"
    )
    assert "<h1>Hello</h1>" in (tmp_path / "min" / "post.html").read_text(encoding="utf-8")
    # verbatim copies are unaffected by minification
    assert (tmp_path / "min" / "assets" / "app.js").read_text(encoding="utf-8") == (
        "console.log( 1 );\n"
    )


def test_rerun_into_existing_output(tmp_path):
    create_project(tmp_path)
    generator = make_generator(tmp_path)
    first = generator.run()
    second = generator.run()
    assert sorted(first.written) == sorted(second.written)


def test_symlinks_are_skipped(tmp_path):
    source = create_project(tmp_path)
    try:
        os.symlink(source / "CNAME", source / "alias")
    except (OSError, NotImplementedError):  # pragma: no cover - platform dependent
        pytest.skip("symlinks unavailable")
    make_generator(tmp_path).run()
    assert not (tmp_path / "dist" / "alias").exists()


def test_broken_stylesheet_reports_path(tmp_path):
    source = create_project(tmp_path)
    bad = source / "assets" / "broken.css"
    bad.write_text("a { color: red;", encoding="utf-8")
    with pytest.raises(StylesheetError) as exc_info:
        make_generator(tmp_path).run()
    assert exc_info.value.source_path == bad


def test_broken_front_matter_reports_path(tmp_path):
    source = create_project(tmp_path)
    bad = source / "blog" / "bad.md"
    bad.write_text("---\ntitle: [oops\n---\nbody", encoding="utf-8")
    with pytest.raises(FrontMatterError) as exc_info:
        make_generator(tmp_path).run()
    assert exc_info.value.source_path == bad


def test_template_errors(tmp_path):
    source = create_project(tmp_path)
    (source / "broken.html").write_text("{% if %}", encoding="utf-8")
    with pytest.raises(TemplateRenderError) as exc_info:
        make_generator(tmp_path)
    assert exc_info.value.source_path == source / "broken.html"

    (source / "broken.html").write_text("{{ missing.attr }}", encoding="utf-8")
    with pytest.raises(TemplateRenderError) as exc_info:
        make_generator(tmp_path).run()
    assert exc_info.value.source_path == source / "broken.html"
    assert "Undefined" in exc_info.value.message


def test_missing_source_is_filesystem_error(tmp_path):
    with pytest.raises(FileSystemError) as exc_info:
        make_generator(tmp_path)
    assert exc_info.value.source_path == tmp_path / "src"
    assert isinstance(exc_info.value, GeneratorError)


def test_invalid_utf8_document(tmp_path):
    source = tmp_path / "src"
    source.mkdir()
    (source / "bad.md").write_bytes(b"\xff\xfe\x00bad")
    with pytest.raises(FileSystemError) as exc_info:
        make_generator(tmp_path).run()
    assert exc_info.value.source_path == source / "bad.md"
