"""Tests for file operations and the file operation engine."""

import asyncio
import logging
import tempfile
from pathlib import Path

import pytest

from scaffy.errors import FileOperationError
from scaffy.models import (
    FileAction,
    FileMethod,
    GeneratorFile,
    NormalizedGenerator,
    TemplateData,
)
from scaffy.operations import (
    FileOperationEngine,
    append_file,
    create_file,
    destroy_file,
    overwrite_file,
    unappend_file,
)
from scaffy.templates import Renderer


@pytest.fixture
def tmpdir_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestCreateFile:
    def test_creates_file(self, tmpdir_path):
        path = tmpdir_path / "a.txt"
        assert create_file(path, b"hello") == FileAction.CREATED
        assert path.read_bytes() == b"hello"

    def test_second_create_is_skipped(self, tmpdir_path, caplog):
        """Test that creating twice writes once and keeps the first content."""
        path = tmpdir_path / "a.txt"
        create_file(path, b"first")
        with caplog.at_level(logging.INFO, logger="scaffy"):
            assert create_file(path, b"second") == FileAction.SKIPPED
        assert path.read_bytes() == b"first"
        assert "already exists" in caplog.text

    def test_creates_parent_directories(self, tmpdir_path, caplog):
        path = tmpdir_path / "deep" / "er" / "a.txt"
        with caplog.at_level(logging.INFO, logger="scaffy"):
            create_file(path, b"x")
        assert path.read_bytes() == b"x"
        assert "init" in caplog.text


class TestOverwriteFile:
    def test_replaces_content(self, tmpdir_path):
        path = tmpdir_path / "a.txt"
        path.write_bytes(b"old content")
        assert overwrite_file(path, b"new") == FileAction.OVERWRITTEN
        assert path.read_bytes() == b"new"

    def test_creates_missing_file(self, tmpdir_path):
        path = tmpdir_path / "sub" / "a.txt"
        overwrite_file(path, b"new")
        assert path.read_bytes() == b"new"


class TestAppendFile:
    def test_appends(self, tmpdir_path):
        path = tmpdir_path / "a.txt"
        path.write_bytes(b"one\n")
        assert append_file(path, b"two\n") == FileAction.APPENDED
        assert path.read_bytes() == b"one\ntwo\n"

    def test_creates_missing_file(self, tmpdir_path):
        path = tmpdir_path / "sub" / "a.txt"
        append_file(path, b"two\n")
        assert path.read_bytes() == b"two\n"


class TestDestroyFile:
    def test_deletes(self, tmpdir_path):
        path = tmpdir_path / "a.txt"
        path.write_bytes(b"x")
        assert destroy_file(path) == FileAction.DESTROYED
        assert not path.exists()

    def test_missing_file_is_logged_not_raised(self, tmpdir_path, caplog):
        with caplog.at_level(logging.ERROR, logger="scaffy"):
            assert destroy_file(tmpdir_path / "gone.txt") == FileAction.MISSING
        assert "gone.txt" in caplog.text

    def test_other_errors_raise(self, tmpdir_path):
        directory = tmpdir_path / "dir"
        directory.mkdir()
        with pytest.raises(FileOperationError) as info:
            destroy_file(directory)
        assert info.value.operation == "destroy"
        assert info.value.path == directory


class TestUnappendFile:
    def test_append_then_unappend_restores_empty_file(self, tmpdir_path):
        path = tmpdir_path / "routes.js"
        path.write_bytes(b"")
        append_file(path, b'route("/widgets");\n')
        assert unappend_file(path, b'route("/widgets");\n') == FileAction.UNAPPENDED
        assert path.read_bytes() == b""

    def test_unappend_leaves_file_created_by_append_empty(self, tmpdir_path):
        """Test that unappend restores content, not existence."""
        path = tmpdir_path / "routes.js"
        append_file(path, b'route("/widgets");\n')
        assert unappend_file(path, b'route("/widgets");\n') == FileAction.UNAPPENDED
        assert path.exists()
        assert path.read_bytes() == b""

    def test_append_then_unappend_restores_content(self, tmpdir_path):
        path = tmpdir_path / "routes.js"
        path.write_bytes(b"existing\n")
        append_file(path, b"added\n")
        unappend_file(path, b"added\n")
        assert path.read_bytes() == b"existing\n"

    def test_removes_first_occurrence_only(self, tmpdir_path):
        path = tmpdir_path / "a.txt"
        path.write_bytes(b"xAyA")
        unappend_file(path, b"A")
        assert path.read_bytes() == b"xyA"

    def test_edited_content_is_left_alone(self, tmpdir_path):
        path = tmpdir_path / "a.txt"
        path.write_bytes(b"route('/widgets')  // edited\n")
        assert unappend_file(path, b'route("/widgets");\n') == FileAction.SKIPPED
        assert path.read_bytes() == b"route('/widgets')  // edited\n"

    def test_missing_file(self, tmpdir_path, caplog):
        with caplog.at_level(logging.ERROR, logger="scaffy"):
            assert unappend_file(tmpdir_path / "gone", b"x") == FileAction.MISSING
        assert "gone" in caplog.text


def make_file(source: Path, base: str, parent_path: str = "", **fields) -> GeneratorFile:
    return GeneratorFile(base=base, source=source, parent_path=parent_path, **fields)


class TestFileOperationEngine:
    """Test rendering and dispatch of file entries."""

    def test_destination_uses_template_data(self, tmpdir_path):
        engine = FileOperationEngine(Renderer())
        file = make_file(tmpdir_path / "t.j2", "{{name}}.js", "app/{{pluralName}}")
        destination, data = engine.destination(file, TemplateData.for_name("widget"))
        assert destination == Path("app/widgets/widget.js")
        assert data.parent_path == "app/widgets"

    def test_name_override_recomputes_plural(self, tmpdir_path):
        engine = FileOperationEngine(Renderer())
        file = make_file(tmpdir_path / "t.j2", "{{pluralName}}.js", "lib", name="person")
        destination, data = engine.destination(file, TemplateData.for_name("widget"))
        assert data.name == "person"
        assert data.plural_name == "people"
        assert destination == Path("lib/people.js")

    def test_without_override_plural_is_inherited(self, tmpdir_path):
        engine = FileOperationEngine(Renderer())
        file = make_file(tmpdir_path / "t.j2", "{{pluralName}}.js")
        data = TemplateData.for_name("widget", plural_name="widgetry")
        destination, _ = engine.destination(file, data)
        assert destination == Path("widgetry.js")

    def test_apply_create(self, tmpdir_path):
        source = tmpdir_path / "t.j2"
        source.write_text("{{ name }}/{{ pluralName }}/{{ parentPath }}\n")
        engine = FileOperationEngine(Renderer())
        file = make_file(source, "{{name}}.txt", str(tmpdir_path / "out"))

        result = asyncio.run(
            engine.apply_file("widget", file, TemplateData.for_name("widget"))
        )

        assert result.action == FileAction.CREATED
        assert result.generator == "widget"
        assert result.path.read_text() == f"widget/widgets/{tmpdir_path / 'out'}\n"

    def test_malformed_template_copied_raw(self, tmpdir_path, caplog):
        source = tmpdir_path / "t.j2"
        source.write_text("broken {{ name \n")
        engine = FileOperationEngine(Renderer())
        file = make_file(source, "out.txt", str(tmpdir_path))

        with caplog.at_level(logging.WARNING, logger="scaffy"):
            result = asyncio.run(
                engine.apply_file("g", file, TemplateData.for_name("widget"))
            )

        assert result.path.read_text() == "broken {{ name \n"
        assert "Could not render" in caplog.text

    def test_failing_helper_copies_raw(self, tmpdir_path, caplog):
        def broken(value):
            raise RuntimeError("helper exploded")

        source = tmpdir_path / "t.j2"
        source.write_text("{{ name | broken }}\n")
        renderer = Renderer()
        renderer.register_helper("broken", broken)
        engine = FileOperationEngine(renderer)
        file = make_file(source, "out.txt", str(tmpdir_path))

        with caplog.at_level(logging.WARNING, logger="scaffy"):
            result = asyncio.run(
                engine.apply_file("g", file, TemplateData.for_name("widget"))
            )

        assert result.action == FileAction.CREATED
        assert result.path.read_text() == "{{ name | broken }}\n"
        assert "helper exploded" in caplog.text

    def test_binary_source_copied_raw(self, tmpdir_path):
        source = tmpdir_path / "logo.png"
        payload = b"\x89PNG\r\n\x1a\n\xff\xfe{{ name }}"
        source.write_bytes(payload)
        engine = FileOperationEngine(Renderer())
        file = make_file(source, "logo.png", str(tmpdir_path / "out"))

        result = asyncio.run(engine.apply_file("g", file, TemplateData.for_name("w")))
        assert result.path.read_bytes() == payload

    def test_missing_source_raises(self, tmpdir_path):
        engine = FileOperationEngine(Renderer())
        file = make_file(tmpdir_path / "nope.j2", "out.txt", str(tmpdir_path))
        with pytest.raises(FileOperationError) as info:
            asyncio.run(engine.apply_file("g", file, TemplateData.for_name("w")))
        assert info.value.operation == "read"
        assert not (tmpdir_path / "out.txt").exists()

    def test_revert_create_deletes(self, tmpdir_path):
        source = tmpdir_path / "t.j2"
        source.write_text("x")
        (tmpdir_path / "widget.txt").write_text("x")
        engine = FileOperationEngine(Renderer())
        file = make_file(source, "{{name}}.txt", str(tmpdir_path))

        result = asyncio.run(
            engine.apply_file("g", file, TemplateData.for_name("widget"), revert=True)
        )
        assert result.action == FileAction.DESTROYED
        assert not (tmpdir_path / "widget.txt").exists()

    def test_revert_append_removes_rendered_content(self, tmpdir_path):
        source = tmpdir_path / "route.j2"
        source.write_text("route('/{{ pluralName }}');\n")
        routes = tmpdir_path / "routes.js"
        routes.write_text("route('/home');\nroute('/widgets');\n")
        engine = FileOperationEngine(Renderer())
        file = make_file(source, "routes.js", str(tmpdir_path), method=FileMethod.APPEND)

        result = asyncio.run(
            engine.apply_file("g", file, TemplateData.for_name("widget"), revert=True)
        )
        assert result.action == FileAction.UNAPPENDED
        assert routes.read_text() == "route('/home');\n"

    def test_apply_generator_runs_every_file(self, tmpdir_path):
        sources = []
        for index in range(5):
            source = tmpdir_path / f"t{index}.j2"
            source.write_text(f"{index} {{{{ name }}}}")
            sources.append(source)
        generator = NormalizedGenerator(
            type="many",
            path=tmpdir_path,
            files=tuple(
                make_file(s, f"{s.stem}.txt", str(tmpdir_path / "out")) for s in sources
            ),
        )
        engine = FileOperationEngine(Renderer())

        results = asyncio.run(
            engine.apply_generator(generator, TemplateData.for_name("widget"))
        )

        assert [r.action for r in results] == [FileAction.CREATED] * 5
        assert (tmpdir_path / "out" / "t3.txt").read_text() == "3 widget"

    def test_apply_generator_surfaces_first_error(self, tmpdir_path):
        good = tmpdir_path / "good.j2"
        good.write_text("ok")
        generator = NormalizedGenerator(
            type="mixed",
            path=tmpdir_path,
            files=(
                make_file(good, "good.txt", str(tmpdir_path / "out")),
                make_file(tmpdir_path / "missing.j2", "bad.txt", str(tmpdir_path / "out")),
            ),
        )
        engine = FileOperationEngine(Renderer())
        with pytest.raises(FileOperationError):
            asyncio.run(engine.apply_generator(generator, TemplateData.for_name("w")))

    def test_plan(self, tmpdir_path):
        generator = NormalizedGenerator(
            type="g",
            path=tmpdir_path,
            files=(
                make_file(tmpdir_path / "a", "{{name}}.js", "app"),
                make_file(tmpdir_path / "b", "routes.js", "", method=FileMethod.APPEND),
            ),
        )
        engine = FileOperationEngine(Renderer())

        forward = engine.plan(generator, TemplateData.for_name("widget"))
        assert [(p.method, p.destination) for p in forward] == [
            ("create", Path("app/widget.js")),
            ("append", Path("routes.js")),
        ]

        backward = engine.plan(generator, TemplateData.for_name("widget"), revert=True)
        assert [p.method for p in backward] == ["delete", "remove-appended"]
