from collections.abc import Iterator
import logging
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from sandoc.core.config import AliasRule
from sandoc.core.identifiers import content_digest
from sandoc.ui.cli import app
from sandoc.ui.cli.commands.compile import parse_alias_option


PREVIEW_CODE = "import '@styles/button.css';\nexport default class Demo {}"


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    package_logger = logging.getLogger("sandoc")
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)


def _write_document(tmp_path: Path) -> Path:
    docs = tmp_path / "docs"
    docs.mkdir()
    styles = tmp_path / "styles"
    styles.mkdir()
    (styles / "button.css").write_text(".button { color: red; }", encoding="utf-8")
    document = docs / "button.md"
    document.write_text(
        f"# Button\n\nIntro text.\n\n```san export=preview\n{PREVIEW_CODE}\n```\n",
        encoding="utf-8",
    )
    return document


def test_html_export_prints_to_stdout(tmp_path: Path) -> None:
    document = _write_document(tmp_path)
    runner = CliRunner()

    result = runner.invoke(app, [str(document)])

    assert result.exit_code == 0, result.output
    assert "<h1>Button</h1>" in result.output
    assert '<pre><code class="language-san">' in result.output
    assert "preview-block" not in result.output


def test_html_export_writes_file(tmp_path: Path) -> None:
    document = _write_document(tmp_path)
    output = tmp_path / "build"
    runner = CliRunner()

    result = runner.invoke(app, [str(document), "--output", str(output)])

    assert result.exit_code == 0, result.output
    assert "<h1>Button</h1>" in (output / "button.html").read_text(encoding="utf-8")


def test_component_export_writes_artifacts(tmp_path: Path) -> None:
    document = _write_document(tmp_path)
    output = tmp_path / "build"
    digest = content_digest(PREVIEW_CODE)
    runner = CliRunner()

    result = runner.invoke(
        app,
        [
            str(document),
            "--export",
            "component",
            "--alias",
            "@styles=../styles",
            "--output",
            str(output),
        ],
    )

    assert result.exit_code == 0, result.output
    module = (output / "button.md.js").read_text(encoding="utf-8")
    assert f"<preview-block-1-{digest}></preview-block-1-{digest}>" in module
    component = output / f"button.md.Component1_{digest}.vpms"
    assert component.read_text(encoding="utf-8") == PREVIEW_CODE
    entry = (output / f"button.md.PreviewBlock1_{digest}.vpms").read_text(encoding="utf-8")
    assert ".button { color: red; }" in entry
    assert "1 preview block" in result.output


def test_component_export_requires_output(tmp_path: Path) -> None:
    document = _write_document(tmp_path)
    runner = CliRunner()

    result = runner.invoke(app, [str(document), "--export", "component"])

    assert result.exit_code == 1


def test_config_file_and_template_option(tmp_path: Path) -> None:
    document = _write_document(tmp_path)
    config = tmp_path / "sandoc.yml"
    config.write_text(
        "export_type: component\nalias:\n  - find: '@styles'\n    replacement: ../styles\n",
        encoding="utf-8",
    )
    template = tmp_path / "entry.template"
    template.write_text("entry <%= id =%>", encoding="utf-8")
    output = tmp_path / "out"
    digest = content_digest(PREVIEW_CODE)
    runner = CliRunner()

    result = runner.invoke(
        app,
        [str(document), "--config", str(config), "--template", str(template), "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    entry = output / f"button.md.PreviewBlock1_{digest}.vpms"
    assert entry.read_text(encoding="utf-8") == f"entry 1_{digest}"


def test_invalid_config_exits_with_error(tmp_path: Path) -> None:
    document = _write_document(tmp_path)
    config = tmp_path / "sandoc.yml"
    config.write_text("export_type: pdf\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, [str(document), "--config", str(config)])

    assert result.exit_code == 1


def test_malformed_alias_is_a_usage_error(tmp_path: Path) -> None:
    document = _write_document(tmp_path)
    runner = CliRunner()

    result = runner.invoke(app, [str(document), "--alias", "no-separator"])

    assert result.exit_code == 2


def test_parse_alias_option() -> None:
    assert parse_alias_option("@=./src/") == AliasRule(find="@", replacement="./src/")
    assert parse_alias_option("a=b=c") == AliasRule(find="a", replacement="b=c")
    with pytest.raises(typer.BadParameter):
        parse_alias_option("=x")


def test_mapping_aliases_from_config_combine_with_cli_aliases(tmp_path: Path) -> None:
    document = _write_document(tmp_path)
    config = tmp_path / "sandoc.yml"
    config.write_text(
        "export_type: component\nalias:\n  '@styles': ../styles\n",
        encoding="utf-8",
    )
    output = tmp_path / "out"
    digest = content_digest(PREVIEW_CODE)
    runner = CliRunner()

    result = runner.invoke(
        app,
        [str(document), "-c", str(config), "-a", "unused=value", "-o", str(output)],
    )

    assert result.exit_code == 0, result.output
    entry = (output / f"button.md.PreviewBlock1_{digest}.vpms").read_text(encoding="utf-8")
    assert ".button { color: red; }" in entry


@pytest.mark.parametrize(
    ("flags", "level"),
    [([], logging.WARNING), (["-v"], logging.INFO), (["-vv"], logging.DEBUG)],
)
def test_verbosity_sets_package_log_level(tmp_path: Path, flags: list[str], level: int) -> None:
    document = _write_document(tmp_path)
    runner = CliRunner()

    result = runner.invoke(app, [str(document), *flags])

    assert result.exit_code == 0, result.output
    assert logging.getLogger("sandoc").level == level


def test_debug_verbosity_traces_compilation(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    document = _write_document(tmp_path)
    output = tmp_path / "build"
    runner = CliRunner()

    result = runner.invoke(
        app,
        [str(document), "-e", "component", "-a", "@styles=../styles", "-o", str(output), "-vv"],
    )

    assert result.exit_code == 0, result.output
    messages = [record.getMessage() for record in caplog.records]
    assert any(message.startswith("Compiling ") for message in messages)
    assert any(message.startswith("Preview block PreviewBlock1_") for message in messages)


def test_missing_stylesheet_is_reported_as_warning(tmp_path: Path) -> None:
    document = _write_document(tmp_path)
    output = tmp_path / "build"
    runner = CliRunner()

    result = runner.invoke(app, [str(document), "-e", "component", "-o", str(output)])

    assert result.exit_code == 0, result.output
    text = " ".join(result.output.split())
    assert "Stylesheet '@styles/button.css' could not be read" in text


def test_error_output_includes_underlying_cause(tmp_path: Path) -> None:
    document = _write_document(tmp_path)
    config = tmp_path / "sandoc.yml"
    config.write_text("template: missing.template\n", encoding="utf-8")
    runner = CliRunner()

    result = runner.invoke(app, [str(document), "--config", str(config)])

    assert result.exit_code == 1
    text = " ".join(result.output.split())
    assert "Unable to read template file" in text
    assert "No such file or directory" in text
