# tests/core/test_convert_handler.py
import pytest

from universal_block_cli.core.handlers.convert_handler import build_parser, handle_convert, parse_args, resolve_options
from universal_block_cli.core.managers.config_manager import config_manager


@pytest.fixture(autouse=True)
def restore_config():
    """Zet de gedeelde configuratie terug na tests die --set gebruiken."""
    yield
    config_manager.reset()


def test_no_arguments_prints_help(capsys):
    assert handle_convert([]) == 0
    assert "html-to-blocks" in capsys.readouterr().out


def test_unknown_option_fails():
    assert handle_convert(["html-to-blocks"]) == 1


def test_missing_input_returns_error(tmp_path, capsys):
    code = handle_convert(["blocks-to-html", str(tmp_path / "nope"), "-o", str(tmp_path / "out")])
    assert code == 1
    assert "Input path not found" in capsys.readouterr().out


def test_cli_flags_override_settings(tmp_path):
    """Opties op de commandoregel winnen van settings.json."""
    pargs = build_parser().parse_args([
        "html-to-blocks", str(tmp_path), "-o", "out", "--format", "json", "--pretty", "--workers", "3", "-v",
    ])
    options = resolve_options(pargs)
    assert options["output_format"] == "json"
    assert options["pretty"] is True
    assert options["workers"] == 3
    assert str(options["output_dir"]) == "out"


def test_settings_provide_defaults(tmp_path):
    options = resolve_options(build_parser().parse_args(["blocks-to-html", str(tmp_path)]))
    assert options["pattern"] == "**/*.json"
    assert options["pretty"] is False
    assert str(options["output_dir"]) == "html"


def test_html_to_blocks_end_to_end(tmp_path, capsys):
    page = tmp_path / "page.html"
    page.write_text('<section class="hero"><h1>Hi</h1></section>', encoding="utf-8")
    out = tmp_path / "blocks"

    code = handle_convert(["html-to-blocks", str(page), "-o", str(out), "--workers", "1"])

    assert code == 0
    assert "Converted 1 file(s)" in capsys.readouterr().out
    assert (out / "page.html").read_text(encoding="utf-8").startswith("<!-- wp:universal/element")


def test_set_overrides_settings(tmp_path):
    """--set past settings.json alleen in het geheugen aan, met type-casting."""
    pargs, code = parse_args([
        "--set", "convert.format=json",
        "html-to-blocks", str(tmp_path), "--set", "convert.workers=2",
    ])
    assert code == 0
    assert config_manager.get_nested("convert.workers") == 2

    options = resolve_options(pargs)
    assert options["output_format"] == "json"
    assert options["workers"] == 2


def test_set_override_end_to_end(tmp_path):
    page = tmp_path / "page.html"
    page.write_text("<p>Hi</p>", encoding="utf-8")
    out = tmp_path / "blocks"

    code = handle_convert([
        "html-to-blocks", str(page), "-o", str(out), "--workers", "1", "--set", "convert.format=json",
    ])

    assert code == 0
    assert (out / "page.json").read_text(encoding="utf-8").startswith('[{"id":')


def test_malformed_set_value_fails(tmp_path, capsys):
    assert handle_convert(["html-to-blocks", str(tmp_path), "--set", "convert.format"]) == 1
    assert "expected KEY=VALUE" in capsys.readouterr().out


def test_invalid_tag_policy_setting_fails(tmp_path, capsys):
    """Een ongeldige tag_policies-sectie stopt vóór er bestanden verwerkt worden."""
    page = tmp_path / "page.html"
    page.write_text("<p>Hi</p>", encoding="utf-8")

    code = handle_convert([
        "html-to-blocks", str(page), "-o", str(tmp_path / "out"),
        "--set", "tag_policies.include.content_model=bogus",
    ])

    assert code == 1
    assert "invalid tag_policies" in capsys.readouterr().out
    assert not (tmp_path / "out").exists()


def test_tag_policies_reach_the_workers(tmp_path):
    config_manager.set_nested("tag_policies.include.content_model", "empty")
    config_manager.set_nested("tag_policies.include.force_self_closing", True)

    options = resolve_options(build_parser().parse_args(["html-to-blocks", str(tmp_path)]))

    assert options["policies"]["include"]["force_self_closing"] is True
    assert options["policies"]["set"]["content_model"] == "empty"
