# ============================================
# file: src/universal_block_cli/core/handlers/convert_handler.py
# ============================================
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from universal_block import TagPolicyTable
from universal_block_cli.controllers.convert_controller import ConvertController
from universal_block_cli.core.managers.config_manager import config_manager
from universal_block_cli.core.utils.parallel_workers import BLOCKS_TO_HTML, HTML_TO_BLOCKS

logger = logging.getLogger(__name__)

convert_help_text = """
  html-to-blocks <input> [-o <dir>] [-p <glob>] [--format wp|json] [--pretty] [--workers <N>]
      Converts HTML templates into block markup (wp) or block JSON (json).
  blocks-to-html <input> [-o <dir>] [-p <glob>] [--pretty] [--workers <N>]
      Converts block JSON files back into HTML.

  Settings can be overridden per run with --set KEY=VALUE (repeatable),
  e.g. --set convert.format=json --set debug.level=INFO.
""".strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="universal-block",
        description="Convert HTML templates to universal/element blocks and back.",
        epilog=convert_help_text,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--set", dest="overrides", action="append", default=[], metavar="KEY=VALUE",
                        help="Override a settings.json value for this run.")
    # Also accepted after the sub-command; SUPPRESS keeps the top-level value.
    # Sub-command --set values get their own list, merged in parse_args.
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", default=argparse.SUPPRESS)
    common.add_argument("--set", dest="sub_overrides", action="append", default=[],
                        metavar="KEY=VALUE", help="Override a settings.json value for this run.")
    subs = parser.add_subparsers(dest="subcommand", help="Sub-command help")

    p_h2b = subs.add_parser(HTML_TO_BLOCKS, parents=[common], help="Convert HTML files to block markup.")
    p_h2b.add_argument("input", help="Input directory or file path.")
    p_h2b.add_argument("-o", "--output", help="Output directory (default from settings: ./blocks).")
    p_h2b.add_argument("-p", "--pattern", help="Glob pattern for HTML files (default: **/*.html).")
    p_h2b.add_argument("--format", choices=["wp", "json"], help="Output format (default: wp).")
    p_h2b.add_argument("--pretty", action="store_true", default=None, help="Pretty print output.")
    p_h2b.add_argument("--workers", type=int, help="Number of parallel processes.")

    p_b2h = subs.add_parser(BLOCKS_TO_HTML, parents=[common], help="Convert block JSON back to HTML.")
    p_b2h.add_argument("input", help="Input directory or file path.")
    p_b2h.add_argument("-o", "--output", help="Output directory (default from settings: ./html).")
    p_b2h.add_argument("-p", "--pattern", help="Glob pattern for JSON files (default: **/*.json).")
    p_b2h.add_argument("--pretty", action="store_true", default=None, help="Indent the HTML output.")
    p_b2h.add_argument("--workers", type=int, help="Number of parallel processes.")
    return parser


def apply_overrides(overrides: List[str]) -> None:
    """Applies `KEY=VALUE` pairs to the in-memory configuration."""
    for item in overrides or []:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or not key:
            raise ValueError(f"Invalid --set value '{item}', expected KEY=VALUE")
        if not config_manager.set_nested(key, value.strip()):
            raise ValueError(f"Cannot override '{key}'")


def parse_args(args: List[str]) -> Tuple[Optional[argparse.Namespace], int]:
    """
    Parses the command line and applies its --set overrides.

    Returns:
        (namespace, 0) when a conversion should run, otherwise (None, exit code)
        after help or an error has been printed.
    """
    parser = build_parser()
    if not args:
        parser.print_help()
        return None, 0

    try:
        pargs = parser.parse_args(args)
    except SystemExit:
        return None, 1

    if pargs.subcommand not in (HTML_TO_BLOCKS, BLOCKS_TO_HTML):
        parser.print_help()
        return None, 1

    try:
        apply_overrides(pargs.overrides + pargs.sub_overrides)
    except ValueError as e:
        print(f"❌ Error: {e}")
        return None, 1
    return pargs, 0


def resolve_options(pargs: argparse.Namespace) -> Dict[str, Any]:
    """
    Merges CLI flags over the `convert` section of settings.json.
    Raises ValueError (or TypeError) when the `tag_policies` section is malformed.
    """
    cfg = config_manager.get_nested("convert", {}) or {}
    is_h2b = pargs.subcommand == HTML_TO_BLOCKS

    if is_h2b:
        output = pargs.output or cfg.get("blocks_output", "./blocks")
        pattern = pargs.pattern or cfg.get("html_pattern", "**/*.html")
        output_format = pargs.format or cfg.get("format", "wp")
    else:
        output = pargs.output or cfg.get("html_output", "./html")
        pattern = pargs.pattern or cfg.get("json_pattern", "**/*.json")
        output_format = "html"

    # Validated here once, shipped to the workers as plain dicts
    policies = TagPolicyTable.from_config(config_manager.get_nested("tag_policies", {}) or {})

    return {
        "mode": pargs.subcommand,
        "input_path": Path(pargs.input),
        "output_dir": Path(output),
        "pattern": pattern,
        "output_format": output_format,
        "pretty": bool(cfg.get("pretty", False) if pargs.pretty is None else pargs.pretty),
        "workers": pargs.workers or cfg.get("workers") or None,
        "policies": policies.to_config(),
    }


def run_convert(pargs: argparse.Namespace, controller: Optional[ConvertController] = None) -> int:
    try:
        options = resolve_options(pargs)
    except (ValueError, TypeError) as e:
        print(f"❌ Error: invalid tag_policies setting: {e}")
        return 1

    controller = controller or ConvertController()

    print(f"🔄 Converting ({options['mode']})...")
    print(f"Input: {options['input_path']}")
    print(f"Output: {options['output_dir']}\n")

    try:
        stats = controller.convert(**options)
    except FileNotFoundError as e:
        print(f"❌ Error: {e}")
        return 1

    if stats["files_total"] == 0:
        print("⚠️  No matching files found")
        return 0

    for source, error in stats["errors"].items():
        print(f"✗ {Path(source).name}: {error}")

    print(f"\n✅ Converted {stats['files_success']} file(s) in {stats['duration_s']}s")
    if stats["files_failed"]:
        print(f"❌ {stats['files_failed']} error(s)")
    return 0


def handle_convert(args: List[str], controller: Optional[ConvertController] = None) -> int:
    pargs, code = parse_args(args)
    if pargs is None:
        return code
    return run_convert(pargs, controller)
