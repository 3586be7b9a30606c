# file: src/universal_block_cli/core/utils/parallel_workers.py
import logging
from pathlib import Path
from typing import Any, Dict

from universal_block import (
    TagPolicyTable,
    dump_blocks_json,
    load_blocks_json,
    parse_html_to_blocks,
    render_blocks_to_html,
    serialize_blocks_to_markup,
)

logger = logging.getLogger(__name__)

HTML_TO_BLOCKS = "html-to-blocks"
BLOCKS_TO_HTML = "blocks-to-html"


def convert_text(mode: str, text: str, *, output_format: str = "wp", pretty: bool = False,
                 policies: TagPolicyTable = None) -> str:
    """Runs one conversion on an in-memory document."""
    if mode == HTML_TO_BLOCKS:
        blocks = parse_html_to_blocks(text, policies=policies)
        if output_format == "json":
            return dump_blocks_json(blocks, pretty=pretty)
        return serialize_blocks_to_markup(blocks)

    if mode == BLOCKS_TO_HTML:
        return render_blocks_to_html(load_blocks_json(text), pretty=pretty, policies=policies)

    raise ValueError(f"Unknown conversion mode: {mode}")


def convert_file_worker(job: Dict[str, Any]) -> Dict[str, Any]:
    """
    Worker function converting a single file.
    Takes and returns plain dicts so it pickles cleanly for spawn-based pools.
    Errors are reported in the result instead of raised, so one bad file
    never aborts the batch.
    """
    source = Path(job["source"])
    target = Path(job["target"])
    result = {"source": str(source), "target": str(target), "ok": False, "error": None}

    try:
        policies = TagPolicyTable.from_config(job.get("policies"))
        text = source.read_text(encoding="utf-8")
        output = convert_text(
            job["mode"], text,
            output_format=job.get("format", "wp"),
            pretty=bool(job.get("pretty", False)),
            policies=policies,
        )
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(output, encoding="utf-8")
        result["ok"] = True
    except Exception as e:
        logger.error(f"WORKER ERROR converting {source}: {e}", exc_info=True)
        result["error"] = str(e)

    return result
