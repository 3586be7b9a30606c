from __future__ import annotations

import logging
import os
import time
from concurrent.futures import ProcessPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm.auto import tqdm

from universal_block_cli.core.utils.parallel_workers import (
    BLOCKS_TO_HTML,
    HTML_TO_BLOCKS,
    convert_file_worker,
)

logger = logging.getLogger(__name__)


class ConvertController:
    """
    Orchestrates batch conversion of template files.
    Every file is an independent unit of work, so larger batches are fanned
    out over a process pool; a single worker runs inline.
    """

    def __init__(self, *, default_workers: Optional[int] = None) -> None:
        self.default_workers = default_workers or (os.cpu_count() or 4)

    @staticmethod
    def collect_files(input_path: Path, pattern: str) -> List[Path]:
        """Returns the input file itself, or every file under the directory matching `pattern`."""
        if input_path.is_dir():
            return sorted(p for p in input_path.glob(pattern) if p.is_file())
        return [input_path]

    @staticmethod
    def target_for(source: Path, input_path: Path, output_dir: Path, extension: str) -> Path:
        """Mirrors the source's path relative to the input directory under `output_dir`."""
        relative = source.relative_to(input_path) if input_path.is_dir() else Path(source.name)
        return output_dir / relative.with_suffix(extension)

    def build_jobs(
            self,
            *,
            mode: str,
            input_path: Path,
            output_dir: Path,
            pattern: str,
            output_format: str = "wp",
            pretty: bool = False,
            policies: Optional[Dict[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        if mode == HTML_TO_BLOCKS:
            extension = ".json" if output_format == "json" else ".html"
        elif mode == BLOCKS_TO_HTML:
            extension = ".html"
        else:
            raise ValueError(f"Unknown conversion mode: {mode}")

        return [
            {
                "mode": mode,
                "source": str(source),
                "target": str(self.target_for(source, input_path, output_dir, extension)),
                "format": output_format,
                "pretty": pretty,
                "policies": policies or {},
            }
            for source in self.collect_files(input_path, pattern)
        ]

    def convert(
            self,
            *,
            mode: str,
            input_path: Path,
            output_dir: Path,
            pattern: str,
            output_format: str = "wp",
            pretty: bool = False,
            policies: Optional[Dict[str, Any]] = None,
            workers: Optional[int] = None,
            show_progress: bool = True,
    ) -> Dict[str, Any]:
        """
        Converts every matching file and returns execution statistics.
        Raises FileNotFoundError when `input_path` does not exist.
        """
        input_path = Path(input_path)
        output_dir = Path(output_dir)
        if not input_path.exists():
            raise FileNotFoundError(f"Input path not found: {input_path}")

        jobs = self.build_jobs(
            mode=mode, input_path=input_path, output_dir=output_dir, pattern=pattern,
            output_format=output_format, pretty=pretty, policies=policies,
        )
        if not jobs:
            return self._empty_stats()

        output_dir.mkdir(parents=True, exist_ok=True)
        n_workers = max(1, min(int(workers or self.default_workers), len(jobs)))

        start = time.perf_counter()
        results = self._run_inline(jobs, show_progress) if n_workers == 1 \
            else self._run_pool(jobs, n_workers, show_progress)
        dur = time.perf_counter() - start

        ok = [r for r in results if r["ok"]]
        failed = [r for r in results if not r["ok"]]
        return {
            "files_total": len(jobs),
            "files_success": len(ok),
            "files_failed": len(failed),
            "outputs": sorted(r["target"] for r in ok),
            "errors": {r["source"]: r["error"] for r in failed},
            "duration_s": round(dur, 3),
        }

    def _run_inline(self, jobs: List[Dict[str, Any]], show_progress: bool) -> List[Dict[str, Any]]:
        iterator = jobs if not show_progress else tqdm(jobs, desc="Converting", unit=" file")
        return [convert_file_worker(job) for job in iterator]

    def _run_pool(self, jobs: List[Dict[str, Any]], n_workers: int, show_progress: bool) -> List[Dict[str, Any]]:
        results: List[Dict[str, Any]] = []
        with ProcessPoolExecutor(max_workers=n_workers) as pool:
            futures = {pool.submit(convert_file_worker, job): job for job in jobs}
            iterator = as_completed(futures)
            if show_progress:
                iterator = tqdm(iterator, total=len(futures), desc="Converting", unit=" file")

            for fut in iterator:
                job = futures[fut]
                try:
                    results.append(fut.result())
                except Exception as e:
                    # A crashed worker process only costs its own file
                    logger.error("Failed to convert %s: %s", job["source"], e, exc_info=True)
                    results.append({"source": job["source"], "target": job["target"], "ok": False, "error": str(e)})
        return results

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            "files_total": 0, "files_success": 0, "files_failed": 0,
            "outputs": [], "errors": {}, "duration_s": 0.0,
        }
