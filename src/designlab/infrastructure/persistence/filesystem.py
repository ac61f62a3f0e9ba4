"""
Filesystem implementation of the run store.

Layout of one run directory::

    task.json
    designs/<candidate-id>.json
    designs/<candidate-id>.md
    reviews/review-<candidate-id>-<model>.json
    scores/score-<candidate-id>-<model>.json
    results/ranking.json
    results/results.md

JSON files are written to a temp file and renamed into place.
"""

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from designlab.domain.exceptions import DuplicateRunError
from designlab.domain.interfaces import RunStoreInterface
from designlab.domain.models import RankedDesign, StoredRun

logger = logging.getLogger(__name__)

DESIGNS_DIR = "designs"
REVIEWS_DIR = "reviews"
SCORES_DIR = "scores"
RESULTS_DIR = "results"
TASK_FILE = "task.json"
RANKING_FILE = "ranking.json"
REPORT_FILE = "results.md"


def find_most_recent_run(base_dir: str | Path) -> Path | None:
    """Latest run directory under base_dir (names sort by date prefix)."""
    base = Path(base_dir)
    if not base.is_dir():
        return None
    runs = sorted((d for d in base.iterdir() if d.is_dir()), key=lambda d: d.name, reverse=True)
    return runs[0] if runs else None


class FilesystemRunStore(RunStoreInterface):
    """
    Persists runs as JSON and Markdown files under a base directory.

    Each run lives in its own sub-directory, created once and never merged
    with an existing one.
    """

    def __init__(self, base_dir: str | Path):
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    # =========================================================================
    # WRITE
    # =========================================================================

    def create_run(self, run_name: str) -> str:
        run_dir = self._base_dir / run_name
        self._base_dir.mkdir(parents=True, exist_ok=True)
        try:
            run_dir.mkdir()
        except FileExistsError as e:
            raise DuplicateRunError(str(run_dir)) from e
        for sub in (DESIGNS_DIR, REVIEWS_DIR, SCORES_DIR, RESULTS_DIR):
            (run_dir / sub).mkdir()
        return str(run_dir)

    def designs_root(self, run_dir: str) -> str:
        return str(Path(run_dir) / DESIGNS_DIR)

    def design_path(self, run_dir: str, candidate_id: str) -> str:
        return str(Path(run_dir) / DESIGNS_DIR / f"{candidate_id}.json")

    def write_task(self, run_dir: str, task: dict[str, Any]) -> str:
        return self._write_json(Path(run_dir) / TASK_FILE, task)

    def write_design(
        self, run_dir: str, candidate_id: str, design: dict[str, Any], markdown: str
    ) -> str:
        path = self._write_json(Path(self.design_path(run_dir, candidate_id)), design)
        self._write_text(Path(run_dir) / DESIGNS_DIR / f"{candidate_id}.md", markdown)
        return path

    def write_review(
        self, run_dir: str, candidate_id: str, model_key: str, review: dict[str, Any]
    ) -> str:
        path = Path(run_dir) / REVIEWS_DIR / f"review-{candidate_id}-{model_key}.json"
        return self._write_json(path, review)

    def write_scores(
        self, run_dir: str, candidate_id: str, model_key: str, scores: list[dict[str, Any]]
    ) -> str:
        path = Path(run_dir) / SCORES_DIR / f"score-{candidate_id}-{model_key}.json"
        return self._write_json(path, scores)

    def write_ranking(self, run_dir: str, rankings: Sequence[RankedDesign]) -> str:
        path = Path(run_dir) / RESULTS_DIR / RANKING_FILE
        return self._write_json(path, [r.to_dict() for r in rankings])

    def write_report(self, run_dir: str, markdown: str) -> str:
        return self._write_text(Path(run_dir) / RESULTS_DIR / REPORT_FILE, markdown)

    def _write_json(self, path: Path, data: Any) -> str:
        """Atomically write JSON using write-to-temp + rename."""
        path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = path.with_suffix(path.suffix + ".tmp")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        temp_path.replace(path)  # Atomic on POSIX
        logger.debug("Wrote %s", path)
        return str(path)

    def _write_text(self, path: Path, text: str) -> str:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return str(path)

    # =========================================================================
    # READ
    # =========================================================================

    def load_ranking(self, run_dir: str) -> list[RankedDesign]:
        with open(Path(run_dir) / RESULTS_DIR / RANKING_FILE, encoding="utf-8") as f:
            data = json.load(f)
        return [RankedDesign.from_dict(entry) for entry in data]

    def load_run(self, run_dir: str) -> StoredRun:
        """
        Read every persisted artifact of a run.

        Designs follow the candidate order recorded in task.json, then any
        remaining design files by name. Review and score files are matched
        to candidates by the longest candidate id that prefixes their name.
        """
        root = Path(run_dir)
        task_path = root / TASK_FILE
        task: dict[str, Any] = self._read_json(task_path) if task_path.exists() else {}

        found = {p.stem: p for p in sorted((root / DESIGNS_DIR).glob("*.json"))}
        ordered = [cid for cid in task.get("candidates", {}) if cid in found]
        ordered += [cid for cid in found if cid not in ordered]
        designs = {cid: self._read_json(found[cid]) for cid in ordered}

        reviews: dict[str, list[dict[str, Any]]] = {cid: [] for cid in designs}
        for path in sorted((root / REVIEWS_DIR).glob("review-*.json")):
            cid = self._match_candidate(path.stem, "review-", designs)
            if cid is None:
                logger.warning("Review %s matches no design; skipped", path.name)
                continue
            reviews[cid].append(self._read_json(path))

        scores: dict[str, list[list[dict[str, Any]]]] = {cid: [] for cid in designs}
        for path in sorted((root / SCORES_DIR).glob("score-*.json")):
            cid = self._match_candidate(path.stem, "score-", designs)
            if cid is None:
                logger.warning("Score file %s matches no design; skipped", path.name)
                continue
            data = self._read_json(path)
            if isinstance(data, dict):
                data = data.get("scores", [])
            scores[cid].append(data)

        return StoredRun(
            run_dir=str(root), task=task, designs=designs, reviews=reviews, scores=scores
        )

    def _match_candidate(
        self, stem: str, prefix: str, candidates: dict[str, Any]
    ) -> str | None:
        rest = stem[len(prefix) :]
        for cid in sorted(candidates, key=len, reverse=True):
            if rest.startswith(f"{cid}-"):
                return cid
        return None

    def _read_json(self, path: Path) -> Any:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
