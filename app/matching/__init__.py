from app.matching.engine import run_reconciliation, apply_candidate, RunResult, RunState
from app.matching.candidates import generate_candidates, MatchCandidate
from app.matching.selector import select_best, split_by_threshold
from app.matching.scoring import score_pair, ScoreResult

__all__ = [
    "run_reconciliation",
    "apply_candidate",
    "RunResult",
    "RunState",
    "generate_candidates",
    "MatchCandidate",
    "select_best",
    "split_by_threshold",
    "score_pair",
    "ScoreResult",
]
