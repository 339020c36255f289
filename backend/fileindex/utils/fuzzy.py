"""Approximate substring matching (edit distance against the best substring)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FuzzyMatch:
    score: float  # errors / len(pattern); 0.0 = exact
    start: int
    end: int  # inclusive

    @property
    def length(self) -> int:
        return self.end - self.start + 1


def best_match(pattern: str, text: str) -> FuzzyMatch | None:
    """Best case-insensitive match of pattern anywhere in text.

    Sellers' variant of Levenshtein: leading and trailing text is free, so
    the position of the match does not affect the score.
    """
    p = pattern.lower()
    t = text.lower()
    m, n = len(p), len(t)
    if m == 0 or n == 0:
        return None

    idx = t.find(p)
    if idx != -1:
        return FuzzyMatch(0.0, idx, idx + m - 1)

    # Two rolling rows of distances plus where each candidate substring starts
    prev = [0] * (n + 1)
    prev_start = list(range(n + 1))
    for i in range(1, m + 1):
        cur = [i] + [0] * n
        cur_start = [0] * (n + 1)
        pc = p[i - 1]
        for j in range(1, n + 1):
            cost = prev[j - 1] + (pc != t[j - 1])
            start = prev_start[j - 1]
            if prev[j] + 1 < cost:
                cost = prev[j] + 1
                start = prev_start[j]
            if cur[j - 1] + 1 < cost:
                cost = cur[j - 1] + 1
                start = cur_start[j - 1]
            cur[j] = cost
            cur_start[j] = start
        prev, prev_start = cur, cur_start

    best_end = min(range(1, n + 1), key=prev.__getitem__)
    start = prev_start[best_end]
    if best_end <= start:
        return None
    return FuzzyMatch(min(prev[best_end] / m, 1.0), start, best_end - 1)
