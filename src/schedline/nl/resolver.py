"""Resolve task references in commands to ids in the specification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from rapidfuzz import fuzz, process, utils

from ..logger import get_logger
from ..parser import iter_spec_entries

logger = get_logger()

DEFAULT_FUZZY_THRESHOLD = 0.7


@dataclass(frozen=True)
class ResolvedEntity:
    """A task reference matched to an entry in the specification."""

    id: str
    name: str
    score: float  # 1.0 for exact id matches
    exact: bool


class EntityResolver:
    """Match a word from a command against the ids and names of every phase,
    workstream and task in a raw specification document.

    Exact case-insensitive id matches always win. Otherwise the best fuzzy
    match over ids and names is used if it scores at least ``threshold``.
    """

    def __init__(self, document: dict[str, Any], threshold: float = DEFAULT_FUZZY_THRESHOLD):
        self.threshold = threshold
        self.entries: list[tuple[str, str]] = []
        for _, entry in iter_spec_entries(document):
            entry_id = entry.get("id")
            if entry_id is None:
                continue
            self.entries.append((str(entry_id), str(entry.get("name") or "")))

        self._by_folded_id = {entry_id.casefold(): (entry_id, name) for entry_id, name in self.entries}

        # Ids and names interleaved; choice index // 2 is the entry index
        self._choices: list[str] = []
        for entry_id, name in self.entries:
            self._choices.extend((entry_id, name))

    def exact(self, candidate: str) -> ResolvedEntity | None:
        match = self._by_folded_id.get(candidate.casefold())
        if match is None:
            return None
        return ResolvedEntity(id=match[0], name=match[1], score=1.0, exact=True)

    def fuzzy(self, candidate: str) -> ResolvedEntity | None:
        if not self._choices:
            return None
        result = process.extractOne(
            candidate,
            self._choices,
            scorer=fuzz.WRatio,
            processor=utils.default_process,
            score_cutoff=self.threshold * 100,
        )
        if result is None:
            logger.debug(f"  no fuzzy match for '{candidate}'")
            return None

        choice, score, index = result
        entry_id, name = self.entries[index // 2]
        logger.debug(f"  fuzzy match '{candidate}' -> {entry_id} via '{choice}' ({score:.1f})")
        return ResolvedEntity(id=entry_id, name=name, score=score / 100, exact=False)

    def resolve(self, candidate: str) -> ResolvedEntity | None:
        """Exact id match first, then fuzzy match; None when nothing is close enough."""
        return self.exact(candidate) or self.fuzzy(candidate)
