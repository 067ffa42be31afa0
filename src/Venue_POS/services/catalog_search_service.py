"""
Venue_POS.services.catalog_search_service

Fuzzy lookup of catalog services by name, for the cashier's service picker.

Strategy:
  1) Normalize (lowercase, strip punctuation, collapse spaces)
  2) Plain substring hits rank first (score 100)
  3) Everything else is scored with RapidFuzz and cut at min_score
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Sequence

from rapidfuzz import fuzz, process

from Venue_POS.domain.models import Service


@dataclass
class ServiceMatch:
    service: Service
    score: float  # 0-100


def _normalize(text: str) -> str:
    t = (text or "").strip().lower()
    t = re.sub(r"[^\w\s]", " ", t)
    t = re.sub(r"\s+", " ", t).strip()
    return t


def search_services(
    services: Sequence[Service],
    query: str,
    limit: int = 10,
    min_score: float = 60.0,
) -> List[ServiceMatch]:
    needle = _normalize(query)
    if not needle or not services:
        return []

    names = [_normalize(s.name) for s in services]

    hits: List[ServiceMatch] = []
    seen = set()
    for idx, name in enumerate(names):
        if needle in name:
            hits.append(ServiceMatch(service=services[idx], score=100.0))
            seen.add(idx)

    fuzzy = process.extract(
        needle,
        names,
        scorer=fuzz.WRatio,
        limit=None,
        score_cutoff=min_score,
    )
    for _name, score, idx in sorted(fuzzy, key=lambda r: r[1], reverse=True):
        if idx in seen:
            continue
        hits.append(ServiceMatch(service=services[idx], score=float(score)))
        seen.add(idx)

    return hits[:limit]
