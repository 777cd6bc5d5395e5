from __future__ import annotations

from rapidfuzz import fuzz


def _safe(value: str | None) -> str:
    return (value or "").strip()


def score_bookmark(bookmark, query: str) -> tuple[float, list[str]]:
    q = query.strip().lower()
    title_l = _safe(bookmark.title).lower()
    url_l = _safe(bookmark.url).lower()
    description_l = _safe(getattr(bookmark, "description", "")).lower()
    notes_l = _safe(getattr(bookmark, "notes", "")).lower()
    tags_l = " ".join(tag.name for tag in bookmark.tags).lower()

    score = 0.0
    reasons: list[str] = []

    if q == title_l:
        score += 150
        reasons.append("exact_title")
    elif title_l.startswith(q):
        score += 120
        reasons.append("title_prefix")
    elif q in title_l:
        score += 100
        reasons.append("title_contains")

    if q in tags_l:
        score += 90
        reasons.append("tag_match")

    if url_l and q in url_l:
        score += 60
        reasons.append("url_contains")

    if description_l and q in description_l:
        score += 45
        reasons.append("description_contains")

    if notes_l and q in notes_l:
        score += 35
        reasons.append("notes_contains")

    fuzzy_title = fuzz.partial_ratio(q, title_l) if title_l else 0
    if fuzzy_title >= 72:
        score += fuzzy_title * 0.30
        reasons.append("title_fuzzy")

    fuzzy_meta = fuzz.partial_ratio(q, tags_l) if tags_l else 0
    if fuzzy_meta >= 80:
        score += fuzzy_meta * 0.20
        reasons.append("meta_fuzzy")

    if description_l and len(q) >= 4:
        fuzzy_description = fuzz.partial_ratio(q, description_l[:6000])
        if fuzzy_description >= 88:
            score += fuzzy_description * 0.20
            reasons.append("description_fuzzy")

    return score, reasons


def search_bookmarks(bookmarks, query: str, limit: int = 50):
    if not query or not query.strip():
        return []

    ranked = []
    for bookmark in bookmarks:
        score, reasons = score_bookmark(bookmark, query)
        if reasons and score > 0:
            ranked.append(
                {"bookmark": bookmark, "score": round(score, 2), "reasons": reasons}
            )

    ranked.sort(key=lambda item: item["score"], reverse=True)
    return ranked[:limit]
