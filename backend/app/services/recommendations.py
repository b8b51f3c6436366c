"""Language-exchange partner matching."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from app.models import User, UserLearningLanguage, user_native_languages


@dataclass(slots=True)
class Match:
    user: User
    match_score: int


def match_score(candidate: User, native_ids: set[int], learning_ids: set[int]) -> int:
    """Count overlaps in both directions between a candidate and the requester.

    One point for each language the candidate learns that the requester speaks
    natively, and one for each language the candidate speaks natively that the
    requester learns.
    """

    score = sum(1 for entry in candidate.learning_languages if entry.language_id in native_ids)
    score += sum(1 for language in candidate.native_languages if language.id in learning_ids)
    return score


def _candidates(db: Session, user: User, native_ids: set[int], learning_ids: set[int], limit: int) -> list[User]:
    clauses = []
    if native_ids:
        clauses.append(
            User.id.in_(
                select(UserLearningLanguage.user_id).where(
                    UserLearningLanguage.language_id.in_(native_ids)
                )
            )
        )
    if learning_ids:
        clauses.append(
            User.id.in_(
                select(user_native_languages.c.user_id).where(
                    user_native_languages.c.language_id.in_(learning_ids)
                )
            )
        )
    if not clauses:
        return []
    stmt = (
        select(User)
        .where(User.id != user.id, or_(*clauses))
        .options(
            selectinload(User.native_languages),
            selectinload(User.learning_languages).selectinload(UserLearningLanguage.language),
        )
        .order_by(User.id)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars())


def recommend_partners(db: Session, user: User, *, limit: int = 20) -> list[Match]:
    """Return up to ``limit`` candidates, best match first.

    Candidates are fetched in store order before scoring, and the sort is
    stable, so equal scores keep that order.
    """

    native_ids = user.native_language_ids()
    learning_ids = user.learning_language_ids()
    matches = [
        Match(user=candidate, match_score=match_score(candidate, native_ids, learning_ids))
        for candidate in _candidates(db, user, native_ids, learning_ids, limit)
    ]
    matches.sort(key=lambda match: match.match_score, reverse=True)
    return matches
