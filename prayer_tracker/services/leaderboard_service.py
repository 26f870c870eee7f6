"""
Leaderboard service.
Orders users by composite score. Receives already-computed stats, does no I/O.
"""
from typing import Iterable, List, Optional, Tuple

from prayer_tracker.constants import LEADERBOARD_LIMIT, TrendDirection
from prayer_tracker.schemas import LeaderboardEntry, PeriodStats


class LeaderboardService:
    """Ranking for global and friends leaderboards"""

    @staticmethod
    def build_entry(
        user_id: str,
        nickname: str,
        stats: PeriodStats,
        composite_score: float,
        trend: TrendDirection = TrendDirection.STABLE
    ) -> LeaderboardEntry:
        return LeaderboardEntry(
            user_id=user_id,
            nickname=nickname or "Anonymous",
            average_score=stats.average_score,
            total_days=stats.total_days,
            total_score=stats.total_score,
            consistency=stats.consistency,
            current_streak=stats.current_streak,
            best_streak=stats.best_streak,
            masjid_percentage=stats.masjid_percentage,
            composite_score=composite_score,
            trend=trend,
        )

    @staticmethod
    def rank_entries(
        entries: Iterable[LeaderboardEntry],
        current_user_id: Optional[str] = None,
        limit: int = LEADERBOARD_LIMIT
    ) -> Tuple[List[LeaderboardEntry], Optional[int]]:
        """
        Sort and rank leaderboard entries.

        Users without a single complete day are left out. Ties on composite
        score fall back to average score, then current streak, then total days.

        Args:
            entries: Unranked entries
            current_user_id: User whose rank should be reported
            limit: Maximum number of entries returned

        Returns:
            Tuple of (top entries with 1-based ranks, current user's rank or None)
        """
        ranked = sorted(
            (entry for entry in entries if entry.total_days > 0),
            key=lambda e: (-e.composite_score, -e.average_score, -e.current_streak, -e.total_days),
        )

        current_rank = None
        for position, entry in enumerate(ranked, start=1):
            entry.rank = position
            if entry.user_id == current_user_id:
                current_rank = position

        return ranked[:max(0, limit)], current_rank
