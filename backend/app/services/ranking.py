"""
Leaderboard ranking over a snapshot of score submissions.

Everything here is a pure function of its inputs: nothing is mutated and the
same snapshot always yields the same boards. Equal scores are ordered by who
got there first (earlier ``submitted_at``), then by id, so output never depends
on the order rows came back from the database.
"""
from __future__ import annotations
from collections.abc import Iterable
from datetime import datetime, timezone
from uuid import UUID
from app.schemas.leaderboard import GameLeaderboard, PlayerRanking, RankedScore, TopScore


def _utc(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def _score_order(s) -> tuple:
    return (-s.score_value, _utc(s.submitted_at), str(s.id))


def _ranked(s) -> RankedScore:
    return RankedScore(
        id=s.id,
        score_value=s.score_value,
        status=s.status,
        submitted_at=s.submitted_at,
        image_url=s.image_url,
    )


def rank_players(submissions: Iterable) -> list[PlayerRanking]:
    """Rank the players of one game by their best submission."""
    by_player: dict[UUID, list] = {}
    for s in submissions:
        by_player.setdefault(s.player_id, []).append(s)

    rows = []
    for player_subs in by_player.values():
        ordered = sorted(player_subs, key=_score_order)
        rows.append((ordered[0], ordered[1:]))
    rows.sort(key=lambda r: (*_score_order(r[0])[:2], str(r[0].player_id)))

    return [
        PlayerRanking(
            rank=i,
            player_id=best.player_id,
            player_name=best.player_name,
            player_instagram=best.player_instagram,
            best=_ranked(best),
            others=[_ranked(s) for s in others],
        )
        for i, (best, others) in enumerate(rows, start=1)
    ]


def rank_games(submissions: Iterable, games: Iterable = (), event_id: UUID | None = None) -> list[GameLeaderboard]:
    """
    Per-game leaderboards.

    Game names come from the live catalog; a game deleted since falls back to
    the name stored on its submissions. Games nobody has scored on are left out.
    Boards are ordered by game name.
    """
    catalog = {g.id: g.name for g in games}
    by_game: dict[UUID, list] = {}
    for s in submissions:
        if event_id is not None and s.event_id != event_id:
            continue
        by_game.setdefault(s.game_id, []).append(s)

    boards = []
    for game_id, game_subs in by_game.items():
        players = rank_players(game_subs)
        if not players:
            continue
        name = catalog.get(game_id) or game_subs[0].game_name
        boards.append(GameLeaderboard(game_id=game_id, game_name=name, players=players))
    boards.sort(key=lambda b: (b.game_name.casefold(), str(b.game_id)))
    return boards


def top_scores(submissions: Iterable, limit: int = 10, event_id: UUID | None = None) -> list[TopScore]:
    """Highest individual submissions across all games."""
    pool = [s for s in submissions if event_id is None or s.event_id == event_id]
    pool.sort(key=_score_order)
    return [
        TopScore(
            rank=i,
            id=s.id,
            player_id=s.player_id,
            player_name=s.player_name,
            game_id=s.game_id,
            game_name=s.game_name,
            score_value=s.score_value,
            status=s.status,
            submitted_at=s.submitted_at,
        )
        for i, s in enumerate(pool[:limit], start=1)
    ]
