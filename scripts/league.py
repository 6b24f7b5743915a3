#!/usr/bin/env python3
"""League CLI: register participants, balance teams, record results, replay ratings."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.balancing.partitioner import spread
from domain.common import MatchRecord, Team
from domain.config import DEFAULT_CONFIG_PATH, EngineConfig, load_engine_config
from domain.errors import TeamBalanceError
from domain.pipeline import league_session, rebuild_ratings
from domain.ratings.calculator import RatingCalculator
from repositories import ensure_league_schema

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Balanced team formation and match rating jobs.",
)

_state: dict[str, object] = {}


@app.callback()
def main(
    db_url: Annotated[
        str,
        typer.Option("--db-url", help="Database URL. Defaults to a local SQLite file."),
    ] = DEFAULT_DB_URL,
    config: Annotated[
        Path,
        typer.Option("--config", help="Engine TOML config file."),
    ] = DEFAULT_CONFIG_PATH,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging."),
    ] = False,
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    engine = create_db_engine(db_url)
    ensure_league_schema(engine)
    _state["session_factory"] = create_session_factory(engine)
    _state["config"] = load_engine_config(config)


def _open_league(*, persist: bool = True):
    engine_config: EngineConfig = _state["config"]  # type: ignore[assignment]
    return league_session(
        _state["session_factory"],  # type: ignore[arg-type]
        calculator=RatingCalculator(engine_config.rating),
        partition_params=engine_config.partition,
        persist=persist,
    )


def _echo_teams(teams: list[Team], match: MatchRecord | None = None) -> None:
    for index, team in enumerate(teams):
        names = ", ".join(
            f"{member.username or member.participant_id}({member.rating:.1f})" for member in team.members
        )
        marker = " (won)" if match is not None and match.is_winner(index) else ""
        typer.echo(f"team {index}{marker}: total={team.total:.1f} members=[{names}]")
    typer.echo(f"spread={spread(teams):.2f}")


def _fail(exc: TeamBalanceError) -> None:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.command()
def register(
    participant_id: Annotated[int, typer.Argument(help="Stable participant id.")],
    rating: Annotated[float, typer.Argument(help="Registration rating (>= 0).")],
    username: Annotated[str, typer.Option("--username", help="Display name.")] = "",
) -> None:
    """Register a participant or reset an existing participant's baseline."""
    try:
        with _open_league() as league:
            participant = league.upsert_participant(participant_id, username, rating)
    except TeamBalanceError as exc:
        _fail(exc)
    typer.echo(f"registered id={participant.participant_id} rating={participant.rating:.1f}")


@app.command()
def remove(participant_id: Annotated[int, typer.Argument()]) -> None:
    """Remove a participant from the registry."""
    try:
        with _open_league() as league:
            league.remove_participant(participant_id)
    except TeamBalanceError as exc:
        _fail(exc)
    typer.echo(f"removed id={participant_id}")


@app.command()
def participants(
    by_name: Annotated[bool, typer.Option("--by-name", help="Sort by username.")] = False,
) -> None:
    """List registered participants."""
    with _open_league(persist=False) as league:
        listed = league.list_participants(sort_by_rating=not by_name)
    if not listed:
        typer.echo("no participants")
        return
    for participant in listed:
        typer.echo(
            f"{participant.participant_id} {participant.username} "
            f"rating={participant.rating:.1f} base={participant.base_rating:.1f} "
            f"wins={participant.wins} games={participant.games} "
            f"win_rate={participant.win_rate:.0%}"
        )


@app.command()
def form(
    num_teams: Annotated[int, typer.Argument(help="Number of teams to form.")],
    participant_ids: Annotated[list[int], typer.Argument(help="Participants to balance.")],
    seed: Annotated[int | None, typer.Option("--seed", help="Fixed search seed.")] = None,
    record: Annotated[
        bool,
        typer.Option("--record", help="Store the formed teams as a new match."),
    ] = False,
) -> None:
    """Balance participants into teams with minimal total spread."""
    try:
        with _open_league(persist=record) as league:
            teams = league.form_teams(participant_ids, num_teams, seed)
            index = league.add_match(teams) if record else None
    except TeamBalanceError as exc:
        _fail(exc)
    _echo_teams(teams)
    if index is not None:
        typer.echo(f"recorded match={index}")


@app.command()
def winner(
    match_index: Annotated[int, typer.Argument(help="History index of the match.")],
    winning_teams: Annotated[
        list[int] | None,
        typer.Argument(help="Winning team indices; omit to clear."),
    ] = None,
) -> None:
    """Set a match's winners and replay all ratings."""
    try:
        with _open_league() as league:
            league.set_match_winner(match_index, winning_teams or [])
    except TeamBalanceError as exc:
        _fail(exc)
    typer.echo(f"match={match_index} winners={winning_teams or []}")


@app.command()
def delete(match_index: Annotated[int, typer.Argument()]) -> None:
    """Delete a match and replay all ratings."""
    try:
        with _open_league() as league:
            league.delete_match(match_index)
    except TeamBalanceError as exc:
        _fail(exc)
    typer.echo(f"deleted match={match_index}")


@app.command()
def recent(
    count: Annotated[int, typer.Option("--count", help="Number of matches to show.")] = 5,
) -> None:
    """Show the most recent matches."""
    with _open_league(persist=False) as league:
        matches = league.recent_matches(count)
        if not matches:
            typer.echo("no matches")
            return
        for index, match in matches:
            typer.echo(f"match {index} played_at={match.played_at:%Y-%m-%d %H:%M:%S} winners={list(match.winning_teams)}")
            _echo_teams(league.match_teams(match), match)


@app.command()
def replay(
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Replay without writing ratings."),
    ] = False,
) -> None:
    """Rebuild every rating from baseline over the stored history."""
    engine_config: EngineConfig = _state["config"]  # type: ignore[assignment]
    try:
        rebuild_ratings(
            session_factory=_state["session_factory"],  # type: ignore[arg-type]
            calculator=RatingCalculator(engine_config.rating),
            dry_run=dry_run,
            echo=typer.echo,
        )
    except TeamBalanceError as exc:
        _fail(exc)


if __name__ == "__main__":
    app()
