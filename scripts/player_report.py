#!/usr/bin/env python3
"""Print statistics for players in a JSON ledger file."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List

import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from landlord.logging import setup_logging
from landlord.models import Bid, Player, PlayerStatistics
from landlord.settings import get_settings
from landlord.statistics import compute_statistics
from landlord.store import JsonFileStore, find_player

logger = logging.getLogger("player_report")


def parse_args() -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Report per-player statistics from a ledger file.")
    parser.add_argument("--ledger", type=str, default=settings.data_file, help="Path to the JSON ledger.")
    parser.add_argument("--player", action="append", default=[], help="Player id or name (repeatable).")
    parser.add_argument("--all", action="store_true", help="Report every registered player.")
    parser.add_argument("--log-level", type=str, default=settings.log_level)
    return parser.parse_args()


def format_report(player: Player, stats: PlayerStatistics) -> List[str]:
    first_bids = ", ".join(f"{bid}: {stats.first_bid_count(bid)}" for bid in Bid)
    return [
        f"== {player.name} ({player.id}) ==",
        f"Rounds: {stats.total_rounds}  won {stats.rounds_won}  lost {stats.rounds_lost}  win rate {stats.win_rate:.1f}%",
        f"Landlord: {stats.rounds_as_landlord} rounds, {stats.landlord_win_rate:.1f}% won",
        f"Farmer: {stats.rounds_as_farmer} rounds, {stats.farmer_win_rate:.1f}% won",
        f"First bids ({stats.first_bidder_rounds} rounds): {first_bids}",
        f"Springs: {stats.spring_count} made, {stats.sprung_against_count} suffered",
        f"Doubled: {stats.doubled_rounds} rounds, {stats.doubled_win_rate:.1f}% won",
        f"Round streaks: current +{stats.current_win_streak}/-{stats.current_loss_streak}  "
        f"best +{stats.max_win_streak}/-{stats.max_loss_streak}",
        f"Matches: {stats.total_matches}  won {stats.matches_won}  lost {stats.matches_lost}  tied {stats.matches_tied}",
        f"Score: total {stats.total_score}  avg/round {stats.average_score_per_round:.1f}  "
        f"best round {stats.best_round_score}  worst round {stats.worst_round_score}",
        f"Running total: peak {stats.running_peak}  trough {stats.running_trough}",
    ]


def main() -> None:
    args = parse_args()
    setup_logging(args.log_level, get_settings().log_dir, name=f"{Path(args.ledger).stem}-report")
    ledger = Path(args.ledger)
    if not ledger.exists():
        raise SystemExit(f"Ledger {ledger} not found")
    store = JsonFileStore(ledger)

    if args.all:
        players = store.players()
    else:
        players = []
        for key in args.player:
            player = find_player(store, key)
            if player is None:
                raise SystemExit(f"Unknown player {key!r}")
            players.append(player)
    if not players:
        raise SystemExit("Pass --player or --all")

    for player in players:
        stats = compute_statistics(
            player.id,
            store.load_round_records_for_player(player.id),
            store.load_match_summaries(player.id),
        )
        logger.debug("computed statistics for %s", player.id)
        print("\n".join(format_report(player, stats)))
        print()


if __name__ == "__main__":
    main()
