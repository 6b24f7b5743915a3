"""Balanced team partitioning via seeded branch-and-bound search."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from domain.common import Participant, Team
from domain.errors import InfeasibleTeamCountError, InvalidTeamCountError

logger = logging.getLogger(__name__)

_FNV_OFFSET = 0xCBF29CE484222325
_FNV_PRIME = 0x100000001B3
_MASK_64 = 0xFFFFFFFFFFFFFFFF


@dataclass(frozen=True)
class PartitionParameters:
    epsilon: float = 1e-12
    max_participants: int = 0
    # 0 disables the budget; otherwise the best partition found so far is returned.
    max_nodes: int = 50_000


def _mix64(value: int) -> int:
    value &= _MASK_64
    value ^= value >> 33
    value = (value * 0xFF51AFD7ED558CCD) & _MASK_64
    value ^= value >> 33
    value = (value * 0xC4CEB9FE1A85EC53) & _MASK_64
    value ^= value >> 33
    return value


def derive_seed(participant_ids: Iterable[int], *, entropy: int | None = None) -> int:
    """Hash the sorted participant ids and mix in wall-clock entropy.

    Passing the same ``entropy`` reproduces the same seed; omitting it makes
    repeated calls vary from run to run.
    """
    digest = _FNV_OFFSET
    for participant_id in sorted(participant_ids):
        digest ^= int(participant_id) & _MASK_64
        digest = (digest * _FNV_PRIME) & _MASK_64

    if entropy is None:
        entropy = time.time_ns()
    return digest ^ _mix64(entropy)


def spread(teams: Sequence[Team]) -> float:
    """Difference between the strongest and weakest team total."""
    if not teams:
        return 0.0
    totals = [team.total for team in teams]
    return max(totals) - min(totals)


class _PartitionSearch:
    """Backtracking state owned by exactly one partition call."""

    def __init__(
        self,
        ratings: Sequence[float],
        num_teams: int,
        rng: random.Random,
        epsilon: float,
        max_nodes: int = 0,
    ) -> None:
        self.ratings = list(ratings)
        self.num_teams = num_teams
        self.rng = rng
        self.epsilon = epsilon
        self.max_nodes = max_nodes
        self.size = len(self.ratings)

        self.suffix = [0.0] * (self.size + 1)
        for index in range(self.size - 1, -1, -1):
            self.suffix[index] = self.suffix[index + 1] + self.ratings[index]
        self.target_mean = self.suffix[0] / num_teams

        self.totals = [0.0] * num_teams
        self.counts = [0] * num_teams
        self.assignment = [-1] * self.size

        self.best_assignment = [-1] * self.size
        self.best_spread = float("inf")
        self.visited_nodes = 0
        self.pruned_nodes = 0
        self.budget_exhausted = False

    def run(self) -> list[int]:
        self._seed_with_greedy()
        self._search(0)
        if self.budget_exhausted:
            logger.info(
                "partition search stopped after %d nodes; returning best spread %.6f",
                self.visited_nodes,
                self.best_spread,
            )
        logger.debug(
            "partition search finished participants=%d teams=%d spread=%.6f visited=%d pruned=%d",
            self.size,
            self.num_teams,
            self.best_spread,
            self.visited_nodes,
            self.pruned_nodes,
        )
        return self.best_assignment

    def _empty_teams(self, counts: Sequence[int]) -> list[int]:
        return [team for team in range(self.num_teams) if counts[team] == 0]

    def _seed_with_greedy(self) -> None:
        totals = [0.0] * self.num_teams
        counts = [0] * self.num_teams
        assignment = [-1] * self.size

        for index, rating in enumerate(self.ratings):
            empty = self._empty_teams(counts)
            if empty and len(empty) == self.size - index:
                candidates = empty
            else:
                candidates = list(range(self.num_teams))

            best_team = candidates[0]
            best_cost = float("inf")
            for team in candidates:
                totals[team] += rating
                cost = max(totals) - min(totals)
                totals[team] -= rating
                if cost < best_cost:
                    best_cost = cost
                    best_team = team
                elif cost == best_cost and self.rng.getrandbits(1):
                    best_team = team

            totals[best_team] += rating
            counts[best_team] += 1
            assignment[index] = best_team

        self.best_assignment = assignment
        self.best_spread = max(totals) - min(totals)

    def _lower_bound(self, index: int) -> float:
        # Final max is at least max(current max, mean); final min is at most
        # min(mean, current min plus everything still unassigned).
        current_max = max(self.totals)
        current_min = min(self.totals)
        highest = max(current_max, self.target_mean)
        lowest = min(self.target_mean, current_min + self.suffix[index])
        return max(0.0, highest - lowest)

    def _placement_order(self, index: int) -> list[int]:
        empty = self._empty_teams(self.counts)
        if empty and len(empty) == self.size - index:
            self.rng.shuffle(empty)
            return empty[:1]

        ordered = sorted(
            range(self.num_teams),
            key=lambda team: (self.totals[team], self.counts[team]),
        )
        # Teams with the same total and emptiness lead to mirrored subtrees.
        seen: set[tuple[float, bool]] = set()
        order: list[int] = []
        for team in ordered:
            key = (self.totals[team], self.counts[team] == 0)
            if key not in seen:
                seen.add(key)
                order.append(team)
        return order

    def _accept_leaf(self) -> None:
        if 0 in self.counts:
            return

        leaf_spread = max(self.totals) - min(self.totals)
        if leaf_spread < self.best_spread - self.epsilon:
            self.best_spread = leaf_spread
            self.best_assignment = self.assignment[:]
        elif abs(leaf_spread - self.best_spread) <= self.epsilon and self.rng.getrandbits(1):
            self.best_assignment = self.assignment[:]

    def _search(self, index: int) -> None:
        if self.budget_exhausted:
            return
        if self.max_nodes and self.visited_nodes >= self.max_nodes:
            self.budget_exhausted = True
            return
        self.visited_nodes += 1
        if index == self.size:
            self._accept_leaf()
            return

        if self._lower_bound(index) >= self.best_spread - self.epsilon:
            self.pruned_nodes += 1
            return

        rating = self.ratings[index]
        for team in self._placement_order(index):
            self.totals[team] += rating
            self.counts[team] += 1
            self.assignment[index] = team

            self._search(index + 1)

            self.assignment[index] = -1
            self.counts[team] -= 1
            self.totals[team] -= rating
            if self.budget_exhausted:
                break


def partition(
    participants: Sequence[Participant],
    num_teams: int,
    seed: int | None = None,
    *,
    params: PartitionParameters | None = None,
) -> list[Team]:
    """Split participants into ``num_teams`` non-empty teams with minimal spread.

    The same participants (in any order) and the same ``seed`` always give the
    same teams. Among equally balanced partitions the choice is random.
    When ``params.max_nodes`` is spent the best partition found so far is
    returned; it is always complete with no empty team.
    """
    params = params or PartitionParameters()
    if num_teams < 1:
        raise InvalidTeamCountError(f"num_teams must be >= 1, got {num_teams}")
    if len(participants) < num_teams:
        raise InfeasibleTeamCountError(
            f"cannot form {num_teams} non-empty teams from {len(participants)} participants"
        )

    if seed is None:
        seed = derive_seed(participant.participant_id for participant in participants)
    rng = random.Random(seed)

    players = sorted(participants, key=lambda participant: (participant.participant_id, participant.rating))
    rng.shuffle(players)
    players.sort(key=lambda participant: participant.rating, reverse=True)

    search = _PartitionSearch(
        [float(player.rating) for player in players],
        num_teams,
        rng,
        params.epsilon,
        params.max_nodes,
    )
    assignment = search.run()

    rosters: list[list[Participant]] = [[] for _ in range(num_teams)]
    totals = [0.0] * num_teams
    for player, team in zip(players, assignment):
        if team < 0 or team >= num_teams:
            team = min(range(num_teams), key=lambda candidate: totals[candidate])
        rosters[team].append(player)
        totals[team] += player.rating

    return [Team(members=tuple(roster)) for roster in rosters]


__all__ = ["PartitionParameters", "derive_seed", "partition", "spread"]
