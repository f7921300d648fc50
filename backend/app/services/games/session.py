"""Authoritative state for the single shared game room.

The SessionManager owns every Player record and the one Round. Transport
handlers call into it; it answers by pushing notifications through a
notifier (broadcast or unicast). Invalid or out-of-turn requests are
silent no-ops.
"""

import itertools
import logging
import threading
import time
from typing import Any, Callable, Dict, List, Optional

from app.models import NUT_TYPES, Player, Round, inflation_size
from .scoring import find_winner, score_round


def _now_ms() -> float:
    return time.time() * 1000


class SessionManager:
    def __init__(self, notifier, scheduler, duration_ms: int = 30000,
                 target_presses: Optional[int] = 100, cooldown_ms: int = 200,
                 eviction_delay_ms: int = 5500,
                 clock: Optional[Callable[[], float]] = None,
                 logger: Optional[logging.Logger] = None):
        self.notifier = notifier
        self.scheduler = scheduler
        self.cooldown_ms = cooldown_ms
        self.eviction_delay_ms = eviction_delay_ms
        self.clock = clock or _now_ms
        self.logger = logger or logging.getLogger(__name__)
        self.round = Round(duration_ms, target_presses)
        # Insertion order doubles as registration order
        self._players: Dict[str, Player] = {}
        self._name_counter = itertools.count(1)
        self._join_counter = itertools.count()
        # Socket handlers and timer tasks may run on different threads
        self._lock = threading.RLock()

    # ---- registry ----

    def get_player(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    def players_snapshot(self) -> Dict[str, Dict[str, Any]]:
        return {pid: p.to_dict() for pid, p in self._players.items()}

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {'round': self.round.to_dict(), 'players': self.players_snapshot()}

    def register(self, player_id: str) -> Player:
        with self._lock:
            player = Player(
                id=player_id,
                name=f"Player {next(self._name_counter)}",
                joined_order=next(self._join_counter),
            )
            self._players[player_id] = player
            self.logger.info(f"[connect] player={player_id} name={player.name!r} players={len(self._players)}")
            self.notifier.send(player_id, 'currentPlayers', self.players_snapshot())
            self.notifier.broadcast('newPlayer', player.to_dict(), skip=player_id)
            return player

    def unregister(self, player_id: str) -> None:
        with self._lock:
            player = self._players.pop(player_id, None)
            if player is None:
                return
            self.logger.info(f"[disconnect] player={player_id} players={len(self._players)}")
            self.notifier.broadcast('playerDisconnected', player_id)

    def rename(self, player_id: str, name: Any) -> None:
        with self._lock:
            player = self._players.get(player_id)
            if player is None:
                return
            player.name = name
            self.notifier.broadcast('updatePlayer', player.to_dict())

    def select_variant(self, player_id: str, variant: Any) -> None:
        with self._lock:
            player = self._players.get(player_id)
            if player is None or variant not in NUT_TYPES:
                return
            player.cosmetic_variant = variant
            self.notifier.broadcast('updatePlayer', player.to_dict())

    # ---- input ----

    def handle_key_press(self, player_id: str) -> None:
        with self._lock:
            if not self.round.is_active:
                return
            player = self._players.get(player_id)
            if player is None:
                return
            now = self.clock()
            if player.last_press_at is not None and now - player.last_press_at < self.cooldown_ms:
                return
            player.key_presses += 1
            player.inflation_size = inflation_size(player.key_presses, self.round.target_presses)
            player.last_press_at = now
            self.notifier.broadcast('updatePlayer', player.to_dict())

            target = self.round.target_presses
            if target and player.key_presses >= target:
                self.end_round(player_id)

    # ---- round lifecycle ----

    def start_round(self) -> bool:
        """Start a round. Returns False when the request was a no-op."""
        with self._lock:
            if self.round.is_active or not self._players:
                return False
            for player in self._players.values():
                player.reset_for_round()
            self.round.is_active = True
            self.round.number += 1
            self.round.start_time = self.clock()
            self.logger.info(
                f"[round-start] players={len(self._players)} duration={self.round.duration}ms "
                f"target={self.round.target_presses}"
            )
            self.notifier.broadcast('gameStarted', self.round.to_dict())
            self.round.timeout_handle = self.scheduler.call_later(
                self.round.duration, self._on_round_timeout, self.round.number, name='round-end'
            )
            return True

    def _on_round_timeout(self, round_number: int) -> None:
        with self._lock:
            # The timer may have woken before an early win and a restart
            # that it then waited behind on the lock
            if not self.round.is_active or self.round.number != round_number:
                self.logger.info(f"[timer-abort] stale round-end for round {round_number}")
                return
            self.end_round()

    def end_round(self, winner_id: Optional[str] = None) -> bool:
        """Close the active round and broadcast the outcome.

        Both the duration timer and a threshold-reaching press land here,
        so a stale timer after an early win must find the round inactive.
        Returns False when there was no active round.
        """
        with self._lock:
            if not self.round.is_active:
                return False
            if self.round.timeout_handle is not None:
                self.round.timeout_handle.cancel()
                self.round.timeout_handle = None
            self.round.is_active = False

            winner = self._players.get(winner_id) if winner_id else None
            if winner is None:
                winner = find_winner(self._players.values())
            target = self.round.target_presses
            inactive = score_round(self._players.values(), winner, target)
            threshold_reached = bool(winner is not None and target and winner.key_presses >= target)

            self.logger.info(
                f"[round-end] winner={winner.id if winner else None} "
                f"threshold_reached={threshold_reached} inactive={len(inactive)}"
            )
            self.notifier.broadcast('gameEnded', {
                'winner': winner.to_dict() if winner else None,
                'players': self.players_snapshot(),
                'thresholdReached': threshold_reached,
            })
            if inactive:
                self.scheduler.call_later(
                    self.eviction_delay_ms, self._evict_inactive, inactive, name='evict-inactive'
                )
            return True

    def _evict_inactive(self, player_ids: List[str]) -> None:
        with self._lock:
            removed = 0
            for player_id in player_ids:
                player = self._players.get(player_id)
                # A new round may have started during the grace delay
                if player is None or player.key_presses > 0:
                    continue
                self.logger.info(f"[evict] removing inactive player {player.name!r} ({player_id})")
                self.notifier.send(player_id, 'kickedForInactivity')
                del self._players[player_id]
                self.notifier.broadcast('playerDisconnected', player_id)
                removed += 1
            if removed:
                self.logger.info(f"[evict] removed {removed} inactive player(s)")
