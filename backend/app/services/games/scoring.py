from typing import Iterable, List, Optional

from app.models import MAX_FINAL_HEIGHT, Player


def find_winner(players: Iterable[Player]) -> Optional[Player]:
    """Return the player with the strictly highest press count.

    Ties go to the earliest registered player. Nobody wins a round where
    nobody pressed.
    """
    winner = None
    for player in sorted(players, key=lambda p: p.joined_order):
        if player.key_presses <= 0:
            continue
        if winner is None or player.key_presses > winner.key_presses:
            winner = player
    return winner


def reference_presses(winner: Optional[Player], target_presses: Optional[int]) -> float:
    max_presses = winner.key_presses if winner else 0
    if target_presses:
        # Use at least 70% of the target so a weak round doesn't max everyone out
        return max(max_presses, target_presses * 0.7)
    return max_presses


def score_round(players: Iterable[Player], winner: Optional[Player],
                target_presses: Optional[int]) -> List[str]:
    """Apply final heights, burst and winner flags.

    Returns the ids of players that never pressed during the round.
    """
    reference = reference_presses(winner, target_presses)
    inactive = []
    for player in players:
        relative = player.key_presses / reference if reference > 0 else 0
        player.final_height = min(MAX_FINAL_HEIGHT, max(0.0, relative * MAX_FINAL_HEIGHT))
        player.has_burst = bool(target_presses) and player.key_presses >= target_presses
        player.is_winner = winner is not None and player.id == winner.id
        if player.key_presses == 0:
            inactive.append(player.id)
    return inactive
