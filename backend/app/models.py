from typing import Any, Dict, Optional

NUT_TYPES = ['almond', 'peanut', 'walnut', 'pistachio', 'cashew', 'hazelnut']

# Size reference when the round has no target
DEFAULT_SIZE_REFERENCE = 100
MAX_FINAL_HEIGHT = 20.0


def hash_code(value: str) -> int:
    """Java-style string hash wrapped to a signed 32-bit int.

    Matches the hash the browser client uses, so both sides agree on the
    nut a given connection id maps to.
    """
    h = 0
    for ch in value:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h


def assign_nut_type(player_id: str) -> str:
    return NUT_TYPES[abs(hash_code(player_id)) % len(NUT_TYPES)]


def inflation_size(key_presses: int, target_presses: Optional[int]) -> float:
    """Base size 1, growing to about 3x at the target."""
    reference = target_presses or DEFAULT_SIZE_REFERENCE
    return 1 + (key_presses / reference) * 2


class Player:
    def __init__(self, id: str, name: str, joined_order: int):
        self.id = id
        self.name = name
        self.joined_order = joined_order
        self.key_presses = 0
        self.inflation_size = 1.0
        self.final_height = 0.0
        self.has_burst = False
        self.is_winner = False
        self.cosmetic_variant = assign_nut_type(id)
        # Timestamp (ms) of the last accepted press, None until the first one
        self.last_press_at: Optional[float] = None

    def reset_for_round(self) -> None:
        self.key_presses = 0
        self.inflation_size = 1.0
        self.final_height = 0.0
        self.has_burst = False
        self.is_winner = False
        self.cosmetic_variant = assign_nut_type(self.id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'keyPresses': self.key_presses,
            'inflationSize': self.inflation_size,
            'finalHeight': self.final_height,
            'hasBurst': self.has_burst,
            'isWinner': self.is_winner,
            'cosmeticVariant': self.cosmetic_variant,
        }


class Round:
    """The single global game round. Reused across rounds, never replaced."""

    def __init__(self, duration: int, target_presses: Optional[int] = None):
        self.is_active = False
        self.start_time: Optional[float] = None
        self.duration = duration
        # 0 and None both mean timer-only
        self.target_presses = target_presses or None
        self.timeout_handle = None
        # Bumped on every start; timers carry the number they were set for
        self.number = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isActive': self.is_active,
            'startTime': self.start_time,
            'duration': self.duration,
            'targetPresses': self.target_presses,
        }
