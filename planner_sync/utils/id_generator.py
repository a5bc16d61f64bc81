"""
Identifier generators for world planner records.

Two independent id domains:

Asset ids (textures, weather) - 64-bit snowflakes:
    [1 bit unused][41 bits: ms since EPOCH_MS][10 bits: machine id][12 bits: sequence]
    Unique for the lifetime of the process and non-decreasing,
    so they sort by creation time and fit a signed BIGINT.

Item ids - 9 byte packed ids (18 hex chars):
    [2 random bytes][4 bytes: big-endian game id][1 random byte][2 random bytes]
    The game id sits at a fixed offset so any consumer can recover it.
    The random bytes keep ids from being guessed sequentially.
"""
import secrets
import time
from typing import Callable, Optional

# 2020-01-01T00:00:00Z
EPOCH_MS = 1577836800000

MACHINE_ID_BITS = 10
SEQUENCE_BITS = 12
MAX_MACHINE_ID = (1 << MACHINE_ID_BITS) - 1
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1

ITEM_ID_LENGTH = 9
NUMERIC_ID_OFFSET = 2
NUMERIC_ID_LENGTH = 4
MAX_NUMERIC_ID = (1 << (8 * NUMERIC_ID_LENGTH)) - 1


def _now_ms() -> int:
    return int(time.time() * 1000)


class SnowflakeGenerator:
    """
    Time-ordered 64-bit id generator.

    Args:
        machine_id: Process/machine discriminant (0-1023)
        epoch_ms: Epoch offset in unix milliseconds
        clock: Millisecond clock, injectable for tests
    """

    def __init__(
        self,
        machine_id: int = 1,
        epoch_ms: int = EPOCH_MS,
        clock: Optional[Callable[[], int]] = None,
    ):
        if not 0 <= machine_id <= MAX_MACHINE_ID:
            raise ValueError(f"machine_id must be between 0 and {MAX_MACHINE_ID}, got {machine_id}")
        self.machine_id = machine_id
        self.epoch_ms = epoch_ms
        self._clock = clock or _now_ms
        self._last_ms = -1
        self._sequence = 0

    def next_id(self) -> int:
        """Generate the next id."""
        now = self._clock()

        # Clock went backwards: keep issuing on the last timestamp
        if now < self._last_ms:
            now = self._last_ms

        if now == self._last_ms:
            self._sequence = (self._sequence + 1) & MAX_SEQUENCE
            if self._sequence == 0:
                now = self._wait_next_ms(self._last_ms)
        else:
            self._sequence = 0

        self._last_ms = now
        elapsed = now - self.epoch_ms
        if elapsed < 0:
            raise ValueError(f"Clock is before the snowflake epoch ({self.epoch_ms})")

        return (
            (elapsed << (MACHINE_ID_BITS + SEQUENCE_BITS))
            | (self.machine_id << SEQUENCE_BITS)
            | self._sequence
        )

    def _wait_next_ms(self, last_ms: int) -> int:
        now = self._clock()
        while now <= last_ms:
            time.sleep(0.0001)
            now = self._clock()
        return now

    def timestamp_ms(self, snowflake: int) -> int:
        """Unix milliseconds at which an id was generated."""
        return (snowflake >> (MACHINE_ID_BITS + SEQUENCE_BITS)) + self.epoch_ms


def generate_item_id(numeric_id: int) -> bytes:
    """
    Generate a new packed item id embedding the game id.

    Args:
        numeric_id: Item game id (unsigned 32-bit)

    Returns:
        9 byte id

    Raises:
        ValueError: If numeric_id does not fit in 4 bytes
    """
    if not 0 <= numeric_id <= MAX_NUMERIC_ID:
        raise ValueError(f"Item id out of range for packed id: {numeric_id}")

    return (
        secrets.token_bytes(2)
        + numeric_id.to_bytes(NUMERIC_ID_LENGTH, 'big')
        + secrets.token_bytes(1)
        + secrets.token_bytes(2)
    )


def extract_numeric_id(item_id: bytes) -> int:
    """Recover the game id embedded in a packed item id."""
    if len(item_id) != ITEM_ID_LENGTH:
        raise ValueError(f"Packed item id must be {ITEM_ID_LENGTH} bytes, got {len(item_id)}")
    return int.from_bytes(item_id[NUMERIC_ID_OFFSET:NUMERIC_ID_OFFSET + NUMERIC_ID_LENGTH], 'big')


def item_id_hex(item_id: bytes) -> str:
    """18 character hex form used in logs and external references."""
    return item_id.hex()
