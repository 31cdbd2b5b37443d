# /repfees/core/block_resolver.py
# Maps a point in time to the last block mined at or before it.
import math

from repfees.core.config import settings
from repfees.core.logger import get_logger, BLOCK_SEARCH_PROBES

log = get_logger(__name__)


def step_blocks_for(elapsed_s: float) -> int:
    """Number of blocks mined in ``elapsed_s`` seconds at the average block time.

    Rounds half up and never returns less than ``MIN_STEP_BLOCKS``.
    """
    blocks = math.floor(elapsed_s / settings.AVERAGE_BLOCK_TIME_S + 0.5)
    return max(settings.MIN_STEP_BLOCKS, blocks)


class BlockResolver:
    """
    Binary search over block timestamps.

    The caller usually knows only how much time has passed since the target,
    not a real lower block bound. A ``lower_bound`` of 0 therefore means
    "uninformed": the search steps back ``step_blocks`` from the top until it
    lands on a block at or before the target, which gives it a real lower
    bound, and then bisects.
    """
    def __init__(self, ledger):
        self.ledger = ledger

    async def find_block(self, target: int, lower_bound: int, upper_bound: int, step_blocks: int) -> int:
        """
        Returns the highest block whose timestamp is <= ``target``.

        Block timestamps must be non-decreasing. If even block 0 is later than
        ``target`` the result is -1.
        """
        if step_blocks < settings.MIN_STEP_BLOCKS:
            raise ValueError(f"step_blocks must be at least {settings.MIN_STEP_BLOCKS}, got {step_blocks}")

        probes = 0
        while lower_bound <= upper_bound:
            if lower_bound == 0:
                # Never step back past genesis
                probe = max(0, upper_bound - step_blocks)
            else:
                probe = (lower_bound + upper_bound) // 2

            timestamp = await self.ledger.get_block_timestamp(probe)
            probes += 1
            BLOCK_SEARCH_PROBES.inc()

            if timestamp > target:
                upper_bound = probe - 1
            else:
                lower_bound = probe + 1

        log.debug("BLOCK_RESOLVED", target=target, block=upper_bound, probes=probes)
        return upper_bound
