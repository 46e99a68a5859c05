from typing import Optional

MAX_POLL_ATTEMPTS = 90
BASE_DELAY_SECONDS = 10
DELAY_STEP_SECONDS = 2
MAX_DELAY_SECONDS = 30


def poll_delay(attempt: int, base: int = BASE_DELAY_SECONDS,
               step: int = DELAY_STEP_SECONDS, cap: int = MAX_DELAY_SECONDS) -> int:
    return min(base + step * attempt, cap)


def next_poll_delay(attempt: int, max_attempts: int = MAX_POLL_ATTEMPTS,
                    base: int = BASE_DELAY_SECONDS, step: int = DELAY_STEP_SECONDS,
                    cap: int = MAX_DELAY_SECONDS) -> Optional[int]:
    """Delay before the poll that follows ``attempt`` (zero based).

    Returns None once ``max_attempts`` polls have been spent.
    """
    if attempt < 0:
        raise ValueError("attempt must be >= 0")
    if attempt + 1 >= max_attempts:
        return None
    return poll_delay(attempt, base=base, step=step, cap=cap)
