from forkswap.core.time.abc import Time
from forkswap.core.time.real import RealTime

__all__ = ["RealTime", "Time"]
