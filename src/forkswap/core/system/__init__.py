from forkswap.core.system.abc import System
from forkswap.core.system.real import RealSystem

__all__ = ["RealSystem", "System"]
