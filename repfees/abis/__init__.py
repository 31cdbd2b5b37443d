from repfees.abis.augur import CASH_ABI, FEE_WINDOW_ABI, UNIVERSE_ABI

__all__ = ["CASH_ABI", "FEE_WINDOW_ABI", "UNIVERSE_ABI"]
