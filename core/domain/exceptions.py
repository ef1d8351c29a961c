class LiquidityEstimationError(ValueError):
    """Liquidity could not be inverted from a notional for the given range."""


class InvalidRangeError(LiquidityEstimationError):
    """Non-positive / non-finite price or bounds, or pa >= pb."""


class DegenerateRangeError(LiquidityEstimationError):
    """Inversion denominator is not positive."""


class StrategyNotFoundError(LookupError):
    def __init__(self, strategy_id: str):
        super().__init__(f"strategy not found: {strategy_id}")
        self.strategy_id = strategy_id


class SnapshotNotFoundError(LookupError):
    def __init__(self, snapshot_id: str):
        super().__init__(f"snapshot not found: {snapshot_id}")
        self.snapshot_id = snapshot_id
