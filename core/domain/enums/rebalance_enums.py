from enum import Enum


class RebalanceReason(str, Enum):
    NONE = "NONE"
    PRICE_MOVE = "PRICE_MOVE"
    DELTA_DRIFT = "DELTA_DRIFT"
    BOTH = "BOTH"
    CROSS_POSITION = "CROSS_POSITION"
    # Reserved for operator overrides; the engine never emits it.
    MANUAL = "MANUAL"


class RangeStatus(str, Enum):
    BELOW_RANGE = "BELOW_RANGE"
    IN_RANGE = "IN_RANGE"
    ABOVE_RANGE = "ABOVE_RANGE"
