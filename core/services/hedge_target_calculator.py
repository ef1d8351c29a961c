from dataclasses import dataclass

from core.services.lp_state_calculator import LPState


@dataclass(frozen=True)
class TargetHedges:
    target_hedge1: float
    target_hedge2: float


def calculate_target_hedge_positions(lp_state: LPState) -> TargetHedges:
    """
    Each token is hedged on its own perp: short the token1 exposure (delta)
    on leg 1 and the token2 amount (y) on leg 2. No netting between legs.
    """
    return TargetHedges(
        target_hedge1=-lp_state.delta,
        target_hedge2=-lp_state.token_amount2,
    )


def calculate_adjustment(target_hedge: float, current_hedge: float) -> float:
    """Signed order size: positive = buy/increase, negative = sell/decrease."""
    return target_hedge - current_hedge


def format_position_size(size: float, token: str) -> str:
    if size == 0:
        return f"0 {token}"
    if size < 0:
        return f"Short {abs(size):.3f} {token}"
    return f"Long {size:.3f} {token}"
