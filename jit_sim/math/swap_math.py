"""
Swap Math - 단일 스왑 스텝 계산

한 틱 구간(현재 가격 → 목표 가격) 안에서의 입력/출력/수수료를 계산합니다.

References:
- Uniswap V3 Core: contracts/libraries/SwapMath.sol

반올림:
    amount_in  → 올림 (풀이 받는 수량)
    amount_out → 내림 (풀이 지급하는 수량)

수수료:
    목표 가격에 도달한 스텝: fee = amount_in * fee_pips / (1e6 - fee_pips)
    목표 전에 멈춘 마지막 스텝 (exact input): fee = amount_remaining - amount_in
"""

from typing import NamedTuple

from ..constants import FEE_DENOMINATOR
from .sqrt_price_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_next_sqrt_price_from_input,
    get_next_sqrt_price_from_output,
)


class SwapStepResult(NamedTuple):
    """스왑 스텝 계산 결과"""
    sqrt_price_next_x96: int
    amount_in: int  # 수수료 제외 입력량
    amount_out: int
    fee_amount: int


def compute_swap_step(
    sqrt_price_current_x96: int,
    sqrt_price_target_x96: int,
    liquidity: int,
    amount_remaining: int,
    fee_pips: int
) -> SwapStepResult:
    """목표 가격까지 (또는 잔여 수량이 소진될 때까지) 스왑 스텝 계산

    방향은 현재/목표 가격 비교로 결정됩니다 (현재 >= 목표 이면 zero_for_one).

    Args:
        sqrt_price_current_x96: 현재 sqrtPriceX96
        sqrt_price_target_x96: 이번 스텝에서 넘을 수 없는 목표 sqrtPriceX96
        liquidity: 활성 유동성
        amount_remaining: 잔여 수량 (양수 = exact input, 음수 = exact output)
        fee_pips: 수수료 티어 (1e6 = 100%, 예: 3000 = 0.30%)

    Returns:
        SwapStepResult(sqrt_price_next_x96, amount_in, amount_out, fee_amount)
    """
    zero_for_one = sqrt_price_current_x96 >= sqrt_price_target_x96
    exact_in = amount_remaining >= 0

    amount_in = 0
    amount_out = 0

    if exact_in:
        amount_remaining_less_fee = amount_remaining * (FEE_DENOMINATOR - fee_pips) // FEE_DENOMINATOR
        if zero_for_one:
            amount_in = get_amount0_delta(sqrt_price_target_x96, sqrt_price_current_x96, liquidity, True)
        else:
            amount_in = get_amount1_delta(sqrt_price_current_x96, sqrt_price_target_x96, liquidity, True)

        if amount_remaining_less_fee >= amount_in:
            sqrt_price_next_x96 = sqrt_price_target_x96
        else:
            sqrt_price_next_x96 = get_next_sqrt_price_from_input(
                sqrt_price_current_x96, liquidity, amount_remaining_less_fee, zero_for_one
            )
    else:
        if zero_for_one:
            amount_out = get_amount1_delta(sqrt_price_target_x96, sqrt_price_current_x96, liquidity, False)
        else:
            amount_out = get_amount0_delta(sqrt_price_current_x96, sqrt_price_target_x96, liquidity, False)

        if -amount_remaining >= amount_out:
            sqrt_price_next_x96 = sqrt_price_target_x96
        else:
            sqrt_price_next_x96 = get_next_sqrt_price_from_output(
                sqrt_price_current_x96, liquidity, -amount_remaining, zero_for_one
            )

    reached_target = sqrt_price_target_x96 == sqrt_price_next_x96

    # 실제 이동한 가격 구간으로 수량 재계산
    if zero_for_one:
        if not (reached_target and exact_in):
            amount_in = get_amount0_delta(sqrt_price_next_x96, sqrt_price_current_x96, liquidity, True)
        if not (reached_target and not exact_in):
            amount_out = get_amount1_delta(sqrt_price_next_x96, sqrt_price_current_x96, liquidity, False)
    else:
        if not (reached_target and exact_in):
            amount_in = get_amount1_delta(sqrt_price_current_x96, sqrt_price_next_x96, liquidity, True)
        if not (reached_target and not exact_in):
            amount_out = get_amount0_delta(sqrt_price_current_x96, sqrt_price_next_x96, liquidity, False)

    # exact output 에서 요청량 이상 지급하지 않음
    if not exact_in and amount_out > -amount_remaining:
        amount_out = -amount_remaining

    if exact_in and not reached_target:
        # 마지막 부분 스텝: 남은 입력 전체가 수수료로 귀속
        fee_amount = amount_remaining - amount_in
    else:
        fee_amount = amount_in * fee_pips // (FEE_DENOMINATOR - fee_pips)

    return SwapStepResult(sqrt_price_next_x96, amount_in, amount_out, fee_amount)
