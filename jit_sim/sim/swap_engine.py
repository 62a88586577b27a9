"""
Swap Engine - 틱 단위 스왑 시뮬레이션

풀 상태에 대해 스왑을 실행하고 가격/유동성/수수료 누적값을 갱신합니다.

루프 (잔여 수량 != 0 이고 가격 != 가격 한도 인 동안):
1. 진행 방향의 다음 초기화된 틱 탐색 (TICK_SCAN_LIMIT 간격까지 선형 탐색)
2. 목표 가격 = 그 틱의 가격 (가격 한도를 넘지 않도록 클램프)
3. compute_swap_step()으로 입력/출력/수수료 계산
4. 수수료를 활성 유동성으로 나눠 입력 토큰의 fee growth에 누적
5. 틱에 정확히 도달하면 크로싱 (fee_growth_outside 반전, liquidity_net 적용)

가격, 틱, 유동성, 전역 fee growth는 루프 종료 후 한 번에 기록합니다.
"""

import logging
from typing import List, NamedTuple, Optional, Tuple

from ..config import settings
from ..constants import MIN_TICK, MAX_TICK, MIN_SQRT_RATIO, MAX_SQRT_RATIO
from ..errors import InvalidAmountError, InvalidPriceLimitError
from ..math.fee_math import fee_growth_per_liquidity, wrap_uint256
from ..math.sqrt_price_math import calculate_price_impact
from ..math.swap_math import compute_swap_step
from ..math.tick_math import get_sqrt_ratio_at_tick, get_tick_at_sqrt_ratio
from .pool_state import PoolState, cross_tick

logger = logging.getLogger(__name__)


class SwapParams(NamedTuple):
    zero_for_one: bool  # True: token0 → token1 (가격 하락)
    amount_specified: int  # 양수 = exact input, 음수 = exact output
    sqrt_price_limit_x96: Optional[int] = None


class SwapStep(NamedTuple):
    """스텝 로그 (진단용)"""
    sqrt_price_start_x96: int
    tick_next: int
    initialized: bool
    sqrt_price_next_x96: int
    amount_in: int
    amount_out: int
    fee_amount: int


class SwapResult(NamedTuple):
    amount0: int  # 양수 = 트레이더가 풀에 지급, 음수 = 풀이 트레이더에게 지급
    amount1: int
    sqrt_price_x96: int
    liquidity: int
    tick: int
    fee_amount: int
    price_impact_pct: float
    steps: Tuple[SwapStep, ...] = ()


def next_initialized_tick(state: PoolState, tick: int, zero_for_one: bool) -> Tuple[int, bool]:
    """진행 방향의 다음 초기화된 틱 탐색

    하향: tick 이하의 가장 큰 간격 배수부터 (현재 틱 포함)
    상향: tick 보다 큰 가장 작은 간격 배수부터

    최대 settings.TICK_SCAN_LIMIT 간격(최소 1)까지만 탐색하며, 찾지 못하면
    마지막으로 확인한 틱에서 한 간격 더 나아간 틱을 반환합니다.
    풀 경계를 넘으면 MIN_TICK / MAX_TICK 을 반환합니다.

    Returns:
        (tick_next, initialized)
    """
    spacing = state.tick_spacing

    if zero_for_one:
        tick_next = (tick // spacing) * spacing
        step = -spacing
    else:
        tick_next = (tick // spacing + 1) * spacing
        step = spacing

    limit = max(1, settings.TICK_SCAN_LIMIT)
    for _ in range(limit):
        if tick_next < MIN_TICK:
            return MIN_TICK, False
        if tick_next > MAX_TICK:
            return MAX_TICK, False

        info = state.ticks.get(tick_next)
        if info is not None and info.initialized:
            return tick_next, True
        tick_next += step

    tick_next = max(MIN_TICK, min(MAX_TICK, tick_next))
    logger.debug(
        "tick scan exhausted after %d spacings from tick %d, stepping to %d",
        limit, tick, tick_next,
    )
    info = state.ticks.get(tick_next)
    return tick_next, info is not None and info.initialized


def _resolve_price_limit(state: PoolState, params: SwapParams) -> int:
    limit = params.sqrt_price_limit_x96
    if limit is None:
        return MIN_SQRT_RATIO + 1 if params.zero_for_one else MAX_SQRT_RATIO - 1

    if params.zero_for_one:
        valid = MIN_SQRT_RATIO < limit < state.sqrt_price_x96
    else:
        valid = state.sqrt_price_x96 < limit < MAX_SQRT_RATIO
    if not valid:
        raise InvalidPriceLimitError(
            f"가격 한도 {limit}이 현재 가격 {state.sqrt_price_x96} 기준 "
            f"{'하향' if params.zero_for_one else '상향'} 스왑에 유효하지 않습니다"
        )
    return limit


def execute_swap(state: PoolState, params: SwapParams) -> SwapResult:
    """풀 상태에 대해 스왑 실행 (state를 변경함)

    Args:
        state: 스왑 대상 풀 상태
        params: SwapParams(zero_for_one, amount_specified, sqrt_price_limit_x96)

    Returns:
        SwapResult

    Raises:
        InvalidAmountError: amount_specified == 0
        InvalidPriceLimitError: 가격 한도가 방향/범위와 맞지 않음
    """
    if params.amount_specified == 0:
        raise InvalidAmountError("스왑 수량은 0일 수 없습니다")

    sqrt_price_limit_x96 = _resolve_price_limit(state, params)
    zero_for_one = params.zero_for_one
    exact_input = params.amount_specified > 0

    sqrt_price_start_x96 = state.sqrt_price_x96
    sqrt_price_x96 = state.sqrt_price_x96
    tick = state.current_tick
    liquidity = state.liquidity
    fee_growth_global_0 = state.fee_growth_global_0_x128
    fee_growth_global_1 = state.fee_growth_global_1_x128

    amount_remaining = params.amount_specified
    amount_calculated = 0
    total_fee = 0
    steps: List[SwapStep] = []

    while amount_remaining != 0 and sqrt_price_x96 != sqrt_price_limit_x96:
        step_start = sqrt_price_x96
        tick_next, initialized = next_initialized_tick(state, tick, zero_for_one)
        sqrt_price_next_x96 = get_sqrt_ratio_at_tick(tick_next)

        if zero_for_one:
            target = max(sqrt_price_next_x96, sqrt_price_limit_x96)
        else:
            target = min(sqrt_price_next_x96, sqrt_price_limit_x96)

        sqrt_price_x96, amount_in, amount_out, fee_amount = compute_swap_step(
            sqrt_price_x96, target, liquidity, amount_remaining, state.fee_tier
        )

        if exact_input:
            amount_remaining -= amount_in + fee_amount
            amount_calculated -= amount_out
        else:
            amount_remaining += amount_out
            amount_calculated += amount_in + fee_amount
        total_fee += fee_amount

        # 활성 유동성이 0이면 수수료는 분배되지 않음
        if liquidity > 0:
            growth = fee_growth_per_liquidity(fee_amount, liquidity)
            if zero_for_one:
                fee_growth_global_0 = wrap_uint256(fee_growth_global_0 + growth)
            else:
                fee_growth_global_1 = wrap_uint256(fee_growth_global_1 + growth)

        if sqrt_price_x96 == sqrt_price_next_x96:
            if initialized:
                liquidity_net = cross_tick(state, tick_next, fee_growth_global_0, fee_growth_global_1)
                if zero_for_one:
                    liquidity -= liquidity_net
                else:
                    liquidity += liquidity_net
                logger.debug("crossed tick %d, liquidity now %d", tick_next, liquidity)
            tick = tick_next - 1 if zero_for_one else tick_next
        elif sqrt_price_x96 != step_start:
            tick = get_tick_at_sqrt_ratio(sqrt_price_x96)

        steps.append(SwapStep(
            sqrt_price_start_x96=step_start,
            tick_next=tick_next,
            initialized=initialized,
            sqrt_price_next_x96=sqrt_price_x96,
            amount_in=amount_in,
            amount_out=amount_out,
            fee_amount=fee_amount,
        ))

    state.sqrt_price_x96 = sqrt_price_x96
    state.current_tick = tick
    state.liquidity = liquidity
    state.fee_growth_global_0_x128 = fee_growth_global_0
    state.fee_growth_global_1_x128 = fee_growth_global_1

    if zero_for_one == exact_input:
        amount0 = params.amount_specified - amount_remaining
        amount1 = amount_calculated
    else:
        amount0 = amount_calculated
        amount1 = params.amount_specified - amount_remaining

    price_impact_pct = calculate_price_impact(sqrt_price_start_x96, sqrt_price_x96)

    logger.debug(
        "swap zero_for_one=%s: amount0=%d amount1=%d fee=%d tick=%d steps=%d",
        zero_for_one, amount0, amount1, total_fee, tick, len(steps),
    )
    return SwapResult(
        amount0=amount0,
        amount1=amount1,
        sqrt_price_x96=sqrt_price_x96,
        liquidity=liquidity,
        tick=tick,
        fee_amount=total_fee,
        price_impact_pct=price_impact_pct,
        steps=tuple(steps),
    )
