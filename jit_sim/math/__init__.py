"""
Math layer for the simulation core

온체인 수준 정밀도의 순수 함수들:
- tick_math: Tick ↔ sqrtPriceX96 변환
- sqrt_price_math: 반올림 방향이 명시된 수량 변화량, 다음 가격 계산
- liquidity_math: 유동성 ↔ 토큰 수량 변환
- fee_math: 백서 기반 fee growth 계산
- swap_math: 단일 스왑 스텝
"""

from .tick_math import (
    get_tick_at_sqrt_ratio,
    get_sqrt_ratio_at_tick,
    nearest_usable_tick,
    get_tick_spacing_for_fee,
    tick_to_price,
    price_to_tick,
)
from .sqrt_price_math import (
    sqrt_price_x96_to_price,
    price_to_sqrt_price_x96,
    get_amount0_delta,
    get_amount1_delta,
)
from .liquidity_math import (
    liquidity_for_amounts,
    amounts_for_liquidity,
    liquidity_for_ticks,
)
from .fee_math import (
    fee_growth_inside,
    calculate_uncollected_fees,
    calculate_fee_growth_delta,
)
from .swap_math import compute_swap_step, SwapStepResult
