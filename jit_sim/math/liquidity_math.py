"""
Liquidity Math - 유동성 계산

Uniswap V3의 집중화된 유동성(Concentrated Liquidity) 계산.
특정 가격 범위에서의 토큰 수량과 유동성 간의 변환.
민트/소각 수량 견적에 사용되며 모든 결과는 내림입니다.

References:
- Uniswap V3 Periphery: contracts/libraries/LiquidityAmounts.sol
- 백서 Section 6.2.1: Concentrated Liquidity

핵심 공식:
    L = Δy / (√P_upper - √P_lower)  # token1 기준
    L = Δx / (1/√P_lower - 1/√P_upper)  # token0 기준
"""

from typing import Tuple

from .tick_math import get_sqrt_ratio_at_tick


def liquidity_from_token0(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int
) -> int:
    """amount0에서 유동성 계산

    공식: L = Δx * (√P_a * √P_b / 2^96) / (√P_b - √P_a)

    Args:
        sqrt_ratio_a_x96: 경계 sqrtPriceX96 (순서 무관)
        sqrt_ratio_b_x96: 경계 sqrtPriceX96 (순서 무관)
        amount0: token0 수량

    Returns:
        유동성
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    # 동일 가격 (빈 범위)
    if sqrt_ratio_b_x96 == sqrt_ratio_a_x96:
        return 0

    intermediate = (sqrt_ratio_a_x96 * sqrt_ratio_b_x96) >> 96
    return amount0 * intermediate // (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def liquidity_from_token1(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount1: int
) -> int:
    """amount1에서 유동성 계산

    공식: L = Δy * 2^96 / (√P_b - √P_a)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96
    if sqrt_ratio_b_x96 == sqrt_ratio_a_x96:
        return 0

    return (amount1 << 96) // (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)


def liquidity_for_amounts(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    amount0: int,
    amount1: int
) -> int:
    """토큰 수량에서 유동성 계산

    현재 가격과 범위, 두 토큰 수량이 주어졌을 때
    민트 가능한 최대 유동성을 계산합니다.

    Args:
        sqrt_ratio_x96: 현재 sqrtPriceX96
        sqrt_ratio_a_x96: 경계 sqrtPriceX96
        sqrt_ratio_b_x96: 경계 sqrtPriceX96
        amount0: token0 수량
        amount1: token1 수량

    Returns:
        유동성 (범위 내일 때는 두 제약 조건 중 작은 값)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        # 범위가 현재 가격 위: token0만 사용
        return liquidity_from_token0(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount0)

    elif sqrt_ratio_x96 < sqrt_ratio_b_x96:
        # 가격이 범위 내: 양쪽 토큰 사용, 작은 값이 제약
        liquidity0 = liquidity_from_token0(sqrt_ratio_x96, sqrt_ratio_b_x96, amount0)
        liquidity1 = liquidity_from_token1(sqrt_ratio_a_x96, sqrt_ratio_x96, amount1)
        return min(liquidity0, liquidity1)

    else:
        # 범위가 현재 가격 아래: token1만 사용
        return liquidity_from_token1(sqrt_ratio_a_x96, sqrt_ratio_b_x96, amount1)


def amount0_for_liquidity(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int
) -> int:
    """유동성에서 token0 수량 계산 (내림)

    공식: Δx = (L << 96) * (√P_b - √P_a) / √P_b / √P_a
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    return (liquidity << 96) * (sqrt_ratio_b_x96 - sqrt_ratio_a_x96) // sqrt_ratio_b_x96 // sqrt_ratio_a_x96


def amount1_for_liquidity(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int
) -> int:
    """유동성에서 token1 수량 계산 (내림)

    공식: Δy = L * (√P_b - √P_a) >> 96
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    return (liquidity * (sqrt_ratio_b_x96 - sqrt_ratio_a_x96)) >> 96


def amounts_for_liquidity(
    sqrt_ratio_x96: int,
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int
) -> Tuple[int, int]:
    """유동성에서 토큰 수량 계산

    현재 가격과 범위, 유동성이 주어졌을 때
    포지션이 보유한 토큰 수량을 계산합니다.

    Args:
        sqrt_ratio_x96: 현재 sqrtPriceX96
        sqrt_ratio_a_x96: 경계 sqrtPriceX96
        sqrt_ratio_b_x96: 경계 sqrtPriceX96
        liquidity: 유동성

    Returns:
        (amount0, amount1) 튜플
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if sqrt_ratio_x96 <= sqrt_ratio_a_x96:
        amount0 = amount0_for_liquidity(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity)
        amount1 = 0

    elif sqrt_ratio_x96 < sqrt_ratio_b_x96:
        amount0 = amount0_for_liquidity(sqrt_ratio_x96, sqrt_ratio_b_x96, liquidity)
        amount1 = amount1_for_liquidity(sqrt_ratio_a_x96, sqrt_ratio_x96, liquidity)

    else:
        amount0 = 0
        amount1 = amount1_for_liquidity(sqrt_ratio_a_x96, sqrt_ratio_b_x96, liquidity)

    return amount0, amount1


def liquidity_for_ticks(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    amount0: int,
    amount1: int
) -> int:
    """틱 범위와 현재 틱으로 민트 가능한 유동성 계산"""
    return liquidity_for_amounts(
        get_sqrt_ratio_at_tick(current_tick),
        get_sqrt_ratio_at_tick(tick_lower),
        get_sqrt_ratio_at_tick(tick_upper),
        amount0,
        amount1,
    )
