"""
Fee Math - 백서 기반 수수료 계산

Uniswap V3 백서 Section 6.3, 6.4의 공식을 정확하게 구현.
온체인 컨트랙트와 동일하게 fee growth 차이는 uint256 랩어라운드로 계산합니다.

References:
- 백서 Section 6.3: Tick-Indexed State (feeGrowthOutside)
- 백서 Section 6.4.1: Position-Indexed State (uncollected fees)

핵심 공식:
    f_a(i) = f_g - f_o(i)  if i_c >= i else f_o(i)     # 틱 i 위 수수료
    f_b(i) = f_o(i)        if i_c >= i else f_g - f_o(i) # 틱 i 아래 수수료
    f_r = f_g - f_b(i_l) - f_a(i_u)                     # 범위 내 수수료
    f_u = l × (f_r(t_1) - f_r(t_0))                     # 미수령 수수료
"""

from ..constants import Q128

_UINT256_MODULUS: int = 2 ** 256


def wrap_uint256(value: int) -> int:
    """Solidity unchecked uint256 연산과 동일한 랩어라운드"""
    return value % _UINT256_MODULUS


def fee_growth_above(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 위에서 발생한 수수료 성장률 (f_a)

    Args:
        tick_idx: 틱 인덱스 (i)
        current_tick: 현재 틱 (i_c)
        fee_growth_global: 전역 fee growth (f_g)
        fee_growth_outside: 틱의 fee growth outside (f_o)

    Returns:
        틱 위의 fee growth (f_a)
    """
    if current_tick >= tick_idx:
        return wrap_uint256(fee_growth_global - fee_growth_outside)
    else:
        return fee_growth_outside


def fee_growth_below(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 아래에서 발생한 수수료 성장률 (f_b)"""
    if current_tick >= tick_idx:
        return fee_growth_outside
    else:
        return wrap_uint256(fee_growth_global - fee_growth_outside)


def fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int
) -> int:
    """범위 내 fee growth 계산 (f_r)

    백서 Section 6.3 공식:
        f_r = f_g - f_b(i_l) - f_a(i_u)

    Args:
        tick_lower: 하한 틱 (i_l)
        tick_upper: 상한 틱 (i_u)
        current_tick: 현재 틱 (i_c)
        fee_growth_global: 전역 fee growth (f_g)
        fee_growth_outside_lower: 하한 틱의 fee growth outside (f_o(i_l))
        fee_growth_outside_upper: 상한 틱의 fee growth outside (f_o(i_u))

    Returns:
        범위 내 fee growth (f_r, uint256 랩어라운드)
    """
    f_b = fee_growth_below(tick_lower, current_tick, fee_growth_global, fee_growth_outside_lower)
    f_a = fee_growth_above(tick_upper, current_tick, fee_growth_global, fee_growth_outside_upper)

    return wrap_uint256(fee_growth_global - f_b - f_a)


def calculate_fee_growth_delta(
    fee_growth_current: int,
    fee_growth_previous: int
) -> int:
    """두 시점 간 fee growth 변화량 (uint256 랩어라운드)"""
    return wrap_uint256(fee_growth_current - fee_growth_previous)


def calculate_uncollected_fees(
    liquidity: int,
    fee_growth_inside_current: int,
    fee_growth_inside_last: int
) -> int:
    """미수령 수수료 계산 (f_u), 토큰 최소 단위

    백서 Section 6.4.1 공식:
        f_u = l × (f_r(t_1) - f_r(t_0)) / 2^128

    Args:
        liquidity: 포지션 유동성 (l)
        fee_growth_inside_current: 현재 범위 내 fee growth (f_r(t_1))
        fee_growth_inside_last: 마지막 업데이트 시 fee growth (f_r(t_0))

    Returns:
        미수령 수수료 (내림)
    """
    delta = calculate_fee_growth_delta(fee_growth_inside_current, fee_growth_inside_last)
    return (liquidity * delta) >> 128


def fee_growth_per_liquidity(fee_amount: int, liquidity: int) -> int:
    """스왑 스텝 수수료를 단위 유동성당 fee growth (Q128)로 변환

    활성 유동성이 0이면 분배할 대상이 없으므로 0을 반환합니다.
    """
    if liquidity <= 0:
        return 0
    return (fee_amount * Q128) // liquidity


def decode_fee_growth(fee_growth_x128: int, decimals: int = 18) -> float:
    """Q128 인코딩된 fee growth를 human-readable 값으로 변환"""
    return fee_growth_x128 / Q128 / (10 ** decimals)
