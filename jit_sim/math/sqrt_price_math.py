"""
Sqrt Price Math - sqrtPriceX96 관련 계산

Uniswap V3의 가격은 sqrtPriceX96 형식으로 저장됩니다.
sqrtPriceX96 = sqrt(price) * 2^96

반올림 규칙:
- 풀이 받는 수량(amount in)은 올림
- 풀이 지급하는 수량(amount out)은 내림
스왑을 여러 번 반복해도 풀이 받는 것보다 많이 지급하지 않도록 하는 규칙입니다.

References:
- Uniswap V3 Core: contracts/libraries/SqrtPriceMath.sol
"""

import math

from ..constants import Q96
from ..errors import InsufficientLiquidityError


def sqrt_price_x96_to_price(
    sqrt_price_x96: int,
    decimal0: int = 18,
    decimal1: int = 18
) -> float:
    """sqrtPriceX96을 human-readable 가격으로 변환

    가격 = (sqrtPriceX96 / 2^96)^2 × 10^(decimal0 - decimal1)

    Args:
        sqrt_price_x96: sqrtPriceX96 값
        decimal0: token0 소수점 자릿수
        decimal1: token1 소수점 자릿수

    Returns:
        가격 (token1/token0 기준, human-readable)
    """
    sqrt_price = sqrt_price_x96 / Q96
    price_raw = sqrt_price ** 2

    decimal_adjustment = 10 ** (decimal0 - decimal1)
    return price_raw * decimal_adjustment


def price_to_sqrt_price_x96(
    price: float,
    decimal0: int = 18,
    decimal1: int = 18
) -> int:
    """Human-readable 가격을 sqrtPriceX96으로 변환

    sqrtPriceX96 = sqrt(price * 10^(decimal1 - decimal0)) * 2^96

    Raises:
        ValueError: 가격이 양수가 아닌 경우
    """
    if price <= 0:
        raise ValueError("가격은 양수여야 합니다")

    decimal_adjustment = 10 ** (decimal1 - decimal0)
    adjusted_price = price * decimal_adjustment
    sqrt_price = math.sqrt(adjusted_price)
    return int(sqrt_price * Q96)


def calculate_price_impact(sqrt_price_before_x96: int, sqrt_price_after_x96: int) -> float:
    """두 sqrtPriceX96 사이의 가격 변화율 (%)

    시작/종료 가격만 사용하는 진단용 값입니다.
    """
    price_before = sqrt_price_x96_to_price(sqrt_price_before_x96)
    price_after = sqrt_price_x96_to_price(sqrt_price_after_x96)
    if price_before == 0:
        return 0.0
    return abs(price_after - price_before) / price_before * 100


def get_amount0_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool
) -> int:
    """두 가격 사이의 token0 변화량

    공식: Δx = L * (√P_b - √P_a) / (√P_a * √P_b)

    Args:
        sqrt_ratio_a_x96: 경계 sqrtPriceX96 (순서 무관)
        sqrt_ratio_b_x96: 경계 sqrtPriceX96 (순서 무관)
        liquidity: 유동성
        round_up: True면 올림 (풀이 받는 수량), False면 내림 (풀이 지급하는 수량)

    Returns:
        amount0 (token0 최소 단위)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    numerator1 = liquidity << 96
    numerator2 = sqrt_ratio_b_x96 - sqrt_ratio_a_x96

    if round_up:
        return div_rounding_up(
            mul_div_rounding_up(numerator1, numerator2, sqrt_ratio_b_x96),
            sqrt_ratio_a_x96
        )
    else:
        return (numerator1 * numerator2 // sqrt_ratio_b_x96) // sqrt_ratio_a_x96


def get_amount1_delta(
    sqrt_ratio_a_x96: int,
    sqrt_ratio_b_x96: int,
    liquidity: int,
    round_up: bool
) -> int:
    """두 가격 사이의 token1 변화량

    공식: Δy = L * (√P_b - √P_a)
    """
    if sqrt_ratio_a_x96 > sqrt_ratio_b_x96:
        sqrt_ratio_a_x96, sqrt_ratio_b_x96 = sqrt_ratio_b_x96, sqrt_ratio_a_x96

    if round_up:
        return mul_div_rounding_up(liquidity, sqrt_ratio_b_x96 - sqrt_ratio_a_x96, Q96)
    else:
        return liquidity * (sqrt_ratio_b_x96 - sqrt_ratio_a_x96) // Q96


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """amount0 변화에 따른 다음 sqrtPriceX96 계산 (올림)

    √P' = L * √P / (L ± Δx * √P)

    Args:
        sqrt_price_x96: 현재 sqrtPriceX96
        liquidity: 유동성
        amount: amount0 변화량
        add: True면 풀에 추가 (가격 하락), False면 풀에서 제거 (가격 상승)

    Returns:
        새로운 sqrtPriceX96

    Raises:
        InsufficientLiquidityError: 제거하려는 token0가 범위 내 유동성을 초과
    """
    if amount == 0:
        return sqrt_price_x96

    numerator1 = liquidity << 96
    product = amount * sqrt_price_x96

    if add:
        # Python 정수는 오버플로우가 없으므로 mulDiv 경로만 사용
        denominator = numerator1 + product
        return mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)
    else:
        if numerator1 <= product:
            raise InsufficientLiquidityError(
                f"token0 출력량 {amount}이 유동성 {liquidity}로 지급 가능한 범위를 초과합니다"
            )
        denominator = numerator1 - product
        return mul_div_rounding_up(numerator1, sqrt_price_x96, denominator)


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """amount1 변화에 따른 다음 sqrtPriceX96 계산 (내림)

    √P' = √P ± Δy / L

    Raises:
        InsufficientLiquidityError: 제거하려는 token1이 범위 내 유동성을 초과
    """
    if add:
        quotient = (amount << 96) // liquidity
        return sqrt_price_x96 + quotient
    else:
        quotient = div_rounding_up(amount << 96, liquidity)
        if sqrt_price_x96 <= quotient:
            raise InsufficientLiquidityError(
                f"token1 출력량 {amount}이 유동성 {liquidity}로 지급 가능한 범위를 초과합니다"
            )
        return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool
) -> int:
    """입력 수량으로 이동한 다음 가격 (풀에 유리하게 반올림)"""
    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_in, True)
    return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in, True)


def get_next_sqrt_price_from_output(
    sqrt_price_x96: int,
    liquidity: int,
    amount_out: int,
    zero_for_one: bool
) -> int:
    """출력 수량으로 이동한 다음 가격 (풀에 유리하게 반올림)"""
    if zero_for_one:
        return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_out, False)
    return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_out, False)


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """(a * b) / denominator 올림"""
    result, remainder = divmod(a * b, denominator)
    if remainder > 0:
        result += 1
    return result


def div_rounding_up(numerator: int, denominator: int) -> int:
    """numerator / denominator 올림"""
    result = numerator // denominator
    if numerator % denominator > 0:
        result += 1
    return result
