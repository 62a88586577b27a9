"""
공통 fixture

0.30% 풀 (tick spacing 60)을 틱 30의 중간 가격에서 생성합니다.
"""

import pytest

from ..math.tick_math import get_sqrt_ratio_at_tick
from ..sim.pool_state import create_pool_state

POOL_ADDRESS = "0x88e6a0c2ddd26feeb64f039a2c41296fcb3f5640"
TOKEN0 = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
TOKEN1 = "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2"


def mid_tick_price(tick: int) -> int:
    """틱 구간 [tick, tick + 1)의 중간 sqrtPriceX96"""
    return (get_sqrt_ratio_at_tick(tick) + get_sqrt_ratio_at_tick(tick + 1)) // 2


@pytest.fixture
def pool():
    """유동성이 없는 0.30% 풀, 현재 틱 30"""
    return create_pool_state(
        address=POOL_ADDRESS,
        token0=TOKEN0,
        token1=TOKEN1,
        fee_tier=3000,
        sqrt_price_x96=mid_tick_price(30),
    )


@pytest.fixture
def pool_at_tick_30():
    """가격이 정확히 틱 30 경계에 있는 0.30% 풀"""
    return create_pool_state(
        address=POOL_ADDRESS,
        token0=TOKEN0,
        token1=TOKEN1,
        fee_tier=3000,
        sqrt_price_x96=get_sqrt_ratio_at_tick(30),
    )
