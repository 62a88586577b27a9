"""
시뮬레이션 상수 정의

온체인 수준 정밀도를 위한 상수들:
- Q96: sqrt price 인코딩에 사용 (2^96)
- Q128: fee growth 인코딩에 사용 (2^128)
- TICK_SPACINGS: 시뮬레이터가 지원하는 수수료 티어별 틱 간격
"""

from typing import Dict

# Fixed-point 인코딩 상수
Q96: int = 2 ** 96
Q128: int = 2 ** 128

# 각 수수료 티어별 틱 간격 (pips, 1e6 = 100%)
TICK_SPACINGS: Dict[int, int] = {
    500: 10,
    3000: 60,
    10000: 200,
}

FEE_DENOMINATOR: int = 1_000_000

# 틱 범위 상수
MIN_TICK: int = -887272
MAX_TICK: int = 887272

# get_tick_at_sqrt_ratio 정의역 [MIN_SQRT_RATIO, MAX_SQRT_RATIO)
MIN_SQRT_RATIO: int = 4295128739
MAX_SQRT_RATIO: int = 1461446703485210103287273052203988822378723970342

# uint 최대값
UINT256_MAX: int = 2 ** 256 - 1
UINT128_MAX: int = 2 ** 128 - 1
