"""
JIT Liquidity Simulation Core

온체인 수준 정밀도의 Uniswap V3 스타일 집중화된 유동성 시뮬레이터.
체인에 접근하지 않고 JIT(just-in-time) 유동성 전략을 백테스트하기 위한
틱/가격 수학, 포지션 생명주기, 틱 단위 스왑 엔진을 제공합니다.
"""

__version__ = "0.1.0"

from .constants import Q96, Q128, TICK_SPACINGS, MIN_TICK, MAX_TICK
from .errors import DomainError
from .sim import (
    PoolState,
    create_pool_state,
    clone_pool_state,
    mint,
    burn,
    collect,
    execute_swap,
)
