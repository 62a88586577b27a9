"""
Simulation layer

PoolState를 변경하는 상태 기계들:
- pool_state: 풀 상태 모델, 복제, 내보내기/가져오기
- positions: Mint / Burn / Collect
- swap_engine: 틱 단위 스왑
"""

from .pool_state import (
    PoolState,
    TickInfo,
    PositionInfo,
    create_pool_state,
    clone_pool_state,
    export_pool_state,
    import_pool_state,
    pool_state_to_json,
    pool_state_from_json,
)
from .positions import (
    MintParams,
    MintResult,
    BurnParams,
    BurnResult,
    CollectParams,
    CollectResult,
    mint,
    burn,
    collect,
    get_position,
    pending_fees,
)
from .swap_engine import SwapParams, SwapResult, SwapStep, execute_swap
