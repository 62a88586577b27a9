"""
Position Lifecycle - Mint / Burn / Collect

포지션 유동성의 상태 기계. liquidity가 0이 되면 포지션은 맵에서 제거됩니다.

모든 검증은 상태 변경 전에 끝납니다. 오류가 발생하면 PoolState는 그대로입니다.

수수료 정산 (백서 Section 6.4.1):
    tokens_owed += liquidity × (f_r(t_1) - f_r(t_0)) >> 128
"""

import logging
from typing import NamedTuple, Optional, Tuple

from ..errors import (
    AmountExceedsMaximumError,
    InsufficientLiquidityError,
    InvalidAmountError,
    InvalidRangeError,
    MisalignedTickError,
    PositionNotFoundError,
    ZeroLiquidityError,
)
from ..math.fee_math import calculate_uncollected_fees
from ..math.liquidity_math import amounts_for_liquidity, liquidity_for_amounts
from ..math.tick_math import get_sqrt_ratio_at_tick
from .pool_state import (
    PoolState,
    PositionInfo,
    check_tick_update,
    get_fee_growth_inside,
    get_position_key,
    update_tick,
)

logger = logging.getLogger(__name__)


class MintParams(NamedTuple):
    owner: str
    tick_lower: int
    tick_upper: int
    amount0_max: int
    amount1_max: int


class MintResult(NamedTuple):
    amount0: int
    amount1: int
    liquidity: int
    position_key: str


class BurnParams(NamedTuple):
    position_key: str
    liquidity: int


class BurnResult(NamedTuple):
    amount0: int  # 원금 인출량 (현재 가격 기준)
    amount1: int
    fee_amount0: int  # 이번 정산으로 적립된 수수료
    fee_amount1: int


class CollectParams(NamedTuple):
    position_key: str
    amount0_max: int
    amount1_max: int


class CollectResult(NamedTuple):
    amount0: int
    amount1: int


def _is_active(state: PoolState, tick_lower: int, tick_upper: int) -> bool:
    return tick_lower <= state.current_tick < tick_upper


def _require_position(state: PoolState, position_key: str) -> PositionInfo:
    position = state.positions.get(position_key)
    if position is None:
        raise PositionNotFoundError(f"포지션을 찾을 수 없습니다: {position_key}")
    return position


def mint(state: PoolState, params: MintParams) -> MintResult:
    """유동성 포지션 민트 (생성 또는 증액)

    주어진 최대 수량으로 가능한 최대 유동성을 계산하고,
    실제 필요한 수량을 현재 가격 기준으로 산출합니다.

    Args:
        state: 변경할 풀 상태
        params: MintParams(owner, tick_lower, tick_upper, amount0_max, amount1_max)

    Returns:
        MintResult(amount0, amount1, liquidity, position_key)

    Raises:
        InvalidRangeError: tick_lower >= tick_upper
        OutOfRangeError: 틱이 [MIN_TICK, MAX_TICK] 밖
        MisalignedTickError: 틱이 tick_spacing의 배수가 아님
        InvalidAmountError: 음수 최대 수량
        ZeroLiquidityError: 계산된 유동성이 0
        AmountExceedsMaximumError: 필요 수량이 최대값 초과
        LiquidityOverflowError: 틱 liquidity_gross 한도 초과
    """
    tick_lower, tick_upper = params.tick_lower, params.tick_upper

    if tick_lower >= tick_upper:
        raise InvalidRangeError(f"잘못된 틱 범위: [{tick_lower}, {tick_upper}]")

    sqrt_price_lower_x96 = get_sqrt_ratio_at_tick(tick_lower)
    sqrt_price_upper_x96 = get_sqrt_ratio_at_tick(tick_upper)

    if tick_lower % state.tick_spacing != 0 or tick_upper % state.tick_spacing != 0:
        raise MisalignedTickError(
            f"틱이 간격 {state.tick_spacing}에 정렬되지 않았습니다: [{tick_lower}, {tick_upper}]"
        )

    if params.amount0_max < 0 or params.amount1_max < 0:
        raise InvalidAmountError("최대 수량은 음수일 수 없습니다")

    liquidity = liquidity_for_amounts(
        state.sqrt_price_x96,
        sqrt_price_lower_x96,
        sqrt_price_upper_x96,
        params.amount0_max,
        params.amount1_max,
    )
    if liquidity == 0:
        raise ZeroLiquidityError("민트할 유동성이 0입니다")

    amount0, amount1 = amounts_for_liquidity(
        state.sqrt_price_x96,
        sqrt_price_lower_x96,
        sqrt_price_upper_x96,
        liquidity,
    )
    if amount0 > params.amount0_max or amount1 > params.amount1_max:
        raise AmountExceedsMaximumError(
            f"필요 수량 ({amount0}, {amount1})이 최대값 "
            f"({params.amount0_max}, {params.amount1_max})을 초과합니다"
        )

    # 두 경계 모두 검증한 뒤에 변경
    check_tick_update(state, tick_lower, liquidity)
    check_tick_update(state, tick_upper, liquidity)

    update_tick(state, tick_lower, liquidity)
    update_tick(state, tick_upper, liquidity, upper=True)

    if _is_active(state, tick_lower, tick_upper):
        state.liquidity += liquidity

    # 틱 갱신 후의 fee growth inside가 새 스냅샷
    inside0, inside1 = get_fee_growth_inside(state, tick_lower, tick_upper)

    position_key = get_position_key(params.owner, tick_lower, tick_upper)
    position = state.positions.get(position_key)

    if position is not None:
        position.tokens_owed_0 += calculate_uncollected_fees(
            position.liquidity, inside0, position.fee_growth_inside_0_last_x128
        )
        position.tokens_owed_1 += calculate_uncollected_fees(
            position.liquidity, inside1, position.fee_growth_inside_1_last_x128
        )
        position.liquidity += liquidity
        position.fee_growth_inside_0_last_x128 = inside0
        position.fee_growth_inside_1_last_x128 = inside1
    else:
        state.positions[position_key] = PositionInfo(
            owner=params.owner,
            tick_lower=tick_lower,
            tick_upper=tick_upper,
            liquidity=liquidity,
            fee_growth_inside_0_last_x128=inside0,
            fee_growth_inside_1_last_x128=inside1,
        )

    logger.debug(
        "mint %s: liquidity=%d amount0=%d amount1=%d",
        position_key, liquidity, amount0, amount1,
    )
    return MintResult(amount0, amount1, liquidity, position_key)


def burn(state: PoolState, params: BurnParams) -> BurnResult:
    """포지션 유동성 소각

    인출 수량은 민트 시점이 아닌 *현재* 가격 기준 견적입니다.
    수수료는 소각 전 포지션 전체 유동성에 대해 정산되어 tokens_owed에 적립됩니다.
    유동성이 0이 되면 포지션을 제거합니다.

    Returns:
        BurnResult(amount0, amount1, fee_amount0, fee_amount1)

    Raises:
        PositionNotFoundError: 포지션 없음
        InvalidAmountError: 음수 유동성
        InsufficientLiquidityError: 포지션 유동성보다 많은 소각 요청
    """
    position = _require_position(state, params.position_key)

    if params.liquidity < 0:
        raise InvalidAmountError(f"소각 유동성은 음수일 수 없습니다: {params.liquidity}")
    if params.liquidity > position.liquidity:
        raise InsufficientLiquidityError(
            f"유동성 부족: 요청 {params.liquidity}, 보유 {position.liquidity}"
        )

    tick_lower, tick_upper = position.tick_lower, position.tick_upper

    inside0, inside1 = get_fee_growth_inside(state, tick_lower, tick_upper)

    amount0, amount1 = amounts_for_liquidity(
        state.sqrt_price_x96,
        get_sqrt_ratio_at_tick(tick_lower),
        get_sqrt_ratio_at_tick(tick_upper),
        params.liquidity,
    )

    fee_amount0 = calculate_uncollected_fees(
        position.liquidity, inside0, position.fee_growth_inside_0_last_x128
    )
    fee_amount1 = calculate_uncollected_fees(
        position.liquidity, inside1, position.fee_growth_inside_1_last_x128
    )

    update_tick(state, tick_lower, -params.liquidity)
    update_tick(state, tick_upper, -params.liquidity, upper=True)

    if _is_active(state, tick_lower, tick_upper):
        state.liquidity -= params.liquidity

    position.liquidity -= params.liquidity
    position.tokens_owed_0 += fee_amount0
    position.tokens_owed_1 += fee_amount1
    position.fee_growth_inside_0_last_x128 = inside0
    position.fee_growth_inside_1_last_x128 = inside1

    if position.liquidity == 0:
        del state.positions[params.position_key]
        logger.debug(
            "position %s closed with owed (%d, %d)",
            params.position_key, position.tokens_owed_0, position.tokens_owed_1,
        )

    logger.debug(
        "burn %s: liquidity=%d amount0=%d amount1=%d fees=(%d, %d)",
        params.position_key, params.liquidity, amount0, amount1, fee_amount0, fee_amount1,
    )
    return BurnResult(amount0, amount1, fee_amount0, fee_amount1)


def collect(state: PoolState, params: CollectParams) -> CollectResult:
    """적립된 수수료 인출

    토큰별로 min(최대값, tokens_owed)를 인출하고 정확히 그만큼 차감합니다.

    Raises:
        PositionNotFoundError: 포지션 없음
        InvalidAmountError: 음수 최대 수량
    """
    position = _require_position(state, params.position_key)

    if params.amount0_max < 0 or params.amount1_max < 0:
        raise InvalidAmountError("최대 수량은 음수일 수 없습니다")

    amount0 = min(params.amount0_max, position.tokens_owed_0)
    amount1 = min(params.amount1_max, position.tokens_owed_1)

    position.tokens_owed_0 -= amount0
    position.tokens_owed_1 -= amount1

    logger.debug("collect %s: amount0=%d amount1=%d", params.position_key, amount0, amount1)
    return CollectResult(amount0, amount1)


def get_position(state: PoolState, position_key: str) -> Optional[PositionInfo]:
    """포지션 조회 (없으면 None)"""
    return state.positions.get(position_key)


def pending_fees(state: PoolState, position_key: str) -> Tuple[int, int]:
    """수령 가능한 수수료 조회 (상태 변경 없음)

    tokens_owed에 아직 정산되지 않은 수수료를 더한 값입니다.

    Raises:
        PositionNotFoundError: 포지션 없음
    """
    position = _require_position(state, position_key)
    inside0, inside1 = get_fee_growth_inside(state, position.tick_lower, position.tick_upper)

    owed0 = position.tokens_owed_0 + calculate_uncollected_fees(
        position.liquidity, inside0, position.fee_growth_inside_0_last_x128
    )
    owed1 = position.tokens_owed_1 + calculate_uncollected_fees(
        position.liquidity, inside1, position.fee_growth_inside_1_last_x128
    )
    return owed0, owed1
