"""
Pool State - 시뮬레이션용 풀 상태 모델

백서 Section 6.2 ~ 6.4의 상태를 Python dataclass로 표현합니다.
- Global State: sqrtPriceX96, tick, liquidity, feeGrowthGlobal
- Tick-Indexed State: TickInfo (liquidityGross, liquidityNet, feeGrowthOutside)
- Position-Indexed State: PositionInfo (liquidity, feeGrowthInsideLast, tokensOwed)

모든 수치 필드는 온체인 정밀도를 위해 int 타입을 사용합니다.
PoolState는 일반 가변 객체이며 동기화되지 않습니다. 독립된 시나리오마다
clone_pool_state()로 복제한 상태를 사용해야 합니다.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from ..config import settings
from ..constants import MIN_SQRT_RATIO, MAX_SQRT_RATIO, UINT128_MAX
from ..errors import (
    DomainError,
    InvalidAmountError,
    InvalidPoolStateError,
    InsufficientLiquidityError,
    LiquidityOverflowError,
)
from ..math.fee_math import fee_growth_inside, wrap_uint256
from ..math.tick_math import (
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    get_tick_spacing_for_fee,
)

logger = logging.getLogger(__name__)


@dataclass
class TickInfo:
    """Tick-Indexed State (Section 6.3)

    - liquidity_gross: 해당 틱을 경계로 하는 총 유동성
    - liquidity_net: 가격이 위로 크로싱할 때 활성 유동성에 더해지는 값 (ΔL)
    - fee_growth_outside_*: 현재 가격 반대편에서 누적된 수수료 (f_o)
    """
    liquidity_gross: int = 0
    liquidity_net: int = 0
    fee_growth_outside_0_x128: int = 0
    fee_growth_outside_1_x128: int = 0

    @property
    def initialized(self) -> bool:
        return self.liquidity_gross != 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "liquidityGross": str(self.liquidity_gross),
            "liquidityNet": str(self.liquidity_net),
            "feeGrowthOutside0X128": str(self.fee_growth_outside_0_x128),
            "feeGrowthOutside1X128": str(self.fee_growth_outside_1_x128),
            "initialized": self.initialized,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TickInfo":
        return cls(
            liquidity_gross=int(data["liquidityGross"]),
            liquidity_net=int(data["liquidityNet"]),
            fee_growth_outside_0_x128=int(data.get("feeGrowthOutside0X128", 0)),
            fee_growth_outside_1_x128=int(data.get("feeGrowthOutside1X128", 0)),
        )


@dataclass
class PositionInfo:
    """Position-Indexed State (Section 6.4)

    - liquidity: 포지션의 유동성 (l)
    - fee_growth_inside_*_last_x128: 마지막 갱신 시점의 범위 내 fee growth (f_r(t_0))
    - tokens_owed_*: 수령 가능한 수수료 (collect로만 감소)
    """
    owner: str
    tick_lower: int
    tick_upper: int
    liquidity: int = 0
    fee_growth_inside_0_last_x128: int = 0
    fee_growth_inside_1_last_x128: int = 0
    tokens_owed_0: int = 0
    tokens_owed_1: int = 0

    @property
    def key(self) -> str:
        return get_position_key(self.owner, self.tick_lower, self.tick_upper)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "owner": self.owner,
            "tickLower": self.tick_lower,
            "tickUpper": self.tick_upper,
            "liquidity": str(self.liquidity),
            "feeGrowthInside0LastX128": str(self.fee_growth_inside_0_last_x128),
            "feeGrowthInside1LastX128": str(self.fee_growth_inside_1_last_x128),
            "tokensOwed0": str(self.tokens_owed_0),
            "tokensOwed1": str(self.tokens_owed_1),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PositionInfo":
        return cls(
            owner=data["owner"],
            tick_lower=int(data["tickLower"]),
            tick_upper=int(data["tickUpper"]),
            liquidity=int(data["liquidity"]),
            fee_growth_inside_0_last_x128=int(data.get("feeGrowthInside0LastX128", 0)),
            fee_growth_inside_1_last_x128=int(data.get("feeGrowthInside1LastX128", 0)),
            tokens_owed_0=int(data.get("tokensOwed0", 0)),
            tokens_owed_1=int(data.get("tokensOwed1", 0)),
        )


@dataclass
class PoolState:
    """시뮬레이션 풀 상태 (Section 6.2, Table 1)

    커서 불변식: get_sqrt_ratio_at_tick(current_tick) <= sqrt_price_x96
    liquidity: 현재 가격을 포함하는 포지션들의 유동성 합 (활성 유동성)
    """
    address: str
    token0: str
    token1: str
    fee_tier: int
    tick_spacing: int
    sqrt_price_x96: int
    current_tick: int
    liquidity: int = 0
    fee_growth_global_0_x128: int = 0
    fee_growth_global_1_x128: int = 0
    decimals0: int = 18
    decimals1: int = 18
    ticks: Dict[int, TickInfo] = field(default_factory=dict)
    positions: Dict[str, PositionInfo] = field(default_factory=dict)

    def snapshot(self) -> "PoolState":
        """독립된 깊은 복사본 (ticks, positions 포함)"""
        return clone_pool_state(self)

    def to_dict(self) -> Dict[str, Any]:
        return export_pool_state(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PoolState":
        return import_pool_state(data)


def get_position_key(owner: str, tick_lower: int, tick_upper: int) -> str:
    """포지션 키 생성: "{owner}-{tick_lower}-{tick_upper}" """
    return f"{owner}-{tick_lower}-{tick_upper}"


def _check_cursor(sqrt_price_x96: int, current_tick: int) -> None:
    """sqrtPriceX96과 current_tick의 일관성 검증

    하향 스왑이 틱 경계에서 끝나면 가격은 경계 위에, 틱은 경계 - 1에 놓이므로
    sqrt(tick) <= price <= sqrt(tick + 1) 까지 허용합니다.
    """
    if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
        raise InvalidPoolStateError(f"sqrtPriceX96이 유효 범위를 벗어났습니다: {sqrt_price_x96}")

    price_tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
    if current_tick == price_tick:
        return
    if current_tick == price_tick - 1 and get_sqrt_ratio_at_tick(price_tick) == sqrt_price_x96:
        return
    raise InvalidPoolStateError(
        f"current_tick {current_tick}이 sqrtPriceX96 {sqrt_price_x96} (틱 {price_tick})과 맞지 않습니다"
    )


def create_pool_state(
    address: str,
    token0: str,
    token1: str,
    fee_tier: int,
    sqrt_price_x96: int,
    current_tick: Optional[int] = None,
    liquidity: int = 0,
    decimals0: Optional[int] = None,
    decimals1: Optional[int] = None
) -> PoolState:
    """새 시뮬레이션 풀 상태 생성

    Args:
        address: 풀 주소
        token0: token0 주소
        token1: token1 주소
        fee_tier: 수수료 티어 (500, 3000, 10000)
        sqrt_price_x96: 초기 sqrtPriceX96
        current_tick: 초기 틱. None이면 가격에서 계산
        liquidity: 초기 활성 유동성 (스냅샷 값)
        decimals0: token0 소수점 자릿수 (기본값: settings.DEFAULT_DECIMALS)
        decimals1: token1 소수점 자릿수 (기본값: settings.DEFAULT_DECIMALS)

    Returns:
        PoolState

    Raises:
        UnknownFeeTierError: 지원하지 않는 수수료 티어
        InvalidPoolStateError: 가격이 범위 밖이거나 틱과 맞지 않음
        InvalidAmountError: 음수 유동성
    """
    tick_spacing = get_tick_spacing_for_fee(fee_tier)

    if current_tick is None:
        if sqrt_price_x96 < MIN_SQRT_RATIO or sqrt_price_x96 >= MAX_SQRT_RATIO:
            raise InvalidPoolStateError(f"sqrtPriceX96이 유효 범위를 벗어났습니다: {sqrt_price_x96}")
        current_tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
    else:
        _check_cursor(sqrt_price_x96, current_tick)

    if liquidity < 0 or liquidity > UINT128_MAX:
        raise InvalidAmountError(f"유동성이 uint128 범위를 벗어났습니다: {liquidity}")

    state = PoolState(
        address=address,
        token0=token0,
        token1=token1,
        fee_tier=fee_tier,
        tick_spacing=tick_spacing,
        sqrt_price_x96=sqrt_price_x96,
        current_tick=current_tick,
        liquidity=liquidity,
        decimals0=settings.DEFAULT_DECIMALS if decimals0 is None else decimals0,
        decimals1=settings.DEFAULT_DECIMALS if decimals1 is None else decimals1,
    )
    logger.debug(
        "pool %s created: fee=%d tick=%d liquidity=%d",
        address, fee_tier, current_tick, liquidity,
    )
    return state


def clone_pool_state(state: PoolState) -> PoolState:
    """시뮬레이션용 깊은 복사

    ticks, positions의 각 레코드까지 새 객체로 복사하므로
    복사본의 mint/burn/swap은 원본에 영향을 주지 않습니다.
    """
    return replace(
        state,
        ticks={tick: replace(info) for tick, info in state.ticks.items()},
        positions={key: replace(position) for key, position in state.positions.items()},
    )


def check_tick_update(state: PoolState, tick: int, liquidity_delta: int) -> int:
    """update_tick의 검증 단계 (상태 변경 없음)

    Returns:
        갱신 후 liquidity_gross

    Raises:
        InsufficientLiquidityError: liquidity_gross가 음수가 됨
        LiquidityOverflowError: liquidity_gross가 2^128 - 1을 초과
    """
    info = state.ticks.get(tick)
    gross_before = info.liquidity_gross if info is not None else 0
    gross_after = gross_before + liquidity_delta

    if gross_after < 0:
        raise InsufficientLiquidityError(
            f"틱 {tick}의 liquidity_gross {gross_before}보다 많은 유동성 제거: {-liquidity_delta}"
        )
    if gross_after > UINT128_MAX:
        raise LiquidityOverflowError(
            f"틱 {tick}의 liquidity_gross가 한도를 초과합니다: {gross_after}"
        )
    return gross_after


def update_tick(state: PoolState, tick: int, liquidity_delta: int, upper: bool = False) -> bool:
    """유동성 변화에 따른 틱 정보 갱신

    처음 참조되는 틱은 생성되며, 틱이 현재 틱 이하이면
    fee_growth_outside를 전역 fee growth로 초기화합니다
    (지금까지의 수수료는 모두 틱 아래에서 발생했다고 간주).
    liquidity_gross가 0이 되면 틱을 제거합니다.

    liquidity_net은 하한 틱에서 +delta, 상한 틱에서 -delta 만큼 변합니다.
    민트(+L)는 하한 +L / 상한 -L 을 기록하고, 소각(-L)은 이를 정확히 되돌립니다.

    Args:
        state: 변경할 풀 상태
        tick: 틱 인덱스
        liquidity_delta: 포지션 유동성 변화량 (민트 +L, 소각 -L)
        upper: 상한 경계이면 True

    Returns:
        초기화 상태가 바뀌었는지 여부 (flipped)

    Raises:
        InsufficientLiquidityError: liquidity_gross가 음수가 됨 (상태 변경 전)
        LiquidityOverflowError: liquidity_gross가 2^128 - 1을 초과 (상태 변경 전)
    """
    gross_after = check_tick_update(state, tick, liquidity_delta)

    info = state.ticks.get(tick)
    if info is None:
        info = TickInfo()
        if tick <= state.current_tick:
            info.fee_growth_outside_0_x128 = state.fee_growth_global_0_x128
            info.fee_growth_outside_1_x128 = state.fee_growth_global_1_x128
        state.ticks[tick] = info

    gross_before = info.liquidity_gross
    flipped = (gross_after == 0) != (gross_before == 0)

    info.liquidity_gross = gross_after
    info.liquidity_net += -liquidity_delta if upper else liquidity_delta

    if gross_after == 0:
        del state.ticks[tick]
        logger.debug("tick %d uninitialized", tick)
    elif flipped:
        logger.debug("tick %d initialized", tick)

    return flipped


def get_fee_growth_inside(state: PoolState, tick_lower: int, tick_upper: int) -> Tuple[int, int]:
    """포지션 범위 내 fee growth (token0, token1)

    초기화되지 않은 틱은 fee_growth_outside = 0 으로 간주합니다.
    """
    lower = state.ticks.get(tick_lower) or TickInfo()
    upper = state.ticks.get(tick_upper) or TickInfo()

    inside0 = fee_growth_inside(
        tick_lower, tick_upper, state.current_tick,
        state.fee_growth_global_0_x128,
        lower.fee_growth_outside_0_x128,
        upper.fee_growth_outside_0_x128,
    )
    inside1 = fee_growth_inside(
        tick_lower, tick_upper, state.current_tick,
        state.fee_growth_global_1_x128,
        lower.fee_growth_outside_1_x128,
        upper.fee_growth_outside_1_x128,
    )
    return inside0, inside1


def cross_tick(
    state: PoolState,
    tick: int,
    fee_growth_global_0_x128: int,
    fee_growth_global_1_x128: int
) -> int:
    """틱 크로싱: fee_growth_outside 반전 후 liquidity_net 반환

    f_o = f_g - f_o
    """
    info = state.ticks.get(tick)
    if info is None:
        return 0

    info.fee_growth_outside_0_x128 = wrap_uint256(fee_growth_global_0_x128 - info.fee_growth_outside_0_x128)
    info.fee_growth_outside_1_x128 = wrap_uint256(fee_growth_global_1_x128 - info.fee_growth_outside_1_x128)
    return info.liquidity_net


def export_pool_state(state: PoolState) -> Dict[str, Any]:
    """JSON 호환 구조로 내보내기

    큰 정수는 정밀도 손실을 막기 위해 10진수 문자열로,
    ticks/positions는 [key, value] 쌍의 배열로 인코딩합니다.
    """
    return {
        "address": state.address,
        "token0": state.token0,
        "token1": state.token1,
        "feeTier": state.fee_tier,
        "tickSpacing": state.tick_spacing,
        "sqrtPriceX96": str(state.sqrt_price_x96),
        "currentTick": state.current_tick,
        "liquidity": str(state.liquidity),
        "feeGrowthGlobal0X128": str(state.fee_growth_global_0_x128),
        "feeGrowthGlobal1X128": str(state.fee_growth_global_1_x128),
        "decimals": {"token0": state.decimals0, "token1": state.decimals1},
        "ticks": [
            [str(tick), info.to_dict()]
            for tick, info in sorted(state.ticks.items())
        ],
        "positions": [
            [key, position.to_dict()]
            for key, position in state.positions.items()
        ],
    }


def import_pool_state(data: Dict[str, Any]) -> PoolState:
    """export_pool_state() 구조에서 PoolState 복원

    Raises:
        InvalidPoolStateError: 필드 누락, 형식 오류 또는 불변식 위반
    """
    if not isinstance(data, dict):
        raise InvalidPoolStateError(f"풀 상태는 객체여야 합니다: {type(data).__name__}")

    decimals = data.get("decimals", {})
    if not isinstance(decimals, dict):
        raise InvalidPoolStateError(f"decimals는 객체여야 합니다: {decimals!r}")

    try:
        state = create_pool_state(
            address=data["address"],
            token0=data["token0"],
            token1=data["token1"],
            fee_tier=int(data["feeTier"]),
            sqrt_price_x96=int(data["sqrtPriceX96"]),
            current_tick=int(data["currentTick"]),
            liquidity=int(data["liquidity"]),
            decimals0=int(decimals.get("token0", settings.DEFAULT_DECIMALS)),
            decimals1=int(decimals.get("token1", settings.DEFAULT_DECIMALS)),
        )
        state.fee_growth_global_0_x128 = int(data.get("feeGrowthGlobal0X128", 0))
        state.fee_growth_global_1_x128 = int(data.get("feeGrowthGlobal1X128", 0))

        for tick, info in data.get("ticks", []):
            tick_info = TickInfo.from_dict(info)
            if tick_info.initialized:
                state.ticks[int(tick)] = tick_info

        for key, position in data.get("positions", []):
            state.positions[key] = PositionInfo.from_dict(position)
    except InvalidPoolStateError:
        raise
    except (DomainError, AttributeError, KeyError, TypeError, ValueError) as exc:
        raise InvalidPoolStateError(f"잘못된 풀 상태 데이터: {exc}") from exc

    return state


def pool_state_to_json(state: PoolState, indent: Optional[int] = 2) -> str:
    """PoolState → JSON 문자열"""
    return json.dumps(export_pool_state(state), indent=indent)


def pool_state_from_json(text: str) -> PoolState:
    """JSON 문자열 → PoolState"""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise InvalidPoolStateError(f"JSON 파싱 실패: {exc}") from exc
    return import_pool_state(data)
