"""
Pool State 테스트

풀 생성 검증, 틱 갱신, 복제 독립성, 내보내기/가져오기를 테스트합니다.
"""

import json

import pytest

from ..constants import MIN_SQRT_RATIO, MAX_SQRT_RATIO, UINT128_MAX
from ..errors import (
    InsufficientLiquidityError,
    InvalidAmountError,
    InvalidPoolStateError,
    LiquidityOverflowError,
    UnknownFeeTierError,
)
from ..math.tick_math import get_sqrt_ratio_at_tick
from ..sim.pool_state import (
    TickInfo,
    PositionInfo,
    create_pool_state,
    clone_pool_state,
    update_tick,
    get_fee_growth_inside,
    cross_tick,
    get_position_key,
    export_pool_state,
    import_pool_state,
    pool_state_to_json,
    pool_state_from_json,
)
from ..sim.positions import MintParams, mint
from .conftest import POOL_ADDRESS, TOKEN0, TOKEN1, mid_tick_price


class TestCreatePoolState:
    """create_pool_state 테스트"""

    def test_derives_tick_and_spacing(self, pool):
        assert pool.current_tick == 30
        assert pool.tick_spacing == 60
        assert pool.liquidity == 0
        assert pool.fee_growth_global_0_x128 == 0
        assert pool.ticks == {}
        assert pool.positions == {}
        assert pool.decimals0 == 18

    def test_explicit_decimals(self):
        state = create_pool_state(POOL_ADDRESS, TOKEN0, TOKEN1, 500, mid_tick_price(0),
                                  decimals0=6, decimals1=18)
        assert state.tick_spacing == 10
        assert (state.decimals0, state.decimals1) == (6, 18)

    def test_unknown_fee_tier(self):
        with pytest.raises(UnknownFeeTierError):
            create_pool_state(POOL_ADDRESS, TOKEN0, TOKEN1, 2500, mid_tick_price(0))

    def test_price_out_of_range(self):
        with pytest.raises(InvalidPoolStateError):
            create_pool_state(POOL_ADDRESS, TOKEN0, TOKEN1, 3000, MIN_SQRT_RATIO - 1)
        with pytest.raises(InvalidPoolStateError):
            create_pool_state(POOL_ADDRESS, TOKEN0, TOKEN1, 3000, MAX_SQRT_RATIO)

    def test_inconsistent_tick(self):
        """가격과 맞지 않는 틱은 거부"""
        with pytest.raises(InvalidPoolStateError):
            create_pool_state(POOL_ADDRESS, TOKEN0, TOKEN1, 3000, mid_tick_price(30), current_tick=31)

    def test_tick_below_boundary_price_accepted(self):
        """하향 크로싱 직후 상태 (가격 = 경계, 틱 = 경계 - 1)"""
        state = create_pool_state(POOL_ADDRESS, TOKEN0, TOKEN1, 3000,
                                  get_sqrt_ratio_at_tick(60), current_tick=59)
        assert state.current_tick == 59

    def test_negative_liquidity(self):
        with pytest.raises(InvalidAmountError):
            create_pool_state(POOL_ADDRESS, TOKEN0, TOKEN1, 3000, mid_tick_price(0), liquidity=-1)


class TestUpdateTick:
    """update_tick 테스트"""

    def test_initializes_and_flips(self, pool):
        assert update_tick(pool, 0, 100) is True
        assert pool.ticks[0].liquidity_gross == 100
        assert pool.ticks[0].liquidity_net == 100
        assert pool.ticks[0].initialized

        assert update_tick(pool, 0, 50) is False
        assert pool.ticks[0].liquidity_gross == 150

    def test_upper_boundary_subtracts_net(self, pool):
        update_tick(pool, 120, 100, upper=True)
        assert pool.ticks[120].liquidity_gross == 100
        assert pool.ticks[120].liquidity_net == -100

    def test_seeds_fee_growth_outside_at_or_below_current(self, pool):
        """현재 틱 이하의 틱만 전역 fee growth로 초기화"""
        pool.fee_growth_global_0_x128 = 123
        pool.fee_growth_global_1_x128 = 456

        update_tick(pool, 0, 100)
        update_tick(pool, 120, 100, upper=True)

        assert pool.ticks[0].fee_growth_outside_0_x128 == 123
        assert pool.ticks[0].fee_growth_outside_1_x128 == 456
        assert pool.ticks[120].fee_growth_outside_0_x128 == 0
        assert pool.ticks[120].fee_growth_outside_1_x128 == 0

    def test_removed_when_gross_reaches_zero(self, pool):
        update_tick(pool, 0, 100)
        assert update_tick(pool, 0, -100) is True
        assert 0 not in pool.ticks

    def test_overflow_leaves_tick_unchanged(self, pool):
        update_tick(pool, 0, UINT128_MAX)
        with pytest.raises(LiquidityOverflowError):
            update_tick(pool, 0, 1)
        assert pool.ticks[0].liquidity_gross == UINT128_MAX

    def test_removing_more_than_gross(self, pool):
        with pytest.raises(InsufficientLiquidityError):
            update_tick(pool, 0, -1)
        assert 0 not in pool.ticks


class TestFeeGrowthInsideAndCrossing:
    """get_fee_growth_inside / cross_tick 테스트"""

    def test_uninitialized_ticks_read_as_zero(self, pool):
        pool.fee_growth_global_0_x128 = 1000
        assert get_fee_growth_inside(pool, -60, 60) == (1000, 0)

    def test_cross_flips_outside(self, pool):
        update_tick(pool, 60, 500, upper=True)
        pool.fee_growth_global_0_x128 = 1000

        liquidity_net = cross_tick(pool, 60, 1000, 0)

        assert liquidity_net == -500
        assert pool.ticks[60].fee_growth_outside_0_x128 == 1000
        assert pool.ticks[60].fee_growth_outside_1_x128 == 0

    def test_cross_uninitialized(self, pool):
        assert cross_tick(pool, 60, 1000, 0) == 0


class TestClonePoolState:
    """clone_pool_state 테스트"""

    def test_clone_is_independent(self, pool):
        mint(pool, MintParams("lp", -600, 600, 10 ** 18, 10 ** 18))
        clone = clone_pool_state(pool)
        baseline = export_pool_state(pool)

        mint(clone, MintParams("jit", -60, 60, 10 ** 18, 10 ** 18))
        clone.ticks[-600].liquidity_gross += 1
        clone.positions[get_position_key("lp", -600, 600)].tokens_owed_0 = 99
        clone.sqrt_price_x96 += 1

        assert export_pool_state(pool) == baseline
        assert pool.snapshot() == pool
        assert pool.snapshot() is not pool


class TestSerialization:
    """export / import 테스트"""

    def test_round_trip(self, pool):
        mint(pool, MintParams("lp", -600, 600, 10 ** 18, 10 ** 18))
        pool.fee_growth_global_0_x128 = 2 ** 200 + 7
        pool.positions[get_position_key("lp", -600, 600)].tokens_owed_1 = 42

        restored = import_pool_state(export_pool_state(pool))

        assert restored == pool

    def test_json_round_trip(self, pool):
        mint(pool, MintParams("lp", -600, 600, 10 ** 18, 10 ** 18))

        text = pool_state_to_json(pool)
        data = json.loads(text)

        # 큰 정수는 문자열, ticks는 [key, value] 쌍
        assert isinstance(data["sqrtPriceX96"], str)
        assert data["ticks"][0][0] == "-600"
        assert data["decimals"] == {"token0": 18, "token1": 18}
        assert pool_state_from_json(text) == pool

    def test_missing_field(self, pool):
        data = export_pool_state(pool)
        del data["sqrtPriceX96"]
        with pytest.raises(InvalidPoolStateError):
            import_pool_state(data)

    def test_invalid_fee_tier(self, pool):
        data = export_pool_state(pool)
        data["feeTier"] = 1234
        with pytest.raises(InvalidPoolStateError):
            import_pool_state(data)

    def test_invalid_number(self, pool):
        data = export_pool_state(pool)
        data["liquidity"] = "not-a-number"
        with pytest.raises(InvalidPoolStateError):
            import_pool_state(data)

    def test_invalid_json(self):
        with pytest.raises(InvalidPoolStateError):
            pool_state_from_json("{not json")

    @pytest.mark.parametrize("text", ["[]", "null", "42", '"pool"'])
    def test_top_level_not_object(self, text):
        """JSON 최상위가 객체가 아니면 InvalidPoolStateError"""
        with pytest.raises(InvalidPoolStateError):
            pool_state_from_json(text)

    @pytest.mark.parametrize("decimals", [None, [18, 18], "18"])
    def test_decimals_not_object(self, pool, decimals):
        data = export_pool_state(pool)
        data["decimals"] = decimals
        with pytest.raises(InvalidPoolStateError):
            pool_state_from_json(json.dumps(data))

    def test_tick_record_not_object(self, pool):
        data = export_pool_state(pool)
        data["ticks"] = [["-600", None]]
        with pytest.raises(InvalidPoolStateError):
            import_pool_state(data)

    def test_record_dicts(self):
        info = TickInfo(liquidity_gross=10, liquidity_net=-10, fee_growth_outside_0_x128=5)
        assert TickInfo.from_dict(info.to_dict()) == info

        position = PositionInfo(owner="lp", tick_lower=-60, tick_upper=60, liquidity=7, tokens_owed_0=3)
        assert PositionInfo.from_dict(position.to_dict()) == position
        assert position.key == "lp--60-60"
