"""
Swap Math 테스트

compute_swap_step의 반올림 방향과 수수료 분기를 검증합니다.
"""

from ..constants import Q96
from ..math.sqrt_price_math import get_amount0_delta, get_amount1_delta
from ..math.swap_math import compute_swap_step
from ..math.tick_math import get_sqrt_ratio_at_tick

LIQUIDITY = 2 * 10 ** 18


class TestExactInput:
    """exact input (amount_remaining > 0)"""

    def test_capped_at_target_one_for_zero(self):
        """목표 가격에 도달: fee = amount_in × fee / (1e6 - fee)"""
        target = get_sqrt_ratio_at_tick(100)
        price, amount_in, amount_out, fee = compute_swap_step(Q96, target, LIQUIDITY, 10 ** 18, 600)

        assert price == target
        assert amount_in == get_amount1_delta(Q96, target, LIQUIDITY, True)
        assert amount_out == get_amount0_delta(Q96, target, LIQUIDITY, False)
        assert fee == amount_in * 600 // (1_000_000 - 600)
        assert amount_in + fee < 10 ** 18

    def test_capped_at_target_zero_for_one(self):
        target = get_sqrt_ratio_at_tick(-100)
        price, amount_in, amount_out, fee = compute_swap_step(Q96, target, LIQUIDITY, 10 ** 18, 3000)

        assert price == target
        assert amount_in == get_amount0_delta(target, Q96, LIQUIDITY, True)
        assert amount_out == get_amount1_delta(target, Q96, LIQUIDITY, False)
        assert fee == amount_in * 3000 // (1_000_000 - 3000)

    def test_partial_step_consumes_everything(self):
        """목표 전에 멈추면 잔여 입력 전체가 amount_in + fee"""
        target = get_sqrt_ratio_at_tick(-1000)
        price, amount_in, amount_out, fee = compute_swap_step(Q96, target, LIQUIDITY, 10 ** 15, 3000)

        assert target < price < Q96
        assert amount_in + fee == 10 ** 15
        assert amount_out > 0
        # 풀은 받는 것보다 많이 지급하지 않음 (가격 ≈ 1)
        assert amount_out <= amount_in

    def test_entire_input_taken_as_fee(self):
        """가격을 움직이지 못하는 극소량 입력은 전부 수수료"""
        result = compute_swap_step(2413, 79887613182836312, 1985041575832132834610021537970, 10, 1872)
        assert result == (2413, 0, 0, 10)

    def test_zero_liquidity_reaches_target(self):
        """유동성이 0이면 수량 없이 목표 가격까지 이동"""
        target = get_sqrt_ratio_at_tick(-60)
        assert compute_swap_step(Q96, target, 0, 10 ** 18, 3000) == (target, 0, 0, 0)


class TestExactOutput:
    """exact output (amount_remaining < 0)"""

    def test_partial_output_exact(self):
        """요청한 출력량을 정확히 지급"""
        target = get_sqrt_ratio_at_tick(1000)
        price, amount_in, amount_out, fee = compute_swap_step(Q96, target, LIQUIDITY, -10 ** 15, 3000)

        assert Q96 < price < target
        assert amount_out == 10 ** 15
        assert amount_in > amount_out
        assert fee == amount_in * 3000 // (1_000_000 - 3000)

    def test_capped_at_target(self):
        target = get_sqrt_ratio_at_tick(-10)
        price, amount_in, amount_out, fee = compute_swap_step(Q96, target, LIQUIDITY, -10 ** 18, 3000)

        assert price == target
        assert amount_out == get_amount1_delta(target, Q96, LIQUIDITY, False)
        assert amount_in == get_amount0_delta(target, Q96, LIQUIDITY, True)
        assert amount_out < 10 ** 18

    def test_insufficient_liquidity_reaches_target(self):
        """출력이 0으로 내림되는 구간에서는 목표 가격에 도달"""
        price = 20282409603651670423947251286016
        target = price * 11 // 10
        result = compute_swap_step(price, target, 1024, -4, 3000)

        assert result.sqrt_price_next_x96 == target
        assert result.amount_out == 0
        assert result.amount_in == 26215
        assert result.fee_amount == 26215 * 3000 // 997000
