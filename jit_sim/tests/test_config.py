"""
설정 및 로깅 테스트
"""

import logging

from ..config import Settings, settings
from ..sim.positions import MintParams, mint
from ..sim.swap_engine import SwapParams, execute_swap


class TestSettings:
    """환경 변수 기반 설정"""

    def test_defaults_are_typed(self):
        assert isinstance(settings, Settings)
        assert isinstance(settings.TICK_SCAN_LIMIT, int)
        assert settings.TICK_SCAN_LIMIT > 0
        assert isinstance(settings.DEFAULT_DECIMALS, int)
        assert settings.LOG_LEVEL == settings.LOG_LEVEL.upper()

    def test_default_decimals_applied(self, pool):
        assert pool.decimals0 == settings.DEFAULT_DECIMALS
        assert pool.decimals1 == settings.DEFAULT_DECIMALS


class TestLogging:
    """모듈 로거는 jit_sim 네임스페이스 아래에서 디버그 기록을 남김"""

    def test_swap_and_mint_are_logged(self, pool, caplog):
        caplog.set_level(logging.DEBUG, logger="jit_sim")

        mint(pool, MintParams("lp", -600, 600, 10 ** 18, 10 ** 18))
        execute_swap(pool, SwapParams(zero_for_one=True, amount_specified=10 ** 8))

        names = {record.name for record in caplog.records}
        assert "jit_sim.sim.positions" in names
        assert "jit_sim.sim.swap_engine" in names
        assert any("swap zero_for_one=True" in record.getMessage() for record in caplog.records)
