"""
시뮬레이션 오류 정의

모든 오류는 입력/프로그래머 오류이며 재시도 대상이 아닙니다.
상태 변경 전에 검증이 끝나므로, 오류가 발생하면 PoolState는 변경되지 않습니다.

호출자는 `code` 속성으로 사유를 보고할 수 있습니다
(예: "opportunity skipped, reason: ZERO_LIQUIDITY").
"""


class DomainError(Exception):
    """시뮬레이션 도메인 오류의 기본 클래스"""

    code: str = "DOMAIN_ERROR"


# --- 범위 오류 ---

class OutOfRangeError(DomainError, ValueError):
    """틱 또는 sqrtPriceX96이 유효 범위를 벗어남"""

    code = "OUT_OF_RANGE"


class InvalidSpacingError(DomainError, ValueError):
    """틱 간격이 양수가 아님"""

    code = "INVALID_SPACING"


class InvalidPriceLimitError(DomainError, ValueError):
    """스왑 가격 한도가 현재 가격 또는 유효 범위와 맞지 않음"""

    code = "INVALID_PRICE_LIMIT"


# --- 설정 오류 ---

class UnknownFeeTierError(DomainError, ValueError):
    """지원하지 않는 수수료 티어"""

    code = "UNKNOWN_FEE_TIER"


class InvalidPoolStateError(DomainError, ValueError):
    """PoolState 생성/가져오기 데이터가 불변식을 위반함"""

    code = "INVALID_POOL_STATE"


# --- 정렬 오류 ---

class InvalidRangeError(DomainError, ValueError):
    """tick_lower >= tick_upper"""

    code = "INVALID_RANGE"


class MisalignedTickError(DomainError, ValueError):
    """틱이 틱 간격의 배수가 아님"""

    code = "MISALIGNED_TICK"


# --- 경제적 오류 ---

class ZeroLiquidityError(DomainError, ValueError):
    """주어진 수량으로 계산된 유동성이 0"""

    code = "ZERO_LIQUIDITY"


class AmountExceedsMaximumError(DomainError, ValueError):
    """필요 수량이 호출자가 지정한 최대값을 초과"""

    code = "AMOUNT_EXCEEDS_MAXIMUM"


class InvalidAmountError(DomainError, ValueError):
    """음수 수량, 0 스왑 수량 등"""

    code = "INVALID_AMOUNT"


# --- 용량 오류 ---

class LiquidityOverflowError(DomainError, OverflowError):
    """틱의 liquidity_gross가 2^128 - 1을 초과"""

    code = "LIQUIDITY_OVERFLOW"


# --- 조회/부족 오류 ---

class PositionNotFoundError(DomainError, LookupError):
    """포지션이 존재하지 않음"""

    code = "POSITION_NOT_FOUND"


class InsufficientLiquidityError(DomainError, ValueError):
    """포지션 보유량보다 많은 유동성 소각 요청"""

    code = "INSUFFICIENT_LIQUIDITY"
