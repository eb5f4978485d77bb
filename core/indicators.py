"""财务指标：VAN（净现值）、TIR（内部收益率，二分法）、TCEA"""
import logging
import math
from typing import Optional, Sequence

import numpy as np

from config.constants import IRR_LOWER_BOUND, IRR_MAX_ITERATIONS, IRR_TOLERANCE, IRR_UPPER_BOUND
from core.rates import annualize
from data_manager.schema import Indicators, ScheduleRow

logger = logging.getLogger(__name__)


def present_value(
    principal: float,
    cashflows: Sequence[float],
    discount_rate: float,
    discount_from_period: int = 1,
) -> float:
    """principal + Σ cf[t] / (1 + r)^(t + offset)

    cashflows 为借款人的支出（负数），放款额以正数抵消，
    以贷款自身利率贴现时结果约为 0。
    """
    flows = np.asarray(cashflows, dtype=float)
    if flows.size == 0:
        return float(principal)
    exponents = np.arange(flows.size) + discount_from_period
    return float(principal + np.sum(flows / (1 + discount_rate) ** exponents))


def internal_rate(
    principal: float,
    cashflows: Sequence[float],
    discount_from_period: int = 1,
) -> Optional[float]:
    """二分法求月 TIR，区间两端同号时返回 None"""
    def f(rate):
        return present_value(principal, cashflows, rate, discount_from_period)

    lo, hi = IRR_LOWER_BOUND, IRR_UPPER_BOUND
    f_lo, f_hi = f(lo), f(hi)
    if not (math.isfinite(f_lo) and math.isfinite(f_hi)):
        logger.debug("TIR no computable: flujos no finitos")
        return None
    if f_lo * f_hi > 0:
        logger.debug("TIR no computable: sin cambio de signo en [%s, %s]", lo, hi)
        return None

    for _ in range(IRR_MAX_ITERATIONS):
        mid = (lo + hi) / 2
        f_mid = f(mid)
        if abs(f_mid) < IRR_TOLERANCE:
            return mid
        if f(lo) * f_mid < 0:
            hi = mid
        else:
            lo = mid
    return (lo + hi) / 2


def compute_indicators(
    principal: float,
    rows: Sequence[ScheduleRow],
    monthly_rate: float,
    cok_monthly_rate: float,
    include_ancillary_in_cashflow: bool = True,
    discount_from_period: int = 1,
) -> Indicators:
    """由还款计划计算 VAN / TIR / TCEA"""
    if include_ancillary_in_cashflow:
        cashflows = [r.cashflow for r in rows]
    else:
        cashflows = [-r.base_payment for r in rows]

    van = present_value(principal, cashflows, cok_monthly_rate, discount_from_period)
    tir_monthly = internal_rate(principal, cashflows, discount_from_period)
    tir_annual = annualize(tir_monthly)

    return Indicators(
        monthly_rate=monthly_rate,
        van=van,
        tir_monthly=tir_monthly,
        tir_annual=tir_annual,
        # 本金已含前期费用，年化 TIR 即为 TCEA
        tcea=tir_annual,
    )
