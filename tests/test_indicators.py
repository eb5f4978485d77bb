"""VAN / TIR 测试"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from scipy import optimize

from config.constants import IRR_LOWER_BOUND, IRR_UPPER_BOUND
from core.indicators import compute_indicators, internal_rate, present_value
from core.rates import annualize, monthly_rate
from core.schedule import build_schedule


@pytest.fixture
def plain_loan():
    tem = monthly_rate("TEA", 0.12)
    rows = build_schedule(100000, tem, 12)
    return tem, [r.cashflow for r in rows]


class TestPresentValue:
    def test_own_rate_nets_to_zero(self, plain_loan):
        tem, cfs = plain_loan
        assert present_value(100000, cfs, tem) == pytest.approx(0, abs=1e-6)

    def test_lower_discount_rate_is_negative(self, plain_loan):
        """贴现率低于贷款利率时，借款人现金流现值为负"""
        _, cfs = plain_loan
        assert present_value(100000, cfs, 0.005) < 0

    def test_discount_offset(self, plain_loan):
        tem, cfs = plain_loan
        pv1 = present_value(100000, cfs, 0.02, discount_from_period=1)
        pv0 = present_value(100000, cfs, 0.02, discount_from_period=0)
        assert pv0 - 100000 == pytest.approx((pv1 - 100000) * 1.02)

    def test_no_cashflows(self):
        assert present_value(500, [], 0.01) == 500


class TestInternalRate:
    def test_recovers_schedule_rate(self, plain_loan):
        tem, cfs = plain_loan
        assert internal_rate(100000, cfs) == pytest.approx(tem, abs=1e-8)

    def test_long_schedule_with_grace(self):
        rows = build_schedule(250000, 0.0085, 240, 6, 6)
        assert internal_rate(250000, [r.cashflow for r in rows]) == pytest.approx(0.0085, abs=1e-8)

    def test_matches_brentq(self):
        rows = build_schedule(180000, 0.011, 180, 0, 0, 0.0004, 0.003, 200000, 10)
        cfs = [r.cashflow for r in rows]
        expected = optimize.brentq(
            lambda r: present_value(180000, cfs, r), IRR_LOWER_BOUND, IRR_UPPER_BOUND, xtol=1e-14,
        )
        assert internal_rate(180000, cfs) == pytest.approx(expected, abs=1e-8)

    def test_fees_raise_the_rate(self):
        rows = build_schedule(100000, 0.01, 60, 0, 0, 0.0005, 0, 0, 15)
        assert internal_rate(100000, [r.cashflow for r in rows]) > 0.01

    def test_negative_principal_not_computable(self, plain_loan):
        _, cfs = plain_loan
        assert internal_rate(-100000, cfs) is None

    def test_zero_cashflows_not_computable(self):
        assert internal_rate(100000, [0.0] * 12) is None

    def test_rate_outside_bracket_not_computable(self):
        """月利率超过 100% 时区间内无根"""
        assert internal_rate(100, [-300.0]) is None

    def test_nan_cashflow_not_computable(self, plain_loan):
        """现金流含 NaN 时不返回区间端点"""
        _, cfs = plain_loan
        assert internal_rate(100000, [float("nan")] + list(cfs[1:])) is None

    def test_nan_principal_not_computable(self, plain_loan):
        _, cfs = plain_loan
        assert internal_rate(float("nan"), cfs) is None


class TestComputeIndicators:
    def test_without_fees(self):
        tem = 0.01
        rows = build_schedule(100000, tem, 24)
        ind = compute_indicators(100000, rows, tem, tem)
        assert ind.monthly_rate == tem
        assert ind.van == pytest.approx(0, abs=1e-6)
        assert ind.tir_monthly == pytest.approx(tem, abs=1e-8)
        assert ind.tir_annual == pytest.approx(annualize(tem), abs=1e-7)
        assert ind.tcea == ind.tir_annual

    def test_exclude_ancillary_from_cashflow(self):
        rows = build_schedule(100000, 0.01, 24, 0, 0, 0.001, 0.003, 120000, 20)
        with_fees = compute_indicators(100000, rows, 0.01, 0.01)
        base_only = compute_indicators(100000, rows, 0.01, 0.01, include_ancillary_in_cashflow=False)
        assert base_only.tir_monthly == pytest.approx(0.01, abs=1e-8)
        assert with_fees.tir_monthly > base_only.tir_monthly
        assert with_fees.van < base_only.van

    def test_not_computable_propagates(self):
        rows = build_schedule(100000, 0.01, 12)
        ind = compute_indicators(-1, rows, 0.01, 0.01)
        assert ind.tir_monthly is None
        assert ind.tir_annual is None
        assert ind.tcea is None
