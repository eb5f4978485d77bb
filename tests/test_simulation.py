"""完整模拟测试"""
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dataclasses import replace

import pytest

from config.constants import Currency, GraceType, RateKind
from core.simulation import financed_principal, simulate
from data_manager.data_validator import LoanValidationError
from data_manager.schema import (
    AncillaryCharges, LoanTerms, PropertyQuote, SimulationRequest, UpfrontCosts,
)


@pytest.fixture
def request_pen():
    return SimulationRequest(
        terms=LoanTerms.from_years(0, 0.10, 20),
        property=PropertyQuote(price=300000, initial_payment=30000, bonus_amount=10000),
        ancillary=AncillaryCharges(
            desgravamen_rate=0.0005, property_insurance_annual_rate=0.003,
            postage_fee=5, periodic_commission=3, admin_expenses=2,
        ),
        upfront=UpfrontCosts(notarial=800, registral=200, appraisal=500),
        cok_annual=0.12,
    )


class TestFinancedPrincipal:
    def test_pen(self, request_pen):
        base, principal = financed_principal(request_pen)
        assert base == 260000
        assert principal == 261500

    def test_usd_converted(self):
        req = SimulationRequest(
            terms=LoanTerms.from_years(0, 0.08, 10),
            property=PropertyQuote(price=100000, initial_payment=20000, currency=Currency.USD),
            upfront=UpfrontCosts(appraisal=1000),
            exchange_rate=3.8,
        )
        assert financed_principal(req) == (pytest.approx(304000), pytest.approx(305000))

    def test_without_property(self):
        req = SimulationRequest(terms=LoanTerms(principal=150000, annual_rate=0.1, total_months=120))
        assert financed_principal(req) == (150000, 150000)


class TestSimulate:
    def test_result_fields(self, request_pen):
        result = simulate(request_pen)
        assert result.simulation_id.startswith("SIM-")
        assert result.principal == 261500
        assert result.upfront_total == 1500
        assert len(result.schedule) == 240
        assert result.grace_type == GraceType.NONE
        assert result.currency == Currency.PEN
        assert result.exchange_rate_used == 1.0
        assert result.monthly_payment == result.schedule[0].base_payment
        assert result.schedule[0].monthly_fees == 10
        # 房屋保险按房价计
        assert result.schedule[0].property_insurance == pytest.approx(300000 * 0.003 / 12)

    def test_fees_push_tcea_above_tea(self, request_pen):
        ind = simulate(request_pen).indicators
        assert ind.tcea > 0.10
        assert ind.tcea == ind.tir_annual

    def test_van_negative_when_cok_below_cost(self, request_pen):
        """COK 低于贷款成本时，借款人 VAN 为负"""
        result = simulate(replace(request_pen, cok_annual=0.05))
        assert result.indicators.van < 0

    def test_usd_exchange_rate_reported(self):
        req = SimulationRequest(
            terms=LoanTerms.from_years(0, 0.08, 10),
            property=PropertyQuote(price=100000, initial_payment=20000, currency=Currency.USD),
            exchange_rate=3.8,
        )
        result = simulate(req)
        assert result.currency == Currency.USD
        assert result.exchange_rate_used == 3.8
        assert result.principal == pytest.approx(304000)

    def test_total_grace(self, request_pen):
        terms = replace(request_pen.terms, grace_total_months=6)
        result = simulate(replace(request_pen, terms=terms))
        assert result.grace_type == GraceType.TOTAL
        assert result.grace_months == 6
        assert result.monthly_payment == result.schedule[6].base_payment
        assert result.summary["grace_periods"] == 6

    def test_partial_grace(self, request_pen):
        terms = replace(request_pen.terms, grace_partial_months=4)
        result = simulate(replace(request_pen, terms=terms))
        assert result.grace_type == GraceType.PARTIAL
        assert result.grace_months == 4

    def test_nominal_rate(self):
        req = SimulationRequest(terms=LoanTerms(
            principal=100000, annual_rate=0.12, rate_kind=RateKind.NOMINAL,
            capitalization_per_year=12, total_months=12,
        ))
        result = simulate(req)
        assert result.monthly_rate == pytest.approx(0.01, abs=1e-12)
        assert result.monthly_payment == pytest.approx(8884.88, abs=0.01)
        assert result.indicators.tir_monthly == pytest.approx(0.01, abs=1e-8)

    def test_discount_from_period_zero(self, request_pen):
        r1 = simulate(request_pen)
        r0 = simulate(replace(request_pen, discount_from_period=0))
        assert r0.indicators.van != r1.indicators.van

    def test_idempotent(self, request_pen):
        assert simulate(request_pen).schedule == simulate(request_pen).schedule


class TestSimulateValidation:
    def test_grace_not_below_term(self, request_pen):
        terms = replace(request_pen.terms, grace_total_months=120, grace_partial_months=120)
        with pytest.raises(LoanValidationError, match="gracia"):
            simulate(replace(request_pen, terms=terms))

    def test_bonus_exceeding_price(self, request_pen):
        quote = replace(request_pen.property, bonus_amount=280000)
        with pytest.raises(LoanValidationError, match="monto a financiar"):
            simulate(replace(request_pen, property=quote, upfront=UpfrontCosts()))

    def test_cok_required(self, request_pen):
        with pytest.raises(LoanValidationError, match="COK"):
            simulate(replace(request_pen, cok_annual=0))

    def test_nan_rate_rejected(self, request_pen):
        terms = replace(request_pen.terms, annual_rate=float("nan"))
        with pytest.raises(LoanValidationError):
            simulate(replace(request_pen, terms=terms))

    def test_nan_cok_rejected(self, request_pen):
        with pytest.raises(LoanValidationError, match="COK"):
            simulate(replace(request_pen, cok_annual=float("nan")))

    def test_principal_required_without_property(self):
        with pytest.raises(LoanValidationError):
            simulate(SimulationRequest(terms=LoanTerms(principal=0, annual_rate=0.1, total_months=12)))
