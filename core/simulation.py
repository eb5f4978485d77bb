"""
贷款模拟：输入换算 -> TEM -> 还款计划 -> 财务指标

纯函数，不读写任何存储；汇率、费率等由调用方传入。
"""
import logging
from typing import Tuple

from config.constants import Currency, GraceType
from core.indicators import compute_indicators
from core.rates import cok_monthly, monthly_rate
from core.schedule import build_schedule, summarize_schedule
from data_manager.data_validator import LoanValidationError, require_valid, validate_simulation_request
from data_manager.schema import LoanTerms, SimulationRequest, SimulationResult
from utils.id_generator import generate_simulation_id

logger = logging.getLogger(__name__)


def _to_pen(amount: float, currency: Currency, exchange_rate: float) -> float:
    if Currency(currency) == Currency.USD:
        return amount * exchange_rate
    return amount


def property_value_pen(request: SimulationRequest) -> float:
    """房产价值（索尔），用于房屋保险"""
    quote = request.property
    if quote is None:
        return 0.0
    return _to_pen(quote.price, quote.currency, request.exchange_rate)


def financed_principal(request: SimulationRequest) -> Tuple[float, float]:
    """返回 (融资基数, 融资本金)；融资本金 = 基数 + 前期费用"""
    quote = request.property
    if quote is None:
        base = request.terms.principal
    else:
        price = _to_pen(quote.price, quote.currency, request.exchange_rate)
        initial = _to_pen(quote.initial_payment, quote.currency, request.exchange_rate)
        bonus = _to_pen(quote.bonus_amount, quote.currency, request.exchange_rate)
        base = price - initial - bonus
    return base, base + request.upfront.total


def grace_of(terms: LoanTerms) -> Tuple[GraceType, int]:
    """宽限类型与月数（全宽限优先）"""
    if terms.grace_total_months > 0:
        return GraceType.TOTAL, terms.grace_total_months
    if terms.grace_partial_months > 0:
        return GraceType.PARTIAL, terms.grace_partial_months
    return GraceType.NONE, 0


def simulate(request: SimulationRequest) -> SimulationResult:
    """执行一次完整模拟，非法输入抛出 LoanValidationError"""
    require_valid(validate_simulation_request(request))

    base, principal = financed_principal(request)
    if principal <= 0:
        raise LoanValidationError("El monto a financiar debe ser mayor a 0.")

    terms = request.terms
    tem = monthly_rate(terms.rate_kind, terms.annual_rate, terms.capitalization_per_year)
    cok_m = cok_monthly(request.cok_annual)

    rows = build_schedule(
        principal,
        tem,
        terms.total_months,
        terms.grace_total_months,
        terms.grace_partial_months,
        request.ancillary.desgravamen_rate,
        request.ancillary.property_insurance_annual_rate,
        property_value_pen(request),
        request.ancillary.monthly_fees,
    )
    indicators = compute_indicators(
        principal, rows, tem, cok_m,
        include_ancillary_in_cashflow=request.include_ancillary_in_cashflow,
        discount_from_period=request.discount_from_period,
    )
    grace_type, grace_months = grace_of(terms)
    payment = next((r.base_payment for r in rows if not r.is_grace), 0.0)

    quote = request.property
    currency = quote.currency if quote is not None else Currency.PEN
    exchange_rate_used = request.exchange_rate if Currency(currency) == Currency.USD else 1.0

    result = SimulationResult(
        simulation_id=generate_simulation_id(),
        principal=principal,
        base_principal=base,
        upfront_total=request.upfront.total,
        monthly_rate=tem,
        monthly_payment=payment,
        grace_type=grace_type,
        grace_months=grace_months,
        currency=Currency(currency),
        exchange_rate_used=exchange_rate_used,
        cok_monthly_rate=cok_m,
        schedule=tuple(rows),
        indicators=indicators,
        summary=summarize_schedule(rows),
        start_date=request.start_date,
    )
    logger.debug(
        "%s: principal=%.2f tem=%.6f cuota=%.2f tir=%s",
        result.simulation_id, principal, tem, payment, indicators.tir_monthly,
    )
    return result
