import math
from typing import Tuple

from config.constants import RateKind
from data_manager.schema import AncillaryCharges, LoanTerms, SimulationRequest, UpfrontCosts


class LoanValidationError(ValueError):
    """贷款参数非法，在进入计算引擎前抛出"""


def is_positive(value) -> bool:
    """有限且大于 0（NaN / inf 不合法）"""
    return value is not None and math.isfinite(value) and value > 0


def is_non_negative(value) -> bool:
    return value is not None and math.isfinite(value) and value >= 0


def require_valid(result: Tuple[bool, str]):
    """把 (是否合法, 错误信息) 转成异常"""
    ok, message = result
    if not ok:
        raise LoanValidationError(message)


def validate_rate(
    rate_kind,
    annual_rate: float,
    capitalization_per_year: int,
) -> Tuple[bool, str]:
    """校验利率输入"""
    if rate_kind not in [e.value for e in RateKind]:
        return False, f"Tipo de tasa inválido: {rate_kind}"

    if not is_positive(annual_rate):
        return False, "La tasa debe ser mayor a 0."

    if RateKind(rate_kind) == RateKind.NOMINAL:
        if capitalization_per_year is None or capitalization_per_year < 1:
            return False, "La capitalización debe ser al menos 1 vez por año."

    return True, ""


def validate_loan_terms(terms: LoanTerms, check_principal: bool = True) -> Tuple[bool, str]:
    """校验贷款条件，返回 (是否合法, 错误信息)"""
    if check_principal and not is_positive(terms.principal):
        return False, "El monto a financiar debe ser mayor a 0."

    ok, message = validate_rate(terms.rate_kind, terms.annual_rate, terms.capitalization_per_year)
    if not ok:
        return ok, message

    if terms.total_months <= 0:
        return False, "El plazo debe ser mayor a 0 meses."

    if terms.grace_total_months < 0 or terms.grace_partial_months < 0:
        return False, "Los meses de gracia no pueden ser negativos."

    if terms.grace_total_months + terms.grace_partial_months >= terms.total_months:
        return False, "Los meses de gracia no pueden superar el plazo total."

    return True, ""


def validate_ancillary(charges: AncillaryCharges) -> Tuple[bool, str]:
    """校验附加费用（保险费率、每月固定费用）"""
    values = [
        charges.desgravamen_rate, charges.property_insurance_annual_rate,
        charges.postage_fee, charges.periodic_commission, charges.admin_expenses,
    ]
    if not all(is_non_negative(v) for v in values):
        return False, "Los seguros y comisiones no pueden ser negativos."
    return True, ""


def validate_upfront_costs(costs: UpfrontCosts) -> Tuple[bool, str]:
    values = [
        costs.notarial, costs.registral, costs.appraisal,
        costs.study_commission, costs.activation_commission,
    ]
    if not all(is_non_negative(v) for v in values):
        return False, "Los costos iniciales no pueden ser negativos."
    return True, ""


def validate_simulation_request(request: SimulationRequest) -> Tuple[bool, str]:
    """校验一次完整模拟的输入（融资本金在换算后另行校验）"""
    quote = request.property
    if quote is not None:
        if not is_positive(quote.price):
            return False, "El valor del inmueble debe ser mayor a 0."
        if not (is_non_negative(quote.initial_payment) and is_non_negative(quote.bonus_amount)):
            return False, "La cuota inicial y el bono no pueden ser negativos."
        if quote.initial_payment >= quote.price:
            return False, "La cuota inicial debe ser menor al valor del inmueble."

    ok, message = validate_loan_terms(request.terms, check_principal=quote is None)
    if not ok:
        return ok, message

    for check in (validate_ancillary(request.ancillary), validate_upfront_costs(request.upfront)):
        if not check[0]:
            return check

    if not is_positive(request.cok_annual):
        return False, "El COK debe ser mayor a 0."

    if not is_positive(request.exchange_rate):
        return False, "El tipo de cambio debe ser mayor a 0."

    if request.discount_from_period not in (0, 1):
        return False, "El desfase de descuento debe ser 0 o 1."

    return True, ""
