"""利率换算：TEA / TNA -> TEM"""
from typing import Optional

from config.constants import RateKind
from config.settings import DEFAULT_CAPITALIZATION_PER_YEAR
from data_manager.data_validator import LoanValidationError, is_positive, require_valid, validate_rate


def nominal_to_effective(annual_rate: float, capitalization_per_year: int) -> float:
    """TNA（每年资本化 m 次）-> TEA"""
    m = capitalization_per_year
    return (1 + annual_rate / m) ** m - 1


def effective_to_monthly(effective_annual: float) -> float:
    return (1 + effective_annual) ** (1 / 12) - 1


def monthly_rate(
    rate_kind,
    annual_rate: float,
    capitalization_per_year: int = DEFAULT_CAPITALIZATION_PER_YEAR,
) -> float:
    """返回有效月利率 TEM。参数非法时抛出 LoanValidationError"""
    require_valid(validate_rate(rate_kind, annual_rate, capitalization_per_year))

    if RateKind(rate_kind) == RateKind.EFFECTIVE:
        return effective_to_monthly(annual_rate)
    return effective_to_monthly(nominal_to_effective(annual_rate, capitalization_per_year))


def cok_monthly(cok_annual: float) -> float:
    """年 COK（有效）-> 月贴现率"""
    if not is_positive(cok_annual):
        raise LoanValidationError("El COK debe ser mayor a 0.")
    return effective_to_monthly(cok_annual)


def annualize(monthly: Optional[float]) -> Optional[float]:
    """月利率年化；None 表示无法计算，原样传递"""
    if monthly is None:
        return None
    return (1 + monthly) ** 12 - 1
