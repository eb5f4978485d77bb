from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple

from config.constants import Currency, GraceType, RateKind
from config.settings import (
    DEFAULT_CAPITALIZATION_PER_YEAR, DEFAULT_COK_ANNUAL, DEFAULT_EXCHANGE_RATE,
)


@dataclass(frozen=True)
class LoanTerms:
    principal: float
    annual_rate: float  # 小数，不是百分比
    rate_kind: RateKind = RateKind.EFFECTIVE
    capitalization_per_year: int = DEFAULT_CAPITALIZATION_PER_YEAR  # 仅 TNA 使用
    total_months: int = 240
    grace_total_months: int = 0
    grace_partial_months: int = 0

    @classmethod
    def from_years(cls, principal: float, annual_rate: float, term_years: int, **kwargs) -> "LoanTerms":
        return cls(principal=principal, annual_rate=annual_rate, total_months=term_years * 12, **kwargs)


@dataclass(frozen=True)
class AncillaryCharges:
    desgravamen_rate: float = 0.0  # 月费率，按余额
    property_insurance_annual_rate: float = 0.0  # 年费率，按房产价值
    postage_fee: float = 0.0  # portes
    periodic_commission: float = 0.0
    admin_expenses: float = 0.0

    @property
    def monthly_fees(self) -> float:
        return self.postage_fee + self.periodic_commission + self.admin_expenses


@dataclass(frozen=True)
class UpfrontCosts:
    notarial: float = 0.0
    registral: float = 0.0
    appraisal: float = 0.0
    study_commission: float = 0.0
    activation_commission: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.notarial + self.registral + self.appraisal
            + self.study_commission + self.activation_commission
        )


@dataclass(frozen=True)
class PropertyQuote:
    price: float
    initial_payment: float = 0.0
    currency: Currency = Currency.PEN
    bonus_amount: float = 0.0  # Bono Techo Propio / BBP，与房价同币种


@dataclass(frozen=True)
class SimulationRequest:
    """property 为空时直接以 terms.principal 作为融资基数"""
    terms: LoanTerms
    property: Optional[PropertyQuote] = None
    ancillary: AncillaryCharges = field(default_factory=AncillaryCharges)
    upfront: UpfrontCosts = field(default_factory=UpfrontCosts)
    cok_annual: float = DEFAULT_COK_ANNUAL
    exchange_rate: float = DEFAULT_EXCHANGE_RATE  # PEN / USD
    include_ancillary_in_cashflow: bool = True
    discount_from_period: int = 1
    start_date: Optional[date] = None


@dataclass(frozen=True)
class ScheduleRow:
    period: int
    balance: float  # 本期变动后的余额
    interest: float
    amortization: float
    base_payment: float
    desgravamen: float
    property_insurance: float
    monthly_fees: float
    total_payment: float
    cashflow: float
    is_grace: bool

    @property
    def ancillary_total(self) -> float:
        return self.desgravamen + self.property_insurance + self.monthly_fees


@dataclass(frozen=True)
class Indicators:
    """tir_* / tcea 为 None 表示无法计算"""
    monthly_rate: float
    van: float
    tir_monthly: Optional[float]
    tir_annual: Optional[float]
    tcea: Optional[float]


@dataclass(frozen=True)
class SimulationResult:
    simulation_id: str
    principal: float
    base_principal: float
    upfront_total: float
    monthly_rate: float
    monthly_payment: float
    grace_type: GraceType
    grace_months: int
    currency: Currency
    exchange_rate_used: float
    cok_monthly_rate: float
    schedule: Tuple[ScheduleRow, ...]
    indicators: Indicators
    summary: dict
    start_date: Optional[date] = None
