"""
还款计划生成（法式等额还款 + 宽限期）

三个阶段依次覆盖 1..total_months：
全宽限（不还款，利息资本化）-> 部分宽限（只还利息）-> 等额摊还。
附加费用（减值保险 desgravamen、房屋保险、每月固定费用）在每一期都计收。
"""
from datetime import date
from typing import Dict, List, Optional, Sequence

import pandas as pd

from config.constants import SCHEDULE_COLUMNS
from data_manager.schema import ScheduleRow
from utils.date_utils import due_dates


def calc_installment(balance: float, rate: float, n: int) -> float:
    """等额还款月供：balance * i / (1 - (1 + i)^-n)"""
    if n <= 0:
        return 0.0
    if rate == 0:
        return balance / n
    return balance * rate / (1 - (1 + rate) ** (-n))


def _row(
    period: int,
    balance: float,
    interest: float,
    amortization: float,
    base_payment: float,
    desgravamen: float,
    property_insurance: float,
    monthly_fees: float,
    is_grace: bool,
) -> ScheduleRow:
    total = base_payment + desgravamen + property_insurance + monthly_fees
    return ScheduleRow(
        period=period,
        balance=balance,
        interest=interest,
        amortization=amortization,
        base_payment=base_payment,
        desgravamen=desgravamen,
        property_insurance=property_insurance,
        monthly_fees=monthly_fees,
        total_payment=total,
        cashflow=-total,
        is_grace=is_grace,
    )


def build_schedule(
    principal: float,
    monthly_rate: float,
    total_months: int,
    grace_total_months: int = 0,
    grace_partial_months: int = 0,
    desgravamen_rate: float = 0.0,
    property_insurance_annual_rate: float = 0.0,
    property_value: float = 0.0,
    monthly_fees: float = 0.0,
) -> List[ScheduleRow]:
    """生成还款计划。

    不做参数校验：剩余摊还期数 <= 0 时按 1 期处理，调用方应先校验
    grace_total_months + grace_partial_months < total_months。
    """
    rows: List[ScheduleRow] = []
    balance = principal
    insurance = property_value * property_insurance_annual_rate / 12

    # 全宽限
    for period in range(1, grace_total_months + 1):
        interest = balance * monthly_rate
        desgravamen = balance * desgravamen_rate
        balance += interest
        rows.append(_row(
            period, balance, interest, 0.0, 0.0,
            desgravamen, insurance, monthly_fees, True,
        ))

    # 部分宽限
    grace_end = grace_total_months + grace_partial_months
    for period in range(grace_total_months + 1, grace_end + 1):
        interest = balance * monthly_rate
        desgravamen = balance * desgravamen_rate
        rows.append(_row(
            period, balance, interest, 0.0, interest,
            desgravamen, insurance, monthly_fees, True,
        ))

    # 等额摊还
    n = max(1, total_months - grace_end)
    installment = calc_installment(balance, monthly_rate, n)
    for period in range(grace_end + 1, total_months + 1):
        interest = balance * monthly_rate
        amortization = max(0.0, installment - interest)
        desgravamen = balance * desgravamen_rate
        balance = max(0.0, balance - amortization)
        rows.append(_row(
            period, balance, interest, amortization, installment,
            desgravamen, insurance, monthly_fees, False,
        ))

    return rows


def schedule_to_frame(
    rows: Sequence[ScheduleRow],
    start_date: Optional[date] = None,
    repayment_day: Optional[int] = None,
) -> pd.DataFrame:
    """还款计划转 DataFrame；给定 start_date（放款日）时填写每期还款日"""
    dates = due_dates(start_date, len(rows), repayment_day) if start_date else [None] * len(rows)
    records = []
    for row, due in zip(rows, dates):
        records.append({
            "period": row.period,
            "due_date": due.strftime("%Y-%m-%d") if due else None,
            "balance": row.balance,
            "interest": row.interest,
            "amortization": row.amortization,
            "base_payment": row.base_payment,
            "desgravamen": row.desgravamen,
            "property_insurance": row.property_insurance,
            "monthly_fees": row.monthly_fees,
            "total_payment": row.total_payment,
            "cashflow": row.cashflow,
            "is_grace": row.is_grace,
        })
    return pd.DataFrame(records, columns=SCHEDULE_COLUMNS)


def summarize_schedule(rows: Sequence[ScheduleRow]) -> Dict[str, float]:
    """汇总：总利息、总本金、总附加费用、总支付"""
    return {
        "total_interest": sum(r.interest for r in rows),
        "total_amortization": sum(r.amortization for r in rows),
        "total_base_payment": sum(r.base_payment for r in rows),
        "total_ancillary": sum(r.ancillary_total for r in rows),
        "total_payment": sum(r.total_payment for r in rows),
        "grace_periods": sum(1 for r in rows if r.is_grace),
    }
