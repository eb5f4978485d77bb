import calendar
from datetime import date
from typing import List, Optional

from dateutil.relativedelta import relativedelta


def due_date(disbursement: date, period: int, repayment_day: Optional[int] = None) -> date:
    """第 period 期的还款日

    默认沿用放款日的日期；当月天数不足时取月末（1 月 31 日放款 -> 2 月 28/29 日）。
    """
    day = repayment_day or disbursement.day
    target = disbursement + relativedelta(months=period)
    last_day = calendar.monthrange(target.year, target.month)[1]
    return target.replace(day=min(day, last_day))


def due_dates(disbursement: date, periods: int, repayment_day: Optional[int] = None) -> List[date]:
    """第 1..periods 期还款日，均从放款日推算，不会因月末截断而漂移"""
    return [due_date(disbursement, p, repayment_day) for p in range(1, periods + 1)]
