from typing import Optional

from config.constants import Currency, NOT_AVAILABLE


def fmt_amount(value: float, currency: str = Currency.PEN.value) -> str:
    """格式化金额：1234567.891 -> S/ 1,234,567.89"""
    return f"{Currency(currency).symbol} {value:,.2f}"


def fmt_number(value: float) -> str:
    """两位小数，不带千分位（导出用）"""
    return f"{value:.2f}"


def fmt_rate(value: Optional[float]) -> str:
    """格式化利率（4 位小数）：0.0094888 -> 0.9489%"""
    if value is None:
        return NOT_AVAILABLE
    return f"{value * 100:.4f}%"


def fmt_percent(value: Optional[float]) -> str:
    """格式化比例（2 位小数）：0.1268 -> 12.68%"""
    if value is None:
        return NOT_AVAILABLE
    return f"{value * 100:.2f}%"


def fmt_months(months: int) -> str:
    """格式化月数：240 -> 20 años · 240 meses"""
    years = months // 12
    if months % 12 == 0:
        return f"{years} años · {months} meses"
    return f"{months} meses"
