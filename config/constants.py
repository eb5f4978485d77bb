from enum import Enum


class RateKind(str, Enum):
    EFFECTIVE = "TEA"  # 有效年利率
    NOMINAL = "TNA"  # 名义年利率

    @property
    def label(self) -> str:
        return {
            "TEA": "Efectiva Anual (TEA)",
            "TNA": "Nominal Anual (TNA)",
        }[self.value]


class GraceType(str, Enum):
    NONE = "NONE"
    TOTAL = "TOTAL"  # 全宽限：不还款，利息资本化
    PARTIAL = "PARTIAL"  # 部分宽限：只还利息

    @property
    def label(self) -> str:
        return {
            "NONE": "Sin gracia",
            "TOTAL": "Gracia total",
            "PARTIAL": "Gracia parcial",
        }[self.value]


class Currency(str, Enum):
    PEN = "PEN"
    USD = "USD"

    @property
    def symbol(self) -> str:
        return {
            "PEN": "S/",
            "USD": "$",
        }[self.value]


# IRR 二分法参数（固定，改动会影响结果可比性）
IRR_LOWER_BOUND = 1e-6
IRR_UPPER_BOUND = 1.0
IRR_MAX_ITERATIONS = 200
IRR_TOLERANCE = 1e-7

# 列定义
SCHEDULE_COLUMNS = [
    "period", "due_date", "balance", "interest", "amortization",
    "base_payment", "desgravamen", "property_insurance", "monthly_fees",
    "total_payment", "cashflow", "is_grace",
]

COMPARISON_COLUMNS = [
    "escenario", "principal", "tem", "cuota", "total_intereses",
    "total_pagado", "van", "tir_mensual", "tcea",
]

# 导出表头
EXPORT_TITLE = "SIMULACIÓN HOGARFIN – CRÉDITO MIVIVIENDA"
EXPORT_HEADER = [
    "N°", "Tipo", "Interés", "Amortización", "Cuota", "Desgravamen",
    "Seg.Inmueble", "Portes", "Saldo Final", "Flujo",
]
SHEET_SUMMARY = "Resumen"
SHEET_SCHEDULE = "Cronograma"
NOT_AVAILABLE = "N/D"
