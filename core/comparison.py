"""方案对比计算"""
from dataclasses import replace
from typing import Dict

import pandas as pd

from config.constants import COMPARISON_COLUMNS, GraceType
from core.simulation import simulate
from data_manager.schema import SimulationRequest, SimulationResult


def compare_simulations(results: Dict[str, SimulationResult]) -> pd.DataFrame:
    """
    对比多个模拟结果的关键指标。
    results: {场景名称: 模拟结果}
    """
    rows = []
    for name, result in results.items():
        ind = result.indicators
        rows.append({
            "escenario": name,
            "principal": result.principal,
            "tem": result.monthly_rate,
            "cuota": result.monthly_payment,
            "total_intereses": result.summary["total_interest"],
            "total_pagado": result.summary["total_payment"],
            "van": ind.van,
            "tir_mensual": ind.tir_monthly,
            "tcea": ind.tcea,
        })
    return pd.DataFrame(rows, columns=COMPARISON_COLUMNS)


def compare_grace_options(request: SimulationRequest, months: int) -> pd.DataFrame:
    """对比无宽限 / 全宽限 / 部分宽限（宽限 months 个月）"""
    terms = request.terms
    variants = {
        GraceType.NONE: replace(terms, grace_total_months=0, grace_partial_months=0),
        GraceType.TOTAL: replace(terms, grace_total_months=months, grace_partial_months=0),
        GraceType.PARTIAL: replace(terms, grace_total_months=0, grace_partial_months=months),
    }
    results = {
        grace.label: simulate(replace(request, terms=variant))
        for grace, variant in variants.items()
    }
    return compare_simulations(results)
