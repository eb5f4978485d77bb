"""模拟结果导出：CSV（分号分隔，带 BOM）与 Excel"""
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np
import pandas as pd

from config.constants import (
    Currency, EXPORT_HEADER, EXPORT_TITLE, SHEET_SCHEDULE, SHEET_SUMMARY,
)
from config.settings import EXPORT_DIR
from core.schedule import schedule_to_frame
from data_manager.schema import SimulationResult
from utils.formatters import fmt_number, fmt_percent, fmt_rate

logger = logging.getLogger(__name__)


def _ensure_export_dir():
    EXPORT_DIR.mkdir(parents=True, exist_ok=True)


def default_export_path(client: str, suffix: str = ".csv") -> Path:
    _ensure_export_dir()
    return EXPORT_DIR / f"HogarFin_{client.replace(' ', '_')}{suffix}"


def build_meta_rows(
    result: SimulationResult,
    client: str = "",
    property_name: str = "",
    entity: str = "",
) -> List[List[str]]:
    """导出表头信息块"""
    sym = Currency.PEN.symbol  # 金额均已换算为索尔
    ind = result.indicators
    return [
        [EXPORT_TITLE],
        [],
        ["Cliente:", client],
        ["Inmueble:", property_name],
        ["Entidad:", entity],
        ["Moneda:", "PEN (calculado)"],
        ["Principal:", f"{sym} {fmt_number(result.principal)}"],
        ["TEM:", fmt_rate(result.monthly_rate)],
        ["TCEA:", fmt_percent(ind.tcea)],
        ["VAN:", f"{sym} {fmt_number(ind.van)}"],
        ["TIR mensual:", fmt_percent(ind.tir_monthly)],
        ["Cuota:", f"{sym} {fmt_number(result.monthly_payment)}"],
    ]


def _schedule_lines(result: SimulationResult) -> List[List[str]]:
    return [
        [
            str(r.period),
            "GRACIA" if r.is_grace else "NORMAL",
            fmt_number(r.interest),
            fmt_number(r.amortization),
            fmt_number(r.base_payment),
            fmt_number(r.desgravamen),
            fmt_number(r.property_insurance),
            fmt_number(r.monthly_fees),
            fmt_number(r.balance),
            fmt_number(r.cashflow),
        ]
        for r in result.schedule
    ]


def schedule_to_csv(
    result: SimulationResult,
    client: str = "",
    property_name: str = "",
    entity: str = "",
) -> str:
    """生成 CSV 文本（Excel 可直接打开）"""
    lines = build_meta_rows(result, client, property_name, entity)
    lines.append([])
    lines.append(EXPORT_HEADER)
    lines.extend(_schedule_lines(result))
    return "\ufeff" + "\n".join(";".join(row) for row in lines)


def write_csv(result: SimulationResult, filepath: Optional[Path] = None, client: str = "", **meta) -> Path:
    filepath = Path(filepath) if filepath else default_export_path(client or result.simulation_id)
    filepath.write_text(schedule_to_csv(result, client, **meta), encoding="utf-8")
    logger.debug("CSV exportado: %s", filepath)
    return filepath


def export_excel(
    result: SimulationResult,
    filepath: Optional[Path] = None,
    client: str = "",
    property_name: str = "",
    entity: str = "",
) -> Path:
    """导出 Excel：Resumen（摘要）+ Cronograma（还款计划）两个 Sheet"""
    filepath = Path(filepath) if filepath else default_export_path(client or result.simulation_id, ".xlsx")

    meta = build_meta_rows(result, client, property_name, entity)[2:]
    summary_df = pd.DataFrame(meta, columns=["campo", "valor"])
    schedule_df = schedule_to_frame(result.schedule, result.start_date)

    with pd.ExcelWriter(filepath, engine="openpyxl") as writer:
        summary_df.to_excel(writer, sheet_name=SHEET_SUMMARY, index=False)
        schedule_df.to_excel(writer, sheet_name=SHEET_SCHEDULE, index=False)

    logger.debug("Excel exportado: %s (%d filas)", filepath, len(schedule_df))
    return filepath


def read_cashflows_csv(filepath: Path) -> Tuple[List[float], Optional[float]]:
    """读取带 cashflow 列的还款计划 CSV，返回 (现金流, 本金)

    本金取第 1 期期初余额，文件缺少 balance 列时返回 None。
    """
    df = pd.read_csv(filepath)
    if "cashflow" not in df.columns:
        raise ValueError(f"{filepath}: falta la columna 'cashflow'")

    df = df.sort_values("period") if "period" in df.columns else df
    values = pd.to_numeric(df["cashflow"], errors="coerce")
    bad = ~np.isfinite(values.astype(float))
    if bad.any():
        # 报告期数；没有 period 列时报告文件中的数据行号（从 1 开始）
        rows = df.loc[bad, "period"] if "period" in df.columns else df.index[bad.to_numpy()] + 1
        raise ValueError(
            f"{filepath}: valores de 'cashflow' no numéricos en las filas "
            + ", ".join(str(r) for r in rows)
        )
    cashflows = values.tolist()

    principal = None
    if {"balance", "amortization", "interest", "base_payment"} <= set(df.columns) and not df.empty:
        first = df.iloc[0]
        # 期末余额 + 本期摊还 - 资本化利息（全宽限期 base_payment 为 0）
        capitalized = first["interest"] if first["base_payment"] == 0 else 0.0
        principal = float(first["balance"] + first["amortization"] - capitalized)
    return cashflows, principal
