import os
from pathlib import Path

# 项目根目录
PROJECT_ROOT = Path(__file__).parent.parent

# 导出文件目录
EXPORT_DIR = PROJECT_ROOT / "exports"

# 默认资本机会成本 COK（有效年利率）
DEFAULT_COK_ANNUAL = 0.12

# TNA 默认每年资本化次数
DEFAULT_CAPITALIZATION_PER_YEAR = 12

# 贷款期限 (年)
DEFAULT_TERM_YEARS = 20
MIN_TERM_YEARS = 5
MAX_TERM_YEARS = 25

# 美元兑索尔汇率，查不到时的兜底值
DEFAULT_EXCHANGE_RATE = 3.75

# 日志级别
LOG_LEVEL = os.environ.get("HOGARFIN_LOG_LEVEL", "WARNING")
