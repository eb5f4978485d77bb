import sys
from pathlib import Path

# 测试直接导入 config / core / data_manager 等顶层包，需要项目根目录在 sys.path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))
