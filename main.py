"""
GhostPay - 卡片自动填写 / UPI 直达

程序入口。
"""

import sys
import os

# 确保程序根目录在 Python 路径中
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from ghostpay.ui.styles import UIStyles
from ghostpay.ui.main_window import GhostPayApp
from ghostpay.utils.logger import setup_logging


def main():
    """程序入口"""
    setup_logging(log_file=os.environ.get('GHOSTPAY_LOG_FILE'))

    # 应用全局样式
    UIStyles.apply_global_styles()

    # 创建主应用并运行主循环
    app = GhostPayApp()
    app.mainloop()


if __name__ == "__main__":
    main()
