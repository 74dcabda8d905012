
import PyInstaller.__main__

print("🚀 开始构建 GhostPay.exe ...")

# 1. 配置参数
params = [
    'main.py',
    '--name=GhostPay',
    '--onefile',
    '--noconsole',
    '--add-data=ghostpay/infrastructure/js/ghost_engine.js;ghostpay/infrastructure/js',  # 注入模式引擎脚本
    '--collect-all=customtkinter',          # 收集 ctk 资源
    '--collect-all=DrissionPage',           # 收集 DrissionPage 资源
    '--collect-submodules=keyring.backends',  # 系统凭据库后端按入口点加载
    '--hidden-import=PIL._tkinter_finder',
    '--clean',
    '--distpath=dist',
    '--workpath=build',
    '--specpath=.',
    '--noconfirm',
]

# 2. 执行构建
PyInstaller.__main__.run(params)

print("✅ 构建完成！文件位于 dist/GhostPay.exe")
