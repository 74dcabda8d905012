import os

from DrissionPage import ChromiumPage
from DrissionPage.common import ChromiumOptions


class BrowserLauncher:
    @staticmethod
    def launch(port: int = 9222, profile_dir: str = "browser_profile") -> ChromiumPage:
        """
        启动一个带调试端口的浏览器实例。
        使用独立的数据目录，与用户日常浏览器的登录态、扩展隔离。
        """
        co = ChromiumOptions()
        co.set_local_port(port)
        co.set_user_data_path(os.path.join(os.getcwd(), profile_dir))

        return ChromiumPage(addr_or_opts=co)
