import socket
from typing import Tuple


class PortChecker:
    @staticmethod
    def split_address(addr: str) -> Tuple[str, int]:
        """'127.0.0.1:9222' -> ('127.0.0.1', 9222)"""
        host, _, port = addr.rpartition(':')
        return (host or '127.0.0.1'), int(port)

    @staticmethod
    def is_port_open(port: int, host: str = '127.0.0.1', timeout: float = 0.5) -> bool:
        """检测浏览器调试端口是否在监听"""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.settimeout(timeout)
            return s.connect_ex((host, port)) == 0
