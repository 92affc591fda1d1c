"""submod - 子模块解析工具"""

__version__ = "0.1.0"
