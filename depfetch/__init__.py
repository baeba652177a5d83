"""depfetch - 依赖包制品定位解析与拉取缓存"""

__version__ = "0.1.0"
