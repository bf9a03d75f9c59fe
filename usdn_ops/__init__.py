"""
USDN 运维脚本

- usdn-find-slashable: 扫描可被罚没的 farming 仓位
- usdn-verify-contracts: 根据 forge 部署记录批量验证合约源码
"""

__version__ = '0.1.0'
