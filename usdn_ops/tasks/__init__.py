"""
任务模块

包含：
- 可罚没仓位扫描
- 合约源码验证
"""

from .slash_finder import SlashFinder, SlashablePosition
from .contract_verifier import ContractVerifier, VerificationResult

__all__ = [
    'SlashFinder',
    'SlashablePosition',
    'ContractVerifier',
    'VerificationResult'
]
