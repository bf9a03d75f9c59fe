"""
配置模块
"""

from .config import (
    CONTRACTS,
    SCAN_CONFIG,
    VERIFY_CONFIG,
    ScannerConfig,
    VerifierConfig
)

__all__ = [
    'CONTRACTS',
    'SCAN_CONFIG',
    'VERIFY_CONFIG',
    'ScannerConfig',
    'VerifierConfig'
]
