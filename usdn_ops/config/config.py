from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# 合约地址 (以太坊主网)
CONTRACTS = {
    'USDN_PROTOCOL': '0x656cb8c6d154aad29d8771384089be5b5141f01a',
    'USDN_LONG_FARMING': '0xf9d36078a248af249aa57ae1d5d0c1033d6bbe27',
    'MULTICALL3': '0xcA11bde05977b3631167028862bE2a173976CA11',
}


# 扫描配置
SCAN_CONFIG = {
    'tick_step': 100,  # tick 间距
    'scan_width': 2000,  # 最高 tick 之上的扫描宽度
    'min_scan_ceiling': 82000,  # 扫描上限的下限
    'positions_per_tick': 50,  # 每个 (tick, version) 查询的仓位数量
    'reward_display_divisor': 10,  # 奖励显示前的缩放
    'request_timeout': 30,  # RPC 请求超时(秒)
}


# 合约验证配置
VERIFY_CONFIG = {
    'forge_bin': 'forge',
    'out_dir': 'out',  # forge 编译输出目录
    'creation_types': ('CREATE', 'CREATE2'),
    'debug_verbosity': '-vvvvv',
}


@dataclass
class ScannerConfig:
    """仓位扫描配置，启动时构建一次"""
    rpc_url: str
    protocol_address: str = CONTRACTS['USDN_PROTOCOL']
    farming_address: str = CONTRACTS['USDN_LONG_FARMING']
    multicall_address: str = CONTRACTS['MULTICALL3']
    tick_step: int = SCAN_CONFIG['tick_step']
    scan_width: int = SCAN_CONFIG['scan_width']
    min_scan_ceiling: int = SCAN_CONFIG['min_scan_ceiling']
    positions_per_tick: int = SCAN_CONFIG['positions_per_tick']
    reward_display_divisor: int = SCAN_CONFIG['reward_display_divisor']
    request_timeout: int = SCAN_CONFIG['request_timeout']


@dataclass
class VerifierConfig:
    """合约验证配置，启动时构建一次"""
    etherscan_api_key: str
    verifier_url: Optional[str] = None
    debug: bool = False
    out_dir: Path = field(default_factory=lambda: Path(VERIFY_CONFIG['out_dir']))
    forge_bin: str = VERIFY_CONFIG['forge_bin']

    def artifact_path(self, contract_name: str) -> Path:
        """forge 编译产物路径: out/<Name>.sol/<Name>.json"""
        return Path(self.out_dir) / f"{contract_name}.sol" / f"{contract_name}.json"
