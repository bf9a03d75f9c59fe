# 标准库
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import List

# 第三方库
from web3 import Web3

# 本地导入
from ..config import ScannerConfig
from ..utils.usdn_data import UsdnDataProvider

logger = logging.getLogger(__name__)


@dataclass
class SlashablePosition:
    tick: int
    tick_version: int
    index: int
    pending_rewards: int
    display_divisor: int = 10

    @property
    def display_rewards(self) -> Decimal:
        """缩放后以 ether 单位显示的奖励"""
        return Web3.from_wei(self.pending_rewards // self.display_divisor, 'ether')


class SlashFinder:
    """扫描 tick 区间，找出已被清算但仍有待领取奖励的仓位"""

    def __init__(self, usdn_data: UsdnDataProvider, config: ScannerConfig):
        self.usdn = usdn_data
        self.config = config

    @classmethod
    def from_config(cls, web3: Web3, config: ScannerConfig) -> 'SlashFinder':
        usdn_data = UsdnDataProvider(
            web3,
            config.protocol_address,
            config.farming_address,
            config.multicall_address
        )
        return cls(usdn_data, config)

    def scan_ceiling(self, highest_tick: int) -> int:
        """扫描上限，最高 tick 很小时保证最小扫描范围"""
        return max(highest_tick + self.config.scan_width, self.config.min_scan_ceiling)

    def ticks_to_scan(self, highest_tick: int) -> range:
        step = self.config.tick_step
        return range(highest_tick + step, self.scan_ceiling(highest_tick) + 1, step)

    def find_candidates(self, tick: int, tick_version: int) -> List[int]:
        """批量模拟 harvest，返回已被清算的仓位索引"""
        indices = list(range(self.config.positions_per_tick))
        results = self.usdn.get_harvest_results(tick, tick_version, indices)
        # 调用失败视为非候选
        return [index for index, result in zip(indices, results) if result is not None and result[0]]

    def scan_tick(self, tick: int) -> List[SlashablePosition]:
        tick_version = self.usdn.get_tick_version(tick)
        if tick_version == 0:
            # 该 tick 从未被清算过
            return []
        # farming 合约只记录已关闭版本的仓位
        tick_version -= 1

        positions = []
        for index in self.find_candidates(tick, tick_version):
            pending_rewards = self.usdn.get_pending_rewards(tick, tick_version, index)
            if pending_rewards:
                positions.append(SlashablePosition(
                    tick,
                    tick_version,
                    index,
                    pending_rewards,
                    self.config.reward_display_divisor
                ))
        return positions

    def run(self) -> List[SlashablePosition]:
        """执行一次完整扫描"""
        highest_tick = self.usdn.get_highest_populated_tick()
        print(f"highest tick {highest_tick}")

        slashable = []
        for tick in self.ticks_to_scan(highest_tick):
            logger.debug("Scanning tick %s", tick)
            for position in self.scan_tick(tick):
                print(
                    f"position should be slashed: "
                    f"({position.tick}, {position.tick_version}, {position.index}) {position.display_rewards}"
                )
                slashable.append(position)

        print("finished")
        return slashable
