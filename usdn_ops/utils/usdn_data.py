# 标准库
import logging
from typing import List, Optional, Sequence, Tuple

# 第三方库
from web3 import Web3
from eth_abi import decode
from eth_abi.exceptions import DecodingError

# 本地导入
from .contracts import load_contract, function_output_types
from .multicall import Multicall

logger = logging.getLogger(__name__)


class UsdnDataProvider:
    def __init__(
        self,
        web3: Web3,
        protocol_address: str,
        farming_address: str,
        multicall_address: str
    ):
        self.protocol = load_contract(web3, protocol_address, 'UsdnProtocol.json')
        self.farming = load_contract(web3, farming_address, 'UsdnLongFarming.json')
        self.multicall = Multicall(web3, multicall_address)
        self._harvest_output_types = function_output_types(self.farming.abi, 'harvest')

    def get_highest_populated_tick(self) -> int:
        """获取协议中最高的有仓位的 tick"""
        return self.protocol.functions.getHighestPopulatedTick().call()

    def get_tick_version(self, tick: int) -> int:
        """获取 tick 当前版本号，每次 tick 被清算后加一"""
        return self.protocol.functions.getTickVersion(tick).call()

    def get_harvest_results(
        self,
        tick: int,
        tick_version: int,
        indices: Sequence[int]
    ) -> List[Optional[Tuple]]:
        """通过 multicall 批量模拟 harvest(tick, tickVersion, index)

        Args:
            tick: tick
            tick_version: 已关闭的 tick 版本
            indices: 仓位索引列表

        Returns:
            与 indices 对应的解码结果 (isLiquidated_, rewards_)，调用失败时为 None
        """
        calls = [
            (self.farming.address,
             Web3.to_bytes(hexstr=self.farming.encode_abi('harvest', args=[tick, tick_version, index])))
            for index in indices
        ]
        results = self.multicall.try_aggregate(calls)

        decoded: List[Optional[Tuple]] = []
        for index, (success, return_data) in zip(indices, results):
            if not success or not return_data:
                decoded.append(None)
                continue
            try:
                decoded.append(tuple(decode(self._harvest_output_types, return_data)))
            except DecodingError as e:
                logger.debug("Cannot decode harvest result for %s: %s", (tick, tick_version, index), e)
                decoded.append(None)
        return decoded

    def get_pending_rewards(self, tick: int, tick_version: int, index: int) -> int:
        """获取仓位待领取奖励"""
        return self.farming.functions.pendingRewards(tick, tick_version, index).call()
