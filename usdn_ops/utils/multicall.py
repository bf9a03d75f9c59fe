# 标准库
from typing import List, Sequence, Tuple

# 第三方库
from web3 import Web3

# 本地导入
from .contracts import load_contract


class Multicall:
    """Multicall3 封装: 一次 RPC 请求执行多个只读调用"""

    def __init__(self, web3: Web3, address: str):
        self.contract = load_contract(web3, address, 'Multicall3.json')

    def try_aggregate(self, calls: Sequence[Tuple[str, bytes]]) -> List[Tuple[bool, bytes]]:
        """批量调用，单个调用失败不会导致整批失败

        Args:
            calls: (目标地址, calldata) 列表

        Returns:
            与 calls 顺序一致的 (是否成功, 返回数据) 列表
        """
        if not calls:
            return []
        results = self.contract.functions.tryAggregate(False, list(calls)).call()
        return [(bool(success), bytes(data)) for success, data in results]
