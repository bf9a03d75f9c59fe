# 标准库
import os
import json
from typing import List

# 第三方库
from web3 import Web3
from web3.contract import Contract


ABI_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'abi')


def connect(rpc_url: str, timeout: int = 30) -> Web3:
    """连接 RPC 节点

    Raises:
        ConnectionError: 如果无法连接到节点
    """
    web3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={'timeout': timeout}))
    if not web3.is_connected():
        raise ConnectionError(f"Failed to connect to RPC at {rpc_url}")
    return web3


def load_abi(abi_file: str) -> List[dict]:
    """读取 ABI 文件

    Args:
        abi_file: ABI文件名 (位于包内 abi 目录)

    Returns:
        ABI 列表

    Raises:
        ValueError: 如果ABI格式无效
        FileNotFoundError: 如果ABI文件不存在
    """
    abi_path = os.path.join(ABI_DIR, abi_file)
    try:
        with open(abi_path) as f:
            contract_json = json.load(f)
    except FileNotFoundError:
        raise FileNotFoundError(f"ABI file not found: {abi_file}")
    except json.JSONDecodeError:
        raise ValueError(f"Invalid JSON in ABI file: {abi_file}")

    # 兼容 forge 编译产物格式 {"abi": [...]}
    if isinstance(contract_json, dict):
        abi = contract_json.get('abi')
    else:
        abi = contract_json

    if not isinstance(abi, list):
        raise ValueError(f"Invalid ABI format in {abi_file}. Expected list, got {type(abi)}")
    return abi


def load_contract(web3: Web3, address: str, abi_file: str) -> Contract:
    """加载合约"""
    return web3.eth.contract(address=Web3.to_checksum_address(address), abi=load_abi(abi_file))


def function_output_types(abi: List[dict], function_name: str) -> List[str]:
    """获取函数返回值类型列表，用于手动解码 multicall 返回数据"""
    for entry in abi:
        if entry.get('type') == 'function' and entry.get('name') == function_name:
            return [output['type'] for output in entry.get('outputs', [])]
    raise ValueError(f"Function {function_name} not found in ABI")
