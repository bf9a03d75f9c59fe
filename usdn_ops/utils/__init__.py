"""
工具模块

包含：
- 合约加载与 RPC 连接
- Multicall3 批量调用
- USDN 协议数据读取
- forge 部署记录解析
- 构造函数参数编码
"""

from .contracts import connect, load_abi, load_contract, function_output_types
from .multicall import Multicall
from .usdn_data import UsdnDataProvider
from .broadcast import (
    Broadcast,
    BroadcastFormatError,
    BroadcastTransaction,
    CompiledArtifact,
    LinkReference,
    resolve_libraries
)
from .abi_args import (
    ArgumentCountError,
    ArgumentParseError,
    ConstructorArgumentError,
    encode_constructor_args,
    parse_argument,
    reshape_tuple_argument
)

__all__ = [
    'connect',
    'load_abi',
    'load_contract',
    'function_output_types',
    'Multicall',
    'UsdnDataProvider',
    'Broadcast',
    'BroadcastFormatError',
    'BroadcastTransaction',
    'CompiledArtifact',
    'LinkReference',
    'resolve_libraries',
    'ArgumentCountError',
    'ArgumentParseError',
    'ConstructorArgumentError',
    'encode_constructor_args',
    'parse_argument',
    'reshape_tuple_argument'
]
