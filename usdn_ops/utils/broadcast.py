"""
forge 部署记录 (broadcast) 与编译产物解析

JSON 在读取时立即转换为数据类，格式错误统一抛出 BroadcastFormatError。
"""

# 标准库
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple, Union

# 本地导入
from ..config import VERIFY_CONFIG


class BroadcastFormatError(ValueError):
    """部署记录或编译产物格式错误"""


def _read_json(path: Union[str, Path]) -> Any:
    try:
        with open(path, encoding='utf-8') as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise BroadcastFormatError(f"Invalid JSON in {path}: {e}")
    except UnicodeDecodeError as e:
        raise BroadcastFormatError(f"{path} is not valid UTF-8: {e}")
    except OSError as e:
        raise BroadcastFormatError(f"Unable to read {path}: {e}")


def _optional_str(raw: dict, key: str) -> Optional[str]:
    value = raw.get(key)
    if value is not None and not isinstance(value, str):
        raise BroadcastFormatError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


@dataclass
class BroadcastTransaction:
    transaction_type: Optional[str]
    contract_address: Optional[str]
    contract_name: Optional[str]
    arguments: Optional[List[str]]

    @property
    def is_creation(self) -> bool:
        return self.transaction_type in VERIFY_CONFIG['creation_types']

    @classmethod
    def from_dict(cls, raw: Any) -> 'BroadcastTransaction':
        if not isinstance(raw, dict):
            raise BroadcastFormatError(f"Transaction must be an object, got {type(raw).__name__}")

        arguments = raw.get('arguments')
        if arguments is not None:
            if not isinstance(arguments, list):
                raise BroadcastFormatError("'arguments' must be a list or null")
            # forge 把所有参数记录为字符串
            arguments = [arg if isinstance(arg, str) else json.dumps(arg) for arg in arguments]

        return cls(
            transaction_type=_optional_str(raw, 'transactionType'),
            contract_address=_optional_str(raw, 'contractAddress'),
            contract_name=_optional_str(raw, 'contractName'),
            arguments=arguments,
        )


@dataclass
class Broadcast:
    libraries: List[str] = field(default_factory=list)
    transactions: List[BroadcastTransaction] = field(default_factory=list)
    chain: Optional[int] = None

    def creations(self) -> List[BroadcastTransaction]:
        """合约创建交易 (CREATE / CREATE2)"""
        return [tx for tx in self.transactions if tx.is_creation]

    @classmethod
    def from_dict(cls, raw: Any) -> 'Broadcast':
        if not isinstance(raw, dict):
            raise BroadcastFormatError("Broadcast file must contain a JSON object")

        libraries = raw.get('libraries', [])
        if libraries is None:
            libraries = []
        if not isinstance(libraries, list) or not all(isinstance(lib, str) for lib in libraries):
            raise BroadcastFormatError("'libraries' must be a list of strings")

        transactions = raw.get('transactions')
        if not isinstance(transactions, list):
            raise BroadcastFormatError("'transactions' must be a list")

        chain = raw.get('chain')
        if chain is not None and (isinstance(chain, bool) or not isinstance(chain, int)):
            raise BroadcastFormatError("'chain' must be an integer")

        return cls(
            libraries=list(libraries),
            transactions=[BroadcastTransaction.from_dict(tx) for tx in transactions],
            chain=chain,
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'Broadcast':
        return cls.from_dict(_read_json(path))


@dataclass(frozen=True)
class LinkReference:
    """字节码中未链接的库占位符"""
    source_path: str
    library_name: str

    @property
    def key(self) -> str:
        return f"{self.source_path}:{self.library_name}"


def _validate_param(param: Any):
    """校验 ABI 参数定义，tuple 递归校验其组件"""
    if not isinstance(param, dict) or not isinstance(param.get('type'), str):
        raise BroadcastFormatError(f"Invalid ABI parameter definition: {param!r}")
    if param['type'].startswith('tuple'):
        components = param.get('components')
        if not isinstance(components, list):
            raise BroadcastFormatError(f"Tuple parameter {param.get('name')!r} must have a list of components")
        for component in components:
            _validate_param(component)


@dataclass
class CompiledArtifact:
    abi: List[dict]
    link_references: List[LinkReference] = field(default_factory=list)

    def constructor_inputs(self) -> Optional[List[dict]]:
        """第一个 constructor 条目的输入参数定义，不存在时返回 None"""
        for entry in self.abi:
            if entry.get('type') == 'constructor':
                return list(entry.get('inputs', []))
        return None

    @classmethod
    def from_dict(cls, raw: Any) -> 'CompiledArtifact':
        if not isinstance(raw, dict):
            raise BroadcastFormatError("Artifact must contain a JSON object")

        abi = raw.get('abi')
        if not isinstance(abi, list) or not all(isinstance(entry, dict) for entry in abi):
            raise BroadcastFormatError("'abi' must be a list of objects")
        for entry in abi:
            if entry.get('type') == 'constructor':
                inputs = entry.get('inputs', [])
                if not isinstance(inputs, list):
                    raise BroadcastFormatError("Constructor 'inputs' must be a list")
                for param in inputs:
                    _validate_param(param)

        bytecode = raw.get('bytecode', {})
        if bytecode is None:
            bytecode = {}
        if not isinstance(bytecode, dict):
            raise BroadcastFormatError("'bytecode' must be an object")
        link_references = bytecode.get('linkReferences', {})
        if link_references is None:
            link_references = {}
        if not isinstance(link_references, dict):
            raise BroadcastFormatError("'bytecode.linkReferences' must be an object")

        references = []
        for source_path, libs in link_references.items():
            if not isinstance(libs, dict):
                raise BroadcastFormatError(f"Invalid link reference entry for {source_path}")
            for library_name in libs:
                references.append(LinkReference(source_path, library_name))

        return cls(abi=abi, link_references=references)

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'CompiledArtifact':
        return cls.from_dict(_read_json(path))


def find_library(reference: LinkReference, libraries: Sequence[str]) -> Optional[str]:
    """在部署记录的库列表中查找占位符对应的条目

    库条目格式为 "<源文件>:<库名>:<地址>"。优先精确匹配 源文件:库名，
    否则退回到按源文件前缀匹配的第一个条目。
    """
    exact_prefix = reference.key + ':'
    for library in libraries:
        if library.startswith(exact_prefix):
            return library
    for library in libraries:
        if library.startswith(reference.source_path):
            return library
    return None


def resolve_libraries(
    references: Sequence[LinkReference],
    libraries: Sequence[str]
) -> Tuple[List[str], List[LinkReference]]:
    """解析所有链接库

    Returns:
        (找到的库条目, 未找到的占位符)
    """
    resolved: List[str] = []
    unresolved: List[LinkReference] = []
    for reference in references:
        library = find_library(reference, libraries)
        if library is None:
            unresolved.append(reference)
        elif library not in resolved:
            resolved.append(library)
    return resolved, unresolved
