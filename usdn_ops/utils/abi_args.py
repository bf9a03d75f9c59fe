"""
构造函数参数解析与 ABI 编码

forge 的 broadcast 文件把构造函数参数记录为字符串，结构体参数被展平为
"(0xabc, 10, \"token\")" 形式。这里按 ABI 声明的参数结构做递归下降解析，
支持任意层嵌套的 tuple、定长/变长数组以及包含逗号的带引号字符串。
"""

# 标准库
import re
import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

# 第三方库
from web3 import Web3
from eth_abi import encode
from eth_abi.exceptions import EncodingError

logger = logging.getLogger(__name__)

_ARRAY_SUFFIX = re.compile(r'^(.*)\[(\d*)\]$')
# forge 会给大数附加科学计数法注释，例如 "1000000000000000000 [1e18]"
_NUMBER = re.compile(r'^(-?(?:0x[0-9a-fA-F]+|\d+))(?:\s*\[[^\]]*\])?$')


class ConstructorArgumentError(ValueError):
    """构造函数参数无法编码"""


class ArgumentParseError(ConstructorArgumentError):
    """参数字面量与 ABI 类型不符"""


class ArgumentCountError(ConstructorArgumentError):
    """参数数量与 ABI 构造函数输入数量不一致"""


def _array_parts(abi_type: str) -> Optional[Tuple[str, Optional[int]]]:
    match = _ARRAY_SUFFIX.match(abi_type)
    if not match:
        return None
    base, size = match.groups()
    return base, int(size) if size else None


def _element_param(param: dict, base_type: str) -> dict:
    element = dict(param)
    element['type'] = base_type
    return element


def _component_key(component: dict, position: int) -> str:
    return component.get('name') or str(position)


def _is_string_like(abi_type: str) -> bool:
    return abi_type in ('address', 'string') or abi_type.startswith('bytes')


def coerce_scalar(abi_type: str, token: str) -> Any:
    """按声明类型转换单个字面量

    address/string/bytes 保留为字符串，整数转为 int，bool 转为 bool。
    """
    if abi_type == 'address':
        logger.debug("isAddress(%s) : %s", token, Web3.is_address(token))
        return Web3.to_checksum_address(token) if Web3.is_address(token) else token
    if _is_string_like(abi_type):
        return token
    if abi_type == 'bool':
        lowered = token.lower()
        if lowered not in ('true', 'false'):
            raise ArgumentParseError(f"Invalid bool literal: {token!r}")
        return lowered == 'true'
    if abi_type.startswith(('uint', 'int')):
        match = _NUMBER.match(token)
        if not match:
            raise ArgumentParseError(f"Invalid {abi_type} literal: {token!r}")
        number = match.group(1)
        return int(number, 16) if number.lstrip('-').startswith('0x') else int(number)
    return token


class _LiteralReader:
    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def skip_whitespace(self):
        while self.pos < len(self.text) and self.text[self.pos].isspace():
            self.pos += 1

    def peek(self) -> str:
        self.skip_whitespace()
        return self.text[self.pos] if self.pos < len(self.text) else ''

    def at_end(self) -> bool:
        return self.peek() == ''

    def expect(self, char: str):
        if self.peek() != char:
            found = self.text[self.pos:self.pos + 10] or 'end of input'
            raise ArgumentParseError(f"Expected {char!r} at position {self.pos} in {self.text!r}, found {found!r}")
        self.pos += 1

    def read_value(self, param: dict) -> Any:
        abi_type = param['type']
        array = _array_parts(abi_type)
        if array:
            return self._read_array(param, *array)
        if abi_type == 'tuple':
            return self._read_tuple(param)
        return self._read_scalar(abi_type)

    def _read_array(self, param: dict, base_type: str, size: Optional[int]) -> List[Any]:
        element = _element_param(param, base_type)
        items: List[Any] = []
        self.expect('[')
        if self.peek() == ']':
            self.pos += 1
        else:
            while True:
                items.append(self.read_value(element))
                if self.peek() == ',':
                    self.pos += 1
                    continue
                self.expect(']')
                break
        if size is not None and len(items) != size:
            raise ArgumentParseError(f"Expected {size} elements for {param['type']}, got {len(items)}")
        return items

    def _read_tuple(self, param: dict) -> Dict[str, Any]:
        components = param.get('components')
        if components is None:
            raise ArgumentParseError(f"Tuple parameter {param.get('name')!r} has no components")
        values: Dict[str, Any] = {}
        self.expect('(')
        for position, component in enumerate(components):
            if position:
                self.expect(',')
            values[_component_key(component, position)] = self.read_value(component)
        self.expect(')')
        return values

    def _read_scalar(self, abi_type: str) -> Any:
        if self.peek() == '"':
            token = self._read_quoted()
        else:
            token = self._read_bare()
        return coerce_scalar(abi_type, token)

    def _read_quoted(self) -> str:
        chars = []
        self.pos += 1
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char == '\\' and self.pos + 1 < len(self.text):
                chars.append(self.text[self.pos + 1])
                self.pos += 2
                continue
            self.pos += 1
            if char == '"':
                return ''.join(chars)
            chars.append(char)
        raise ArgumentParseError(f"Unterminated string in {self.text!r}")

    def _read_bare(self) -> str:
        start = self.pos
        depth = 0
        while self.pos < len(self.text):
            char = self.text[self.pos]
            if char in '([':
                depth += 1
            elif char in ')]':
                if depth == 0:
                    break
                depth -= 1
            elif char == ',' and depth == 0:
                break
            self.pos += 1
        return self.text[start:self.pos].strip()


def parse_argument(text: str, param: dict) -> Any:
    """把 broadcast 中的参数字符串解析为结构化值

    tuple 解析为按组件名排列的 dict，数组解析为 list。
    """
    abi_type = param['type']
    # 顶层字符串原样保留
    if abi_type == 'string':
        return text

    literal = text.strip()
    # 顶层 tuple 允许省略外层括号
    if abi_type == 'tuple' and not literal.startswith('('):
        literal = f"({literal})"

    reader = _LiteralReader(literal)
    value = reader.read_value(param)
    if not reader.at_end():
        raise ArgumentParseError(f"Unexpected trailing input in {text!r}")
    return value


def reshape_tuple_argument(text: str, param: dict) -> Dict[str, Any]:
    """把展平的 tuple 参数还原为按组件名排列的结构"""
    if param['type'] != 'tuple':
        raise ArgumentParseError(f"Parameter {param.get('name')!r} is not a tuple")
    value = parse_argument(text, param)
    logger.debug("formatted tuple argument : %s", json.dumps(value))
    return value


def abi_type(param: dict) -> str:
    """eth_abi 使用的类型字符串，tuple 展开为 (t1,t2,...)"""
    declared = param['type']
    if declared.startswith('tuple'):
        suffix = declared[len('tuple'):]
        inner = ','.join(abi_type(component) for component in param.get('components', []))
        return f"({inner}){suffix}"
    return declared


def to_abi_value(param: dict, value: Any) -> Any:
    """把结构化值转换为 eth_abi 可编码的值"""
    declared = param['type']
    array = _array_parts(declared)
    if array:
        element = _element_param(param, array[0])
        return [to_abi_value(element, item) for item in value]
    if declared == 'tuple':
        components = param.get('components', [])
        if isinstance(value, dict):
            items = [value[_component_key(component, position)] for position, component in enumerate(components)]
        else:
            items = list(value)
        return tuple(to_abi_value(component, item) for component, item in zip(components, items))
    if declared.startswith('bytes') and isinstance(value, str):
        return Web3.to_bytes(hexstr=value)
    return value


def encode_constructor_args(inputs: Sequence[dict], arguments: Sequence[str]) -> str:
    """解析并 ABI 编码构造函数参数

    Args:
        inputs: ABI 中 constructor 的 inputs
        arguments: broadcast 中记录的参数字符串

    Returns:
        0x 开头的编码结果

    Raises:
        ArgumentCountError: 参数数量不一致
        ArgumentParseError: 参数字面量无法解析
        ConstructorArgumentError: 编码失败
    """
    if len(inputs) != len(arguments):
        raise ArgumentCountError(
            f"constructorInputsType length: {len(inputs)} != argumentList length: {len(arguments)}"
        )

    values = []
    for param, argument in zip(inputs, arguments):
        if param['type'] == 'tuple':
            values.append(reshape_tuple_argument(argument, param))
        else:
            values.append(parse_argument(argument, param))

    types = [abi_type(param) for param in inputs]
    try:
        encoded = encode(types, [to_abi_value(param, value) for param, value in zip(inputs, values)])
    except (EncodingError, ValueError, TypeError) as e:
        raise ConstructorArgumentError(f"Cannot encode constructor arguments: {e}")
    return '0x' + encoded.hex()
