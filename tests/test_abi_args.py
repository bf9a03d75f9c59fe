import unittest

from eth_abi import decode
from web3 import Web3

from usdn_ops.utils.abi_args import (
    ArgumentCountError,
    ArgumentParseError,
    ConstructorArgumentError,
    abi_type,
    encode_constructor_args,
    parse_argument,
    reshape_tuple_argument
)

TOKEN_PARAM = {
    'name': 'token',
    'type': 'tuple',
    'components': [
        {'name': 'owner', 'type': 'address'},
        {'name': 'amount', 'type': 'uint256'},
        {'name': 'symbol', 'type': 'string'},
    ],
}

OWNER = '0x656cb8c6d154aad29d8771384089be5b5141f01a'


class TestReshapeTuple(unittest.TestCase):
    def test_quoting_follows_declared_type(self):
        value = reshape_tuple_argument('(0xABC, 10, tokenX)', TOKEN_PARAM)
        self.assertEqual(value, {'owner': '0xABC', 'amount': 10, 'symbol': 'tokenX'})
        self.assertEqual(list(value), ['owner', 'amount', 'symbol'])

    def test_without_outer_parentheses(self):
        value = reshape_tuple_argument('0xABC, 10, tokenX', TOKEN_PARAM)
        self.assertEqual(value['amount'], 10)

    def test_quoted_string_with_comma(self):
        value = reshape_tuple_argument(f'({OWNER}, 1, "USDN, long")', TOKEN_PARAM)
        self.assertEqual(value['symbol'], 'USDN, long')
        self.assertEqual(value['owner'], Web3.to_checksum_address(OWNER))

    def test_rejects_non_tuple(self):
        with self.assertRaises(ArgumentParseError):
            reshape_tuple_argument('1', {'name': 'x', 'type': 'uint256'})

    def test_missing_component(self):
        with self.assertRaises(ArgumentParseError):
            reshape_tuple_argument('(0xABC, 10)', TOKEN_PARAM)


class TestParseArgument(unittest.TestCase):
    def test_scalars(self):
        self.assertEqual(parse_argument('1000000000000000000 [1e18]', {'type': 'uint256'}), 10 ** 18)
        self.assertEqual(parse_argument('-5', {'type': 'int24'}), -5)
        self.assertEqual(parse_argument('0x10', {'type': 'uint8'}), 16)
        self.assertIs(parse_argument('true', {'type': 'bool'}), True)
        self.assertEqual(parse_argument('0xdeadbeef', {'type': 'bytes4'}), '0xdeadbeef')

    def test_top_level_string_kept_verbatim(self):
        text = 'Ultimate Synthetic Delta Neutral, (USDN)'
        self.assertEqual(parse_argument(text, {'type': 'string'}), text)

    def test_invalid_scalar(self):
        with self.assertRaises(ArgumentParseError):
            parse_argument('ten', {'type': 'uint256'})
        with self.assertRaises(ArgumentParseError):
            parse_argument('yes', {'type': 'bool'})

    def test_arrays(self):
        self.assertEqual(parse_argument('[1, 2, 3]', {'type': 'uint256[]'}), [1, 2, 3])
        self.assertEqual(parse_argument('[]', {'type': 'address[]'}), [])
        with self.assertRaises(ArgumentParseError):
            parse_argument('[1, 2]', {'type': 'uint256[3]'})

    def test_nested_tuples(self):
        param = {
            'type': 'tuple',
            'components': [
                {'name': 'id', 'type': 'uint8'},
                {'name': 'inner', 'type': 'tuple', 'components': [
                    {'name': 'flag', 'type': 'bool'},
                    {'name': 'values', 'type': 'uint256[]'},
                ]},
                {'name': 'items', 'type': 'tuple[]', 'components': [
                    {'name': 'label', 'type': 'string'},
                ]},
            ],
        }
        value = parse_argument('(1, (false, [4, 5]), [("a"), ("b, c")])', param)
        self.assertEqual(value, {
            'id': 1,
            'inner': {'flag': False, 'values': [4, 5]},
            'items': [{'label': 'a'}, {'label': 'b, c'}],
        })

    def test_trailing_input(self):
        with self.assertRaises(ArgumentParseError):
            parse_argument('(0xABC, 10, tokenX) extra', TOKEN_PARAM)


class TestEncode(unittest.TestCase):
    def test_abi_type(self):
        param = {'type': 'tuple[]', 'components': [
            {'type': 'address'},
            {'type': 'tuple', 'components': [{'type': 'uint8'}, {'type': 'bytes'}]},
        ]}
        self.assertEqual(abi_type(param), '(address,(uint8,bytes))[]')

    def test_tuple_round_trip(self):
        inputs = [TOKEN_PARAM, {'name': 'fee', 'type': 'uint16'}]
        encoded = encode_constructor_args(inputs, [f'({OWNER}, 10, tokenX)', '250'])
        (owner, amount, symbol), fee = decode(['(address,uint256,string)', 'uint16'], Web3.to_bytes(hexstr=encoded))
        self.assertEqual(owner.lower(), OWNER)
        self.assertEqual(amount, 10)
        self.assertEqual(symbol, 'tokenX')
        self.assertEqual(fee, 250)

    def test_bytes_arguments(self):
        inputs = [{'name': 'salt', 'type': 'bytes32'}, {'name': 'data', 'type': 'bytes'}]
        salt = '0x' + 'ab' * 32
        encoded = encode_constructor_args(inputs, [salt, '0x0102'])
        decoded = decode(['bytes32', 'bytes'], Web3.to_bytes(hexstr=encoded))
        self.assertEqual(decoded, (bytes.fromhex('ab' * 32), b'\x01\x02'))

    def test_count_mismatch(self):
        with self.assertRaises(ArgumentCountError):
            encode_constructor_args([TOKEN_PARAM], [])

    def test_invalid_address_fails_encoding(self):
        with self.assertRaises(ConstructorArgumentError):
            encode_constructor_args([TOKEN_PARAM], ['(0xABC, 10, tokenX)'])


if __name__ == '__main__':
    unittest.main()
