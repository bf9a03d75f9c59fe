import json
import tempfile
import unittest
from pathlib import Path

from usdn_ops.utils.broadcast import (
    Broadcast,
    BroadcastFormatError,
    CompiledArtifact,
    LinkReference,
    find_library,
    resolve_libraries
)

LIBRARIES = [
    'src/libraries/TickMath.sol:TickMath:0x1111111111111111111111111111111111111111',
    'src/libraries/Long.sol:LongLib:0x2222222222222222222222222222222222222222',
    'src/libraries/Long.sol:LongActions:0x3333333333333333333333333333333333333333',
]


class TestBroadcast(unittest.TestCase):
    def test_creations_filter(self):
        broadcast = Broadcast.from_dict({
            'libraries': LIBRARIES,
            'chain': 1,
            'transactions': [
                {'transactionType': 'CREATE', 'contractAddress': '0xa', 'contractName': 'Usdn', 'arguments': None},
                {'transactionType': 'CALL', 'contractAddress': '0xa', 'contractName': 'Usdn', 'arguments': ['1']},
                {'transactionType': 'CREATE2', 'contractAddress': '0xb', 'contractName': 'Wusdn', 'arguments': ['0xa']},
            ],
        })
        self.assertEqual([tx.contract_name for tx in broadcast.creations()], ['Usdn', 'Wusdn'])
        self.assertIsNone(broadcast.creations()[0].arguments)
        self.assertEqual(broadcast.chain, 1)

    def test_libraries_default_to_empty(self):
        broadcast = Broadcast.from_dict({'transactions': []})
        self.assertEqual(broadcast.libraries, [])

    def test_invalid_structure(self):
        for raw in (
            [],
            {'transactions': {}},
            {'transactions': [], 'libraries': [1]},
            {'transactions': ['CREATE']},
            {'transactions': [{'transactionType': 'CREATE', 'arguments': 'x'}]},
            {'transactions': [], 'chain': '1'},
        ):
            with self.assertRaises(BroadcastFormatError):
                Broadcast.from_dict(raw)

    def test_falsy_values_of_wrong_type(self):
        for raw in (
            {'transactions': [], 'libraries': ''},
            {'transactions': [], 'libraries': 0},
        ):
            with self.assertRaises(BroadcastFormatError):
                Broadcast.from_dict(raw)

    def test_null_libraries(self):
        self.assertEqual(Broadcast.from_dict({'transactions': [], 'libraries': None}).libraries, [])

    def test_load_invalid_utf8(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / 'run-latest.json'
            path.write_bytes(b'{"transactions": ["\xff\xfe"]}')
            with self.assertRaises(BroadcastFormatError):
                Broadcast.load(path)

    def test_load_directory(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(BroadcastFormatError):
                Broadcast.load(tmp)

    def test_load_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / 'run-latest.json'
            path.write_text('{not json')
            with self.assertRaises(BroadcastFormatError):
                Broadcast.load(path)


class TestCompiledArtifact(unittest.TestCase):
    def test_link_references_and_constructor(self):
        artifact = CompiledArtifact.from_dict({
            'abi': [
                {'type': 'function', 'name': 'foo', 'inputs': []},
                {'type': 'constructor', 'inputs': [{'name': 'a', 'type': 'uint256'}]},
            ],
            'bytecode': {
                'object': '0x',
                'linkReferences': {'src/libraries/Long.sol': {'LongLib': [], 'LongActions': []}},
            },
        })
        self.assertEqual(artifact.constructor_inputs(), [{'name': 'a', 'type': 'uint256'}])
        self.assertEqual(
            artifact.link_references,
            [LinkReference('src/libraries/Long.sol', 'LongLib'), LinkReference('src/libraries/Long.sol', 'LongActions')]
        )

    def test_no_constructor(self):
        artifact = CompiledArtifact.from_dict({'abi': [], 'bytecode': {'linkReferences': {}}})
        self.assertIsNone(artifact.constructor_inputs())
        self.assertEqual(artifact.link_references, [])

    def test_invalid_artifact(self):
        with self.assertRaises(BroadcastFormatError):
            CompiledArtifact.from_dict({'abi': {}})
        with self.assertRaises(BroadcastFormatError):
            CompiledArtifact.from_dict({'abi': [], 'bytecode': {'linkReferences': []}})
        with self.assertRaises(BroadcastFormatError):
            CompiledArtifact.from_dict({'abi': [], 'bytecode': []})

    def test_null_bytecode_sections(self):
        artifact = CompiledArtifact.from_dict({'abi': [], 'bytecode': {'linkReferences': None}})
        self.assertEqual(artifact.link_references, [])
        self.assertEqual(CompiledArtifact.from_dict({'abi': [], 'bytecode': None}).link_references, [])

    def test_invalid_constructor_inputs(self):
        for inputs in (
            [{'name': 'x'}],
            ['uint256'],
            [{'name': 't', 'type': 'tuple'}],
            [{'name': 't', 'type': 'tuple[]', 'components': [{'name': 'a'}]}],
            {'name': 'x', 'type': 'uint256'},
        ):
            with self.assertRaises(BroadcastFormatError):
                CompiledArtifact.from_dict({'abi': [{'type': 'constructor', 'inputs': inputs}]})

    def test_load(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / 'Usdn.json'
            path.write_text(json.dumps({'abi': [{'type': 'constructor', 'inputs': []}]}))
            self.assertEqual(CompiledArtifact.load(path).constructor_inputs(), [])


class TestLibraryResolution(unittest.TestCase):
    def test_exact_match_preferred(self):
        reference = LinkReference('src/libraries/Long.sol', 'LongActions')
        self.assertEqual(find_library(reference, LIBRARIES), LIBRARIES[2])

    def test_falls_back_to_source_prefix(self):
        reference = LinkReference('src/libraries/TickMath.sol', 'Renamed')
        self.assertEqual(find_library(reference, LIBRARIES), LIBRARIES[0])

    def test_unresolved(self):
        references = [
            LinkReference('src/libraries/Long.sol', 'LongLib'),
            LinkReference('src/libraries/Missing.sol', 'Missing'),
        ]
        resolved, unresolved = resolve_libraries(references, LIBRARIES)
        self.assertEqual(resolved, [LIBRARIES[1]])
        self.assertEqual(unresolved, [references[1]])


if __name__ == '__main__':
    unittest.main()
