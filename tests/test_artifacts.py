import json
import os
import tempfile
import unittest

from solc_cli.artifacts import contract_file_name, write_artifacts

ABI = [{'inputs': [], 'name': 'f', 'outputs': [], 'stateMutability': 'nonpayable', 'type': 'function'}]

OUTPUT = {
    'contracts': {
        'src/Main.sol': {
            'Main': {'abi': ABI, 'evm': {'bytecode': {'object': '6080604052'}}},
        },
        'C:\\lib\\x.sol': {
            'X': {'abi': [], 'evm': {'bytecode': {'object': ''}}},
        },
    }
}


class TestArtifacts(unittest.TestCase):
    def test_contract_file_name(self):
        tests = [
            ('src/Main.sol', 'Main', 'src_Main_sol_Main'),
            ('C:\\lib\\x.sol', 'X', 'C__lib_x_sol_X'),
            ('/abs/path/a.b.sol', 'A', '_abs_path_a_b_sol_A'),
        ]
        for (key, name, expected) in tests:
            self.assertEqual(expected, contract_file_name(key, name))

    def test_write_bin_and_abi(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, 'build', 'out')
            written = write_artifacts(OUTPUT, out, bin=True, abi=True)

            self.assertEqual(4, len(written))
            with open(os.path.join(out, 'src_Main_sol_Main.bin')) as f:
                self.assertEqual('6080604052', f.read())
            with open(os.path.join(out, 'src_Main_sol_Main.abi')) as f:
                self.assertEqual(ABI, json.loads(f.read()))
            with open(os.path.join(out, 'C__lib_x_sol_X.bin')) as f:
                self.assertEqual('', f.read())

    def test_write_abi_only_pretty(self):
        with tempfile.TemporaryDirectory() as tmp:
            written = write_artifacts(OUTPUT, tmp, abi=True, pretty=True)

            self.assertEqual({'src_Main_sol_Main.abi', 'C__lib_x_sol_X.abi'}, {os.path.basename(p) for p in written})
            with open(os.path.join(tmp, 'src_Main_sol_Main.abi')) as f:
                content = f.read()
            self.assertIn('\n    {', content)
            self.assertEqual(ABI, json.loads(content))

    def test_no_contracts(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual([], write_artifacts({'errors': []}, tmp, bin=True, abi=True))
