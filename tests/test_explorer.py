import os
import unittest
from unittest.mock import patch

from hypothesis import given, strategies as st

from clawdvine_sdk.core.explorer import explorer_url, is_solana_signature

BASE58 = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
SOLANA_SIG = "5" * 40 + "Kx9mPqRsTuVwXyZaBcDeFgHiJk" + "2" * 22
EVM_HASH = "0x" + "ab" * 32


class TestExplorerUrl(unittest.TestCase):
    def test_solana_network(self):
        self.assertEqual(explorer_url(EVM_HASH, "solana"), f"https://solscan.io/tx/{EVM_HASH}")

    def test_base_network(self):
        self.assertEqual(explorer_url(EVM_HASH, "base"), f"https://basescan.org/tx/{EVM_HASH}")

    def test_signature_shape_overrides_declared_evm_network(self):
        self.assertEqual(len(SOLANA_SIG), 88)
        self.assertEqual(explorer_url(SOLANA_SIG, "base"), f"https://solscan.io/tx/{SOLANA_SIG}")

    def test_server_link_wins(self):
        self.assertEqual(explorer_url(EVM_HASH, "solana", override="https://x/tx/1"), "https://x/tx/1")

    def test_templates_read_from_environment_per_call(self):
        env = {"BASE_EXPLORER_TX": "https://sepolia.basescan.org/tx/{tx}", "SOLANA_EXPLORER_TX": "https://explorer.test/{tx}"}
        with patch.dict(os.environ, env):
            self.assertEqual(explorer_url(EVM_HASH, "base"), f"https://sepolia.basescan.org/tx/{EVM_HASH}")
            self.assertEqual(explorer_url(EVM_HASH, "solana"), f"https://explorer.test/{EVM_HASH}")

    def test_signature_length_bounds(self):
        self.assertFalse(is_solana_signature("A" * 79))
        self.assertTrue(is_solana_signature("A" * 80))
        self.assertTrue(is_solana_signature("A" * 90))
        self.assertFalse(is_solana_signature("A" * 91))

    def test_base58_excludes_ambiguous_chars(self):
        for bad in "0OIl":
            self.assertFalse(is_solana_signature("A" * 85 + bad))

    @given(tx=st.text())
    def test_solana_network_always_solscan(self, tx):
        self.assertTrue(explorer_url(tx, "solana").startswith("https://solscan.io/tx/"))

    @given(tx=st.text(alphabet=BASE58, min_size=80, max_size=90))
    def test_base58_signatures_always_solscan(self, tx):
        self.assertTrue(explorer_url(tx, "base").startswith("https://solscan.io/tx/"))

    @given(tx=st.text().filter(lambda t: not is_solana_signature(t)))
    def test_other_references_on_base_go_to_basescan(self, tx):
        self.assertEqual(explorer_url(tx, "base"), f"https://basescan.org/tx/{tx}")


if __name__ == '__main__':
    unittest.main()
