"""
escrowgate Configuration Suite

Contract file loading through the contract cache.
"""

import json
import os
import tempfile
import unittest

from escrowgate import ContractParameterError, PartyKeyring
from escrowgate.config import ContractCache, is_production, load_contract


class TestContractCache(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "contract.json")
        self.params = PartyKeyring.generate().contract_parameters(arbiter_fee=1000)
        self._write(self.params.to_dict())

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, data):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def test_load_contract(self):
        self.assertEqual(load_contract(self.path), self.params)

    def test_entry_reused_within_ttl(self):
        cache = ContractCache(ttl_seconds=60)
        self.assertIs(cache.get(self.path), cache.get(self.path))

    def test_force_reload_and_invalidate(self):
        cache = ContractCache(ttl_seconds=60)
        first = cache.get(self.path)

        self.assertIsNot(cache.get(self.path, force_reload=True), first)

        second = cache.get(self.path)
        cache.invalidate(self.path)
        self.assertIsNot(cache.get(self.path), second)

    def test_modified_file_is_reparsed(self):
        cache = ContractCache(ttl_seconds=60)
        cache.get(self.path)

        changed = dict(self.params.to_dict(), arbiter_fee=2000)
        self._write(changed)
        stat = os.stat(self.path)
        os.utime(self.path, (stat.st_atime, stat.st_mtime + 10))

        self.assertEqual(cache.get(self.path).arbiter_fee, 2000)

    def test_expired_entry_reloads(self):
        cache = ContractCache(ttl_seconds=-1)
        self.assertIsNot(cache.get(self.path), cache.get(self.path))

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            ContractCache().get(os.path.join(self.tmp.name, "absent.json"))

    def test_invalid_contract(self):
        self._write({"arbiter_fee": 1})
        with self.assertRaises(ContractParameterError):
            ContractCache().get(self.path)

    def test_default_environment_is_not_production(self):
        if os.getenv("ESCROWGATE_ENV", "dev") != "prod":
            self.assertFalse(is_production())


if __name__ == "__main__":
    unittest.main()
