"""Tests for the static and contract-backed price oracles."""

import unittest
from unittest import mock

from lending_ledger.services.price_oracle import ContractPriceOracle, StaticPriceOracle


class StaticPriceOracleTests(unittest.TestCase):
    """Test the in-memory price table."""

    def test_quotes_are_case_insensitive(self) -> None:
        """Match asset symbols case-insensitively."""
        oracle = StaticPriceOracle({"btc": 50_000_000_000})
        self.assertEqual(oracle.get_price("BTC"), 50_000_000_000)

    def test_absent_and_zero_are_distinct(self) -> None:
        """Distinguish a missing quote from zero."""
        oracle = StaticPriceOracle()
        self.assertIsNone(oracle.get_price("BTC"))
        oracle.set_price("BTC", 0)
        self.assertEqual(oracle.get_price("BTC"), 0)
        oracle.clear_price("BTC")
        self.assertIsNone(oracle.get_price("BTC"))

    def test_negative_price_rejected(self) -> None:
        """Reject a negative static price."""
        with self.assertRaises(ValueError):
            StaticPriceOracle().set_price("BTC", -1)


class ContractPriceOracleTests(unittest.TestCase):
    """Test contract-backed price reads."""

    def _oracle(self, contract: mock.MagicMock, pass_asset: bool = False) -> ContractPriceOracle:
        return ContractPriceOracle(
            rpc_url="http://localhost:8545",
            contract_address="0x0000000000000000000000000000000000000001",
            abi_json="[]",
            price_function="latestPrice",
            pass_asset=pass_asset,
            contract=contract,
        )

    def test_reads_price_function(self) -> None:
        """Read the configured contract function."""
        contract = mock.MagicMock()
        contract.functions.latestPrice.return_value.call.return_value = 42_000_000_000
        self.assertEqual(self._oracle(contract).get_price("BTC"), 42_000_000_000)
        contract.functions.latestPrice.assert_called_once_with()

    def test_passes_asset_when_configured(self) -> None:
        """Pass the asset symbol when configured."""
        contract = mock.MagicMock()
        contract.functions.latestPrice.return_value.call.return_value = 7
        self.assertEqual(self._oracle(contract, pass_asset=True).get_price("BTC"), 7)
        contract.functions.latestPrice.assert_called_once_with("BTC")

    def test_failed_call_reads_as_no_quote(self) -> None:
        """Treat a failed call as no quote."""
        contract = mock.MagicMock()
        contract.functions.latestPrice.return_value.call.side_effect = RuntimeError("rpc down")
        self.assertIsNone(self._oracle(contract).get_price("BTC"))

    def test_negative_contract_price_reads_as_no_quote(self) -> None:
        """Treat a negative contract price as no quote."""
        contract = mock.MagicMock()
        contract.functions.latestPrice.return_value.call.return_value = -5
        self.assertIsNone(self._oracle(contract).get_price("BTC"))

    def test_builds_contract_through_web3(self) -> None:
        """Build the contract through Web3."""
        with mock.patch("lending_ledger.services.price_oracle.Web3") as web3_cls:
            web3_cls.to_checksum_address.side_effect = lambda address: address
            contract = web3_cls.return_value.eth.contract.return_value
            contract.functions.getPrice.return_value.call.return_value = 11
            oracle = ContractPriceOracle(
                rpc_url="http://localhost:8545",
                contract_address="0xabc",
                abi_json="[]",
            )
            self.assertEqual(oracle.get_price("BTC"), 11)
            web3_cls.HTTPProvider.assert_called_once_with("http://localhost:8545")


if __name__ == "__main__":
    unittest.main()
