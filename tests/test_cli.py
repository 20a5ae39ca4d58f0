"""
Unit tests for the CLI module.

Tests follow the Given/When/Then pattern for clarity.
"""

import json
import os
from unittest.mock import patch

import pytest
import responses

from scripts.check_eligibility import build_parser, main
from scripts.lib.injective_client import encode_smart_query
from scripts.lib.models import MARKETPLACE_CONTRACT, NINJA_CONTRACT, QUANT_CONTRACT


RPC_URL = "https://lcd.example.com"
INDEXER_URL = "https://indexer.example.com"


@pytest.fixture
def sheet_file(tmp_path):
    path = tmp_path / "registered.json"
    path.write_text(
        json.dumps(
            {
                "range": "Sheet1!A1:B4",
                "majorDimension": "ROWS",
                "values": [
                    ["email", "address"],
                    ["a@example.com", "inj1seller"],
                    ["b@example.com", "inj1trader"],
                    ["c@example.com", "inj1nobody"],
                ],
            }
        )
    )
    return path


@pytest.fixture
def env(sheet_file):
    values = {
        "REGISTERED_FILE": str(sheet_file),
        "RPC_URL": RPC_URL,
        "INDEXER_URL": INDEXER_URL,
    }
    with patch.dict(os.environ, values, clear=True), patch(
        "scripts.lib.config.find_dotenv", return_value=""
    ):
        yield values


def _smart_url(contract, query):
    return f"{RPC_URL}/cosmwasm/wasm/v1/contract/{contract}/smart/{encode_smart_query(query)}"


def _mock_chain():
    responses.add(
        responses.GET,
        _smart_url(MARKETPLACE_CONTRACT, {"all_sell_orders": {}}),
        json={"data": {"orders": [{"owner": "inj1seller", "contract_address": QUANT_CONTRACT}]}},
    )
    for address in ("inj1seller", "inj1trader", "inj1nobody"):
        for contract in (QUANT_CONTRACT, NINJA_CONTRACT):
            responses.add(
                responses.GET,
                _smart_url(contract, {"tokens": {"owner": address}}),
                json={"data": {"ids": []}},
            )
    balances = {"inj1seller": "0", "inj1trader": "5000000", "inj1nobody": "0"}
    for address, amount in balances.items():
        responses.add(
            responses.GET,
            f"{RPC_URL}/cosmos/bank/v1beta1/balances/{address}",
            json={"balances": [{"denom": "inj", "amount": amount}]},
        )
    responses.add(
        responses.GET,
        f"{INDEXER_URL}/api/explorer/v1/accountTxs/inj1trader",
        json={"data": [{"logs": [{"events": [{"type": "injective.exchange.v1beta1.EventFoo"}]}]}]},
    )


class TestBuildParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        """
        Given no arguments
        When parsing
        Then defaults should apply
        """
        # When
        args = build_parser().parse_args([])

        # Then
        assert args.output == "results.json"
        assert args.output_format == "full"
        assert args.batch_size == 5
        assert args.pause == 1.0

    def test_rejects_unknown_format(self):
        """
        Given an unsupported output format
        When parsing
        Then argparse should exit
        """
        # When / Then
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--format", "csv"])


class TestMain:
    """Tests for the main entry point."""

    @responses.activate
    def test_writes_report_of_eligible_addresses(self, env, tmp_path):
        """
        Given a seller, a trader and an inactive address
        When running the scan
        Then only the seller and trader should be reported
        """
        # Given
        _mock_chain()
        output = tmp_path / "results.json"

        # When
        exit_code = main(["--output", str(output), "--pause", "0"])

        # Then
        assert exit_code == 0
        assert json.loads(output.read_text()) == [
            {
                "address": "inj1seller",
                "balance": 0,
                "collections": ["quant"],
                "exchange_flag": False,
                "vault_flag": False,
            },
            {
                "address": "inj1trader",
                "balance": 5000000,
                "collections": [],
                "exchange_flag": True,
                "vault_flag": False,
            },
        ]

    def test_missing_config_exits_with_error(self, tmp_path, capsys):
        """
        Given no RPC_URL in the environment
        When running the scan
        Then exit code 1 should be returned and nothing written
        """
        # Given
        output = tmp_path / "results.json"
        values = {"REGISTERED_FILE": "x.json", "INDEXER_URL": INDEXER_URL}

        # When
        with patch.dict(os.environ, values, clear=True), patch(
            "scripts.lib.config.find_dotenv", return_value=""
        ):
            exit_code = main(["--output", str(output)])

        # Then
        assert exit_code == 1
        assert "RPC_URL not set" in capsys.readouterr().err
        assert not output.exists()

    @responses.activate
    def test_sell_order_failure_is_fatal(self, env, tmp_path, capsys):
        """
        Given a failing sell order query
        When running the scan
        Then exit code 1 should be returned and no file written
        """
        # Given
        responses.add(
            responses.GET,
            _smart_url(MARKETPLACE_CONTRACT, {"all_sell_orders": {}}),
            status=503,
        )
        output = tmp_path / "results.json"

        # When
        exit_code = main(["--output", str(output)])

        # Then
        assert exit_code == 1
        assert "could not fetch sell orders" in capsys.readouterr().err
        assert not output.exists()

    @pytest.mark.parametrize(
        "payload", [{"data": []}, {"data": {"orders": "oops"}}, []]
    )
    @responses.activate
    def test_malformed_sell_order_response_is_fatal(self, env, tmp_path, capsys, payload):
        """
        Given a sell order response with the wrong top-level shape
        When running the scan
        Then exit code 1 should be returned and no file written
        """
        # Given
        responses.add(
            responses.GET,
            _smart_url(MARKETPLACE_CONTRACT, {"all_sell_orders": {}}),
            json=payload,
        )
        output = tmp_path / "results.json"

        # When
        exit_code = main(["--output", str(output)])

        # Then
        assert exit_code == 1
        assert "Invalid sell order response" in capsys.readouterr().err
        assert not output.exists()
        assert len(responses.calls) == 1

    @responses.activate
    def test_addresses_format_to_stdout(self, env, capsys):
        """
        Given the addresses format and - as output
        When running the scan
        Then a flat address list should be printed to stdout
        """
        # Given
        _mock_chain()

        # When
        exit_code = main(["--format", "addresses", "--output", "-", "--pause", "0"])

        # Then
        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == ["inj1seller", "inj1trader"]
