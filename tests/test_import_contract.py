import json
import logging

import pytest
from web3 import Web3

from conftest import ADDRESS, FakeClient, envelope
from etherscan_tools.commands.import_contract import (
    EtherscanSource,
    build_import_metadata,
    decode_source_files,
    get_etherscan_api_data,
    import_contract,
    import_contracts,
    strip_constructor_args,
)
from etherscan_tools.commands.verify import build_verification_request
from etherscan_tools.errors import (
    BytecodeMismatchError,
    EtherscanApiError,
    ScrapeError,
    SourceNotVerifiedError,
)
from etherscan_tools.helpers.scraper import EtherscanPageScraper, find_constructor_args, find_verified_bytecode

OTHER = "0x0000000000000000000000000000000000000abc"
API_URL = "https://api.etherscan.io/api"
SOURCE = "pragma solidity ^0.6.12;\n\ncontract Token {\n    constructor(uint256 x) public {}\n}\n"
ABI = [{"type": "constructor", "inputs": [{"name": "x", "type": "uint256"}]}]


def code_page(bytecode, encoded_args=None):
    html = (
        "<html><body>\n"
        "<div id='verifiedbytecode2'>\n" + bytecode + "\n</div>\n"
    )
    if encoded_args is not None:
        html += (
            "<pre class='wordwrap'>-----Encoded View---------------<br>" + encoded_args + "<br><br>"
            "-----Decoded View---------------<br>Arg [0] : x (uint256): 1</pre>\n"
        )
    return html + "</body></html>"


def source_record(**overrides):
    record = {
        "SourceCode": SOURCE,
        "ABI": json.dumps(ABI),
        "ContractName": "Token",
        "CompilerVersion": "v0.6.12+commit.27d51765",
        "OptimizationUsed": "1",
        "Runs": "200",
        "ConstructorArguments": "00000000000000000000000000000000000000000000000000000000deadbeef",
        "EVMVersion": "Default",
        "Library": "",
        "LicenseType": "",
        "SwarmSource": "",
    }
    record.update(overrides)
    return record


def page_url(address):
    return f"https://etherscan.io/address/{address}#code"


# ---------- scraping ----------

def test_find_verified_bytecode():
    assert find_verified_bytecode(code_page("6080AbCd")) == "6080AbCd"
    assert find_verified_bytecode("<div id='other'>6080</div>") is None


def test_find_constructor_args():
    assert find_constructor_args(code_page("6080", "00ff")) == "00ff"
    assert find_constructor_args(code_page("6080")) is None


def test_scraper_fetches_each_page_once():
    client = FakeClient(pages={page_url(ADDRESS): code_page("6080deadbeef", "deadbeef")})
    scraper = EtherscanPageScraper("mainnet", client)

    assert scraper.fetch_verified_bytecode(ADDRESS) == "6080deadbeef"
    assert scraper.fetch_constructor_args(ADDRESS) == "deadbeef"
    assert len(client.get_calls) == 1


def test_scraper_raises_on_layout_change():
    client = FakeClient(pages={page_url(ADDRESS): "<html>redesigned</html>"})
    scraper = EtherscanPageScraper("mainnet", client)
    with pytest.raises(ScrapeError):
        scraper.fetch_verified_bytecode(ADDRESS)
    with pytest.raises(ScrapeError):
        scraper.fetch_constructor_args(ADDRESS)


# ---------- bytecode ----------

def test_strip_constructor_args():
    assert strip_constructor_args("6080abcdDEADBEEF", "deadbeef") == "6080abcd"
    assert strip_constructor_args("6080abcd", "") == "6080abcd"


def test_strip_constructor_args_mismatch():
    with pytest.raises(BytecodeMismatchError):
        strip_constructor_args("6080abcddeadbeef", "cafebabe")


# ---------- api ----------

def test_get_etherscan_api_data():
    client = FakeClient(gets=[envelope("1", "OK", [source_record(EVMVersion="istanbul")])])

    data = get_etherscan_api_data("mainnet", ADDRESS, "KEY", client)

    assert data.contract == "Token"
    assert data.abi == ABI
    assert data.optimized is True
    assert data.optimization_runs == 200
    assert data.evm_version == "istanbul"
    url, params, _ = client.get_calls[0]
    assert url == API_URL
    assert params == {"module": "contract", "action": "getsourcecode", "address": ADDRESS, "apikey": "KEY"}


def test_get_etherscan_api_data_error_status():
    client = FakeClient(gets=[envelope("0", "NOTOK", "Invalid API Key")])
    with pytest.raises(EtherscanApiError) as exc:
        get_etherscan_api_data("mainnet", ADDRESS, "KEY", client)
    assert exc.value.result == "Invalid API Key"


def test_get_etherscan_api_data_not_verified():
    record = source_record(ABI="Contract source code not verified", SourceCode="")
    client = FakeClient(gets=[envelope("1", "OK", [record])])
    with pytest.raises(SourceNotVerifiedError):
        get_etherscan_api_data("mainnet", ADDRESS, "KEY", client)


# ---------- metadata ----------

def test_decode_multi_file_sources():
    standard_json = {
        "language": "Solidity",
        "sources": {
            "src/Lib.sol": {"content": "library Lib {}"},
            "src/Token.sol": {"content": "import './Lib.sol';\ncontract Token {}"},
        },
    }
    files = decode_source_files("{" + json.dumps(standard_json) + "}", "Token")
    assert files == {
        "src/Lib.sol": "library Lib {}",
        "src/Token.sol": "import './Lib.sol';\ncontract Token {}",
    }


def test_build_import_metadata_picks_declaring_file():
    standard_json = {"sources": {
        "src/Lib.sol": {"content": "library Lib {}"},
        "src/Token.sol": {"content": "contract Token {}"},
    }}
    api_data = EtherscanSource(
        source=json.dumps(standard_json), abi=[], contract="Token", compiler="v0.8.4+commit.c7e474f2",
        optimized=False, optimization_runs=200, constructor_args="",
    )
    target_file, metadata = build_import_metadata(api_data)
    assert target_file == "src/Token.sol"
    assert metadata["settings"]["compilationTarget"] == {"src/Token.sol": "Token"}
    assert set(metadata["sources"]) == {"src/Lib.sol", "src/Token.sol"}


def test_build_import_metadata_keeps_standard_json_settings():
    standard_json = {
        "language": "Solidity",
        "sources": {"src/Token.sol": {"content": "contract Token {}"}},
        "settings": {
            "remappings": ["@oz/=lib/openzeppelin/"],
            "optimizer": {"enabled": True, "runs": 1, "details": {"yul": True}},
            "viaIR": True,
            "evmVersion": "paris",
        },
    }
    api_data = EtherscanSource(
        source="{" + json.dumps(standard_json) + "}", abi=[], contract="Token",
        compiler="v0.8.20+commit.a1b79de6", optimized=True, optimization_runs=200, constructor_args="",
    )
    _, metadata = build_import_metadata(api_data)
    settings = metadata["settings"]
    assert settings["remappings"] == ["@oz/=lib/openzeppelin/"]
    assert settings["optimizer"] == {"enabled": True, "runs": 200, "details": {"yul": True}}
    assert settings["viaIR"] is True
    assert settings["evmVersion"] == "paris"


def test_build_import_metadata_single_file_uses_record_settings():
    api_data = EtherscanSource(
        source=SOURCE, abi=[], contract="Token", compiler="v0.6.12+commit.27d51765",
        optimized=False, optimization_runs=200, constructor_args="", evm_version="istanbul",
    )
    _, metadata = build_import_metadata(api_data)
    settings = metadata["settings"]
    assert settings["remappings"] == []
    assert settings["optimizer"] == {"enabled": False, "runs": 200}
    assert "viaIR" not in settings
    assert settings["evmVersion"] == "istanbul"


# ---------- import ----------

def test_import_single_contract(tmp_path):
    args = source_record()["ConstructorArguments"]
    client = FakeClient(
        gets=[envelope("1", "OK", [source_record()])],
        pages={page_url(ADDRESS): code_page("6080604052" + args.upper())},
    )
    outfile = tmp_path / "build" / "imported.json"

    build = import_contract("mainnet", ADDRESS, outfile, api_key="KEY", client=client)

    written = json.loads(outfile.read_text())
    assert written == build.to_json()
    assert written["version"] == "v0.6.12+commit.27d51765"
    record = written["contracts"]["contracts/Token.sol:Token"]
    assert record["bin"] == "6080604052"
    assert record["abi"] == ABI

    metadata = record["metadata"]
    assert metadata["version"] == "1"
    assert metadata["language"] == "Solidity"
    assert metadata["settings"]["remappings"] == []
    assert metadata["settings"]["libraries"] == {}
    assert metadata["settings"]["metadata"] == {"useLiteralContent": False}
    assert metadata["settings"]["optimizer"] == {"enabled": True, "runs": 200}
    assert "evmVersion" not in metadata["settings"]
    source = metadata["sources"]["contracts/Token.sol"]
    assert source["content"] == SOURCE
    assert source["keccak256"] == Web3.to_hex(Web3.keccak(text=SOURCE))


def test_caller_constructor_args_take_precedence():
    client = FakeClient(
        gets=[envelope("1", "OK", [source_record()])],
        pages={page_url(ADDRESS): code_page("6080cafebabe")},
    )
    build = import_contracts("mainnet", [ADDRESS], constructor_args="0xcafebabe", client=client)
    assert build.contracts["contracts/Token.sol:Token"]["bin"] == "6080"


def test_constructor_args_scraped_when_api_omits_them():
    record = source_record()
    del record["ConstructorArguments"]
    client = FakeClient(
        gets=[envelope("1", "OK", [record])],
        pages={page_url(ADDRESS): code_page("6080cafebabe", "cafebabe")},
    )
    build = import_contracts("mainnet", ADDRESS, client=client)
    assert build.contracts["contracts/Token.sol:Token"]["bin"] == "6080"


def test_missing_scraped_constructor_args_fails():
    record = source_record()
    del record["ConstructorArguments"]
    client = FakeClient(
        gets=[envelope("1", "OK", [record])],
        pages={page_url(ADDRESS): code_page("6080cafebabe")},
    )
    with pytest.raises(ScrapeError):
        import_contracts("mainnet", ADDRESS, client=client)


def test_bytecode_mismatch_fails():
    client = FakeClient(
        gets=[envelope("1", "OK", [source_record()])],
        pages={page_url(ADDRESS): code_page("6080604052cafebabe")},
    )
    with pytest.raises(BytecodeMismatchError):
        import_contracts("mainnet", ADDRESS, client=client)


def test_import_multiple_warns_on_compiler_mismatch(caplog):
    other = source_record(
        ContractName="Vault",
        SourceCode="contract Vault {}",
        CompilerVersion="v0.8.4+commit.c7e474f2",
        ConstructorArguments="",
    )
    client = FakeClient(
        gets=[envelope("1", "OK", [source_record()]), envelope("1", "OK", [other])],
        pages={
            page_url(ADDRESS): code_page("6080" + source_record()["ConstructorArguments"]),
            page_url(OTHER): code_page("6081"),
        },
    )

    with caplog.at_level(logging.WARNING):
        build = import_contracts("mainnet", [ADDRESS, OTHER], client=client)

    assert set(build.contracts) == {"contracts/Token.sol:Token", "contracts/Vault.sol:Vault"}
    assert build.version == "v0.8.4+commit.c7e474f2"
    assert "Contracts differ in compiler version" in caplog.text


def test_imported_metadata_round_trips_into_verify_request():
    client = FakeClient(
        gets=[envelope("1", "OK", [source_record()])],
        pages={page_url(ADDRESS): code_page("6080" + source_record()["ConstructorArguments"])},
    )
    build = import_contracts("mainnet", ADDRESS, client=client)
    contract_json = build.contracts["contracts/Token.sol:Token"]

    request = build_verification_request(contract_json, "KEY", ADDRESS)

    assert len(contract_json["metadata"]["settings"]["compilationTarget"]) == 1
    assert request.contract_name == "contracts/Token.sol:Token"
    assert request.as_form()["compilerversion"] == "v0.6.12+commit.27d51765"
    blob = json.loads(request.source_code)
    assert blob["sources"]["contracts/Token.sol"]["content"] == SOURCE
