import json

import pytest


ADDRESS = "0x65eb5a03635c627a0f254707712812b234753f31"


class FakeClient:
    """Scripted stand-in for EtherscanHttpClient."""

    def __init__(self, posts=None, gets=None, pages=None):
        self.posts = list(posts or [])
        self.gets = list(gets or [])
        self.pages = dict(pages or {})
        self.post_calls = []
        self.get_calls = []

    def post(self, url, data):
        self.post_calls.append((url, dict(data)))
        return self.posts.pop(0)

    def get(self, url, params=None, parse_json=True):
        self.get_calls.append((url, dict(params or {}), parse_json))
        if not parse_json:
            return self.pages[url]
        return self.gets.pop(0)


class FakeClock:
    def __init__(self):
        self.now = 1000.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def metadata():
    return {
        "version": 1,
        "language": "Solidity",
        "compiler": {"version": "0.8.4+commit.c7e474f2.Linux.gcc"},
        "settings": {
            "remappings": [],
            "optimizer": {"enabled": True, "runs": 200},
            "metadata": {"bytecodeHash": "ipfs"},
            "compilationTarget": {"contracts/Counter.sol": "Counter"},
            "libraries": {},
        },
        "sources": {
            "contracts/Counter.sol": {
                "keccak256": "0x1234",
                "content": "pragma solidity ^0.8.4;\ncontract Counter { uint256 public count; }\n",
                "urls": [],
            }
        },
        "output": {"abi": [], "userdoc": {}, "devdoc": {}},
    }


@pytest.fixture
def contract_json(metadata):
    return {"abi": [], "bin": "6080", "metadata": json.dumps(metadata)}


def envelope(status, message, result):
    return {"status": status, "message": message, "result": result}
