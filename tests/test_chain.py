import json
from decimal import Decimal

import httpx
import pytest

from app.services.chain import (
    BALANCE_OF_SELECTOR,
    DECIMALS_SELECTOR,
    ChainQueryError,
    ChainQueryService,
    encode_balance_of,
    is_address,
    normalize_units,
)

TOKEN = "0x" + "ab" * 20
ALICE = "0x" + "11" * 20


def uint_hex(value):
    return "0x" + format(value, "064x")


def rpc_service(handler):
    return ChainQueryService("https://rpc.example.test", client=httpx.Client(transport=httpx.MockTransport(handler)))


def token_handler(decimals, raw_balance, seen=None):
    def handler(request):
        body = json.loads(request.content)
        if seen is not None:
            seen.append(body)
        call = body["params"][0]
        if call["data"] == DECIMALS_SELECTOR:
            result = uint_hex(decimals)
        else:
            result = uint_hex(raw_balance)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    return handler


def test_encode_balance_of_pads_address():
    data = encode_balance_of(ALICE)
    assert data.startswith(BALANCE_OF_SELECTOR)
    assert len(data) == 10 + 64
    assert data.endswith("11" * 20)


def test_encode_balance_of_rejects_bad_address():
    with pytest.raises(ValueError):
        encode_balance_of("0x123")


def test_is_address():
    assert is_address(ALICE)
    assert not is_address("")
    assert not is_address("11" * 21)


def test_normalize_units():
    assert normalize_units(10 ** 18, 18) == Decimal(1)
    assert normalize_units(12345, 2) == Decimal("123.45")


def test_token_balance_normalizes_by_decimals():
    seen = []
    service = rpc_service(token_handler(18, 25_000 * 10 ** 18, seen))
    assert service.token_balance(TOKEN, ALICE) == Decimal(25_000)
    assert [b["method"] for b in seen] == ["eth_call", "eth_call"]
    assert seen[0]["params"][0]["to"] == TOKEN
    assert seen[0]["params"][1] == "latest"
    assert seen[1]["params"][0]["data"] == encode_balance_of(ALICE)


def test_rpc_error_raises():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "boom"}})

    with pytest.raises(ChainQueryError):
        rpc_service(handler).token_balance(TOKEN, ALICE)


def test_http_error_raises():
    with pytest.raises(ChainQueryError):
        rpc_service(lambda request: httpx.Response(503)).token_balance(TOKEN, ALICE)


def test_empty_result_raises():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0x"})

    with pytest.raises(ChainQueryError):
        rpc_service(handler).token_decimals(TOKEN)


def test_non_object_body_raises():
    with pytest.raises(ChainQueryError):
        rpc_service(lambda request: httpx.Response(200, json=[])).token_decimals(TOKEN)


def test_non_hex_result_raises():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": "0xzz"})

    with pytest.raises(ChainQueryError):
        rpc_service(handler).token_balance(TOKEN, ALICE)
