import json

from orderguard.client import OrderClient
from orderguard.errors import CryptoOperationFailure
from orderguard.keys import ClientKeyPair
from orderguard.messages import (
    FAILURE_RESPONSE,
    NO_ORDERS_RESPONSE,
    STORAGE_FAILURE_RESPONSE,
    create_buy_stock_message,
    create_get_orders_message,
    create_sell_stock_message,
    create_server_response_message,
    create_signed_envelope,
)


def _fragments(response: str):
    return [json.loads(line) for line in response.split("\n")]


def test_end_to_end_buy_then_get_orders(router, envelope):
    k = ClientKeyPair.generate()
    cid = router.register_client(k.public_key)
    assert cid == 0

    buy = create_buy_stock_message("AAPL", "3")
    resp = json.loads(router.accept_envelope(envelope(cid, buy, k)))
    assert resp["success"] is True

    resp = router.accept_envelope(envelope(cid, create_get_orders_message(), k))
    fragments = _fragments(resp)
    assert len(fragments) == 1
    assert fragments[0]["messageType"] == "ServerSendOrders"
    assert fragments[0]["order"].encode("utf-8") == buy.encode("utf-8")


def test_wrong_key_is_rejected_without_mutation(router, envelope):
    owner = ClientKeyPair.generate()
    impostor = ClientKeyPair.generate()
    cid = router.register_client(owner.public_key)

    resp = router.accept_envelope(envelope(cid, create_buy_stock_message("AAPL", "3"), impostor))
    assert json.loads(resp) == {"messageType": "ServerResponse", "success": False}
    assert len(router.registry.ledger(cid)) == 0

    resp = router.accept_envelope(envelope(cid, create_get_orders_message(), owner))
    assert resp == NO_ORDERS_RESPONSE


def test_get_orders_with_wrong_key_reveals_nothing(router, envelope):
    owner = OrderClient.register(router)
    owner.buy("AAPL", "3")
    impostor = ClientKeyPair.generate()
    resp = router.accept_envelope(envelope(owner.client_id, create_get_orders_message(), impostor))
    assert resp == create_server_response_message(False)


def test_unregistered_client_gets_negative_ack(router, envelope):
    k = ClientKeyPair.generate()
    resp = router.accept_envelope(envelope(5, create_buy_stock_message("AAPL", "3"), k))
    assert json.loads(resp)["success"] is False


def test_empty_ledger_sentinel(router, client):
    resp = client.send(create_get_orders_message())
    assert resp == NO_ORDERS_RESPONSE
    assert client.get_orders() == []


def test_orders_come_back_in_insertion_order(client):
    assert client.buy("AAPL", "3")
    assert client.sell("MSFT", "10")
    assert client.buy("TSLA", 1)
    orders = [json.loads(o) for o in client.get_orders()]
    assert [(o["messageType"], o["stock"], o["amount"]) for o in orders] == [
        ("BuyStock", "AAPL", "3"),
        ("SellStock", "MSFT", "10"),
        ("BuyStock", "TSLA", "1"),
    ]


def test_get_orders_is_not_stored(client):
    client.buy("AAPL", "3")
    client.get_orders()
    client.get_orders()
    assert len(client.get_orders()) == 1


def test_malformed_envelope(router):
    assert router.accept_envelope("not json") == FAILURE_RESPONSE
    assert router.accept_envelope(b'{"clientId":0}') == FAILURE_RESPONSE
    assert router.accept_envelope('{"clientId":0,"content":"x","signature":"%%"}') == FAILURE_RESPONSE


def test_malformed_inner_message_after_valid_signature(router, envelope):
    k = ClientKeyPair.generate()
    cid = router.register_client(k.public_key)
    assert router.accept_envelope(envelope(cid, "not json", k)) == FAILURE_RESPONSE
    assert router.accept_envelope(envelope(cid, '{"messageType":"ShortStock"}', k)) == FAILURE_RESPONSE
    assert len(router.registry.ledger(cid)) == 0


def test_server_message_types_are_unroutable(router, envelope):
    k = ClientKeyPair.generate()
    cid = router.register_client(k.public_key)
    content = create_server_response_message(True)
    assert router.accept_envelope(envelope(cid, content, k)) == FAILURE_RESPONSE


def test_storage_failure_response(monkeypatch, router, client):
    def broken(plaintext):
        raise CryptoOperationFailure("encrypt: boom")
    monkeypatch.setattr(router.vault, "encrypt", broken)
    resp = client.send(create_buy_stock_message("AAPL", "3"))
    assert resp == STORAGE_FAILURE_RESPONSE


def test_undecryptable_entry_is_marked_not_dropped(router, client):
    client.buy("AAPL", "3")
    router.registry.ledger(client.client_id).append(b"\x00" * 64)
    client.buy("MSFT", "4")
    orders = client.get_orders()
    assert len(orders) == 3
    assert orders[1] is None
    assert json.loads(orders[2])["stock"] == "MSFT"


def test_eviction_through_router(client):
    for i in range(101):
        assert client.buy("S%d" % i, str(i))
    stocks = [json.loads(o)["stock"] for o in client.get_orders()]
    assert stocks == ["S%d" % i for i in range(1, 101)]


def test_stored_content_is_exact_signed_bytes(router, envelope):
    k = ClientKeyPair.generate()
    cid = router.register_client(k.public_key)
    # same order, unusual but valid formatting
    content = '{ "messageType": "SellStock", "amount": "5", "stock": "ÄBC" }'
    assert json.loads(router.accept_envelope(envelope(cid, content, k)))["success"] is True
    resp = router.accept_envelope(envelope(cid, create_get_orders_message(), k))
    assert _fragments(resp)[0]["order"] == content


def test_clients_are_isolated(router):
    alice = OrderClient.register(router)
    bob = OrderClient.register(router)
    alice.buy("AAPL", "3")
    assert bob.get_orders() == []
    assert len(alice.get_orders()) == 1


def test_envelope_id_swap_is_rejected(router):
    alice = OrderClient.register(router)
    bob = OrderClient.register(router)
    content = create_sell_stock_message("AAPL", "3")
    # alice's signature presented under bob's id
    raw = create_signed_envelope(bob.client_id, content, alice.sign(content))
    assert json.loads(router.accept_envelope(raw))["success"] is False
    assert bob.get_orders() == []
