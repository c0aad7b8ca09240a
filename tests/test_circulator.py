import threading

from tokenring.config import NodeConfig
from tokenring.connectors.base import LoopbackTransport
from tokenring.models import Token
from tokenring.ring.circulator import CLOSED, DROPPED, FORWARDED, RETURNED, TokenCirculator
from tokenring.ring.status import RingStatus

from conftest import RecordingStatus, ScriptedTransport, addr, build_ring, unreachable


def make_node(node_id="B", port=8081, neighbor=None, transport=None, status=None):
    config = NodeConfig(node_id, listen_addr=f":{port}", neighbor=neighbor)
    transport = transport or ScriptedTransport()
    status = status if status is not None else RingStatus()
    return TokenCirculator(config, transport, status), transport, status


def test_three_node_ring_records_full_path_on_issuer(ring3) -> None:
    _, nodes = ring3
    config_a, circulator_a, status_a = nodes["A"]

    circulator_a.issue()

    record = status_a.read()
    assert record is not None
    assert record.issuer == "A"
    assert list(record.signers) == [addr(9000), addr(9001), addr(9002)]

    # Only the issuer records a completion
    assert nodes["B"][2].read() is None
    assert nodes["C"][2].read() is None


def test_issue_creates_token_signed_by_issuer() -> None:
    circulator, transport, _ = make_node("A", 8080, neighbor=addr(8081))

    token = circulator.issue()

    assert token.issuer == "A"
    assert token.signers == [addr(8080)]
    assert transport.calls == [(addr(8081), token.to_payload())]


def test_receive_appends_own_address_and_forwards() -> None:
    circulator, transport, status = make_node("B", 8081, neighbor=addr(8082))
    token = Token(issuer="A", issued_at=100, signers=[addr(8080)])

    outcome = circulator.receive(token)

    assert outcome == FORWARDED
    assert token.signers == [addr(8080), addr(8081)]
    assert transport.calls == [
        (addr(8082), {"issuer": "A", "issued_at": 100, "signers": [addr(8080), addr(8081)]})
    ]
    assert status.read() is None


def test_issuer_closes_loop_regardless_of_signers() -> None:
    for signers in ([], ["http://elsewhere:1"], [addr(8080), addr(8081), addr(8082)]):
        circulator, transport, status = make_node("A", 8080, neighbor=addr(8081))
        token = Token(issuer="A", issued_at=5, signers=list(signers))

        assert circulator.receive(token) == CLOSED
        assert transport.calls == []
        assert list(status.read().signers) == signers


def test_node_without_neighbor_completes_immediately() -> None:
    transport = LoopbackTransport()
    circulator, _, status = make_node("A", 8080, neighbor=None, transport=transport)
    transport.register(addr(8080), circulator)

    token = circulator.issue()

    assert list(status.read().signers) == [addr(8080)]
    assert status.read().issued_at == token.issued_at


def test_end_of_chain_returns_token_to_issuer() -> None:
    circulator, transport, _ = make_node("C", 8082, neighbor=None)
    token = Token(issuer="A", issued_at=1, signers=[addr(8080), addr(8081)])

    assert circulator.receive(token) == RETURNED
    assert transport.addresses == [addr(8080)]
    assert transport.calls[0][1]["signers"] == [addr(8080), addr(8081), addr(8082)]


def test_unreachable_neighbor_falls_back_to_issuer() -> None:
    transport = ScriptedTransport({addr(8082): unreachable(addr(8082))})
    circulator, _, _ = make_node("B", 8081, neighbor=addr(8082), transport=transport)

    outcome = circulator.receive(Token(issuer="A", signers=[addr(8080)]))

    assert outcome == RETURNED
    assert transport.addresses == [addr(8082), addr(8080)]


def test_broken_link_yields_partial_path_on_issuer() -> None:
    transport, nodes = build_ring(["A", "B", "C"])
    transport.unregister(nodes["C"][0].public_addr)

    nodes["A"][1].issue()

    assert list(nodes["A"][2].read().signers) == [addr(9000), addr(9001)]


def test_token_dropped_when_issuer_also_unreachable() -> None:
    transport = ScriptedTransport(default=unreachable("any"))
    circulator, _, _ = make_node("B", 8081, neighbor=addr(8082), transport=transport)

    outcome = circulator.receive(Token(issuer="A", signers=[addr(8080)]))

    assert outcome == DROPPED
    assert transport.addresses == [addr(8082), addr(8080)]


def test_dropped_token_leaves_issuer_status_untouched() -> None:
    transport = ScriptedTransport(default=unreachable("any"))
    status = RingStatus()
    status.record(Token(issuer="A", issued_at=1, signers=["previous"]))
    circulator, _, _ = make_node("A", 8080, neighbor=addr(8081), transport=transport, status=status)

    circulator.issue()

    assert status.read().signers == ("previous",)
    assert status.completed_count == 1


def test_dropped_token_keeps_status_pending() -> None:
    transport = ScriptedTransport(default=unreachable("any"))
    circulator, _, status = make_node("A", 8080, neighbor=addr(8081), transport=transport)

    circulator.issue()

    assert status.read() is None


def test_empty_signers_on_fallback_is_dropped_without_raising() -> None:
    circulator, transport, _ = make_node("C", 8082, neighbor=None)
    token = Token(issuer="A", signers=[])

    assert circulator.return_to_issuer(token) == DROPPED
    assert transport.calls == []


def test_non_ok_neighbor_response_counts_as_forwarded() -> None:
    transport = ScriptedTransport({addr(8082): 500})
    circulator, _, _ = make_node("B", 8081, neighbor=addr(8082), transport=transport)

    outcome = circulator.receive(Token(issuer="A", signers=[addr(8080)]))

    assert outcome == FORWARDED
    assert transport.addresses == [addr(8082)]


def test_recorder_failure_is_not_surfaced() -> None:
    class BrokenStatus(RingStatus):
        def record(self, token):
            raise RuntimeError("boom")

    circulator, _, _ = make_node("A", 8080, status=BrokenStatus())

    assert circulator.receive(Token(issuer="A", signers=[addr(8080)])) == CLOSED


def test_concurrent_issues_do_not_interleave() -> None:
    _, nodes = build_ring(["A", "B", "C"], status_factory=RecordingStatus)
    _, circulator_a, status_a = nodes["A"]
    tokens = []
    barrier = threading.Barrier(2)

    def issue():
        barrier.wait()
        tokens.append(circulator_a.issue())

    threads = [threading.Thread(target=issue) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert len(tokens) == 2
    # The issuer's own token object is never mutated downstream
    assert all(token.signers == [addr(9000)] for token in tokens)
    assert status_a.completed_count == 2
    assert list(status_a.read().signers) == [addr(9000), addr(9001), addr(9002)]
    assert status_a.closures == [[addr(9000), addr(9001), addr(9002)]] * 2


def test_foreign_token_without_signers_is_dropped() -> None:
    transport = LoopbackTransport()
    circulator, _, status = make_node("C", 8082, neighbor=None, transport=transport)
    transport.register(addr(8082), circulator)

    assert circulator.receive(Token(issuer="A", signers=[])) == DROPPED
    assert status.read() is None


def test_foreign_token_is_never_returned_to_the_current_node() -> None:
    transport = ScriptedTransport()
    circulator, _, _ = make_node("C", 8082, neighbor=None, transport=transport)

    # signers[0] claims C's own address although A issued it
    outcome = circulator.receive(Token(issuer="A", signers=[addr(8082)]))

    assert outcome == DROPPED
    assert transport.calls == []


def test_unreachable_neighbor_on_issuer_returns_to_itself() -> None:
    transport = LoopbackTransport()
    status = RecordingStatus()
    config = NodeConfig("A", listen_addr=":8080", neighbor=addr(8081))
    circulator = TokenCirculator(config, transport, status)
    transport.register(addr(8080), circulator)

    circulator.issue()

    assert status.closures == [[addr(8080)]]
