"""Property-based tests for CoreDNS federation.

Appending a forwarding block is not idempotent: every run adds one more
identical block. Upserting converges after the first run.
"""

from hypothesis import given
from hypothesis import strategies as st

from cluster_bridge.config import DNSSettings
from cluster_bridge.corefile import Corefile
from cluster_bridge.dns import DNSFederationPatcher
from cluster_bridge.models import ZoneForward
from tests.fakes import KIND_COREFILE, FakeDNSConfigStore, make_cluster


@st.composite
def zone_name(draw):
    label = draw(st.text(alphabet="abcdefghijklmnopqrstuvwxyz0123456789", min_size=1, max_size=8))
    return f"{label}.example.com"


@st.composite
def zone_forward(draw):
    octets = draw(st.tuples(*[st.integers(min_value=1, max_value=254)] * 3))
    return ZoneForward(
        zone=draw(zone_name()),
        upstream=f"10.{octets[0]}.{octets[1]}.{octets[2]}",
        cache_ttl=draw(st.integers(min_value=1, max_value=300)),
    )


@st.composite
def corefile_text(draw):
    """The kind default Corefile followed by some forwarding blocks."""
    forwards = draw(st.lists(zone_forward(), max_size=4))
    return KIND_COREFILE + "".join(f.render() for f in forwards)


@given(text=corefile_text())
def test_parse_preserves_text(text):
    assert Corefile.parse(text).render() == text


@given(text=corefile_text(), forward=zone_forward())
def test_upsert_is_idempotent(text, forward):
    once = Corefile.parse(text)
    once.upsert(forward)
    twice = Corefile.parse(once.render())
    twice.upsert(forward)

    assert twice.render() == once.render()
    assert once.keys().count(forward.key) == 1


@given(text=corefile_text(), forward=zone_forward(), runs=st.integers(min_value=1, max_value=4))
def test_append_adds_one_block_per_run(text, forward, runs):
    before = Corefile.parse(text).keys().count(forward.key)
    corefile = Corefile.parse(text)

    for _ in range(runs):
        corefile = Corefile.parse(corefile.render())
        corefile.append(forward)

    assert corefile.keys().count(forward.key) == before + runs
    assert corefile.render().startswith(text)


@given(runs=st.integers(min_value=2, max_value=4))
def test_patch_rerun_duplicates_stanza(runs):
    """Rerunning the DNS step with unchanged configuration stacks identical stanzas."""
    a = make_cluster("grpc-xds", "10.110.0.0/16", 1, zone="cluster.example.com")
    b = make_cluster("grpc-xds-2", "10.220.0.0/16", 2, zone="cluster2.example.com")
    store = FakeDNSConfigStore(
        corefiles={a.name: KIND_COREFILE, b.name: KIND_COREFILE},
        dns_ips={a.name: "10.110.0.10", b.name: "10.220.0.10"},
    )
    patcher = DNSFederationPatcher(store, DNSSettings())

    for _ in range(runs):
        patcher.federate([a, b])

    stanza = ZoneForward(zone="cluster2.example.com", upstream="10.220.0.10").render()
    assert store.corefiles[a.name] == KIND_COREFILE + stanza * runs
