from tokenring import NodeConfig, RingStatus, TokenCirculator
from tokenring.connectors import LoopbackTransport

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

# --------------------------------
# Ring topology A → B → C → A
# --------------------------------

transport = LoopbackTransport()

nodes = {
    "A": NodeConfig("A", listen_addr=":8080", neighbor="http://localhost:8081", initiator=True),
    "B": NodeConfig("B", listen_addr=":8081", neighbor="http://localhost:8082"),
    "C": NodeConfig("C", listen_addr=":8082", neighbor="http://localhost:8080"),
}

statuses = {}
circulators = {}

for node_id, config in nodes.items():
    statuses[node_id] = RingStatus()
    circulators[node_id] = TokenCirculator(config, transport, statuses[node_id])
    transport.register(config.public_addr, circulators[node_id])

issuer = circulators["A"]

# --------------------------------
# Healthy ring
# --------------------------------

issuer.issue()
print("Healthy ring:", statuses["A"].read().signers)

# --------------------------------
# Broken link: C goes down
# --------------------------------

transport.unregister(nodes["C"].public_addr)
issuer.issue()
print("After C failed:", statuses["A"].read().signers)
