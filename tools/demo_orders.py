import json
from orderguard import OrderClient
from orderguard.keys import ClientKeyPair
from orderguard.server import bootstrap

router = bootstrap()

alice = OrderClient.register(router)
bob = OrderClient.register(router)
print("Registered clients:", alice.client_id, bob.client_id)

print("alice buys AAPL x3:", alice.buy("AAPL", "3"))
print("alice sells MSFT x10:", alice.sell("MSFT", "10"))
print("bob buys TSLA x1:", bob.buy("TSLA", 1))

# mallory claims alice's id but signs with her own key
mallory = OrderClient(alice.client_id, ClientKeyPair.generate(), router)
print("mallory as alice:", mallory.buy("GME", "1000"))

for c in (alice, bob):
    print(f"orders of client {c.client_id}:")
    for order in c.get_orders():
        print("  ", json.loads(order) if order else order)
