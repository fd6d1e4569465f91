from concurrent.futures import ThreadPoolExecutor

from acfengine import ACFEngine, PlacementConfig, MemberIdGenerator, NewNodeData

import logging

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

# --------------------------------
# Engine
# --------------------------------

ids = MemberIdGenerator(start=0)
config = PlacementConfig(acf_root_id=ids.make(1), max_retries=32)
engine = ACFEngine.create(config=config)

_, root_id = ids.next()
engine.bootstrap_root(root_id)

# --------------------------------
# Registrations without invite code
# --------------------------------


def register(invite_code=None):
    sequence, member_id = ids.next()
    return engine.register(NewNodeData(id=member_id, sequence=sequence), invite_code)


for _ in range(10):
    result = register()
    print(result.to_dict())

# --------------------------------
# Invited registrations, concurrently
# --------------------------------

inviter = ids.make(2)

with ThreadPoolExecutor(max_workers=8) as pool:
    results = list(pool.map(lambda _: register(inviter), range(40)))

print("placed:", sum(r.is_success for r in results), "of", len(results))

# --------------------------------
# Audit
# --------------------------------

verification = engine.verify()
print("invariants ok:", verification.ok, verification.violations)
print(engine.report().to_frame())
