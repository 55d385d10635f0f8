# smoke.py - end-to-end runner for the Raid Roster API (expects a server on BASE)
import json
import uuid

import requests

BASE = "http://127.0.0.1:8000"


def post(path, data=None, headers=None, params=None):
    r = requests.post(BASE + path, json=data, headers=headers, params=params)
    r.raise_for_status()
    return r.json()


def get(path):
    r = requests.get(BASE + path)
    r.raise_for_status()
    return r.json()


print("=== 1) create event ===")
event = post("/events/", {"title": f"Smoke Raid {uuid.uuid4().hex[:6]}", "game": "WoW"})
event_id = event["id"]
print(json.dumps(event, indent=2))

print("=== 2) characters ===")
chars = {
    "tess": post("/characters/", {"owner": "tess", "name": "Ironhide", "class_name": "Warrior", "role": "tank"}),
    "hugo": post("/characters/", {"owner": "hugo", "name": "Lightwell", "class_name": "Priest", "role": "healer"}),
    "dina": post("/characters/", {"owner": "dina", "name": "Frostbolt", "class_name": "Mage", "role": "dps"}),
}

print("=== 3) signups ===")
signups = [
    {"username": "dina", "character_id": chars["dina"]["id"], "preferred_roles": ["dps", "healer"]},
    {"username": "hugo", "character_id": chars["hugo"]["id"], "preferred_roles": ["healer"]},
    {"username": "tess", "character_id": chars["tess"]["id"]},
    {"username": "pat", "preferred_roles": ["dps", "healer", "tank"]},
    {"username": "nobody"},
]
for s in signups:
    out = post(f"/events/{event_id}/signups", s)
    print(f"  signup {out['id']}: {out['username']} prefs={out['preferred_roles']}")

print("=== 4) auto-fill preview ===")
preview = post(
    f"/events/{event_id}/roster/auto-fill",
    headers={"Idempotency-Key": str(uuid.uuid4())},
    params={"dry_run": "true"},
)
print(json.dumps(preview, indent=2))

print("=== 5) auto-fill commit ===")
result = post(f"/events/{event_id}/roster/auto-fill", headers={"Idempotency-Key": str(uuid.uuid4())})
print(f"filled {result['total_filled']} of {result['open_seats']} open slots")
for line in result["summary"]:
    print(f"  {line['label']}: {line['count']}")

print("=== 6) roster ===")
roster = get(f"/events/{event_id}/roster")
for a in roster["assignments"]:
    flag = " (override)" if a["is_override"] else ""
    print(f"  {a['slot']:>6} #{a['position']}: {a['username']}{flag}")
print(f"  pool: {[p['username'] for p in roster['pool']]}")

print("✅ smoke OK")
