"""
Fire registrations at a running backend. Useful for checking capacity and
cooldown behaviour end to end.

  python scripts/test/simulate_registration.py --password secret --create-event --bags 3 --count 5
  python scripts/test/simulate_registration.py --session <code> --phone "555-123-4567"
"""

import argparse
import random
import requests
from datetime import datetime, timedelta

BACKEND_URL = "http://localhost:8080/api/v1"


def login(base, username, password):
    resp = requests.post(f"{base}/auth/login", json={"username": username, "password": password}, timeout=10)
    resp.raise_for_status()
    return resp.json()["token"]


def create_event(base, token, bags, hours):
    now = datetime.utcnow()
    body = {
        "name": f"Simulated distribution {now:%Y-%m-%d %H:%M}",
        "available_bags": bags,
        "start_datetime": (now - timedelta(minutes=5)).isoformat(),
        "end_datetime": (now + timedelta(hours=hours)).isoformat(),
    }
    resp = requests.post(f"{base}/events", json=body, headers={"Authorization": f"Bearer {token}"}, timeout=10)
    resp.raise_for_status()
    event = resp.json()
    print(f"✅ Event {event['id']} created with {bags} bags")
    return event["id"]


def register(base, event_id, session_code, phone, index):
    body = {
        "first_name": f"Test{index}",
        "last_name": "Citizen",
        "phone_number": phone,
        "total_individuals": random.randint(1, 6),
        "is_homeless": index % 4 == 0,
        "address": None if index % 4 == 0 else f"{100 + index} Main St",
    }
    if session_code:
        body["session_code"] = session_code
    else:
        body["event_id"] = event_id
    resp = requests.post(f"{base}/registrations", json=body, timeout=10)
    data = resp.json()
    if resp.status_code == 201:
        print(f"✅ #{index} {phone} → {data['order_number']}")
    else:
        print(f"❌ #{index} {phone} → HTTP {resp.status_code}: {data.get('code')} {data.get('detail')}")


def random_phone():
    return f"555-{random.randint(200, 999)}-{random.randint(0, 9999):04d}"


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Simulate citizen registrations")
    parser.add_argument("--url", default=BACKEND_URL)
    parser.add_argument("--username", default="admin")
    parser.add_argument("--password")
    parser.add_argument("--event-id", type=int)
    parser.add_argument("--session", help="QR session code instead of an event id")
    parser.add_argument("--create-event", action="store_true")
    parser.add_argument("--bags", type=int, default=5)
    parser.add_argument("--hours", type=int, default=2)
    parser.add_argument("--count", type=int, default=1)
    parser.add_argument("--phone", help="Reuse one phone for every attempt (exercises cooldown)")
    args = parser.parse_args()

    event_id = args.event_id
    if args.create_event:
        if not args.password:
            parser.error("--create-event needs --password")
        event_id = create_event(args.url, login(args.url, args.username, args.password), args.bags, args.hours)
    if event_id is None and not args.session:
        parser.error("give --event-id, --session or --create-event")

    for i in range(1, args.count + 1):
        register(args.url, event_id, args.session, args.phone or random_phone(), i)
