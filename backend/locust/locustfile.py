"""
Locust Load Test Suite

Run scenarios:
  locust -f locustfile.py --tags concurrency  # Race for the last places
  locust -f locustfile.py --tags throughput   # Calendar cache
  locust -f locustfile.py --tags edge         # Bad input
  locust -f locustfile.py                     # All tests
"""

import random
import uuid
from locust import HttpUser, task, between, tag, events
from datetime import datetime, timezone, timedelta

# Shared state
EVENT_IDS = []
CONCURRENCY_EVENT_ID = None
CONCURRENCY_CAPACITY = 10
PASSWORD = "loadtest-password"


def random_email():
    return f"load_{uuid.uuid4().hex[:10]}@test.com"


def future_time(days: int) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def sign_up_and_login(client) -> dict:
    """Create a fresh identity and return its auth headers ({} on failure)."""
    email = random_email()
    client.post("/api/v1/auth/signup", json={"email": email, "password": PASSWORD})
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    if resp.status_code == 200:
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}
    return {}


@events.test_start.add_listener
def on_test_start(environment, **kwargs):
    print("\n" + "=" * 60)
    print(f"Concurrency scenario: many users -> {CONCURRENCY_CAPACITY} places")
    print("=" * 60)


@events.test_stop.add_listener
def on_test_stop(environment, **kwargs):
    if CONCURRENCY_EVENT_ID:
        print(
            f"\nVerify: SELECT COUNT(*) FROM event_registrations "
            f"WHERE event_id = '{CONCURRENCY_EVENT_ID}' AND status = 'registered';"
            f"  -> must be <= {CONCURRENCY_CAPACITY}\n"
        )


class ConcurrencyUser(HttpUser):
    """
    TEST 1: Concurrency - 100 users -> 10 places

    Run: locust -f locustfile.py --tags concurrency -u 100 -r 50 --run-time 30s

    With CAPACITY_STRATEGY=locking the registered count never exceeds 10.
    With CAPACITY_STRATEGY=advisory it may.
    """
    wait_time = between(0, 0.1)

    def on_start(self):
        self.headers = sign_up_and_login(self.client)
        self.is_creator = False
        if not self.headers or CONCURRENCY_EVENT_ID:
            return

        resp = self.client.post(
            "/api/v1/events",
            json={
                "title": "Concurrency Test Event",
                "description": f"{CONCURRENCY_CAPACITY} places only",
                "start_time": future_time(30),
                "end_time": future_time(31),
                "location": "Test",
                "max_attendees": CONCURRENCY_CAPACITY,
            },
            headers=self.headers,
        )
        if resp.status_code == 201:
            globals()["CONCURRENCY_EVENT_ID"] = resp.json()["id"]
            self.is_creator = True
            print(f"\nCreated event {CONCURRENCY_EVENT_ID} with {CONCURRENCY_CAPACITY} places\n")

    @tag("concurrency")
    @task
    def register_for_limited_event(self):
        """All users fight for the same places."""
        if not CONCURRENCY_EVENT_ID or not self.headers or self.is_creator:
            return

        with self.client.post(
            f"/api/v1/events/{CONCURRENCY_EVENT_ID}/registration",
            headers=self.headers,
            name="/api/v1/events/{id}/registration",
            catch_response=True,
        ) as resp:
            if resp.status_code in (201, 409):
                # 409: event full or already registered
                resp.success()
            else:
                resp.failure(f"Unexpected: {resp.status_code}")


class ThroughputUser(HttpUser):
    """
    TEST 2: Throughput - Cache effectiveness

    Run twice:
      1. With Redis: locust -f locustfile.py --tags throughput -u 100 -r 20 --run-time 60s
      2. With REDIS_ENABLED=false, run again

    Compare avg response time, requests/sec and P95/P99 latency.
    """
    wait_time = between(0.1, 0.5)

    @tag("throughput", "read")
    @task(10)
    def list_events_cached(self):
        page = random.randint(1, 5)
        self.client.get(f"/api/v1/events?page={page}&page_size=20", name="/api/v1/events [cached]")

    @tag("throughput", "read")
    @task(3)
    def get_event_detail(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}", name="/api/v1/events/{id}")

    @tag("throughput")
    @task(1)
    def health_check(self):
        self.client.get("/health")


class EdgeCaseUser(HttpUser):
    """
    TEST 3: Edge cases - Bad input handling

    Run: locust -f locustfile.py --tags edge -u 20 -r 5 --run-time 30s

    The service must answer with proper error codes, never 5xx.
    """
    wait_time = between(0.5, 1.5)

    def on_start(self):
        self.headers = sign_up_and_login(self.client)

    def _expect(self, resp, allowed):
        if resp.status_code in allowed:
            resp.success()
        else:
            resp.failure(f"Expected {allowed}, got {resp.status_code}")

    @tag("edge")
    @task
    def unknown_event(self):
        with self.client.post(
            f"/api/v1/events/{uuid.uuid4()}/registration",
            headers=self.headers,
            name="/api/v1/events/{id}/registration [unknown]",
            catch_response=True,
        ) as resp:
            self._expect(resp, (404,))

    @tag("edge")
    @task
    def malformed_event_id(self):
        with self.client.get(
            "/api/v1/events/not-a-uuid",
            name="/api/v1/events/{id} [malformed]",
            catch_response=True,
        ) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def zero_capacity(self):
        with self.client.post(
            "/api/v1/events",
            json={
                "title": "Bad",
                "start_time": future_time(1),
                "end_time": future_time(2),
                "max_attendees": 0,
            },
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def unsupported_reminder_time(self):
        with self.client.put(
            "/api/v1/profiles/me/notification-preferences",
            json={"email": True, "push": False, "reminder_times": [5]},
            headers=self.headers,
            catch_response=True,
        ) as resp:
            self._expect(resp, (422,))

    @tag("edge")
    @task
    def malformed_json(self):
        with self.client.post(
            "/api/v1/events",
            data="not json at all",
            headers={**self.headers, "Content-Type": "application/json"},
            catch_response=True,
        ) as resp:
            self._expect(resp, (400, 422))

    @tag("edge")
    @task
    def missing_auth(self):
        with self.client.get("/api/v1/registrations", catch_response=True) as resp:
            self._expect(resp, (401,))


class RealisticUser(HttpUser):
    """
    TEST 4: Realistic mixed workload

    Run: locust -f locustfile.py -u 200 -r 20 --run-time 120s

    Mostly browsing, some registrations, rare creates.
    """
    wait_time = between(1, 3)

    def on_start(self):
        self.headers = sign_up_and_login(self.client)

    @task(50)
    def browse_events(self):
        resp = self.client.get("/api/v1/events?page=1&page_size=20", headers=self.headers)
        if resp.status_code == 200:
            for event in resp.json().get("events", []):
                if event["id"] not in EVENT_IDS:
                    EVENT_IDS.append(event["id"])

    @task(20)
    def view_event(self):
        if EVENT_IDS:
            self.client.get(f"/api/v1/events/{random.choice(EVENT_IDS)}", name="/api/v1/events/{id}")

    @task(10)
    def register(self):
        if EVENT_IDS and self.headers:
            self.client.post(
                f"/api/v1/events/{random.choice(EVENT_IDS)}/registration",
                json={"join_waitlist": random.random() < 0.3},
                headers=self.headers,
                name="/api/v1/events/{id}/registration",
            )

    @task(3)
    def unregister(self):
        if EVENT_IDS and self.headers:
            self.client.delete(
                f"/api/v1/events/{random.choice(EVENT_IDS)}/registration",
                headers=self.headers,
                name="/api/v1/events/{id}/registration [delete]",
            )

    @task(3)
    def create_event(self):
        if self.headers:
            days = random.randint(1, 90)
            resp = self.client.post(
                "/api/v1/events",
                json={
                    "title": f"Event {random.randint(1, 10000)}",
                    "description": "Test event",
                    "start_time": future_time(days),
                    "end_time": future_time(days + 1),
                    "location": "Venue",
                    "max_attendees": random.randint(10, 500),
                    "event_type": random.choice(["general", "meeting", "workshop", "social", "conference"]),
                },
                headers=self.headers,
            )
            if resp.status_code == 201:
                EVENT_IDS.append(resp.json()["id"])
