"""
Load test for the league site submission API.
Uses Locust: https://locust.io

Point the server at sandbox credentials (or leave email unconfigured to
exercise the 500 path) before running this; every valid submission sends
a real email otherwise.

Run (50 users, 5 spawn rate, 2 min):
    locust -f tests/load_test.py --host http://localhost:8000 \
           --users 50 --spawn-rate 5 --run-time 2m --headless

Or run with web UI:
    locust -f tests/load_test.py --host http://localhost:8000
    # Open http://localhost:8089
"""
import random

from locust import HttpUser, between, task


SAMPLE_NAMES = ["Alex Martin", "Sam Roy", "Jordan Leblanc", "Casey Nguyen", "Riley Singh"]
SAMPLE_EMAILS = [f"player{i}@example.com" for i in range(1, 21)]
LEVELS = ["Beginner", "Rec C", "Rec B", "Rec A", "Former junior"]
POSITIONS = ["Forward", "Defence", "Goal", "Any"]
SAMPLE_MESSAGES = [
    "Looking to join a team for the fall season.",
    "I can sub most Tuesday nights if anyone needs a spare.",
    "New to the area, played house league growing up.",
    "Goalie looking for regular ice time.",
]


def _join_payload() -> dict:
    return {
        "name": random.choice(SAMPLE_NAMES),
        "email": random.choice(SAMPLE_EMAILS),
        "message": random.choice(SAMPLE_MESSAGES),
        "phone": f"519555{random.randint(1000, 9999)}",
        "age": str(random.randint(19, 65)),
        "currentLevel": random.choice(LEVELS),
        "position": random.choice(POSITIONS),
        "goalie": random.random() < 0.1,
        "spareOnly": random.random() < 0.3,
        "notes": "",
        "company": "",
    }


class JoinFormUser(HttpUser):
    """Simulates a visitor filling in the join form."""

    wait_time = between(1, 5)

    @task(3)
    def check_health(self):
        with self.client.get("/health", catch_response=True) as resp:
            if resp.status_code == 200:
                resp.success()
            else:
                resp.failure(f"Health check failed: {resp.status_code}")

    @task(10)
    def submit_join_form(self):
        with self.client.post(
            "/api/contact",
            json=_join_payload(),
            catch_response=True,
            name="/api/contact",
        ) as resp:
            if resp.status_code == 200:
                resp.success()
            else:
                resp.failure(f"Submit failed: {resp.status_code} {resp.text[:200]}")

    @task(2)
    def submit_incomplete_form(self):
        """Missing message must be rejected with 400, never a 5xx."""
        payload = _join_payload()
        payload["message"] = ""
        with self.client.post(
            "/api/contact",
            json=payload,
            catch_response=True,
            name="/api/contact [incomplete]",
        ) as resp:
            if resp.status_code == 400:
                resp.success()
            else:
                resp.failure(f"Expected 400, got {resp.status_code}")


class BotUser(HttpUser):
    """Form spam that fills the hidden honeypot field."""

    wait_time = between(2, 6)
    weight = 1

    @task
    def submit_spam(self):
        payload = _join_payload()
        payload["company"] = "Cheap Jerseys Ltd"
        with self.client.post(
            "/api/contact",
            json=payload,
            catch_response=True,
            name="/api/contact [honeypot]",
        ) as resp:
            if resp.status_code == 204:
                resp.success()
            else:
                resp.failure(f"Expected 204, got {resp.status_code}")
