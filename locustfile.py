from locust import HttpUser, task, between
import random

class ApiUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Register a reviewer for this simulated client
        uname = f"user_{random.randint(1, 1_000_000)}"
        r = self.client.post(
            "/api/auth/register",
            json={"username": uname, "email": f"{uname}@example.com", "password": "load-test"},
        )
        self.headers = None
        if r.status_code == 201:
            self.headers = {"Authorization": f"Bearer {r.json()['token']}"}

    @task(3)
    def list_arcades(self):
        self.client.get("/api/arcades")

    @task(1)
    def review_arcade(self):
        if not self.headers:
            return
        arcades = self.client.get("/api/arcades").json()
        if not arcades:
            r = self.client.post("/api/arcades", json={"name": "Load Test Arcade"}, headers=self.headers)
            arcades = [r.json()]
        arcade = random.choice(arcades)
        self.client.post(
            f"/api/arcades/{arcade['id']}/comments",
            json={"comment": "load test", "rating": random.randint(1, 5)},
            headers=self.headers,
            name="/api/arcades/[id]/comments",
        )

    @task(1)
    def profile(self):
        if self.headers:
            self.client.get("/api/profile", headers=self.headers)
