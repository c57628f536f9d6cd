"""
Persistence smoke test.

Starts the API with uvicorn, creates a tenant and saves a pricing section,
restarts the server and checks the saved value is still served.
Requires a reachable database and Redis as configured in .env.
"""

import os
import signal
import subprocess
import sys
import time

import httpx

from pantabilen.app.core.jwt import create_access_token

BASE_URL = "http://127.0.0.1:8000"
API_PREFIX = "/v1"
SERVER_CMD = [sys.executable, "-m", "uvicorn", "pantabilen.app.main:app", "--host", "127.0.0.1", "--port", "8000"]


def bearer(payload: dict) -> dict:
    return {"Authorization": f"Bearer {create_access_token(payload)}"}


def wait_for_server(retries=10, delay=2):
    url = f"{BASE_URL}/health"
    print(f"Waiting for server at {url}...")
    for _ in range(retries):
        try:
            resp = httpx.get(url)
            if resp.status_code == 200:
                print(f"✅ Server is up! (redis: {resp.json().get('redis')})")
                return True
        except httpx.TransportError:
            pass
        time.sleep(delay)
    print("❌ Server failed to start.")
    return False


def start_server(echo: bool = False) -> subprocess.Popen:
    return subprocess.Popen(
        SERVER_CMD,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        env={**os.environ, "DB_ECHO": str(echo)},
    )


def stop_server(proc: subprocess.Popen) -> None:
    proc.send_signal(signal.SIGTERM)
    proc.wait()


def run_verification():
    super_admin = bearer({"sub": "smoke@pantabilen.se", "user_id": 1, "role": "SUPER_ADMIN"})

    print("\n--- [Step 1] Starting Server (Initial) ---")
    proc = start_server(echo=True)
    try:
        if not wait_for_server():
            stdout, stderr = proc.communicate(timeout=2)
            print("Server Stdout:", stdout.decode())
            print("Server Stderr:", stderr.decode())
            raise RuntimeError("Server start failed")

        print("\n--- [Step 2] Creating Tenant ---")
        resp = httpx.post(f"{BASE_URL}{API_PREFIX}/admin/tenants", json={"name": "Smoke Test Skrot AB"}, headers=super_admin)
        if resp.status_code != 201:
            raise RuntimeError(f"Tenant creation failed: {resp.status_code} {resp.text}")
        tenant_id = resp.json()["id"]
        print(f"✅ Tenant {tenant_id} created")

        print("\n--- [Step 3] Saving Pricing Section ---")
        resp = httpx.put(
            f"{BASE_URL}{API_PREFIX}/tenants/{tenant_id}/pricing/settings/old_car_deduction",
            json={"pre1990": -1234},
            headers=super_admin,
        )
        if resp.status_code != 200:
            raise RuntimeError(f"Saving settings failed: {resp.status_code} {resp.text}")
        print("✅ Pricing settings saved")
    finally:
        print("\n--- [Step 4] Stopping Server ---")
        stop_server(proc)

    time.sleep(2)  # port release

    print("\n--- [Step 5] Restarting Server (Verification) ---")
    proc2 = start_server()
    try:
        if not wait_for_server():
            raise RuntimeError("Server restart failed")

        resp = httpx.get(f"{BASE_URL}{API_PREFIX}/tenants/{tenant_id}/pricing/settings", headers=super_admin)
        value = resp.json().get("old_car_deduction", {}).get("pre1990") if resp.status_code == 200 else None
        if value == -1234:
            print("✅ Pricing settings persisted across restart")
        else:
            print(f"❌ Persistence Issue: {resp.status_code} {resp.text}")
            raise RuntimeError("Settings lost after restart")
    finally:
        print("\n--- [Step 6] Stopping Server ---")
        stop_server(proc2)


if __name__ == "__main__":
    run_verification()
