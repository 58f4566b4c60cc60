"""Tests for the Flask REST surface."""

import pytest

from api.app import create_app
from budget_core.config import Settings

from conftest import BrokenStore

USER = "demo-user-001"


def _expense(amount=100, description="Lunch", category="Food & Dining", day="2024-12-15"):
    return {"amount": amount, "description": description, "category": category, "date": day}


class TestHealth:
    def test_health(self, http):
        response = http.get("/api/health")
        body = response.get_json()
        assert response.status_code == 200
        assert body["status"] == "ok"
        assert body["timestamp"].endswith("Z")


class TestExpenses:
    def test_empty_listing(self, http):
        response = http.get(f"/api/expenses/{USER}")
        assert response.status_code == 200
        assert response.get_json() == {"success": True, "expenses": []}

    def test_create_then_list(self, http):
        created = http.post(f"/api/expenses/{USER}", json=_expense(amount=2450.5)).get_json()
        assert created["success"] is True

        expenses = http.get(f"/api/expenses/{USER}").get_json()["expenses"]

        assert len(expenses) == 1
        expense = expenses[0]
        assert expense["id"] == created["id"]
        assert expense["amount"] == 2450.5
        assert expense["description"] == "Lunch"
        assert expense["category"] == "Food & Dining"
        assert expense["date"] == "2024-12-15"
        assert expense["userId"] == USER
        assert expense["createdAt"].endswith("Z")

    def test_delete_removes_expense(self, http):
        first = http.post(f"/api/expenses/{USER}", json=_expense(description="One")).get_json()["id"]
        second = http.post(f"/api/expenses/{USER}", json=_expense(description="Two")).get_json()["id"]

        response = http.delete(f"/api/expenses/{USER}/{first}")

        assert response.get_json() == {"success": True}
        ids = [expense["id"] for expense in http.get(f"/api/expenses/{USER}").get_json()["expenses"]]
        assert ids == [second]

    def test_delete_unknown_succeeds(self, http):
        assert http.delete(f"/api/expenses/{USER}/nope").get_json() == {"success": True}

    def test_listing_is_per_user(self, http):
        http.post("/api/expenses/someone-else", json=_expense())
        assert http.get(f"/api/expenses/{USER}").get_json()["expenses"] == []

    def test_malformed_body_is_generic_500(self, http):
        response = http.post(
            f"/api/expenses/{USER}", data="{broken", content_type="application/json"
        )
        assert response.status_code == 500
        assert response.get_json() == {"success": False, "error": "Failed to add expense"}

    def test_missing_fields_is_generic_500(self, http):
        response = http.post(f"/api/expenses/{USER}", json={"description": "no amount"})
        assert response.status_code == 500
        assert response.get_json()["error"] == "Failed to add expense"


class TestSalary:
    def test_default_salary(self, http):
        body = http.get(f"/api/salary/{USER}").get_json()
        assert body == {"success": True, "salary": {"monthly": 50000, "lastUpdated": None}}

    def test_update_overwrites(self, http):
        assert http.post(f"/api/salary/{USER}", json={"monthly": 60000}).get_json() == {"success": True}
        http.post(f"/api/salary/{USER}", json={"monthly": 72500.75})

        salary = http.get(f"/api/salary/{USER}").get_json()["salary"]

        assert salary["monthly"] == 72500.75
        assert salary["lastUpdated"] is not None


class TestSavings:
    def test_default_savings(self, http):
        body = http.get(f"/api/savings/{USER}").get_json()
        assert body == {
            "success": True,
            "savings": {"goal": 100000, "current": 0, "lastUpdated": None},
        }

    def test_partial_update(self, http):
        http.post(f"/api/savings/{USER}", json={"goal": 250000})
        http.post(f"/api/savings/{USER}", json={"current": 1200})

        savings = http.get(f"/api/savings/{USER}").get_json()["savings"]

        assert savings["goal"] == 250000
        assert savings["current"] == 1200
        assert savings["lastUpdated"].endswith("Z")

    def test_full_record_update(self, http):
        http.post(f"/api/savings/{USER}", json={"goal": 5000, "current": 10, "lastUpdated": None})
        savings = http.get(f"/api/savings/{USER}").get_json()["savings"]
        assert (savings["goal"], savings["current"]) == (5000, 10)
        assert savings["lastUpdated"] is not None


class TestStorageFailures:
    @pytest.fixture
    def broken(self):
        app = create_app(store=BrokenStore(), settings=Settings(env="dev"))
        return app.test_client()

    @pytest.mark.parametrize(
        "method, path, body, message",
        [
            ("GET", f"/api/expenses/{USER}", None, "Failed to fetch expenses"),
            ("POST", f"/api/expenses/{USER}", _expense(), "Failed to add expense"),
            ("DELETE", f"/api/expenses/{USER}/x", None, "Failed to delete expense"),
            ("GET", f"/api/salary/{USER}", None, "Failed to fetch salary"),
            ("POST", f"/api/salary/{USER}", {"monthly": 1}, "Failed to update salary"),
            ("GET", f"/api/savings/{USER}", None, "Failed to fetch savings"),
            ("POST", f"/api/savings/{USER}", {"goal": 1}, "Failed to update savings"),
        ],
    )
    def test_generic_error_envelope(self, broken, method, path, body, message):
        response = broken.open(path, method=method, json=body)
        assert response.status_code == 500
        assert response.get_json() == {"success": False, "error": message}

    def test_health_still_answers(self, broken):
        assert broken.get("/api/health").status_code == 200


class TestNonFiniteAmounts:
    @pytest.mark.parametrize("value", ["NaN", "Infinity"])
    @pytest.mark.parametrize(
        "path, body, message",
        [
            (f"/api/expenses/{USER}", lambda value: _expense(amount=value), "Failed to add expense"),
            (f"/api/salary/{USER}", lambda value: {"monthly": value}, "Failed to update salary"),
            (f"/api/savings/{USER}", lambda value: {"goal": value}, "Failed to update savings"),
            (f"/api/savings/{USER}", lambda value: {"current": value}, "Failed to update savings"),
        ],
    )
    def test_rejected_with_generic_500(self, http, value, path, body, message):
        response = http.post(path, json=body(value))
        assert response.status_code == 500
        assert response.get_json() == {"success": False, "error": message}

    def test_nothing_is_stored(self, http):
        http.post(f"/api/expenses/{USER}", json=_expense(amount="NaN"))
        http.post(f"/api/salary/{USER}", json={"monthly": "Infinity"})

        assert http.get(f"/api/expenses/{USER}").get_json()["expenses"] == []
        assert http.get(f"/api/salary/{USER}").get_json()["salary"]["lastUpdated"] is None


class TestConfiguration:
    def test_custom_prefix(self, store):
        app = create_app(store=store, settings=Settings(api_prefix="/make-server"))
        client = app.test_client()
        assert client.get("/make-server/health").status_code == 200
        assert client.get("/api/health").status_code == 404

    def test_json_store_from_data_dir(self, tmp_path):
        client = create_app(tmp_path, settings=Settings()).test_client()
        client.post(f"/api/salary/{USER}", json={"monthly": 1000})
        assert (tmp_path / "kv_store.json").exists()
