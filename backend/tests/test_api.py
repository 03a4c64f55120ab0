"""
HTTP-level tests: auth, error bodies, movements and reporting endpoints.
"""
from io import BytesIO

from fastapi.testclient import TestClient
from openpyxl import load_workbook

from buffetdesk.main import create_app

TEST_PASSWORD = "party-time-123"


def _create_item(client, **overrides):
    payload = {
        "name": "Party hats",
        "category": "decorations",
        "unit": "pieces",
        "minimumStock": 5,
        "unitCost": 1.25,
        "initialStock": 10,
    }
    payload.update(overrides)
    response = client.post("/api/inventory", json=payload)
    assert response.status_code == 201
    return response.json()


class TestHealth:
    def test_liveness(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_readiness(self, client):
        response = client.get("/readyz")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}


class TestAuth:
    def test_business_routes_require_login(self, client):
        response = client.get("/api/stats")

        assert response.status_code == 401
        body = response.json()
        assert body["code"] == "UNAUTHORIZED"
        assert body["requestId"] == response.headers["X-Request-Id"]

    def test_login_sets_session_cookie(self, auth_client):
        auth_client.post("/api/logout")
        assert auth_client.get("/api/user").status_code == 401

        response = auth_client.post("/api/login", json={"username": "maria", "password": TEST_PASSWORD})

        assert response.status_code == 200
        assert response.json()["token_type"] == "bearer"
        user = auth_client.get("/api/user").json()
        assert user["username"] == "maria"
        assert user["name"] == "Maria Souza"
        assert "hashedPassword" not in user

    def test_bearer_token_works(self, auth_client):
        token = auth_client.post(
            "/api/login", json={"username": "maria", "password": TEST_PASSWORD}
        ).json()["access_token"]
        auth_client.cookies.clear()

        response = auth_client.get("/api/user", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    def test_wrong_password(self, auth_client):
        response = auth_client.post("/api/login", json={"username": "maria", "password": "nope"})

        assert response.status_code == 401

    def test_duplicate_username(self, auth_client):
        response = auth_client.post("/api/register", json={
            "username": "maria", "password": TEST_PASSWORD, "name": "Another Maria"
        })

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestErrors:
    def test_request_id_is_echoed(self, auth_client):
        response = auth_client.get("/api/inventory/missing", headers={"X-Request-Id": "req-42"})

        assert response.status_code == 404
        assert response.headers["X-Request-Id"] == "req-42"
        assert response.json() == {
            "code": "NOT_FOUND",
            "message": "Inventory item 'missing' not found",
            "requestId": "req-42",
        }

    def test_body_validation_is_400(self, auth_client):
        response = auth_client.post("/api/inventory/movements", json={
            "inventoryId": "anything", "movementType": "in", "quantity": 0
        })

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert "quantity" in body["message"]
        assert body["requestId"]

    def test_start_after_end_is_400(self, auth_client):
        response = auth_client.get("/api/stats/financial?startDate=2024-04-01&endDate=2024-03-01")

        assert response.status_code == 400


class TestInventoryApi:
    def test_movement_lifecycle(self, auth_client):
        item = _create_item(auth_client)
        assert item["currentStock"] == 10

        response = auth_client.post("/api/inventory/movements", json={
            "inventoryId": item["id"], "movementType": "out", "quantity": 4, "reason": "used_in_event"
        })
        assert response.status_code == 201
        movement = response.json()
        assert movement["stockAfter"] == 6
        assert movement["movementType"] == "out"

        history = auth_client.get(f"/api/inventory/movements?inventoryId={item['id']}").json()
        assert [m["stockAfter"] for m in history] == [6, 10]
        assert auth_client.get(f"/api/inventory/{item['id']}").json()["currentStock"] == 6

    def test_insufficient_stock_is_409(self, auth_client):
        item = _create_item(auth_client, initialStock=2)

        response = auth_client.post("/api/inventory/movements", json={
            "inventoryId": item["id"], "movementType": "out", "quantity": 3
        })

        assert response.status_code == 409
        assert response.json()["code"] == "INSUFFICIENT_STOCK"
        assert auth_client.get(f"/api/inventory/{item['id']}").json()["currentStock"] == 2

    def test_unknown_item_is_404(self, auth_client):
        response = auth_client.post("/api/inventory/movements", json={
            "inventoryId": "missing", "movementType": "in", "quantity": 1
        })

        assert response.status_code == 404

    def test_low_stock(self, auth_client):
        _create_item(auth_client, name="Straws", initialStock=1)
        _create_item(auth_client, name="Cups", initialStock=100)

        names = [i["name"] for i in auth_client.get("/api/inventory/low-stock").json()]

        assert names == ["Straws"]

    def test_delete_item(self, auth_client):
        item = _create_item(auth_client)

        assert auth_client.delete(f"/api/inventory/{item['id']}").status_code == 204
        assert auth_client.get(f"/api/inventory/{item['id']}").status_code == 404

    def test_backdated_movement_is_400(self, auth_client):
        item = _create_item(auth_client, initialStock=0)
        auth_client.post("/api/inventory/movements", json={
            "inventoryId": item["id"], "movementType": "in", "quantity": 5,
            "movementDate": "2024-03-10T09:00:00",
        })

        response = auth_client.post("/api/inventory/movements", json={
            "inventoryId": item["id"], "movementType": "out", "quantity": 5,
            "movementDate": "2024-03-01T09:00:00",
        })

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert auth_client.get(f"/api/inventory/{item['id']}").json()["currentStock"] == 5

    def test_movement_date_offset_is_converted_to_utc(self, auth_client):
        item = _create_item(auth_client, initialStock=0)

        response = auth_client.post("/api/inventory/movements", json={
            "inventoryId": item["id"], "movementType": "in", "quantity": 5,
            "movementDate": "2024-03-10T10:00:00+02:00",
        })

        assert response.status_code == 201
        assert response.json()["movementDate"] == "2024-03-10T08:00:00"


class TestReportingApi:
    def _book_party(self, client):
        customer = client.post("/api/clients", json={"name": "Ana Lima", "email": "ana@example.com"}).json()
        event = client.post("/api/events", json={
            "childName": "Pedro",
            "age": 6,
            "clientId": customer["id"],
            "eventDate": "2024-03-16",
            "startTime": "14:00:00",
            "endTime": "18:00:00",
            "guestCount": 30,
            "totalValue": 1500,
        })
        assert event.status_code == 201
        return event.json()

    def test_financial_summary(self, auth_client):
        event = self._book_party(auth_client)
        auth_client.post("/api/payments", json={
            "eventId": event["id"], "amount": 600, "paymentMethod": "transfer",
            "paymentDate": "2024-03-05T10:00:00",
        })
        auth_client.post("/api/expenses", json={
            "description": "Balloons", "amount": 150.5, "category": "decorations",
            "paymentMethod": "cash", "expenseDate": "2024-03-02T09:00:00",
        })

        summary = auth_client.get("/api/stats/financial?startDate=2024-03-01&endDate=2024-03-31").json()

        assert summary["totalRevenue"] == 600.0
        assert summary["totalExpenses"] == 150.5
        assert summary["netProfit"] == 449.5
        assert summary["profitMargin"] == 74.92
        assert summary["expensesByCategory"] == [{"category": "decorations", "total": 150.5}]
        assert summary["revenueByMonth"] == [{"month": "2024-03", "revenue": 600.0}]

        cash_flow = auth_client.get("/api/cashflow?startDate=2024-03-01&endDate=2024-03-31").json()
        assert sorted(e["type"] for e in cash_flow) == ["expense", "income"]

    def test_payment_date_offset_is_converted_to_utc(self, auth_client):
        event = self._book_party(auth_client)

        response = auth_client.post("/api/payments", json={
            "eventId": event["id"], "amount": 100, "paymentMethod": "cash",
            "paymentDate": "2024-03-31T22:30:00-03:00",
        })

        assert response.status_code == 201
        assert response.json()["paymentDate"] == "2024-04-01T01:30:00"
        march = auth_client.get("/api/stats/financial?startDate=2024-03-01&endDate=2024-03-31").json()
        assert march["totalRevenue"] == 0.0

    def test_monthly_stats_shape(self, auth_client):
        stats = auth_client.get("/api/stats").json()

        assert stats == {
            "monthlyRevenue": 0.0,
            "monthlyExpenses": 0.0,
            "monthlyProfit": 0.0,
            "eventsCount": 0,
            "activeClients": 0,
            "pendingPayments": 0.0,
            "lowStockItemsCount": 0,
            "totalInventoryValue": 0.0,
        }

    def test_excel_export(self, auth_client):
        event = self._book_party(auth_client)
        auth_client.post("/api/payments", json={
            "eventId": event["id"], "amount": 600, "paymentMethod": "card",
            "paymentDate": "2024-03-05T10:00:00",
        })

        response = auth_client.get("/api/stats/financial/excel?startDate=2024-03-01&endDate=2024-03-31")

        assert response.status_code == 200
        assert "attachment" in response.headers["content-disposition"]
        workbook = load_workbook(BytesIO(response.content))
        values = [cell for row in workbook.active.iter_rows(values_only=True) for cell in row]
        assert 600 in values


class TestRateLimit:
    def test_login_attempts_are_limited(self, settings):
        app = create_app(settings.model_copy(update={"RATE_LIMIT_ENABLED": True}))
        with TestClient(app) as client:
            statuses = [
                client.post("/api/login", json={"username": "ghost", "password": "wrong"}).status_code
                for _ in range(6)
            ]
            blocked = client.post("/api/login", json={"username": "ghost", "password": "wrong"})

        assert statuses[:5] == [401] * 5
        assert statuses[5] == 429
        assert blocked.json()["code"] == "RATE_LIMITED"
        assert "Retry-After" in blocked.headers
