from __future__ import annotations

from unittest.mock import MagicMock

from kitchen.app import app
from kitchen.store.base import StoreError
from kitchen.store.memory import MemoryStore, get_store

MISSING_ID = "0" * 24


def _feedback_id(store, food_item_id, comment):
    return next(fb.id for fb in store.query_feedback(food_item_id=food_item_id) if fb.comment == comment)


# ── Basics ───────────────────────────────────────────────────────────────


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_create_customer_uses_camel_case(client):
    resp = client.post("/customers", json={"firstName": "Carol", "lastName": "White"})

    assert resp.status_code == 201
    data = resp.json()
    assert data["firstName"] == "Carol"
    assert data["lastName"] == "White"
    assert len(data["id"]) == 24


def test_create_food_item_and_feedback(client, store, menu):
    resp = client.post(
        f"/food-items/{menu['pasta'].id}/feedback",
        json={"rating": 4, "comment": "Delicious", "userId": menu["bob"].id},
    )

    assert resp.status_code == 201
    data = resp.json()
    assert data["foodItemName"] == "Pasta"
    assert data["userId"] == menu["bob"].id
    assert store.get_food_item(menu["pasta"].id).rating == 4.0


def test_feedback_rating_out_of_range(client, menu):
    resp = client.post(f"/food-items/{menu['pasta'].id}/feedback", json={"rating": 6})
    assert resp.status_code == 422


def test_feedback_rejects_malformed_customer_id(client, store, menu):
    resp = client.post(f"/food-items/{menu['pasta'].id}/feedback", json={"rating": 4, "userId": "bob"})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Invalid customer ID"}
    assert len(store.query_feedback(food_item_id=menu["pasta"].id)) == 2


def test_feedback_on_unknown_item(client):
    resp = client.post(f"/food-items/{MISSING_ID}/feedback", json={"rating": 3})
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Food item not found"}


# ── Dashboard & trend ────────────────────────────────────────────────────


def test_dashboard_metrics(client, menu, classifier):
    resp = client.get("/orders/analytics/satisfaction")

    assert resp.status_code == 200
    body = resp.json()
    metrics = body["metrics"]
    assert body["success"] is True
    assert metrics["totalCustomers"] == 2
    assert metrics["totalReviews"] == 4
    assert metrics["averageRating"] == 3.5
    assert metrics["sentimentDistribution"] == {"positive": 1, "neutral": 2, "negative": 1}
    assert metrics["satisfactionScore"] == 62.0
    assert metrics["issuesReported"] == {"count": 1, "unresolved": 1}
    assert [t["name"] for t in metrics["trendingItems"]] == ["Pasta", "Tomato Soup"]

    recent = body["recentFeedback"]
    assert len(recent) == 4
    assert recent[0]["user"] == "Anonymous"
    assert recent[-1]["user"] == "Alice"
    assert recent[-1]["sentiment"] == "positive"
    # Blank comment is never sent to the classifier
    assert "" not in classifier.calls


def test_dashboard_with_no_feedback(client):
    resp = client.get("/orders/analytics/satisfaction")

    assert resp.status_code == 200
    metrics = resp.json()["metrics"]
    assert metrics["totalReviews"] == 0
    assert metrics["satisfactionScore"] is None
    assert resp.json()["recentFeedback"] == []


def test_satisfaction_trend_by_month(client, menu):
    resp = client.get("/orders/analytics/satisfaction-trend")

    assert resp.status_code == 200
    body = resp.json()
    assert body["period"] == "month"
    assert [b["periodKey"] for b in body["data"]] == ["2024-06", "2024-07", "2024-08"]
    june = body["data"][0]
    assert june["count"] == 2
    assert june["averageRating"] == 3.5
    assert june["sampledSentiment"] == {"positive": 1, "neutral": 0, "negative": 1}


def test_satisfaction_trend_by_year(client, menu):
    resp = client.get("/orders/analytics/satisfaction-trend", params={"period": "year"})

    data = resp.json()["data"]
    assert [b["periodKey"] for b in data] == ["2024"]
    assert data[0]["count"] == 4


def test_satisfaction_trend_rejects_unknown_period(client):
    resp = client.get("/orders/analytics/satisfaction-trend", params={"period": "fortnight"})
    assert resp.status_code == 422


# ── Per-entity profiles ──────────────────────────────────────────────────


def test_customer_profile(client, menu):
    resp = client.get(f"/orders/analytics/customers/{menu['alice'].id}/satisfaction")

    assert resp.status_code == 200
    body = resp.json()
    assert body["hasFeedback"] is True
    assert body["customerName"] == "Alice Smith"
    assert body["metrics"]["totalFeedback"] == 2
    assert body["metrics"]["averageRating"] == 3.5
    assert body["metrics"]["scopeId"] == menu["alice"].id
    assert [f["foodItem"] for f in body["recentFeedback"]] == ["Tomato Soup", "Pasta"]


def test_customer_profile_without_feedback(client, store):
    newcomer = store.add_customer("New", "Face")

    resp = client.get(f"/orders/analytics/customers/{newcomer.id}/satisfaction")

    assert resp.status_code == 200
    body = resp.json()
    assert body["hasFeedback"] is False
    assert body["message"] == "No feedback found for this customer"
    assert body["customerId"] == newcomer.id


def test_customer_profile_invalid_id(client):
    resp = client.get("/orders/analytics/customers/not-an-id/satisfaction")

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Invalid customer ID"}


def test_food_item_profile(client, menu):
    client.post(
        "/orders",
        json={"userId": menu["bob"].id, "items": [{"foodItemId": menu["pasta"].id, "quantity": 3}]},
    )

    resp = client.get(f"/orders/analytics/food-items/{menu['pasta'].id}/satisfaction")

    assert resp.status_code == 200
    body = resp.json()
    assert body["foodItemName"] == "Pasta"
    assert body["metrics"]["totalFeedback"] == 2
    assert body["metrics"]["scopeId"] == menu["pasta"].id
    assert body["metrics"]["totalOrders"] == 1
    assert [f["customer"] for f in body["recentFeedback"]] == ["Anonymous", "Alice Smith"]
    assert body["recentOrders"][0]["customer"] == "Bob Jones"
    assert body["recentOrders"][0]["quantity"] == 3


def test_food_item_profile_without_feedback(client, store):
    item = store.add_food_item("Salad", 8.0)

    resp = client.get(f"/orders/analytics/food-items/{item.id}/satisfaction")

    body = resp.json()
    assert body["hasFeedback"] is False
    assert body["foodItemName"] == "Salad"


def test_food_item_profile_not_found(client):
    resp = client.get(f"/orders/analytics/food-items/{MISSING_ID}/satisfaction")
    assert resp.status_code == 404


def test_food_item_profile_invalid_id(client):
    resp = client.get("/orders/analytics/food-items/xyz/satisfaction")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid food item ID"


# ── Replies ──────────────────────────────────────────────────────────────


def test_reply_to_feedback(client, store, menu):
    feedback_id = _feedback_id(store, menu["soup"].id, "Soup was cold")

    resp = client.post(
        f"/orders/food-items/{menu['soup'].id}/feedback/{feedback_id}/reply",
        json={"reply": "Sorry, we have fixed the warmer."},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Reply added successfully"
    assert body["feedback"]["reply"] == "Sorry, we have fixed the warmer."
    assert body["feedback"]["repliedAt"] is not None

    dashboard = client.get("/orders/analytics/satisfaction").json()
    replied = next(f for f in dashboard["recentFeedback"] if f["id"] == feedback_id)
    assert replied["replied"] is True


def test_reply_to_unknown_feedback(client, menu):
    resp = client.post(
        f"/orders/food-items/{menu['soup'].id}/feedback/{MISSING_ID}/reply",
        json={"reply": "Thanks"},
    )
    assert resp.status_code == 404
    assert resp.json()["message"] == "Feedback not found"


def test_reply_with_malformed_ids(client, menu):
    resp = client.post(
        f"/orders/food-items/{menu['soup'].id}/feedback/bad/reply",
        json={"reply": "Thanks"},
    )
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid food item or feedback ID"


# ── Orders ───────────────────────────────────────────────────────────────


def test_place_order_and_list_recent(client, menu):
    resp = client.post(
        "/orders",
        json={"userId": menu["alice"].id, "items": [{"foodItemId": menu["pasta"].id, "quantity": 2}]},
    )

    assert resp.status_code == 201
    order = resp.json()
    assert order["totalAmount"] == 25.0
    assert order["status"] == "pending"

    recent = client.get("/orders/recent").json()
    assert [o["id"] for o in recent] == [order["id"]]


def test_place_order_requires_items(client):
    resp = client.post("/orders", json={"items": []})
    assert resp.status_code == 422


def test_chef_queue_with_analysis(client, menu, generator):
    client.post("/orders", json={"items": [{"foodItemId": menu["pasta"].id}]})
    client.post(
        "/orders",
        json={"userId": menu["alice"].id, "items": [{"foodItemId": menu["soup"].id, "quantity": 2}]},
    )

    resp = client.get("/orders/chef", params={"analyze": "true"})

    assert resp.status_code == 200
    queue = resp.json()
    assert len(queue) == 2
    by_customer = {o["customerName"]: o for o in queue}
    assert by_customer["Guest"]["analysis"]["text"].startswith("Guest user")
    analysis = by_customer["Alice Smith"]["analysis"]
    assert analysis["text"] == "Serve the soup piping hot and go light on salt."
    assert analysis["historicalData"]["totalFeedback"] == 2
    assert "2x Tomato Soup" in generator.prompts[0]


def test_chef_queue_without_analysis(client, menu, generator):
    client.post("/orders", json={"items": [{"foodItemId": menu["pasta"].id}]})

    queue = client.get("/orders/chef").json()

    assert queue[0]["analysis"] is None
    assert queue[0]["orderNumber"].startswith("#")
    assert generator.prompts == []


def test_update_order_status(client, menu):
    order = client.post("/orders", json={"items": [{"foodItemId": menu["pasta"].id}]}).json()

    resp = client.patch(f"/orders/{order['id']}/status", json={"status": "ready"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "ready"
    assert client.get("/orders/chef").json() == []


def test_update_order_status_invalid(client, menu):
    order = client.post("/orders", json={"items": [{"foodItemId": menu["pasta"].id}]}).json()

    resp = client.patch(f"/orders/{order['id']}/status", json={"status": "burnt"})

    assert resp.status_code == 400
    assert resp.json() == {"success": False, "message": "Invalid status value"}


def test_update_unknown_order(client):
    resp = client.patch(f"/orders/{MISSING_ID}/status", json={"status": "ready"})
    assert resp.status_code == 404
    assert resp.json()["message"] == "Order not found"


# ── Store failures ───────────────────────────────────────────────────────


def test_store_failure_returns_503(client):
    broken = MagicMock(spec=MemoryStore)
    broken.query_feedback.side_effect = StoreError("connection refused")
    app.dependency_overrides[get_store] = lambda: broken

    resp = client.get("/orders/analytics/satisfaction")

    assert resp.status_code == 503
    assert resp.json() == {"success": False, "message": "Feedback store unavailable"}
