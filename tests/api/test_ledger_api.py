"""
Tests for member, transaction and report endpoints.

These test the HTTP layer: status codes, response format and
error handling. Business logic is tested in tests/services.
"""

from decimal import Decimal

from sqlalchemy.exc import OperationalError


def create_member(client, **seeds):
    response = client.post("/members", json={"name": "Wang", **seeds})
    assert response.status_code == 201
    return response.json()["id"]


def post_adjustment(client, member_id, **overrides):
    payload = {
        "category": "balance",
        "adjust_type": "increase",
        "magnitude": 500,
        "transaction_date": "2025-01-01",
        "description": "deposit",
    }
    payload.update(overrides)
    return client.post(f"/members/{member_id}/transactions", json=payload)


class TestMembers:

    def test_create_member_with_seed(self, client):
        response = client.post("/members", json={
            "name": "Lin",
            "nickname": "阿林",
            "designated_lesson_minutes": 120,
        })
        assert response.status_code == 201
        data = response.json()
        assert data["nickname"] == "阿林"
        assert data["designated_lesson_minutes"] == 120
        assert Decimal(data["balance"]) == 0

    def test_unknown_member_returns_404(self, client):
        response = client.get("/members/999")
        assert response.status_code == 404

    def test_list_members(self, client):
        create_member(client)
        response = client.get("/members")
        assert response.status_code == 200
        assert [m["name"] for m in response.json()] == ["Wang"]


class TestRecordAdjustment:

    def test_record_returns_201_and_balance(self, client):
        member_id = create_member(client)
        response = post_adjustment(client, member_id)

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["balances"]["balance"]) == Decimal("500")
        assert data["transaction"]["category"] == "balance"
        assert Decimal(data["transaction"]["balance_after"]) == Decimal("500")
        assert data["negative_categories"] == []

        member = client.get(f"/members/{member_id}").json()
        assert Decimal(member["balance"]) == Decimal("500")

    def test_negative_balance_is_flagged(self, client):
        member_id = create_member(client)
        response = post_adjustment(
            client, member_id,
            category="gift_boat", adjust_type="decrease", magnitude=30,
        )
        assert response.status_code == 201
        assert response.json()["negative_categories"] == ["gift_boat"]

    def test_zero_magnitude_returns_400(self, client):
        member_id = create_member(client)
        response = post_adjustment(client, member_id, magnitude=0)
        assert response.status_code == 400

    def test_sub_cent_amount_returns_400(self, client):
        member_id = create_member(client)
        response = post_adjustment(client, member_id, magnitude="10.005")
        assert response.status_code == 400

    def test_blank_description_returns_400(self, client):
        member_id = create_member(client)
        response = post_adjustment(client, member_id, description=" ")
        assert response.status_code == 400

    def test_unknown_category_returns_422(self, client):
        member_id = create_member(client)
        response = post_adjustment(client, member_id, category="points")
        assert response.status_code == 422

    def test_unknown_member_returns_404(self, client):
        response = post_adjustment(client, 999)
        assert response.status_code == 404

    def test_storage_failure_returns_503_and_rolls_back(
        self, client, db_session, monkeypatch
    ):
        member_id = create_member(client)

        def failing_flush(*args, **kwargs):
            raise OperationalError("UPDATE", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "flush", failing_flush)
        response = post_adjustment(client, member_id)
        monkeypatch.undo()

        assert response.status_code == 503
        member = client.get(f"/members/{member_id}").json()
        assert Decimal(member["balance"]) == 0
        assert client.get(f"/members/{member_id}/transactions").json() == []


class TestEditAndDelete:

    def test_edit_moves_between_categories(self, client):
        member_id = create_member(client)
        txn_id = post_adjustment(client, member_id).json()["transaction"]["id"]

        response = client.put(f"/transactions/{txn_id}", json={
            "category": "vip_voucher",
            "adjust_type": "decrease",
            "magnitude": 50,
            "transaction_date": "2025-01-02",
            "description": "moved",
        })

        assert response.status_code == 200
        balances = response.json()["balances"]
        assert Decimal(balances["balance"]) == 0
        assert Decimal(balances["vip_voucher"]) == Decimal("-50")

    def test_edit_unknown_returns_404(self, client):
        response = client.put("/transactions/999", json={
            "category": "balance",
            "adjust_type": "increase",
            "magnitude": 10,
            "transaction_date": "2025-01-02",
            "description": "x",
        })
        assert response.status_code == 404

    def test_delete_returns_204_and_restores(self, client):
        member_id = create_member(client)
        txn_id = post_adjustment(client, member_id).json()["transaction"]["id"]

        response = client.delete(f"/transactions/{txn_id}")
        assert response.status_code == 204

        assert client.get(f"/transactions/{txn_id}").status_code == 404
        member = client.get(f"/members/{member_id}").json()
        assert Decimal(member["balance"]) == 0

    def test_delete_twice_returns_404(self, client):
        member_id = create_member(client)
        txn_id = post_adjustment(client, member_id).json()["transaction"]["id"]

        client.delete(f"/transactions/{txn_id}")
        response = client.delete(f"/transactions/{txn_id}")
        assert response.status_code == 404

    def test_list_filters_by_category(self, client):
        member_id = create_member(client)
        post_adjustment(client, member_id)
        post_adjustment(
            client, member_id, category="boat_voucher_g23", magnitude=60,
        )

        response = client.get(
            f"/members/{member_id}/transactions",
            params={"category": "boat_voucher_g23"},
        )
        assert response.status_code == 200
        rows = response.json()
        assert len(rows) == 1
        assert rows[0]["minutes"] == 60


class TestConsistencyEndpoints:

    def test_no_drift_after_mutations(self, client):
        member_id = create_member(client, balance=100)
        post_adjustment(client, member_id, magnitude=40)

        response = client.get(f"/members/{member_id}/drift")
        assert response.status_code == 200
        assert response.json() == []

    def test_repair_is_noop_when_consistent(self, client):
        member_id = create_member(client)
        post_adjustment(client, member_id, magnitude=40)

        response = client.post(f"/members/{member_id}/balances/balance/repair")
        assert response.status_code == 200
        assert Decimal(response.json()["balance"]) == Decimal("40")


class TestReports:

    def test_reconciliation(self, client):
        member_id = create_member(client)
        post_adjustment(client, member_id, magnitude=300,
                        transaction_date="2025-01-05")
        post_adjustment(client, member_id, adjust_type="decrease",
                        magnitude=100, transaction_date="2025-01-20")

        response = client.get(
            f"/members/{member_id}/reconciliation",
            params={
                "category": "balance",
                "start_date": "2025-01-01",
                "end_date": "2025-01-31",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert Decimal(data["opening_balance"]) == 0
        assert Decimal(data["closing_balance"]) == Decimal("200")
        assert Decimal(data["total_increase"]) == Decimal("300")
        assert Decimal(data["total_decrease"]) == Decimal("100")
        assert len(data["transactions"]) == 2

    def test_inverted_window_returns_400(self, client):
        member_id = create_member(client)
        response = client.get(
            f"/members/{member_id}/reconciliation",
            params={
                "category": "balance",
                "start_date": "2025-02-01",
                "end_date": "2025-01-01",
            },
        )
        assert response.status_code == 400

    def test_monthly_statement_covers_all_categories(self, client):
        member_id = create_member(client)
        response = client.get(f"/members/{member_id}/statements/2025/1")
        assert response.status_code == 200
        assert len(response.json()) == 6

    def test_member_export_is_csv_with_bom(self, client):
        member_id = create_member(client)
        post_adjustment(client, member_id, transaction_date="2025-01-05")

        response = client.get(f"/members/{member_id}/exports/2025/1")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert response.content.startswith(b"\xef\xbb\xbf")
        assert "2025/01/05,deposit,儲值,$500," in response.content.decode("utf-8-sig")

    def test_general_ledger_export(self, client):
        member_id = create_member(client)
        post_adjustment(client, member_id, transaction_date="2025-01-05")

        response = client.get("/exports/general-ledger", params={
            "start_date": "2025-01-01", "end_date": "2025-01-31",
        })

        assert response.status_code == 200
        lines = response.content.decode("utf-8-sig").splitlines()
        assert len(lines) == 2

    def test_balance_export(self, client):
        create_member(client, balance=250)
        response = client.get("/exports/balances")
        assert response.status_code == 200
        assert "Wang,,250,0,0,0,0,0" in response.content.decode("utf-8-sig")

    def test_export_with_invalid_year_returns_400(self, client):
        member_id = create_member(client)
        response = client.get(f"/members/{member_id}/exports/0/1")
        assert response.status_code == 400
