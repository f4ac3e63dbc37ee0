"""Account API tests."""

from decimal import Decimal

import pytest

API = "/api/v1/accounts"


async def _create(client, headers, **body):
    body.setdefault("name", "Checking")
    response = await client.post(API, json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_create_account_envelope(client, auth_headers):
    response = await client.post(
        API, json={"name": "Checking", "balance": "25.00", "currency_id": 1}, headers=auth_headers
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == 201
    assert body["message"] == "Account created successfully"
    assert body["data"]["name"] == "Checking"
    assert Decimal(body["data"]["balance"]) == Decimal("25")
    assert body["data"]["currency"] == {"id": 1, "name": "USD"}


@pytest.mark.asyncio
async def test_create_account_validation_error(client, auth_headers):
    response = await client.post(API, json={"name": "", "balance": "0"}, headers=auth_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert body["message"] == "Account name is required"


@pytest.mark.asyncio
async def test_malformed_body_is_validation_error(client, auth_headers):
    response = await client.post(API, json={"balance": "abc"}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_requires_token(client):
    response = await client.get(API)

    assert response.status_code == 401
    assert response.json() == {
        "message": "Access token is required",
        "status": 401,
        "code": "UNAUTHORIZED",
    }


@pytest.mark.asyncio
async def test_list_get_update_delete(client, auth_headers):
    account = await _create(client, auth_headers)
    url = f"{API}/{account['id']}"

    listed = await client.get(API, headers=auth_headers)
    assert [a["id"] for a in listed.json()["data"]] == [account["id"]]

    fetched = await client.get(url, headers=auth_headers)
    assert fetched.json()["data"]["name"] == "Checking"

    updated = await client.put(url, json={"name": "Main"}, headers=auth_headers)
    assert updated.status_code == 200
    assert updated.json()["data"]["name"] == "Main"

    deleted = await client.delete(url, headers=auth_headers)
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Account deleted successfully"

    missing = await client.get(url, headers=auth_headers)
    assert missing.status_code == 404
    assert missing.json()["code"] == "NOT_FOUND"
    assert missing.json()["message"] == "Account not found"


@pytest.mark.asyncio
async def test_foreign_account_is_unauthorized(client, auth_headers, bob_headers):
    account = await _create(client, auth_headers)

    response = await client.get(f"{API}/{account['id']}", headers=bob_headers)
    assert response.status_code == 401
    assert response.json()["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_deposit_and_withdraw(client, auth_headers):
    account = await _create(client, auth_headers, balance="100.00")
    url = f"{API}/{account['id']}"

    deposit = await client.post(f"{url}/deposit", json={"amount": "50.25"}, headers=auth_headers)
    assert deposit.status_code == 200
    assert Decimal(deposit.json()["data"]["balance"]) == Decimal("150.25")

    refused = await client.post(f"{url}/withdraw", json={"amount": "500"}, headers=auth_headers)
    assert refused.status_code == 400
    assert refused.json()["message"] == "Insufficient funds for withdrawal"

    withdraw = await client.post(f"{url}/withdraw", json={"amount": "0.25"}, headers=auth_headers)
    assert Decimal(withdraw.json()["data"]["balance"]) == Decimal("150")


@pytest.mark.asyncio
async def test_transfer(client, auth_headers):
    source = await _create(client, auth_headers, name="A", balance="500")
    target = await _create(client, auth_headers, name="B")

    response = await client.post(
        f"{API}/transfer",
        json={"from_account_id": source["id"], "to_account_id": target["id"], "amount": "200"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert Decimal(data["from_account"]["balance"]) == Decimal("300")
    assert Decimal(data["to_account"]["balance"]) == Decimal("200")


@pytest.mark.asyncio
async def test_failed_transfer_is_rolled_back(client, auth_headers):
    source = await _create(client, auth_headers, name="A", balance="10")
    target = await _create(client, auth_headers, name="B")

    response = await client.post(
        f"{API}/transfer",
        json={"from_account_id": source["id"], "to_account_id": target["id"], "amount": "20"},
        headers=auth_headers,
    )
    assert response.status_code == 400

    source_now = (await client.get(f"{API}/{source['id']}", headers=auth_headers)).json()["data"]
    target_now = (await client.get(f"{API}/{target['id']}", headers=auth_headers)).json()["data"]
    assert Decimal(source_now["balance"]) == Decimal("10")
    assert Decimal(target_now["balance"]) == Decimal("0")


@pytest.mark.asyncio
async def test_total_and_low_balance(client, auth_headers):
    await _create(client, auth_headers, name="A", balance="500")
    low = await _create(client, auth_headers, name="B", balance="20")

    total = await client.get(f"{API}/total-balance", headers=auth_headers)
    assert Decimal(total.json()["data"]["total_balance"]) == Decimal("520")

    low_balance = await client.get(f"{API}/low-balance", headers=auth_headers)
    assert [a["id"] for a in low_balance.json()["data"]] == [low["id"]]

    negative = await client.get(f"{API}/low-balance", params={"threshold": "-5"}, headers=auth_headers)
    assert negative.status_code == 400


@pytest.mark.asyncio
async def test_oversized_deposit_is_validation_error(client, auth_headers):
    account = await _create(client, auth_headers)

    response = await client.post(
        f"{API}/{account['id']}/deposit", json={"amount": "1e30"}, headers=auth_headers
    )

    assert response.status_code == 400
    assert response.json() == {
        "message": "Amount is out of range",
        "status": 400,
        "code": "VALIDATION_ERROR",
    }
