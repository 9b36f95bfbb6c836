from bson import ObjectId

from database import HOTEL_DATA, USER_INFO


def test_root(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.text == "Marriott Resort Server is running"


def test_hotel_data(client, store):
    store.db[HOTEL_DATA].insert_many([{"name": "Marriott Downtown"}, {"name": "Marriott Beach"}])
    res = client.get("/hotel-data")
    assert res.status_code == 200
    names = sorted(h["name"] for h in res.json())
    assert names == ["Marriott Beach", "Marriott Downtown"]
    assert all("id" in h and "_id" not in h for h in res.json())


def test_add_hotel_to_list(client):
    res = client.post("/hotels-list", json={"name": "Seaside Villa", "price": 120})
    assert res.status_code == 201
    inserted_id = res.json()["insertedId"]

    hotels = client.get("/hotels-list").json()
    assert {"id": inserted_id, "name": "Seaside Villa", "price": 120} in hotels


def test_add_hotel_rejects_non_object(client):
    res = client.post("/hotels-list", json=["Seaside Villa"])
    assert res.status_code == 400


def test_earnings(client):
    assert client.get("/all-earnings").json() == []
    res = client.post("/all-earnings", json={"month": "2024-05", "amount": 5400})
    assert res.status_code == 201
    assert res.json()["message"] == "Earning added successfully"

    earnings = client.get("/all-earnings").json()
    assert len(earnings) == 1
    assert earnings[0]["amount"] == 5400


def test_user_info(client, store):
    store.db[USER_INFO].insert_one({"email": "ana@example.com", "phone": "555-0100"})
    res = client.get("/userInfo")
    assert res.status_code == 200
    assert res.json()[0]["phone"] == "555-0100"


def test_hotel_data_with_nested_object_ids(client, store):
    owner_id = ObjectId()
    room_ids = [ObjectId(), ObjectId()]
    store.db[HOTEL_DATA].insert_one({"name": "Marriott Harbor", "ownerId": owner_id, "rooms": {"ids": room_ids}})
    res = client.get("/hotel-data")
    assert res.status_code == 200
    hotel = res.json()[0]
    assert hotel["ownerId"] == str(owner_id)
    assert hotel["rooms"]["ids"] == [str(i) for i in room_ids]
