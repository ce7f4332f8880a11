"""Integration tests for lists, media items, ratings and notes."""

import pytest

MATRIX = {
    "mediaType": "movie",
    "externalId": "tt0133093",
    "title": "The Matrix",
    "year": 1999,
    "posterUrl": "https://img/matrix.jpg",
    "additionalData": {"director": "Wachowski"},
}


@pytest.fixture
def movie_list(client, alice, login_as):
    login_as(alice)
    r = client.post("/api/lists", json={"name": "Sci-fi", "description": "Robots"})
    assert r.status_code == 201
    return r.json()


class TestLists:
    def test_create_and_read(self, client, movie_list):
        assert movie_list["is_public"] is True
        assert [ml["id"] for ml in client.get("/api/lists").json()] == [movie_list["id"]]

        detail = client.get(f"/api/lists/{movie_list['id']}").json()
        assert detail["name"] == "Sci-fi"
        assert detail["mediaItems"] == []
        assert detail["isOwner"] is True

    def test_name_required(self, client, alice, login_as):
        login_as(alice)
        assert client.post("/api/lists", json={"name": ""}).status_code == 400

    def test_public_lists_need_no_login(self, client, movie_list, test_app):
        from routes.deps import get_current_user

        test_app.dependency_overrides.pop(get_current_user)
        public = client.get("/api/lists/public").json()
        assert [ml["id"] for ml in public] == [movie_list["id"]]

    def test_private_list_hidden_from_others(self, client, movie_list, bob, login_as):
        client.put(f"/api/lists/{movie_list['id']}", json={"isPublic": False})
        assert client.get("/api/lists/public").json() == []

        login_as(bob)
        assert client.get(f"/api/lists/{movie_list['id']}").status_code == 403
        assert client.get("/api/lists/9999").status_code == 404

    def test_only_owner_updates_and_deletes(self, client, movie_list, bob, login_as):
        list_id = movie_list["id"]
        login_as(bob)
        assert client.put(f"/api/lists/{list_id}", json={"name": "x"}).status_code == 403
        assert client.delete(f"/api/lists/{list_id}").status_code == 403

    def test_delete_removes_items(self, client, movie_list, alice, login_as):
        list_id = movie_list["id"]
        client.post(f"/api/lists/{list_id}/media", json=MATRIX)
        assert client.delete(f"/api/lists/{list_id}").status_code == 200
        assert client.get(f"/api/lists/{list_id}").status_code == 404


class TestAutoLists:
    def test_auto_list_is_lazy_and_stable(self, client, alice, bob, login_as):
        login_as(alice)
        first = client.post("/api/lists/auto", json={"mediaType": "album"}).json()
        second = client.post("/api/lists/auto", json={"mediaType": "album"}).json()
        assert first["id"] == second["id"]
        assert first["name"] == "My Albums"
        assert first["is_public"] is False

        detail = client.get(f"/api/lists/user/{alice.id}/auto/album").json()
        assert detail["id"] == first["id"]

        login_as(bob)
        assert client.get(f"/api/lists/user/{alice.id}/auto/album").status_code == 403
        assert client.get(f"/api/lists/user/{bob.id}/auto/album").status_code == 404

    def test_invalid_media_type(self, client, alice, login_as):
        login_as(alice)
        r = client.post("/api/lists/auto", json={"mediaType": "podcast"})
        assert r.status_code == 400


class TestMediaItems:
    def test_add_and_dedupe(self, client, movie_list):
        url = f"/api/lists/{movie_list['id']}/media"
        r = client.post(url, json=MATRIX)
        assert r.status_code == 201
        item = r.json()
        assert item["external_id"] == "tt0133093"
        assert item["year"] == "1999"
        assert item["additional_data"] == {"director": "Wachowski"}

        again = client.post(url, json={**MATRIX, "title": "Matrix"})
        assert again.status_code == 200
        assert again.json()["id"] == item["id"]

        detail = client.get(f"/api/lists/{movie_list['id']}").json()
        assert len(detail["mediaItems"]) == 1

    def test_missing_fields(self, client, movie_list):
        r = client.post(
            f"/api/lists/{movie_list['id']}/media", json={"mediaType": "movie"}
        )
        assert r.status_code == 400

    def test_ratings_from_several_users(self, client, movie_list, bob, login_as):
        list_id = movie_list["id"]
        item_id = client.post(f"/api/lists/{list_id}/media", json=MATRIX).json()["id"]
        rate_url = f"/api/lists/{list_id}/media/{item_id}/rate"

        r = client.post(rate_url, json={"rating": 4})
        assert r.json() == {"message": "Rating saved", "averageRating": 4}
        r = client.post(rate_url, json={"rating": 2})
        assert r.json()["averageRating"] == 2

        login_as(bob)
        assert client.post(rate_url, json={"rating": 5}).json()["averageRating"] == 3.5
        assert client.post(rate_url, json={"rating": 6}).status_code == 400
        assert client.post(rate_url, json={}).status_code == 400
        # bob can rate a public list but not annotate it
        notes_url = f"/api/lists/{list_id}/media/{item_id}/notes"
        assert client.put(notes_url, json={"notes": "x"}).status_code == 403

        detail = client.get(f"/api/lists/{list_id}").json()
        item = detail["mediaItems"][0]
        assert item["userRating"] == 5
        assert item["averageRating"] == 3.5

    def test_rate_wrong_list(self, client, movie_list, alice):
        list_id = movie_list["id"]
        item_id = client.post(f"/api/lists/{list_id}/media", json=MATRIX).json()["id"]
        other = client.post("/api/lists", json={"name": "Other"}).json()
        r = client.post(
            f"/api/lists/{other['id']}/media/{item_id}/rate", json={"rating": 3}
        )
        assert r.status_code == 404

    def test_notes_and_delete_by_owner(self, client, movie_list):
        list_id = movie_list["id"]
        item_id = client.post(f"/api/lists/{list_id}/media", json=MATRIX).json()["id"]

        r = client.put(
            f"/api/lists/{list_id}/media/{item_id}/notes", json={"notes": "Red pill"}
        )
        assert r.json()["notes"] == "Red pill"

        r = client.delete(f"/api/lists/{list_id}/media/{item_id}")
        assert r.status_code == 200
        assert client.get(f"/api/lists/{list_id}").json()["mediaItems"] == []

    def test_watched_with_friends_only(self, client, movie_list, alice, bob, login_as):
        list_id = movie_list["id"]
        item_id = client.post(f"/api/lists/{list_id}/media", json=MATRIX).json()["id"]
        url = f"/api/lists/{list_id}/media/{item_id}/watched-with"

        assert client.put(url, json={"friendIds": [bob.id]}).status_code == 400

        request_id = client.post(
            "/api/friends/request", json={"toUserId": bob.id}
        ).json()["requestId"]
        login_as(bob)
        client.post(
            f"/api/friends/request/{request_id}/respond", json={"status": "approved"}
        )
        login_as(alice)

        r = client.put(url, json={"friendIds": [bob.id]})
        assert r.json() == {"mediaItemId": item_id, "watchedWith": [bob.id]}
        detail = client.get(f"/api/lists/{list_id}").json()
        assert detail["mediaItems"][0]["watchedWith"] == [bob.id]
