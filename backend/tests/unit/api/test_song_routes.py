"""
Tests for the song REST endpoints.
"""

import uuid

import pytest

from app.core.errors import StorageUnavailable

AUDIO = b"ID3" + b"\x00" * 2045


def upload(client, headers, title="A", artist="B", content_type="audio/mpeg", **form):
    return client.post(
        "/api/songs/upload",
        headers=headers,
        data={"title": title, "artist": artist, **form},
        files={"audio": ("track.mp3", AUDIO, content_type)},
    )


class TestUploadEndpoint:
    """Tests for POST /api/songs/upload."""

    def test_upload_success(self, client, blob_store, auth_headers, owner_id):
        response = upload(client, auth_headers(owner_id), genre="Rock", duration="125")

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Song uploaded successfully"
        song = body["song"]
        assert song["title"] == "A"
        assert song["artist"] == "B"
        assert song["user_id"] == str(owner_id)
        assert song["is_public"] is True
        assert song["play_count"] == 0
        assert song["file_size"] == len(AUDIO)
        assert song["formatted_duration"] == "2:05"
        assert song["created_at"].endswith("Z")
        assert blob_store.objects == {song["blob_key"]: AUDIO}

    def test_upload_requires_authentication(self, client, blob_store):
        response = upload(client, {})

        assert response.status_code == 401
        assert blob_store.objects == {}

    def test_upload_with_invalid_token(self, client, blob_store):
        response = upload(client, {"Authorization": "Bearer not-a-token"})

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid authentication credentials"

    def test_upload_unsupported_type(self, client, blob_store, auth_headers, owner_id):
        response = upload(client, auth_headers(owner_id), content_type="audio/flac")

        assert response.status_code == 415
        assert "Only MP3 and WAV" in response.json()["detail"]
        blob_store.put.assert_not_called()

    def test_upload_invalid_metadata(self, client, blob_store, auth_headers, owner_id):
        response = upload(client, auth_headers(owner_id), title="x" * 201)

        assert response.status_code == 422
        blob_store.put.assert_not_called()

    def test_upload_storage_unavailable(
        self, client, blob_store, auth_headers, owner_id
    ):
        blob_store.put.side_effect = StorageUnavailable("Blob store put_object failed")

        response = upload(client, auth_headers(owner_id))

        assert response.status_code == 503
        mine = client.get("/api/songs/my-songs", headers=auth_headers(owner_id))
        assert mine.json()["pagination"]["total_items"] == 0


class TestSongEndpoints:
    """Tests for reading, editing, deleting and playing songs."""

    def test_list_public_songs(self, client, make_song, owner_id):
        for n in range(25):
            make_song(owner_id, title=f"Song {n:02d}")
        make_song(owner_id, title="Hidden", is_public=False)

        response = client.get("/api/songs", params={"page": 2, "limit": 20})

        assert response.status_code == 200
        body = response.json()
        assert len(body["songs"]) == 5
        assert body["pagination"] == {
            "current_page": 2,
            "total_pages": 2,
            "total_items": 25,
            "has_next": False,
            "has_prev": True,
        }

    def test_list_with_search_and_sort(self, client, make_song, owner_id):
        make_song(owner_id, title="Blue", genre="Jazz", play_count=3)
        make_song(owner_id, title="Blue Train", genre="jazz", play_count=9)
        make_song(owner_id, title="Red", genre="Jazz")

        response = client.get(
            "/api/songs",
            params={"search": "blue", "genre": "JAZZ", "sort_by": "play_count"},
        )

        assert [song["title"] for song in response.json()["songs"]] == [
            "Blue Train",
            "Blue",
        ]

    def test_list_rejects_oversized_limit(self, client):
        response = client.get("/api/songs", params={"limit": 101})

        assert response.status_code == 422

    def test_my_songs(self, client, make_song, auth_headers, owner_id, other_user_id):
        make_song(owner_id, title="Mine", is_public=False)
        make_song(other_user_id, title="Theirs")

        response = client.get("/api/songs/my-songs", headers=auth_headers(owner_id))

        assert response.status_code == 200
        assert [song["title"] for song in response.json()["songs"]] == ["Mine"]

    def test_my_songs_requires_authentication(self, client):
        assert client.get("/api/songs/my-songs").status_code == 401

    def test_get_song(self, client, make_song, owner_id):
        song = make_song(owner_id)

        response = client.get(f"/api/songs/{song.id}")

        assert response.status_code == 200
        assert response.json()["song"]["id"] == str(song.id)

    def test_get_private_song(
        self, client, make_song, auth_headers, owner_id, other_user_id
    ):
        song = make_song(owner_id, is_public=False)

        url = f"/api/songs/{song.id}"

        assert client.get(url).status_code == 403
        assert client.get(url, headers=auth_headers(other_user_id)).status_code == 403
        assert client.get(url, headers=auth_headers(owner_id)).status_code == 200

    def test_get_missing_song(self, client):
        response = client.get(f"/api/songs/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"detail": "Song not found"}

    def test_update_song(self, client, make_song, auth_headers, owner_id):
        song = make_song(owner_id)

        response = client.put(
            f"/api/songs/{song.id}",
            headers=auth_headers(owner_id),
            json={"title": "Renamed", "is_public": False},
        )

        assert response.status_code == 200
        assert response.json()["song"]["title"] == "Renamed"
        assert response.json()["song"]["is_public"] is False

    def test_update_with_null_visibility(
        self, client, make_song, auth_headers, owner_id
    ):
        song = make_song(owner_id, title="Keep")

        response = client.put(
            f"/api/songs/{song.id}",
            headers=auth_headers(owner_id),
            json={"is_public": None, "title": None},
        )

        assert response.status_code == 422
        stored = client.get(f"/api/songs/{song.id}", headers=auth_headers(owner_id))
        assert stored.json()["song"]["is_public"] is True
        assert stored.json()["song"]["title"] == "Keep"

    def test_update_by_non_owner(
        self, client, make_song, auth_headers, owner_id, other_user_id
    ):
        song = make_song(owner_id)

        response = client.put(
            f"/api/songs/{song.id}",
            headers=auth_headers(other_user_id),
            json={"title": "Mine now"},
        )

        assert response.status_code == 403

    def test_play_song(self, client, make_song, owner_id):
        song = make_song(owner_id)

        client.post(f"/api/songs/{song.id}/play")
        response = client.post(f"/api/songs/{song.id}/play")

        assert response.status_code == 200
        assert response.json() == {"message": "Play count updated", "play_count": 2}

    @pytest.mark.parametrize("is_public,expected", [(True, 200), (False, 403)])
    def test_play_song_visibility(
        self, client, make_song, owner_id, is_public, expected
    ):
        song = make_song(owner_id, is_public=is_public)

        response = client.post(f"/api/songs/{song.id}/play")

        assert response.status_code == expected

    def test_delete_song(self, client, make_song, blob_store, auth_headers, owner_id):
        song = make_song(owner_id)
        blob_store.objects[song.blob_key] = AUDIO

        response = client.delete(
            f"/api/songs/{song.id}", headers=auth_headers(owner_id)
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Song deleted successfully"}
        assert blob_store.objects == {}
        assert client.get(f"/api/songs/{song.id}").status_code == 404


class TestEndToEnd:
    """Upload, playlist membership and retirement across two users."""

    def test_catalog_walkthrough(
        self, client, blob_store, auth_headers, owner_id, other_user_id
    ):
        owner = auth_headers(owner_id)

        uploaded = upload(client, owner, title="A", artist="B")
        assert uploaded.status_code == 201
        song = uploaded.json()["song"]
        assert (song["title"], song["artist"]) == ("A", "B")
        assert song["user_id"] == str(owner_id)
        assert song["is_public"] is True

        created = client.post("/api/playlists", headers=owner, json={"name": "Mix"})
        assert created.status_code == 201
        playlist_id = created.json()["playlist"]["id"]

        added = client.post(
            f"/api/playlists/{playlist_id}/songs",
            headers=owner,
            json={"song_id": song["id"]},
        )
        assert added.status_code == 200
        assert added.json()["playlist"]["song_ids"] == [song["id"]]

        again = client.post(
            f"/api/playlists/{playlist_id}/songs",
            headers=owner,
            json={"song_id": song["id"]},
        )
        assert again.status_code == 409

        stranger = client.delete(
            f"/api/songs/{song['id']}", headers=auth_headers(other_user_id)
        )
        assert stranger.status_code == 403

        retired = client.delete(f"/api/songs/{song['id']}", headers=owner)
        assert retired.status_code == 200
        assert client.get(f"/api/songs/{song['id']}").status_code == 404
        assert blob_store.objects == {}

        # The playlist keeps the reference but no longer resolves the song
        playlist = client.get(f"/api/playlists/{playlist_id}", headers=owner).json()
        assert playlist["playlist"]["song_ids"] == [song["id"]]
        assert playlist["playlist"]["songs"] == []
