from app.models.subscription import Subscription
from app.models.user import User
from app.models.video import Video, WatchHistoryEntry
from app.services.channels import ChannelProfileQuery, WatchHistoryQuery

from helpers import API, auth_headers


def add_user(db, username: str) -> User:
    user = User(
        username=username,
        email=f"{username}@example.com",
        full_name=username.capitalize(),
        avatar=f"/media/{username}.png",
        password_hash="hashed",
    )
    db.add(user)
    db.flush()
    return user


def add_video(db, owner: User, title: str) -> Video:
    video = Video(
        video_file=f"/media/{title}.mp4",
        thumbnail=f"/media/{title}.jpg",
        title=title,
        description=f"About {title}",
        duration=61.5,
        owner_id=owner.id,
    )
    db.add(video)
    db.flush()
    return video


def subscribe(db, subscriber: User, channel: User) -> None:
    db.add(Subscription(subscriber_id=subscriber.id, channel_id=channel.id))


def test_channel_profile_counts_subscriptions(session_factory):
    db = session_factory()
    try:
        alice = add_user(db, "alice")
        bob = add_user(db, "bob")
        carol = add_user(db, "carol")
        subscribe(db, bob, alice)
        subscribe(db, carol, alice)
        subscribe(db, alice, carol)
        db.commit()

        profile = ChannelProfileQuery(db).fetch("alice", viewer_id=bob.id)
        assert profile["subscribers_count"] == 2
        assert profile["channels_subscribed_to_count"] == 1
        assert profile["is_subscribed"] is True

        carol_profile = ChannelProfileQuery(db).fetch("carol", viewer_id=bob.id)
        assert carol_profile["subscribers_count"] == 1
        assert carol_profile["channels_subscribed_to_count"] == 1
        assert carol_profile["is_subscribed"] is False

        bob_profile = ChannelProfileQuery(db).fetch("bob")
        assert bob_profile["subscribers_count"] == 0
        assert bob_profile["channels_subscribed_to_count"] == 1
        assert bob_profile["is_subscribed"] is False
    finally:
        db.close()


def test_channel_profile_unknown_channel(session_factory):
    db = session_factory()
    try:
        assert ChannelProfileQuery(db).fetch("ghost") is None
    finally:
        db.close()


def test_watch_history_is_newest_first_with_owner(session_factory):
    db = session_factory()
    try:
        viewer = add_user(db, "viewer")
        creator = add_user(db, "creator")
        first = add_video(db, creator, "first")
        second = add_video(db, creator, "second")
        db.add(WatchHistoryEntry(user_id=viewer.id, video_id=first.id, watched_at="2026-01-01T10:00:00+00:00"))
        db.add(WatchHistoryEntry(user_id=viewer.id, video_id=second.id, watched_at="2026-01-02T10:00:00+00:00"))
        db.add(WatchHistoryEntry(user_id=creator.id, video_id=first.id, watched_at="2026-01-03T10:00:00+00:00"))
        db.commit()

        history = WatchHistoryQuery(db).fetch(viewer.id)

        assert [item["title"] for item in history] == ["second", "first"]
        assert history[0]["owner"] == {
            "id": creator.id,
            "username": "creator",
            "full_name": "Creator",
            "avatar": "/media/creator.png",
        }
        assert WatchHistoryQuery(db).fetch(add_user(db, "newcomer").id) == []
    finally:
        db.close()


def test_channel_endpoint_returns_profile(client, login_user, session_factory):
    login_response = login_user("viewer")
    viewer_id = login_response.json()["data"]["user"]["id"]

    db = session_factory()
    try:
        channel = add_user(db, "channel")
        other = add_user(db, "other")
        db.add(Subscription(subscriber_id=viewer_id, channel_id=channel.id))
        subscribe(db, other, channel)
        db.commit()
    finally:
        db.close()

    response = client.get(f"{API}/c/Channel", headers=auth_headers(login_response))

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["username"] == "channel"
    assert data["fullName"] == "Channel"
    assert data["subscribersCount"] == 2
    assert data["channelsSubscribedToCount"] == 0
    assert data["isSubscribed"] is True
    assert "password" not in response.text.lower()


def test_channel_endpoint_unknown_channel(client, login_user):
    login_response = login_user("viewer")

    response = client.get(f"{API}/c/ghost", headers=auth_headers(login_response))

    assert response.status_code == 404
    assert response.json() == {"status": 404, "message": "Channel does not exist"}


def test_channel_endpoint_requires_authentication(client):
    response = client.get(f"{API}/c/anyone")

    assert response.status_code == 401


def test_history_endpoint(client, login_user, session_factory):
    login_response = login_user("watcher")
    watcher_id = login_response.json()["data"]["user"]["id"]

    db = session_factory()
    try:
        creator = add_user(db, "studio")
        video = add_video(db, creator, "pilot")
        creator_id = creator.id
        db.add(WatchHistoryEntry(user_id=watcher_id, video_id=video.id))
        db.commit()
    finally:
        db.close()

    response = client.get(f"{API}/history", headers=auth_headers(login_response))

    assert response.status_code == 200
    history = response.json()["data"]
    assert len(history) == 1
    assert history[0]["title"] == "pilot"
    assert history[0]["videoFile"] == "/media/pilot.mp4"
    assert history[0]["owner"] == {
        "id": creator_id,
        "username": "studio",
        "fullName": "Studio",
        "avatar": "/media/studio.png",
    }
