from chatrelay.services.session_directory import Session, SessionDirectory


def test_upsert_and_lookup():
    sessions = SessionDirectory()
    session = sessions.upsert("conn-a", 1, "alice")
    assert session == Session(connection_id="conn-a", user_id=1, username="alice")
    assert sessions.lookup("conn-a") == session


def test_upsert_is_last_write_wins():
    sessions = SessionDirectory()
    sessions.upsert("conn-a", 1, "alice")
    sessions.upsert("conn-a", 2, "bob")

    assert len(sessions) == 1
    assert sessions.lookup("conn-a").username == "bob"


def test_upsert_is_idempotent():
    sessions = SessionDirectory()
    sessions.upsert("conn-a", 1, "alice")
    sessions.upsert("conn-a", 1, "alice")
    assert len(sessions) == 1


def test_remove_returns_session_and_tolerates_absence():
    sessions = SessionDirectory()
    sessions.upsert("conn-a", 1, "alice")

    assert sessions.remove("conn-a").username == "alice"
    assert sessions.lookup("conn-a") is None
    assert sessions.remove("conn-a") is None


def test_same_username_on_two_connections():
    sessions = SessionDirectory()
    sessions.upsert("conn-a", 1, "alice")
    sessions.upsert("conn-b", 1, "alice")

    assert len(sessions) == 2
    sessions.remove("conn-a")
    assert sessions.lookup("conn-b").connection_id == "conn-b"
