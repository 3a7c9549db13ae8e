"""
Tests for chat sessions, message/chunk counters and citation search.
"""
from app.db.models.chat import ChatSession, Message
from app.db.models.citation import Citation
from app.db.models.document import Document, DocumentChunk
from app.services import chat_service


def test_message_insert_and_delete_maintain_counter(db, free_user):
    session = chat_service.create_session(db, free_user.id, "Interview prep")

    first = chat_service.post_message(db, session, "Hello")
    chat_service.post_message(db, session, "Anyone there?")

    db.refresh(session)
    assert session.message_count == 2
    assert session.last_message_at is not None

    chat_service.delete_message(db, first)
    db.refresh(session)
    assert session.message_count == 1


def test_message_counter_never_goes_negative(db, free_user):
    session = chat_service.create_session(db, free_user.id)
    message = chat_service.post_message(db, session, "Hello")

    # Counter drifted (e.g. manual repair); deleting must not go below zero
    session.message_count = 0
    db.commit()
    chat_service.delete_message(db, message)

    db.refresh(session)
    assert session.message_count == 0


def test_chunk_counter(db, free_user):
    document = Document(user_id=free_user.id, name="cv", original_filename="cv.pdf", file_type="pdf")
    db.add(document)
    db.commit()

    chunks = [DocumentChunk(document_id=document.id, content=f"part {i}", chunk_number=i) for i in range(3)]
    db.add_all(chunks)
    db.commit()
    db.refresh(document)
    assert document.total_chunks == 3

    db.delete(chunks[0])
    db.commit()
    db.refresh(document)
    assert document.total_chunks == 2


def test_default_title_and_archiving(db, free_user):
    session = chat_service.create_session(db, free_user.id, "   ")
    assert session.title == "New Chat"

    chat_service.archive_session(db, session)
    assert chat_service.list_sessions(db, free_user.id) == []
    assert len(chat_service.list_sessions(db, free_user.id, include_archived=True)) == 1


def test_chat_routes_are_owner_scoped(client, db, make_user, auth_for):
    owner, other = make_user(), make_user()

    created = client.post("/chat/sessions", json={"title": "Prep"}, headers=auth_for(owner))
    assert created.status_code == 201
    session_id = created.json()["id"]

    posted = client.post(f"/chat/sessions/{session_id}/messages", json={"content": "Hi"}, headers=auth_for(owner))
    assert posted.status_code == 201
    assert posted.json()["sender"] == "user"

    messages = client.get(f"/chat/sessions/{session_id}/messages", headers=auth_for(owner)).json()
    assert [m["content"] for m in messages] == ["Hi"]

    sessions = client.get("/chat/sessions", headers=auth_for(owner)).json()
    assert sessions[0]["message_count"] == 1

    assert client.get(f"/chat/sessions/{session_id}/messages", headers=auth_for(other)).status_code == 404
    assert client.post(
        f"/chat/sessions/{session_id}/messages", json={"content": "Hijack"}, headers=auth_for(other)
    ).status_code == 404
    assert db.query(Message).count() == 1

    archived = client.post(f"/chat/sessions/{session_id}/archive", headers=auth_for(owner))
    assert archived.json()["is_archived"] is True
    assert db.query(ChatSession).count() == 1


def test_citation_search(client, db, free_user, auth_for):
    db.add_all([
        Citation(case_name="Adeyemi v. State", citation_text="(2019) LPELR-123 (SC)", court="Supreme Court", year=2019),
        Citation(case_name="Okafor v. Bank", citation_text="(2005) 3 NWLR 45", year=2005, metadata_={"pages": 12}),
    ])
    db.commit()

    response = client.get("/citations", params={"q": "adeyemi"}, headers=auth_for(free_user))
    assert response.status_code == 200
    results = response.json()["results"]
    assert [r["case_name"] for r in results] == ["Adeyemi v. State"]

    results = client.get("/citations", params={"q": "NWLR"}, headers=auth_for(free_user)).json()["results"]
    assert results[0]["metadata"] == {"pages": 12}


def test_admin_can_read_any_session(client, make_user, auth_for):
    owner, admin = make_user(), make_user("admin")
    session_id = client.post("/chat/sessions", json={}, headers=auth_for(owner)).json()["id"]

    response = client.get(f"/chat/sessions/{session_id}/messages", headers=auth_for(admin))

    assert response.status_code == 200
    assert response.json() == []


def test_delete_message_route_decrements_counter(client, make_user, auth_for):
    owner, other = make_user(), make_user()
    headers = auth_for(owner)
    session_id = client.post("/chat/sessions", json={}, headers=headers).json()["id"]
    first = client.post(f"/chat/sessions/{session_id}/messages", json={"content": "One"}, headers=headers).json()
    client.post(f"/chat/sessions/{session_id}/messages", json={"content": "Two"}, headers=headers)

    url = f"/chat/sessions/{session_id}/messages/{first['id']}"
    assert client.delete(url, headers=auth_for(other)).status_code == 404
    assert client.delete(url, headers=headers).status_code == 204
    assert client.delete(url, headers=headers).status_code == 404

    sessions = client.get("/chat/sessions", headers=headers).json()
    assert sessions[0]["message_count"] == 1
    messages = client.get(f"/chat/sessions/{session_id}/messages", headers=headers).json()
    assert [m["content"] for m in messages] == ["Two"]
