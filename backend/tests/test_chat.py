import pytest

from gymapp.core.errors import Forbidden, InvalidInput, NotFound
from gymapp.core.security import Identity, Role
from gymapp.services import chat_service


def _send(client, user, headers_for, receiver_id, text):
    body = {"sender": user.id, "receiver": receiver_id, "text": text}
    return client.post("/chat/send", json=body, headers=headers_for(user))


def test_send_then_history_ends_with_message(client, member, trainer, headers_for):
    r = _send(client, member, headers_for, trainer.id, "hi")
    assert r.status_code == 201
    assert r.json()["message"] == "Message sent successfully"

    history = client.get(f"/chat/{member.id}/{trainer.id}", headers=headers_for(member)).json()
    last = history[-1]
    assert (last["sender"], last["receiver"], last["text"]) == (member.id, trainer.id, "hi")


def test_history_is_both_directions_in_order_and_stable(client, make_user, member, trainer, headers_for):
    other = make_user(Role.CLIENT)
    _send(client, member, headers_for, trainer.id, "first")
    _send(client, trainer, headers_for, member.id, "second")
    _send(client, other, headers_for, trainer.id, "not in this chat")
    _send(client, member, headers_for, trainer.id, "third")

    url = f"/chat/{trainer.id}/{member.id}"
    history = client.get(url, headers=headers_for(trainer)).json()
    assert [m["text"] for m in history] == ["first", "second", "third"]
    assert {(m["sender"], m["receiver"]) for m in history} <= {(member.id, trainer.id), (trainer.id, member.id)}
    assert client.get(url, headers=headers_for(trainer)).json() == history


def test_history_forbidden_for_non_participant(client, make_user, member, trainer, headers_for):
    outsider = make_user(Role.CLIENT)
    _send(client, member, headers_for, trainer.id, "private")
    r = client.get(f"/chat/{member.id}/{trainer.id}", headers=headers_for(outsider))
    assert r.status_code == 403


def test_history_requires_token(client, member, trainer):
    assert client.get(f"/chat/{member.id}/{trainer.id}").status_code == 401


def test_send_as_someone_else_is_forbidden(client, db, member, trainer, headers_for):
    r = client.post(
        "/chat/send",
        json={"sender": trainer.id, "receiver": member.id, "text": "hello"},
        headers=headers_for(member),
    )
    assert r.status_code == 403
    assert chat_service.get_history(db, Identity(member.id, Role.CLIENT), member.id, trainer.id) == []


def test_send_requires_sender_field(client, member, trainer, headers_for):
    r = client.post("/chat/send", json={"receiver": trainer.id, "text": "hi"}, headers=headers_for(member))
    assert r.status_code == 400


def test_send_to_unknown_receiver(db, member):
    with pytest.raises(NotFound):
        chat_service.send_message(db, member.id, 999, "hello?")


@pytest.mark.parametrize(
    "text", ["", "   ", None, 123, ["hi"], {"text": "hi"}, "x" * (chat_service.MAX_MESSAGE_LENGTH + 1)]
)
def test_send_rejects_bad_text(db, member, trainer, text):
    with pytest.raises(InvalidInput):
        chat_service.send_message(db, member.id, trainer.id, text)


def test_get_history_service_checks_participant(db, member, trainer, owner):
    chat_service.send_message(db, member.id, trainer.id, "hi")
    with pytest.raises(Forbidden):
        chat_service.get_history(db, Identity(owner.id, Role.GYM_OWNER), member.id, trainer.id)
    history = chat_service.get_history(db, Identity(trainer.id, Role.TRAINER), member.id, trainer.id)
    assert len(history) == 1
