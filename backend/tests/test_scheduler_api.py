from __future__ import annotations

import time

from scheduler_tools import get_scheduler_copy

EN = get_scheduler_copy("en")
ES = get_scheduler_copy("es")


def _start(client, headers, **overrides):
    payload = {"session_key": "chat-1", "lang": "en", "timezone": "UTC"}
    payload.update(overrides)
    return client.post("/scheduler/start", headers=headers, json=payload)


def _say(client, headers, message: str, session_key: str = "chat-1"):
    return client.post(
        "/scheduler/input",
        headers=headers,
        json={"session_key": session_key, "message": message},
    )


def _texts(body: dict) -> list[str]:
    return [message["text"] for message in body["messages"]]


def _wait_for_phase(client, headers, phase: str, session_key: str = "chat-1") -> dict:
    body: dict = {}
    for _ in range(100):
        body = client.get(f"/scheduler/{session_key}", headers=headers).json()
        if body["phase"] == phase:
            return body
        time.sleep(0.01)
    return body


def test_start_returns_greeting_and_first_question(client, auth_headers):
    response = _start(client, auth_headers("user-a"))
    assert response.status_code == 200
    body = response.json()
    assert body["phase"] == "awaiting_user"
    assert body["active"] is True
    assert body["awaiting_input"] is True
    assert _texts(body) == [f"{EN.intro_greeting}\n{EN.agent_signature}", EN.ask_name]
    assert all(message["actions"] == [] for message in body["messages"])


def test_start_requires_authorization(client):
    response = client.post("/scheduler/start", json={"session_key": "chat-1"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Missing Authorization"


def test_start_rejects_unknown_timezone(client, auth_headers):
    response = _start(client, auth_headers("user-a"), timezone="Mars/Olympus_Mons")
    assert response.status_code == 400
    assert response.json()["detail"].startswith("Unknown timezone")


def test_start_twice_does_not_repeat_greeting(client, auth_headers):
    headers = auth_headers("user-a")
    _start(client, headers)
    _say(client, headers, "Ana")
    second = _start(client, headers).json()
    assert second["messages"] == []
    assert second["phase"] == "awaiting_user"
    reply = _say(client, headers, "ana@example.com").json()
    assert _texts(reply) == [EN.ask_symptoms]


def test_prefilled_identity_and_spanish_locale(client, auth_headers):
    body = _start(
        client,
        auth_headers("user-a"),
        lang="es-MX",
        patient_name="Ana López",
        patient_email="ana@example.com",
    ).json()
    assert _texts(body) == [
        f"{ES.intro_greeting}\n{ES.agent_signature}",
        ES.acknowledge_prefill,
        ES.ask_symptoms,
    ]


def test_input_without_session_is_not_found(client, auth_headers):
    response = _say(client, auth_headers("user-a"), "hello")
    assert response.status_code == 404


def test_sessions_are_scoped_per_user(client, auth_headers):
    _start(client, auth_headers("user-a"))
    response = _say(client, auth_headers("user-b"), "Ana")
    assert response.status_code == 404


def test_invalid_answer_is_reprompted(client, auth_headers):
    headers = auth_headers("user-a")
    _start(client, headers)
    _say(client, headers, "Ana")
    body = _say(client, headers, "not-an-email").json()
    assert body["accepted"] is True
    assert _texts(body) == [EN.invalid_email]
    assert body["phase"] == "awaiting_user"


def test_full_interview_books_through_simulated_backend(client, auth_headers, backend_module):
    headers = auth_headers("user-a")
    _start(client, headers)
    for answer in ["Ana López", "ana@example.com", "Persistent cough", "2030-01-15 09:30"]:
        assert _say(client, headers, answer).json()["accepted"] is True

    final = _say(client, headers, "skip").json()
    assert final["accepted"] is True
    assert final["phase"] == "completed"
    confirm, success = final["messages"]
    assert confirm["text"] == f"{EN.confirm_scheduling}\n{EN.agent_signature}"
    assert success["text"].startswith(EN.success_headline)
    assert [action["label"] for action in success["actions"]] == [EN.view_visit, EN.add_calendar]
    assert success["actions"][0]["url"].startswith("https://doxy.me/medikah?appointment=apt_")
    assert "20300115T093000Z" in success["actions"][1]["url"]

    submitted = backend_module.container.simulated.requests
    assert len(submitted) == 1
    assert submitted[0].appointment_time_iso == "2030-01-15T09:30:00.000Z"
    assert submitted[0].locale_preference is None

    idle = _wait_for_phase(client, headers, "idle")
    assert idle["phase"] == "idle"
    assert idle["active"] is False

    follow_up = _say(client, headers, "thanks!").json()
    assert follow_up["accepted"] is False
    assert follow_up["messages"] == []


def test_delete_disposes_session(client, auth_headers):
    headers = auth_headers("user-a")
    _start(client, headers)
    response = client.delete("/scheduler/chat-1", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"status": "closed", "session_key": "chat-1"}
    assert _say(client, headers, "Ana").status_code == 404
    assert client.delete("/scheduler/chat-1", headers=headers).status_code == 404


def test_health_reports_submitter(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "submitter": "simulated"}
