"""
Testing API via TestClient
- Words are seeded straight into the test DB through DBWordRegistry.
- The clock is pinned to 2025-01-01 (see conftest), so "today" is predictable.
"""

from datetime import datetime

from cricket_puzzle.auth import issue_token

WRONG_GUESSES = ["googly", "bowled", "wicket", "stumps", "flicks", "swings"]


def auth_header(user_id: str) -> dict:
    return {"Authorization": f"Bearer {issue_token(user_id)}"}


def parse_time(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def test_full_game_lost(client, db_words):
    """
    Flow:
    1) Seed YORKER for terms/1 on 2025-01-01.
    2) init -> maxAttempts 6, wordLength 6, no word in the body.
    3) six wrong guesses -> attemptsLeft 5..0.
    4) 7th guess -> 409.
    5) finish -> 200 with score 0 and the answer revealed.
    """
    db_words.add_word("2025-01-01", "terms", "1", "YORKER")

    response = client.post("/api/puzzle/init", json={"category": "terms", "level": "1", "date": "2025-01-01"})
    assert response.status_code == 200
    body = response.json()
    assert body["maxAttempts"] == 6
    assert body["wordLength"] == 6
    assert body["maxScore"] == 60
    assert "yorker" not in response.text.lower()
    puzzle_id = body["puzzleId"]

    response = client.post("/api/puzzle/guess", json={"puzzleId": puzzle_id, "guess": "GOOGLY"})
    assert response.status_code == 200
    first = response.json()
    assert first["feedback"][0] != "correct"
    assert first["attemptsLeft"] == 5
    assert first["solved"] is False

    for guess in WRONG_GUESSES[1:]:
        response = client.post("/api/puzzle/guess", json={"puzzleId": puzzle_id, "guess": guess})
        assert response.status_code == 200
    assert response.json()["attemptsLeft"] == 0

    response = client.post("/api/puzzle/guess", json={"puzzleId": puzzle_id, "guess": "yorker"})
    assert response.status_code == 409

    response = client.post("/api/puzzle/finish", json={"puzzleId": puzzle_id, "result": "lost"})
    assert response.status_code == 200
    done = response.json()
    assert done["success"] is True
    assert done["score"] == 0
    assert done["answer"] == "yorker"


def test_win_and_finish_twice(client, db_words):
    db_words.add_word("2025-01-01", "terms", "1", "yorker")
    puzzle_id = client.post("/api/puzzle/init", json={"category": "terms", "level": "1"}).json()["puzzleId"]

    client.post("/api/puzzle/guess", json={"puzzleId": puzzle_id, "guess": "googly"})
    response = client.post("/api/puzzle/guess", json={"puzzleId": puzzle_id, "guess": "yorker"})
    assert response.json()["solved"] is True
    assert response.json()["feedback"] == ["correct"] * 6

    # server scoring ignores the posted score
    response = client.post("/api/puzzle/finish", json={"puzzleId": puzzle_id, "result": "won", "score": 500})
    assert response.status_code == 200
    assert response.json()["score"] == 40
    assert response.json()["maxScore"] == 60

    response = client.post("/api/puzzle/finish", json={"puzzleId": puzzle_id, "result": "won"})
    assert response.status_code == 409

    state = client.get(f"/api/puzzle/{puzzle_id}").json()
    assert state["score"] == 40
    assert state["status"] == "finished"


def test_init_without_seeded_word_is_404(client):
    response = client.post("/api/puzzle/init", json={"category": "terms", "level": "1", "date": "2025-01-01"})
    assert response.status_code == 404


def test_init_requires_category_and_level(client):
    assert client.post("/api/puzzle/init", json={"level": "1"}).status_code == 400
    assert client.post("/api/puzzle/init", json={"category": "terms"}).status_code == 400
    assert client.post("/api/puzzle/init", json={"category": " ", "level": "1"}).status_code == 400
    response = client.post("/api/puzzle/init", json={"category": "terms", "level": "1", "date": "tomorrow"})
    assert response.status_code == 400
    assert response.json()["message"] == "Input validation failed"


def test_init_accepts_numeric_level_and_expires_end_of_day(client, db_words):
    db_words.add_word("2025-01-01", "terms", "2", "bouncer")

    response = client.post("/api/puzzle/init", json={"category": "Terms", "level": 2})
    assert response.status_code == 200
    body = response.json()
    assert body["wordLength"] == 7
    # 23:59:59.999 in Kolkata == 18:29:59.999 UTC
    expires = parse_time(body["expiresAt"])
    assert expires.utctimetuple()[:6] == (2025, 1, 1, 18, 29, 59)


def test_guess_errors(client, db_words):
    db_words.add_word("2025-01-01", "terms", "1", "yorker")
    puzzle_id = client.post("/api/puzzle/init", json={"category": "terms", "level": "1"}).json()["puzzleId"]

    # wrong length
    response = client.post("/api/puzzle/guess", json={"puzzleId": puzzle_id, "guess": "cat"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Guess length mismatch"

    # missing fields / not letters
    assert client.post("/api/puzzle/guess", json={"puzzleId": puzzle_id}).status_code == 400
    assert client.post("/api/puzzle/guess", json={"guess": "yorker"}).status_code == 400
    assert client.post("/api/puzzle/guess", json={"puzzleId": puzzle_id, "guess": "york3r"}).status_code == 400

    # unknown session
    response = client.post("/api/puzzle/guess", json={"puzzleId": "nope", "guess": "yorker"})
    assert response.status_code == 404

    # none of the rejected guesses used an attempt
    state = client.get(f"/api/puzzle/{puzzle_id}").json()
    assert state["attemptsLeft"] == 6
    assert state["answer"] is None


def test_owner_only(client, db_words):
    db_words.add_word("2025-01-01", "terms", "1", "yorker")
    response = client.post(
        "/api/puzzle/init",
        json={"category": "terms", "level": "1"},
        headers=auth_header("alice"),
    )
    puzzle_id = response.json()["puzzleId"]

    # someone else
    response = client.post(
        "/api/puzzle/guess",
        json={"puzzleId": puzzle_id, "guess": "yorker"},
        headers=auth_header("bob"),
    )
    assert response.status_code == 403
    response = client.post(
        "/api/puzzle/finish",
        json={"puzzleId": puzzle_id, "result": "won"},
        headers=auth_header("bob"),
    )
    assert response.status_code == 403
    # anonymous
    response = client.post("/api/puzzle/guess", json={"puzzleId": puzzle_id, "guess": "yorker"})
    assert response.status_code == 403

    # the owner is unaffected by those attempts
    response = client.post(
        "/api/puzzle/guess",
        json={"puzzleId": puzzle_id, "guess": "yorker"},
        headers=auth_header("alice"),
    )
    assert response.status_code == 200
    assert response.json()["attemptsLeft"] == 5

    response = client.post(
        "/api/puzzle/finish",
        json={"puzzleId": puzzle_id, "result": "won"},
        headers=auth_header("alice"),
    )
    assert response.status_code == 200
    assert response.json()["score"] == 60


def test_bad_token_is_401(client, db_words):
    db_words.add_word("2025-01-01", "terms", "1", "yorker")
    response = client.post(
        "/api/puzzle/init",
        json={"category": "terms", "level": "1"},
        headers={"Authorization": "Bearer not-a-real-token"},
    )
    assert response.status_code == 401


def test_categories_and_health(client, db_words):
    db_words.add_word("2025-01-01", "terms", "1", "yorker")
    db_words.add_word("2025-01-01", "players", "1", "dhoni")

    response = client.get("/api/puzzle/categories")
    assert response.status_code == 200
    assert response.json() == {"categories": ["players", "terms"]}

    assert client.get("/health").json() == {"status": "ok"}


def test_state_for_unknown_puzzle_is_404(client):
    assert client.get("/api/puzzle/does-not-exist").status_code == 404


def test_client_score_is_bounded(client, db_words, monkeypatch):
    from cricket_puzzle import config

    monkeypatch.setattr(config, "SCORE_MODE", "client")
    db_words.add_word("2025-01-01", "terms", "1", "yorker")
    puzzle_id = client.post("/api/puzzle/init", json={"category": "terms", "level": "1"}).json()["puzzleId"]

    # too large for any integer column -> rejected up front, session still open
    response = client.post("/api/puzzle/finish", json={"puzzleId": puzzle_id, "score": 10**20})
    assert response.status_code == 400
    assert client.get(f"/api/puzzle/{puzzle_id}").json()["status"] == "active"

    # in range but above maxScore -> capped
    response = client.post("/api/puzzle/finish", json={"puzzleId": puzzle_id, "result": "won", "score": 500})
    assert response.status_code == 200
    assert response.json()["score"] == 60
